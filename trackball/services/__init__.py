"""Services package for business logic."""
from trackball.services.plan_permissions import (
    AccountKind,
    PlanPermissions,
    PlanLimitExceeded,
    FeatureLocked,
    resolve_plan_permissions,
    get_plan_permissions,
)
from trackball.services.account_service import AccountService, AccountError
from trackball.services.track_allowance_service import TrackAllowanceService, InsufficientTrackAllowance

__all__ = [
    'AccountKind',
    'PlanPermissions',
    'PlanLimitExceeded',
    'FeatureLocked',
    'resolve_plan_permissions',
    'get_plan_permissions',
    'AccountService',
    'AccountError',
    'TrackAllowanceService',
    'InsufficientTrackAllowance',
]

"""
Plan enforcement decorators.
Apply to API routes (after @jwt_required) that need plan checks.
"""
from functools import wraps

from flask import request

from trackball.services.plan_permissions import (
    AccountKind,
    FeatureLocked,
    get_plan_permissions,
    require_feature,
)


def permission_required(flag, feature=None):
    """Decorator: require a boolean plan capability (e.g. 'has_account_manager').

    Raises FeatureLocked (403 feature_locked) if the plan lacks it.

    Usage:
        @api_bp.route('/me/account-manager')
        @jwt_required
        @permission_required('has_account_manager')
        def account_manager():
            ...
    """
    def decorator(f):
        @wraps(f)
        def decorated(*args, **kwargs):
            require_feature(get_plan_permissions(request.api_user), flag, feature)
            return f(*args, **kwargs)
        return decorated
    return decorator


def label_account_required(f):
    """Decorator: require a label account (subdistributor features)."""
    @wraps(f)
    def decorated(*args, **kwargs):
        permissions = get_plan_permissions(request.api_user)
        if permissions.account_type != AccountKind.LABEL.value:
            raise FeatureLocked('subdistributor_branding', 'subdistributor branding')
        return f(*args, **kwargs)
    return decorated

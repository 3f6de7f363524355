"""
Plan permission resolution.

Maps an account's plan and profile to the capability set the dashboard uses
to show, lock or limit actions. The mapping is a pure lookup on the account
kind; it never raises and falls back to the restricted artist set.
"""
import enum
from collections.abc import Mapping
from dataclasses import dataclass, asdict
from typing import Any, Optional

from flask import g, has_app_context


class AccountKind(str, enum.Enum):
    """Closed set of account kinds driving the permission branch."""
    ARTIST = 'artist'
    LABEL = 'label'

    @classmethod
    def from_account_type(cls, account_type: Any) -> 'AccountKind':
        """Case-insensitive match against 'label'. Anything else is an artist."""
        if isinstance(account_type, str) and account_type.lower() == cls.LABEL.value:
            return cls.LABEL
        return cls.ARTIST


@dataclass(frozen=True)
class PlanPermissions:
    """Immutable capability set derived from (plan, profile)."""
    can_add_users: bool
    can_create_labels: bool
    can_access_publishing: bool
    can_access_tickets: bool
    has_account_manager: bool
    max_users: Optional[int]  # None = unlimited
    max_labels: Optional[int]  # None = unlimited
    max_users_per_label: Optional[int]  # None = unlimited
    max_artist_names: Optional[int]  # None = unlimited
    plan_display_name: str
    account_type: str

    def to_dict(self):
        return asdict(self)


PLAN_PERMISSIONS = {
    AccountKind.LABEL: PlanPermissions(
        can_add_users=True,
        can_create_labels=True,
        can_access_publishing=True,
        can_access_tickets=True,
        has_account_manager=True,
        max_users=None,
        max_labels=None,
        max_users_per_label=None,
        max_artist_names=None,
        plan_display_name='Label',
        account_type=AccountKind.LABEL.value,
    ),
    AccountKind.ARTIST: PlanPermissions(
        can_add_users=False,
        can_create_labels=True,
        can_access_publishing=False,
        can_access_tickets=True,
        has_account_manager=False,
        max_users=1,
        max_labels=1,
        max_users_per_label=0,
        max_artist_names=3,
        plan_display_name='Artist',
        account_type=AccountKind.ARTIST.value,
    ),
}

# Human-readable names used in limit and lock messages
LIMIT_LABELS = {
    'max_users': 'users',
    'max_labels': 'labels',
    'max_users_per_label': 'users per label',
    'max_artist_names': 'artist names',
}

FEATURE_LABELS = {
    'can_add_users': 'user management',
    'can_create_labels': 'label management',
    'can_access_publishing': 'publishing',
    'can_access_tickets': 'support tickets',
    'has_account_manager': 'account manager',
}

UPGRADE_PLAN_NAME = 'a label plan'


class PlanLimitExceeded(Exception):
    """Raised when an account reaches one of its numeric plan limits."""

    def __init__(self, limit_name: str, current: int, maximum: int):
        self.limit_name = limit_name
        self.current = current
        self.maximum = maximum
        super().__init__(limit_message(current, maximum))


class FeatureLocked(Exception):
    """Raised when an account's plan does not include a feature."""

    def __init__(self, flag: str, feature: Optional[str] = None):
        self.flag = flag
        self.feature = feature or FEATURE_LABELS.get(flag, 'feature')
        super().__init__(locked_feature_message(self.feature))


def limit_message(current, maximum, required_plan=None):
    return (
        f"You've reached your plan limit ({current}/{maximum}). "
        f"Upgrade to {required_plan or UPGRADE_PLAN_NAME} for more."
    )


def locked_feature_message(feature, required_plan=None):
    return f"This {feature} is only available on {required_plan or 'higher plans'}. Upgrade to unlock."


def _account_type_of(profile: Any) -> Any:
    if profile is None:
        return None
    if isinstance(profile, Mapping):
        return profile.get('account_type')
    return getattr(profile, 'account_type', None)


def resolve_plan_permissions(user_plan: Any, profile: Any) -> PlanPermissions:
    """Derive the PlanPermissions of an account.

    Args:
        user_plan: The account's plan. Accepted for plan-tiered rules; the
            current mapping does not read it.
        profile: Profile row, mapping with an 'account_type' key, or None.

    Returns:
        The constant PlanPermissions for the profile's AccountKind.
    """
    return PLAN_PERMISSIONS[AccountKind.from_account_type(_account_type_of(profile))]


def get_plan_permissions(profile: Any, user_plan: Any = None) -> PlanPermissions:
    """Request-scoped memoized resolve.

    Results are cached on flask.g keyed on the identity of (user_plan, profile),
    so repeated checks during one request share a single resolution.
    """
    if user_plan is None and profile is not None and hasattr(profile, 'current_plan'):
        user_plan = profile.current_plan

    if not has_app_context():
        return resolve_plan_permissions(user_plan, profile)

    # Entries hold their inputs so ids stay unique while cached
    cache = g.setdefault('_plan_permissions', {})
    key = (id(user_plan), id(profile))
    entry = cache.get(key)
    if entry is None or entry[0] is not user_plan or entry[1] is not profile:
        entry = (user_plan, profile, resolve_plan_permissions(user_plan, profile))
        cache[key] = entry
    return entry[2]


def check_limit(permissions: PlanPermissions, limit_field: str, current: int) -> None:
    """Raise PlanLimitExceeded if adding one more item would exceed a limit.

    A limit of None never blocks.
    """
    maximum = getattr(permissions, limit_field)
    if maximum is None:
        return
    if current >= maximum:
        raise PlanLimitExceeded(LIMIT_LABELS.get(limit_field, limit_field), current, maximum)


def require_feature(permissions: PlanPermissions, flag: str, feature: Optional[str] = None) -> None:
    """Raise FeatureLocked unless the boolean capability is granted."""
    if not getattr(permissions, flag):
        raise FeatureLocked(flag, feature)


def feature_lock_states(permissions: PlanPermissions, usage: Optional[dict] = None):
    """Lock state of every gated feature, as rendered by lock badges.

    Args:
        permissions: Resolved permissions.
        usage: Current counts keyed by limit field (e.g. {'max_labels': 1}).

    Returns:
        List of dicts: feature, locked, message, and for numeric limits
        current / max.
    """
    usage = usage or {}
    states = []

    for flag, feature in FEATURE_LABELS.items():
        locked = not getattr(permissions, flag)
        states.append({
            'feature': flag,
            'locked': locked,
            'message': locked_feature_message(feature) if locked else None,
        })

    for limit_field in LIMIT_LABELS:
        maximum = getattr(permissions, limit_field)
        current = usage.get(limit_field)
        locked = maximum is not None and current is not None and current >= maximum
        states.append({
            'feature': limit_field,
            'locked': locked,
            'message': limit_message(current, maximum) if locked else None,
            'current': current,
            'max': maximum,
        })

    return states

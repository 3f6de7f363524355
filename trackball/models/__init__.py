"""
SQLAlchemy models for Trackball.
All models are imported here for easy access.
"""
from trackball.models.profile import Profile
from trackball.models.subscription import (
    Plan,
    UserPlan,
    SubscriptionStatus,
    PLAN_CATALOGUE,
    seed_plans,
)
from trackball.models.label import Label, LabelMember
from trackball.models.artist_name import ArtistName
from trackball.models.track_allowance import TrackAllowanceUsage, month_key, usage_percentage

__all__ = [
    # Accounts
    'Profile',
    # Plans
    'Plan',
    'UserPlan',
    'SubscriptionStatus',
    'PLAN_CATALOGUE',
    'seed_plans',
    # Labels
    'Label',
    'LabelMember',
    'ArtistName',
    # Track allowance
    'TrackAllowanceUsage',
    'month_key',
    'usage_percentage',
]

"""
Account service: labels, label members, sub-accounts and artist names.
Every mutation is checked against the account's resolved plan permissions.
"""
from typing import Optional

from flask import current_app
from sqlalchemy import func

from trackball.extensions import db
from trackball.models.profile import Profile
from trackball.models.label import Label, LabelMember
from trackball.models.artist_name import ArtistName
from trackball.services.plan_permissions import (
    get_plan_permissions,
    check_limit,
    require_feature,
)


class AccountError(Exception):
    """Request-level account problem mapped to an API error."""

    def __init__(self, message: str, code: str = 'validation_error', status: int = 422):
        self.code = code
        self.status = status
        super().__init__(message)


def _clean_name(name, what):
    name = (name or '').strip()
    if not name:
        raise AccountError(f'{what} cannot be blank.')
    return name


def _profile_by_email(email):
    """Case-insensitive lookup; the auth backend stores emails as typed."""
    return Profile.query.filter(func.lower(Profile.email) == email.strip().lower()).first()


class AccountService:
    """Service for plan-limited account management."""

    @staticmethod
    def accessible_labels(profile: Profile) -> list:
        """Labels the profile owns, followed by labels shared with it."""
        owned = profile.owned_labels.order_by(Label.created_at).all()
        shared = (
            Label.query.join(LabelMember)
            .filter(LabelMember.profile_id == profile.id)
            .order_by(Label.created_at)
            .all()
        )
        return owned + [label for label in shared if label not in owned]

    @staticmethod
    def usage(profile: Profile) -> dict:
        """Current counts for every numeric plan limit."""
        labels = profile.owned_labels.all()
        return {
            'max_users': profile.user_count,
            'max_labels': len(labels),
            'max_users_per_label': max((label.members.count() for label in labels), default=0),
            'max_artist_names': profile.artist_names.count(),
        }

    @staticmethod
    def create_label(profile: Profile, name: str) -> Label:
        """Create a label owned by the profile.

        Raises:
            FeatureLocked: If the plan cannot create labels
            PlanLimitExceeded: If max_labels is reached
            AccountError: If the profile already owns a label with that name
        """
        name = _clean_name(name, 'Label name')
        permissions = get_plan_permissions(profile)
        require_feature(permissions, 'can_create_labels')
        check_limit(permissions, 'max_labels', profile.owned_labels.count())

        if profile.owned_labels.filter_by(name=name).first():
            raise AccountError(f'A label named "{name}" already exists.', code='duplicate')

        label = Label(name=name, owner_id=profile.id)
        db.session.add(label)
        db.session.commit()
        current_app.logger.info('Label %s created by profile %s', label.id, profile.id)
        return label

    @staticmethod
    def add_label_member(profile: Profile, label: Label, member_email: str) -> LabelMember:
        """Share a label owned by `profile` with another existing profile.

        Raises:
            AccountError: If the caller is not the owner or the member is unknown
            PlanLimitExceeded: If max_users_per_label is reached
        """
        if label.owner_id != profile.id:
            raise AccountError('Only the label owner can add members.', code='forbidden', status=403)

        permissions = get_plan_permissions(profile)
        check_limit(permissions, 'max_users_per_label', label.members.count())

        member = _profile_by_email(member_email)
        if member is None:
            raise AccountError('No account found for that email.', code='not_found', status=404)
        if member.id == profile.id or label.members.filter_by(profile_id=member.id).first():
            raise AccountError('This account already has access to the label.', code='duplicate')

        membership = LabelMember(label_id=label.id, profile_id=member.id)
        db.session.add(membership)
        db.session.commit()
        current_app.logger.info('Profile %s added to label %s', member.id, label.id)
        return membership

    @staticmethod
    def add_sub_account(profile: Profile, email: str, full_name: Optional[str] = None) -> Profile:
        """Create a sub-account under `profile`.

        The owner counts as one user towards max_users.

        Raises:
            FeatureLocked: If the plan cannot add users
            PlanLimitExceeded: If max_users is reached
            AccountError: If the email is already registered
        """
        permissions = get_plan_permissions(profile)
        require_feature(permissions, 'can_add_users')
        check_limit(permissions, 'max_users', profile.user_count)

        email = email.strip().lower()
        if _profile_by_email(email) is not None:
            raise AccountError('An account with this email already exists.', code='duplicate')

        sub_account = Profile(
            email=email,
            full_name=full_name,
            account_type=profile.account_type,
            parent_account_id=profile.id,
            preferred_currency=profile.preferred_currency,
        )
        db.session.add(sub_account)
        db.session.commit()
        current_app.logger.info('Sub-account %s created under %s', sub_account.id, profile.id)
        return sub_account

    @staticmethod
    def add_artist_name(profile: Profile, name: str) -> ArtistName:
        """Register an artist name on the profile.

        Raises:
            PlanLimitExceeded: If max_artist_names is reached
            AccountError: If the name is already registered
        """
        name = _clean_name(name, 'Artist name')
        permissions = get_plan_permissions(profile)
        check_limit(permissions, 'max_artist_names', profile.artist_names.count())

        if profile.artist_names.filter_by(name=name).first():
            raise AccountError(f'Artist name "{name}" is already registered.', code='duplicate')

        artist_name = ArtistName(profile_id=profile.id, name=name)
        db.session.add(artist_name)
        db.session.commit()
        return artist_name

    @staticmethod
    def set_active_label(profile: Profile, label_id: Optional[str]) -> Profile:
        """Switch the label the dashboard works under. None clears it.

        Raises:
            AccountError: If the label does not exist or is not accessible
        """
        if label_id is None:
            profile.active_label_id = None
            profile.label_name = None
            db.session.commit()
            return profile

        label = db.session.get(Label, label_id)
        if label is None or not label.is_accessible_by(profile):
            raise AccountError('Label not found.', code='not_found', status=404)

        profile.active_label_id = label.id
        profile.label_name = label.name
        db.session.commit()
        return profile

    @staticmethod
    def update_branding(profile: Profile, branding: dict) -> Profile:
        """Apply subdistributor branding fields and mark the profile as master."""
        for field, value in branding.items():
            setattr(profile, f'subdistributor_{field}', value)
        profile.is_subdistributor_master = True
        db.session.commit()
        current_app.logger.info('Branding updated for profile %s', profile.id)
        return profile

    @staticmethod
    def update_preferred_currency(profile: Profile, currency: str) -> Profile:
        """Store the profile's preferred currency (must be supported)."""
        from trackball.utils.currency import normalize_currency

        code = normalize_currency(currency)
        if code is None:
            raise AccountError(f'Unsupported currency: {currency}')
        profile.preferred_currency = code
        db.session.commit()
        return profile

"""
Profile model: one row per dashboard account (artist or label).
The id mirrors the `sub` claim of the auth backend's access tokens.
"""
import uuid
from datetime import datetime

from trackball.extensions import db


def _new_uuid():
    return str(uuid.uuid4())


class Profile(db.Model):
    """Dashboard account profile."""

    __tablename__ = 'profiles'

    id = db.Column(db.String(36), primary_key=True, default=_new_uuid)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    full_name = db.Column(db.String(200))
    display_name = db.Column(db.String(200))
    artist_name = db.Column(db.String(200))

    # 'artist' or 'label' (free text from signup, see AccountKind)
    account_type = db.Column(db.String(50))
    label_type = db.Column(db.String(50))
    label_name = db.Column(db.String(200))
    active_label_id = db.Column(
        db.String(36),
        db.ForeignKey('labels.id', ondelete='SET NULL', use_alter=True),
        nullable=True,
    )

    # Sub-accounts point to the account that invited them
    parent_account_id = db.Column(
        db.String(36),
        db.ForeignKey('profiles.id', ondelete='CASCADE'),
        nullable=True,
        index=True,
    )

    # Subdistributor branding
    is_subdistributor_master = db.Column(db.Boolean, nullable=False, default=False)
    subdistributor_dashboard_name = db.Column(db.String(200))
    subdistributor_logo_url = db.Column(db.String(500))
    subdistributor_banner_url = db.Column(db.String(500))
    subdistributor_accent_color = db.Column(db.String(7))
    subdistributor_footer_text = db.Column(db.String(500))

    # Account manager contact
    account_manager_name = db.Column(db.String(200))
    account_manager_email = db.Column(db.String(255))
    account_manager_phone = db.Column(db.String(50))
    account_manager_timezone = db.Column(db.String(64))

    preferred_currency = db.Column(db.String(3))
    user_timezone = db.Column(db.String(64))

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=True, onupdate=datetime.utcnow)

    # Relationships
    parent_account = db.relationship(
        'Profile',
        remote_side=[id],
        backref=db.backref('sub_accounts', lazy='dynamic'),
    )
    active_label = db.relationship('Label', foreign_keys=[active_label_id])

    def __repr__(self):
        return f'<Profile {self.email} ({self.account_type or "artist"})>'

    @property
    def account_kind(self):
        """AccountKind derived from account_type (unknown values are artists)."""
        from trackball.services.plan_permissions import AccountKind
        return AccountKind.from_account_type(self.account_type)

    @property
    def is_label_account(self):
        from trackball.services.plan_permissions import AccountKind
        return self.account_kind is AccountKind.LABEL

    @property
    def current_plan(self):
        """The active UserPlan, or None when the account has no running plan."""
        for user_plan in self.user_plans:
            if user_plan.is_active:
                return user_plan
        return None

    @property
    def user_count(self):
        """Users on this account: the owner plus its sub-accounts."""
        return 1 + self.sub_accounts.count()

    @property
    def has_account_manager_contact(self):
        return bool(self.account_manager_name or self.account_manager_email)

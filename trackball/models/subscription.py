"""
Plan catalogue and per-profile plan subscriptions.
The active UserPlan is what the dashboard hands to the permission resolver.
"""
import enum
from datetime import datetime, date

from trackball.extensions import db


class SubscriptionStatus(str, enum.Enum):
    """Billing-provider-aligned subscription statuses."""
    ACTIVE = 'active'
    PAST_DUE = 'past_due'
    CANCELED = 'canceled'
    TRIALING = 'trialing'
    INCOMPLETE = 'incomplete'


# Catalogue seeded by `flask seed-plans` (name, monthly price in cents)
PLAN_CATALOGUE = [
    ('Trackball Free', 0),
    ('Trackball Lite', 999),
    ('Trackball Signature', 2499),
    ('Trackball Prestige', 4999),
]


class Plan(db.Model):
    """A purchasable distribution plan."""

    __tablename__ = 'plans'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), unique=True, nullable=False)
    monthly_price_cents = db.Column(db.Integer, nullable=False, default=0)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self):
        return f'<Plan {self.name}>'


class UserPlan(db.Model):
    """A profile's subscription to a plan."""

    __tablename__ = 'user_plans'

    id = db.Column(db.Integer, primary_key=True)
    profile_id = db.Column(
        db.String(36),
        db.ForeignKey('profiles.id', ondelete='CASCADE'),
        nullable=False,
        index=True,
    )
    plan_id = db.Column(db.Integer, db.ForeignKey('plans.id'), nullable=False)
    status = db.Column(
        db.Enum(SubscriptionStatus, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=SubscriptionStatus.ACTIVE,
    )
    current_period_end = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    plan = db.relationship('Plan')
    profile = db.relationship('Profile', backref=db.backref('user_plans', lazy='select'))

    def __repr__(self):
        return f'<UserPlan profile={self.profile_id} plan={self.plan_id} {self.status.value}>'

    @property
    def is_active(self):
        """Active, trialing and past due (grace period) plans count as running."""
        return self.status in (
            SubscriptionStatus.ACTIVE,
            SubscriptionStatus.TRIALING,
            SubscriptionStatus.PAST_DUE,
        )

    @property
    def days_remaining(self):
        """Days remaining in current billing period. None without a period end."""
        if not self.current_period_end:
            return None
        delta = self.current_period_end.date() - date.today()
        return max(0, delta.days)


def seed_plans():
    """Insert catalogue plans that are not in the table yet. Returns the new rows."""
    created = []
    for name, price in PLAN_CATALOGUE:
        if Plan.query.filter_by(name=name).first() is None:
            plan = Plan(name=name, monthly_price_cents=price)
            db.session.add(plan)
            created.append(plan)
    db.session.commit()
    return created

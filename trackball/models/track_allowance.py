"""
Monthly track allowance usage.
One row per profile and calendar month (YYYY-MM).
"""
from datetime import datetime

from trackball.extensions import db


def month_key(when=None):
    """Calendar month key used by the usage table, e.g. '2026-10'."""
    when = when or datetime.utcnow()
    return f'{when.year}-{when.month:02d}'


class TrackAllowanceUsage(db.Model):
    """Tracks consumed from a monthly allowance."""

    __tablename__ = 'track_allowance_usage'

    id = db.Column(db.Integer, primary_key=True)
    profile_id = db.Column(
        db.String(36),
        db.ForeignKey('profiles.id', ondelete='CASCADE'),
        nullable=False,
        index=True,
    )
    month_year = db.Column(db.String(7), nullable=False)
    track_count = db.Column(db.Integer, nullable=False, default=0)
    tracks_allowed = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=True, onupdate=datetime.utcnow)

    profile = db.relationship('Profile', backref=db.backref('track_allowance_usage', lazy='dynamic'))

    __table_args__ = (
        db.UniqueConstraint('profile_id', 'month_year', name='uq_track_allowance_month'),
    )

    def __repr__(self):
        return f'<TrackAllowanceUsage {self.profile_id} {self.month_year} {self.track_count}/{self.tracks_allowed}>'

    @property
    def tracks_remaining(self):
        return max(0, (self.tracks_allowed or 0) - (self.track_count or 0))

    @property
    def usage_percentage(self):
        """Share of the allowance used, for the dashboard progress bar (0-100)."""
        return usage_percentage(self.track_count, self.tracks_allowed)


def usage_percentage(used, allowed):
    """Percentage of `allowed` consumed by `used`, capped at 100, one decimal.

    Nothing allowed means nothing to show: 0.
    """
    if not allowed or allowed <= 0:
        return 0.0
    return round(min(100.0, max(0, used or 0) / allowed * 100), 1)

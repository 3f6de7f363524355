"""
Track allowance service: monthly usage reads, grants and consumption.
"""
from datetime import datetime
from typing import Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError

from trackball.extensions import db
from trackball.models.profile import Profile
from trackball.models.track_allowance import TrackAllowanceUsage, month_key


class InsufficientTrackAllowance(Exception):
    """Raised when a release needs more tracks than the allowance has left."""

    def __init__(self, remaining: int, requested: int):
        self.remaining = remaining
        self.requested = requested
        super().__init__(
            f'Insufficient track allowance. You have {remaining} tracks remaining '
            f'but need {requested}.'
        )


class TrackAllowanceService:
    """Service for the monthly track allowance."""

    @staticmethod
    def usage_query(profile: Profile, key: str, lock: bool = False):
        """Query for the profile's usage row of month `key`.

        With `lock`, the row is selected FOR UPDATE so concurrent writers
        serialize on it (ignored by SQLite).
        """
        query = TrackAllowanceUsage.query.filter_by(profile_id=profile.id, month_year=key)
        if lock:
            query = query.with_for_update()
        return query

    @staticmethod
    def get_usage(profile: Profile, when: Optional[datetime] = None) -> TrackAllowanceUsage:
        """Usage row for the month, or an unsaved empty row when none exists."""
        key = month_key(when)
        usage = TrackAllowanceService.usage_query(profile, key).first()
        if usage is None:
            usage = TrackAllowanceUsage(profile_id=profile.id, month_year=key, track_count=0, tracks_allowed=0)
        return usage

    @staticmethod
    def _write_grant(profile, key, tracks_per_month):
        usage = TrackAllowanceService.usage_query(profile, key, lock=True).first()
        if usage is None:
            usage = TrackAllowanceUsage(profile_id=profile.id, month_year=key)
            db.session.add(usage)
        usage.tracks_allowed = tracks_per_month
        usage.track_count = 0
        db.session.commit()
        return usage

    @staticmethod
    def grant(profile: Profile, tracks_per_month: int, when: Optional[datetime] = None) -> TrackAllowanceUsage:
        """Grant a monthly allowance, restarting the month's count at zero.

        Raises:
            ValueError: If tracks_per_month < 1
        """
        if tracks_per_month < 1:
            raise ValueError('tracks_per_month must be at least 1')

        key = month_key(when)
        try:
            usage = TrackAllowanceService._write_grant(profile, key, tracks_per_month)
        except IntegrityError:
            # Another worker inserted the month's row first
            db.session.rollback()
            usage = TrackAllowanceService._write_grant(profile, key, tracks_per_month)

        current_app.logger.info(
            'Granted %d tracks/month to profile %s (%s)', tracks_per_month, profile.id, key,
        )
        return usage

    @staticmethod
    def revoke(profile: Profile, when: Optional[datetime] = None) -> bool:
        """Remove the month's allowance. Returns False when there was none."""
        key = month_key(when)
        usage = TrackAllowanceService.usage_query(profile, key, lock=True).first()
        if usage is None:
            return False
        db.session.delete(usage)
        db.session.commit()
        current_app.logger.info('Revoked track allowance of profile %s (%s)', profile.id, key)
        return True

    @staticmethod
    def consume(
        profile: Profile,
        track_count: int,
        release_title: Optional[str] = None,
        when: Optional[datetime] = None,
    ) -> TrackAllowanceUsage:
        """Consume tracks from the month's allowance.

        Args:
            profile: Account distributing the release
            track_count: Number of tracks (>= 1)
            release_title: For the audit log line
            when: Month to charge (defaults to now)

        Returns:
            Updated usage row

        Raises:
            ValueError: If track_count < 1
            InsufficientTrackAllowance: If not enough tracks remain
        """
        if track_count < 1:
            raise ValueError('track_count must be at least 1')

        usage = TrackAllowanceService.usage_query(profile, month_key(when), lock=True).first()
        remaining = usage.tracks_remaining if usage is not None else 0
        if remaining < track_count:
            db.session.rollback()
            raise InsufficientTrackAllowance(remaining, track_count)

        usage.track_count = (usage.track_count or 0) + track_count
        db.session.commit()

        current_app.logger.info(
            'Profile %s used %d track slot(s) for "%s" (%d/%d)',
            profile.id, track_count, release_title or 'release',
            usage.track_count, usage.tracks_allowed,
        )
        return usage

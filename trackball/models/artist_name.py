"""
Artist names an account releases music under.
"""
from datetime import datetime

from trackball.extensions import db


class ArtistName(db.Model):
    """A stage name registered on an account."""

    __tablename__ = 'artist_names'

    id = db.Column(db.Integer, primary_key=True)
    profile_id = db.Column(
        db.String(36),
        db.ForeignKey('profiles.id', ondelete='CASCADE'),
        nullable=False,
        index=True,
    )
    name = db.Column(db.String(200), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    profile = db.relationship('Profile', backref=db.backref('artist_names', lazy='dynamic'))

    __table_args__ = (
        db.UniqueConstraint('profile_id', 'name', name='uq_artist_name_profile'),
    )

    def __repr__(self):
        return f'<ArtistName {self.name}>'

"""
Label model for record labels owned by an account, plus label membership.
"""
import uuid
from datetime import datetime

from trackball.extensions import db


class Label(db.Model):
    """Record label entity."""
    __tablename__ = 'labels'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = db.Column(db.String(200), nullable=False)
    owner_id = db.Column(
        db.String(36),
        db.ForeignKey('profiles.id', ondelete='CASCADE'),
        nullable=False,
        index=True,
    )
    logo_url = db.Column(db.String(500))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    owner = db.relationship(
        'Profile',
        foreign_keys=[owner_id],
        backref=db.backref('owned_labels', lazy='dynamic'),
    )
    members = db.relationship(
        'LabelMember',
        back_populates='label',
        lazy='dynamic',
        cascade='all, delete-orphan',
    )

    __table_args__ = (
        db.UniqueConstraint('owner_id', 'name', name='uq_label_owner_name'),
    )

    def __repr__(self):
        return f'<Label {self.name}>'

    def is_accessible_by(self, profile):
        """Owners and members can work under this label."""
        if profile is None:
            return False
        if self.owner_id == profile.id:
            return True
        return self.members.filter_by(profile_id=profile.id).first() is not None


class LabelMember(db.Model):
    """A profile granted access to someone else's label."""
    __tablename__ = 'label_members'

    id = db.Column(db.Integer, primary_key=True)
    label_id = db.Column(
        db.String(36),
        db.ForeignKey('labels.id', ondelete='CASCADE'),
        nullable=False,
        index=True,
    )
    profile_id = db.Column(
        db.String(36),
        db.ForeignKey('profiles.id', ondelete='CASCADE'),
        nullable=False,
        index=True,
    )
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    label = db.relationship('Label', back_populates='members')
    profile = db.relationship('Profile')

    __table_args__ = (
        db.UniqueConstraint('label_id', 'profile_id', name='uq_label_member'),
    )

    def __repr__(self):
        return f'<LabelMember label={self.label_id} profile={self.profile_id}>'

"""
Subscriber aggregate models.

A Subscriber exclusively owns its SubscriberType rows: they are created with
the parent, replaced wholesale on update and removed before the parent.
"""

from datetime import datetime, timezone

from mylo_api.infra.db import db
from mylo_api.schemas.subscriber import SubscriberTypeName

# Closed set; extending it requires a schema migration of the enum type.
SUBSCRIBER_TYPE_NAMES = tuple(t.value for t in SubscriberTypeName)


def _utcnow():
    return datetime.now(timezone.utc)


def _isoformat(value):
    return value.isoformat() if value else None


class Subscriber(db.Model):
    """A single subscriber and its owned subscriber types."""

    __tablename__ = 'subscribers'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), nullable=False)
    name = db.Column(db.String(255), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    subscriber_types = db.relationship(
        'SubscriberType',
        back_populates='subscriber',
        cascade='all, delete-orphan',
        order_by='SubscriberType.id',
        lazy='selectin',
    )

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'name': self.name,
            'subscriber_types': [t.to_dict() for t in self.subscriber_types],
            'created_at': _isoformat(self.created_at),
            'updated_at': _isoformat(self.updated_at),
        }

    def __repr__(self):
        return f'<Subscriber {self.id} ({len(self.subscriber_types)} types)>'


class SubscriberType(db.Model):
    """One role of a subscriber, drawn from the ``subscriber_type`` enum."""

    __tablename__ = 'subscriber_types'

    id = db.Column(db.Integer, primary_key=True)
    subscriber_id = db.Column(
        db.Integer,
        db.ForeignKey('subscribers.id'),
        nullable=False,
        index=True,
    )
    name = db.Column(
        db.Enum(*SUBSCRIBER_TYPE_NAMES, name='subscriber_type'),
        nullable=False,
    )

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    subscriber = db.relationship('Subscriber', back_populates='subscriber_types')

    def to_dict(self):
        return {
            'id': self.id,
            'subscriber_id': self.subscriber_id,
            'name': self.name,
            'created_at': _isoformat(self.created_at),
            'updated_at': _isoformat(self.updated_at),
        }

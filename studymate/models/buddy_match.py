"""
Buddy Match Model

This module contains the BuddyMatch model pairing two users with a
compatibility score and a lifecycle status.
"""

from datetime import datetime
from sqlalchemy.orm import validates
from .database import db
from ..constants import MATCH_STATUSES, MATCH_STATUS_PENDING


class BuddyMatch(db.Model):
    """Proposed study pairing between two users"""
    __tablename__ = 'buddy_matches'

    id = db.Column(db.Integer, primary_key=True)
    user_id1 = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    user_id2 = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    compatibility_score = db.Column(db.Float, nullable=False)
    common_topics = db.Column(db.JSON)
    suggested_activities = db.Column(db.JSON)
    status = db.Column(db.String(20), nullable=False, default=MATCH_STATUS_PENDING)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    requester = db.relationship('User', foreign_keys=[user_id1])
    partner = db.relationship('User', foreign_keys=[user_id2])

    __table_args__ = (
        db.UniqueConstraint('user_id1', 'user_id2', name='unique_match_pair'),
    )

    @validates('status')
    def validate_status(self, key, status):
        if status not in MATCH_STATUSES:
            raise ValueError(f"Invalid match status: {status}")
        return status

    def set_status(self, status):
        """Move the match to `status`; raises ValueError on an unknown status"""
        self.status = status

    def involves(self, user_id):
        return user_id in (self.user_id1, self.user_id2)

    def other_user(self, user_id):
        """Return the user on the opposite side of the match from `user_id`"""
        return self.partner if self.user_id1 == user_id else self.requester

    def to_dict(self, viewer_id=None):
        """Serialize the match; with `viewer_id`, describe the partner from that user's side"""
        data = {
            'matchId': self.id,
            'userId1': self.user_id1,
            'userId2': self.user_id2,
            'compatibilityScore': self.compatibility_score,
            'commonTopics': self.common_topics or [],
            'suggestedActivities': self.suggested_activities or [],
            'status': self.status,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
            'updatedAt': self.updated_at.isoformat() if self.updated_at else None,
        }
        if viewer_id is not None:
            other = self.other_user(viewer_id)
            data.update({
                'userId': other.id if other else None,
                'name': other.name if other else None,
                'learningStyle': (other.learning_type if other else None) or 'unknown',
                'availability': (other.availability_time if other else None) or 'flexible',
            })
        return data

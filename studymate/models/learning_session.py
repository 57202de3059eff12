"""
Learning Session Model

One row per piece of content a user submitted for analysis.
"""

from datetime import datetime
from .database import db


class LearningSession(db.Model):
    """Content submitted for blind spot analysis"""
    __tablename__ = 'learning_sessions'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    content = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    blind_spots = db.relationship('BlindSpot', backref='session', lazy=True)

    def to_dict(self):
        return {
            'sessionId': self.id,
            'userId': self.user_id,
            'content': self.content,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }

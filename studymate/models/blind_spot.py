"""
Blind Spot Model

This module contains the BlindSpot model: a topic the AI analysis flagged
with low confidence for a user.
"""

from datetime import datetime
from .database import db


class BlindSpot(db.Model):
    """Low-confidence topic detected in a learning session"""
    __tablename__ = 'blind_spots'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    session_id = db.Column(db.Integer, db.ForeignKey('learning_sessions.id'))
    topic = db.Column(db.String(255), nullable=False)
    confidence = db.Column(db.Float, nullable=False)
    ai_analysis = db.Column(db.JSON)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    __table_args__ = (
        db.CheckConstraint('confidence >= 0 AND confidence <= 1', name='ck_blind_spot_confidence'),
    )

    def __init__(self, user_id, topic, confidence, session_id=None, ai_analysis=None):
        """Initialize a blind spot, enforcing the [0, 1] confidence bound"""
        confidence = float(confidence)
        if not 0.0 <= confidence <= 1.0:
            raise ValueError("Confidence must be between 0 and 1")
        if not topic or not str(topic).strip():
            raise ValueError("Topic cannot be empty")

        self.user_id = user_id
        self.topic = str(topic).strip()[:255]
        self.confidence = confidence
        self.session_id = session_id
        self.ai_analysis = ai_analysis

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'sessionId': self.session_id,
            'topic': self.topic,
            'confidence': self.confidence,
            'aiAnalysis': self.ai_analysis,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }

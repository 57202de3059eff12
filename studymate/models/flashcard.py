"""
Flashcard Model
"""

from datetime import datetime
from .database import db


class Flashcard(db.Model):
    """Generated question/answer pair tied to a topic"""
    __tablename__ = 'flashcards'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    question = db.Column(db.Text, nullable=False)
    answer = db.Column(db.Text, nullable=False)
    related_topic = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'question': self.question,
            'answer': self.answer,
            'relatedTopic': self.related_topic,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }

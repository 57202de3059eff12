"""
User Model

This module contains the User model holding credentials and the study
preferences consumed by buddy matching.
"""

from datetime import datetime
from .database import db


class User(db.Model):
    """User model for authentication and study profile management"""
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False)
    password_hash = db.Column(db.String(255))
    study_style = db.Column(db.JSON)  # learningType, studyTime, sessionLength, difficulty
    interest_tags = db.Column(db.JSON)
    availability = db.Column(db.JSON)  # {"time": "evening"}
    experience_level = db.Column(db.String(50), default='beginner')
    learning_patterns = db.Column(db.JSON)
    embedding_vector = db.Column(db.JSON)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    learning_sessions = db.relationship('LearningSession', backref='user', lazy=True,
                                        cascade='all, delete-orphan')
    blind_spots = db.relationship('BlindSpot', backref='user', lazy=True,
                                  cascade='all, delete-orphan')
    flashcards = db.relationship('Flashcard', backref='user', lazy=True,
                                 cascade='all, delete-orphan')

    def __init__(self, name, email, password_hash=None, **profile):
        """Initialize a new user after validating name and email"""
        # Import validators here to avoid circular imports
        from ..utils.validators import validate_email, sanitize_input

        email_validation = validate_email(email)
        if not email_validation.is_valid:
            raise ValueError(email_validation.error_message)

        name = sanitize_input(name, max_length=255)
        if not name:
            raise ValueError("Name cannot be empty")

        self.name = name
        self.email = email_validation.sanitized_value
        self.password_hash = password_hash
        self.experience_level = 'beginner'
        self.update_profile(**profile)

    def update_profile(self, study_style=None, interest_tags=None, availability=None,
                       experience_level=None, learning_patterns=None):
        """Apply the provided study preferences; None leaves a field unchanged"""
        if study_style is not None:
            self.study_style = dict(study_style)
        if interest_tags is not None:
            self.interest_tags = list(interest_tags)
        if availability is not None:
            self.availability = dict(availability)
        if experience_level is not None:
            self.experience_level = experience_level
        if learning_patterns is not None:
            self.learning_patterns = dict(learning_patterns)

    @property
    def learning_type(self):
        return (self.study_style or {}).get('learningType')

    @property
    def availability_time(self):
        return (self.availability or {}).get('time')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'studyStyle': self.study_style,
            'interestTags': self.interest_tags or [],
            'availability': self.availability,
            'experienceLevel': self.experience_level,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
            'updatedAt': self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f'<User {self.id} {self.email}>'

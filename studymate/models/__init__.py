"""
Database Models Package

FLOW OVERVIEW
- Centralizes SQLAlchemy DB instance and model imports for convenient usage.
- Exposes: db, User, LearningSession, BlindSpot, Flashcard, BuddyMatch.
"""

from .database import db
from .user import User
from .learning_session import LearningSession
from .blind_spot import BlindSpot
from .flashcard import Flashcard
from .buddy_match import BuddyMatch

__all__ = [
    'db',
    'User',
    'LearningSession',
    'BlindSpot',
    'Flashcard',
    'BuddyMatch'
]

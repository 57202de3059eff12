"""
Authentication Utilities

This module contains utility functions for password hashing and user management.
"""

import bcrypt
from ..models import db, User


def hash_password(password, rounds=12):
    """Hash a password using bcrypt"""
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')


def verify_password(password, password_hash):
    """Verify a password against its bcrypt hash"""
    if not password_hash:
        return False
    return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))


def create_user(name, email, password, rounds=12, **profile):
    """Create and persist a new user with a hashed password"""
    user = User(name=name, email=email, password_hash=hash_password(password, rounds), **profile)
    db.session.add(user)
    db.session.commit()
    return user


def authenticate_user(email, password):
    """Authenticate a user with email and password"""
    user = User.query.filter_by(email=(email or '').strip().lower()).first()

    if user and verify_password(password, user.password_hash):
        return user

    return None

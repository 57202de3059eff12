"""
Test configuration and shared fixtures for StudyMate tests.

This file contains:
- Centralized test configuration
- Shared fixtures used across multiple test files
- Common test utilities
"""

import pytest
from studymate import create_app
from studymate.models import db, User, BlindSpot
from studymate.utils.auth_utils import hash_password


# Centralized test configuration
TEST_CONFIG = {
    'TESTING': True,
    'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
    'SECRET_KEY': 'test-secret-key',
    'AI_API_KEY': '',
    'RATELIMIT_ENABLED': False,
    'BCRYPT_ROUNDS': 4,
}


@pytest.fixture
def app():
    """Create and configure a new app instance for each test."""
    app = create_app(TEST_CONFIG)
    return app


@pytest.fixture
def make_app():
    """Factory for apps with configuration overrides on top of TEST_CONFIG."""
    def _make(**overrides):
        return create_app({**TEST_CONFIG, **overrides})
    return _make


@pytest.fixture
def client(app):
    """Create a test client for the app."""
    return app.test_client()


@pytest.fixture
def app_context(app):
    """Create an application context for database operations."""
    with app.app_context():
        yield


@pytest.fixture
def db_session(app_context):
    """Create a database session and clean up after tests."""
    db.create_all()
    yield db.session
    db.session.remove()
    db.drop_all()


def make_user(session, name, email, style=None, tags=None, time=None, level='beginner'):
    """Persist a user with a study profile."""
    user = User(
        name=name,
        email=email,
        password_hash=hash_password('secret123', rounds=4),
        study_style={'learningType': style} if style else None,
        interest_tags=tags or [],
        availability={'time': time} if time else None,
        experience_level=level,
    )
    session.add(user)
    session.commit()
    return user


@pytest.fixture
def test_user(db_session):
    """Create a test user for testing."""
    return make_user(db_session, 'Test User', 'test@example.com',
                     style='visual', tags=['mathematics'], time='evening',
                     level='intermediate')


@pytest.fixture
def study_partners(db_session, test_user):
    """Three other users with varying overlap with `test_user`."""
    close = make_user(db_session, 'Close Match', 'close@example.com',
                      style='visual', tags=['mathematics', 'physics'], time='evening',
                      level='intermediate')
    partial = make_user(db_session, 'Partial Match', 'partial@example.com',
                        style='hands-on', tags=['physics'], time='flexible',
                        level='advanced')
    distant = make_user(db_session, 'Distant', 'distant@example.com',
                        style='auditory', tags=['history'], time='morning',
                        level='expert')
    db_session.add(BlindSpot(user_id=close.id, topic='linear algebra', confidence=0.2))
    db_session.commit()
    return close, partial, distant


@pytest.fixture
def match_profile(test_user):
    """A valid POST /api/match body for `test_user`."""
    return {
        'userId': test_user.id,
        'learningPatterns': {
            'preferredSubjects': ['mathematics', 'physics'],
            'studyStyle': 'visual',
            'availability': 'evening',
            'experienceLevel': 'intermediate',
        },
        'knowledgeGaps': [
            {'topic': 'linear algebra', 'confidence': 0.3},
            {'topic': 'calculus', 'confidence': 0.7},
        ],
    }

"""
Application Configuration

FLOW OVERVIEW
- Config.__init__
  • Reads FLASK_ENV to select which .env file to load (dev/prod). Testing bypasses file load.
- Properties expose configuration values, defaulting to sensible development-safe defaults.
"""

import os
from dotenv import load_dotenv

class Config:
    """Base configuration class"""

    def __init__(self):
        # Load environment variables based on FLASK_ENV
        env_file = os.getenv('FLASK_ENV', 'development')
        if env_file == 'testing':
            # For testing, don't load config files, use environment variables directly
            pass
        elif env_file == 'production':
            load_dotenv('config.prod.env')
        else:
            load_dotenv('config.env')  # Default to development

    @property
    def SECRET_KEY(self):
        """Application secret key"""
        return os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')

    @property
    def SQLALCHEMY_DATABASE_URI(self):
        """Database connection URI"""
        return os.getenv('DATABASE_URL', 'sqlite:///studymate.db')

    @property
    def SQLALCHEMY_TRACK_MODIFICATIONS(self):
        """SQLAlchemy track modifications setting"""
        return False

    @property
    def AI_API_KEY(self):
        """API key for the chat-completion provider (stub replies when empty)"""
        return os.getenv('AI_API_KEY', '')

    @property
    def AI_BASE_URL(self):
        """Base URL of an OpenAI-compatible endpoint; None uses the SDK default"""
        return os.getenv('AI_BASE_URL') or None

    @property
    def AI_MODEL(self):
        """Chat model name"""
        return os.getenv('AI_MODEL', 'gpt-4o-mini')

    @property
    def AI_TEMPERATURE(self):
        """Sampling temperature for AI calls"""
        return float(os.getenv('AI_TEMPERATURE', 0.7))

    @property
    def MAX_CONTENT_LENGTH_CHARS(self):
        """Maximum characters accepted for analyzed content"""
        return int(os.getenv('MAX_CONTENT_LENGTH_CHARS', 10000))

    @property
    def BLIND_SPOT_THRESHOLD(self):
        """Confidence below which a topic counts as a blind spot"""
        return float(os.getenv('BLIND_SPOT_THRESHOLD', 0.5))

    @property
    def MATCH_MIN_SCORE(self):
        """Minimum compatibility score for a candidate to be kept"""
        return float(os.getenv('MATCH_MIN_SCORE', 0.3))

    @property
    def MATCH_RESULT_LIMIT(self):
        """Maximum number of matches returned by a search"""
        return int(os.getenv('MATCH_RESULT_LIMIT', 10))

    @property
    def RATELIMIT_ENABLED(self):
        """Whether per-client rate limits are enforced"""
        return os.getenv('RATELIMIT_ENABLED', 'True').lower() == 'true'

    @property
    def LOG_LEVEL(self):
        """Root logging level"""
        return os.getenv('LOG_LEVEL', 'INFO').upper()

    @property
    def BCRYPT_ROUNDS(self):
        """bcrypt cost factor for password hashes"""
        return int(os.getenv('BCRYPT_ROUNDS', 12))

    @property
    def SESSION_COOKIE_SECURE(self):
        """Whether session cookies should be secure (HTTPS only)"""
        return os.getenv('SESSION_COOKIE_SECURE', 'False').lower() == 'true'

    @property
    def SESSION_COOKIE_HTTPONLY(self):
        """Whether session cookies should be HTTP only"""
        return True

    @property
    def SESSION_COOKIE_SAMESITE(self):
        """Session cookie SameSite policy"""
        return 'Lax'

    @property
    def PERMANENT_SESSION_LIFETIME(self):
        """Session lifetime in seconds"""
        return 86400  # 1 day

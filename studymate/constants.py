"""
Application constants shared by validators, services and routes.
"""

MATCH_STATUS_PENDING = 'pending'
MATCH_STATUS_ACCEPTED = 'accepted'
MATCH_STATUS_REJECTED = 'rejected'
MATCH_STATUS_ACTIVE = 'active'

MATCH_STATUSES = (
    MATCH_STATUS_PENDING,
    MATCH_STATUS_ACCEPTED,
    MATCH_STATUS_REJECTED,
    MATCH_STATUS_ACTIVE,
)

# Statuses a client may move a match into
UPDATABLE_MATCH_STATUSES = (
    MATCH_STATUS_ACCEPTED,
    MATCH_STATUS_REJECTED,
    MATCH_STATUS_ACTIVE,
)

# Ordered from least to most experienced
EXPERIENCE_LEVELS = ('beginner', 'intermediate', 'advanced', 'expert')

DIFFICULTY_LEVELS = ('beginner', 'intermediate', 'advanced')
DEFAULT_DIFFICULTY = 'intermediate'

MAX_TOPICS_PER_REQUEST = 10
MAX_ACTIVITIES_PER_MATCH = 5
MIN_PASSWORD_LENGTH = 6

# Requests per minute per client
RATE_LIMITS = {
    'analyze': 10,
    'cards': 20,
    'match': 5,
}

DEFAULT_HISTORY_LIMIT = 10
MAX_HISTORY_LIMIT = 100

ERROR_MESSAGES = {
    'CONTENT_REQUIRED': 'Content is required',
    'CONTENT_NOT_STRING': 'Content must be a string',
    'CONTENT_EMPTY': 'Content cannot be empty',
    'CONTENT_TOO_LONG': 'Content too long. Maximum {max_length:,} characters allowed.',
    'CONTENT_SCRIPT': 'Content contains potentially malicious script tags',
    'TOPICS_REQUIRED': 'Topics array is required and cannot be empty',
    'TOO_MANY_TOPICS': 'Too many topics. Maximum 10 topics allowed.',
    'INVALID_DIFFICULTY': 'Invalid difficulty level. Must be beginner, intermediate, or advanced',
    'USER_ID_REQUIRED': 'User ID is required',
    'INVALID_USER_ID': 'Invalid user ID',
    'MATCH_ID_REQUIRED': 'Match ID is required',
    'INVALID_MATCH_ID': 'Invalid match ID',
    'INVALID_CONFIDENCE': 'Confidence must be between 0 and 1',
    'INVALID_STATUS': 'Valid status is required (accepted, rejected, or active)',
    'RATE_LIMIT_EXCEEDED': 'Rate limit exceeded',
    'AI_SERVICE_ERROR': 'AI service error occurred',
    'DATABASE_ERROR': 'Database error occurred',
}

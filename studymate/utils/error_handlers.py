"""
Error Handlers

FLOW OVERVIEW
- AppError and subclasses
  • Raised by services and validators; carry the HTTP status and a machine code.
- register_error_handlers(app)
  • AppError → {"error": message} with its status.
  • HTTPException (bad JSON, 404, 405) → {"error": description} with its status.
  • Anything else → logged, session rolled back, 500 "Internal server error".
"""

import logging
from flask import jsonify
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Operational error with an HTTP status code"""

    def __init__(self, message, status_code=500, is_operational=True, code=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.is_operational = is_operational
        self.code = code


class ValidationError(AppError):
    """Invalid client input (400)"""

    def __init__(self, message, field=None):
        super().__init__(message, 400, code='VALIDATION_ERROR')
        self.field = field


class NotFoundError(AppError):
    """Missing or foreign-owned resource (404)"""

    def __init__(self, resource='Resource'):
        super().__init__(f'{resource} not found', 404, code='NOT_FOUND')
        self.resource = resource


class RateLimitError(AppError):
    """Client exceeded its request budget (429)"""

    def __init__(self, message='Rate limit exceeded'):
        super().__init__(message, 429, code='RATE_LIMIT_EXCEEDED')


class DatabaseError(AppError):
    """Unexpected persistence failure (500)"""

    def __init__(self, message='Database error occurred'):
        super().__init__(message, 500, code='DATABASE_ERROR')


class AIServiceError(AppError):
    """Failed or unparseable call to the AI provider (500)"""

    def __init__(self, message='AI service error occurred'):
        super().__init__(message, 500, code='AI_SERVICE_ERROR')


def handle_error(error):
    """Map any exception to a (message, status_code) pair"""
    if isinstance(error, AppError):
        return error.message, error.status_code

    if isinstance(error, HTTPException):
        return error.description or error.name, error.code or 500

    logger.error(f"Unexpected error: {error}", exc_info=error)
    return 'Internal server error', 500


def error_response(error):
    """Build the JSON error response for `error`"""
    message, status_code = handle_error(error)
    return jsonify({'error': message}), status_code


def register_error_handlers(app):
    """Register error handlers with the Flask app"""

    @app.errorhandler(AppError)
    def app_error(error):
        if error.status_code >= 500:
            logger.error(f"{error.code or 'APP_ERROR'}: {error.message}")
        else:
            logger.warning(f"{error.code or 'APP_ERROR'}: {error.message}")
        return error_response(error)

    @app.errorhandler(HTTPException)
    def http_error(error):
        return error_response(error)

    @app.errorhandler(Exception)
    def internal_error(error):
        from ..models import db
        db.session.rollback()
        return error_response(error)

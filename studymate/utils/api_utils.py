"""
API Utilities Module

FLOW OVERVIEW
- APIRequestValidator
  • get_json_body → parse the JSON object body or raise ValidationError (400).
  • get_param → read a value from the query string, falling back to the JSON body.
  • resolve_user → acting user from the session, else the `userId` parameter.

- APIRateLimiter
  • check_rate_limit(bucket, limit) → per-client fixed one-minute window with in-app cleanup.
  • rate_limited(bucket) decorator → raises RateLimitError (429) when exhausted.

Shared by the analyze, cards and match blueprints.
"""

import time
import logging
from functools import wraps
from typing import Dict, Any, Optional
from flask import request, session, current_app

from ..constants import ERROR_MESSAGES, RATE_LIMITS
from ..models import db, User
from .error_handlers import ValidationError, NotFoundError, RateLimitError
from .validators import validate_user_id, require


def get_client_ip() -> str:
    forwarded = request.headers.get('X-Forwarded-For', '')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.remote_addr or 'unknown'


class APIRequestValidator:
    """Handles common request parsing logic."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def get_json_body(self, required: bool = True) -> Dict[str, Any]:
        """
        Parse the request body as a JSON object.

        Args:
            required: Whether an empty body is an error

        Returns:
            The decoded JSON object ({} for an optional empty body)
        """
        raw = request.get_data(cache=True)
        if not raw or not raw.strip():
            if required:
                raise ValidationError('Invalid request format. JSON payload required.')
            return {}

        data = request.get_json(force=True, silent=True)
        if data is None:
            self.logger.warning(f"Invalid JSON from {get_client_ip()}")
            raise ValidationError('Invalid JSON format. Request must be valid JSON.')

        if not isinstance(data, dict):
            self.logger.warning(f"Invalid data type from {get_client_ip()}: {type(data).__name__}")
            raise ValidationError('Request data must be a JSON object.')

        return data

    def get_param(self, name: str, data: Optional[Dict[str, Any]] = None):
        """Read `name` from the query string, else from the parsed body."""
        value = request.args.get(name)
        if value is None and data:
            value = data.get(name)
        return value

    def resolve_user(self, data: Optional[Dict[str, Any]] = None) -> User:
        """
        Resolve the acting user.

        The logged-in session user wins; otherwise the `userId` query or body
        parameter names the user.
        """
        user_id = session.get('user_id')
        if user_id is None:
            user_id = self.get_param('userId', data)

        user_id = require(validate_user_id(user_id), 'userId')
        user = db.session.get(User, user_id)
        if not user:
            raise NotFoundError('User')
        return user


class APIRateLimiter:
    """Handles rate limiting logic."""

    WINDOW_SECONDS = 60

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def check_rate_limit(self, bucket: str, limit: int, client_ip: str) -> bool:
        """
        Count a request against `bucket` for `client_ip`.

        Returns:
            False once the client exceeded `limit` requests in the current window
        """
        if not hasattr(current_app, 'rate_limit_counts'):
            current_app.rate_limit_counts = {}
        counts = current_app.rate_limit_counts

        window = int(time.time()) // self.WINDOW_SECONDS
        key = (bucket, client_ip, window)
        counts[key] = counts.get(key, 0) + 1

        # Drop windows older than the current one
        for old_key in [k for k in counts if k[2] < window]:
            del counts[old_key]

        if counts[key] > limit:
            self.logger.warning(f"Rate limit exceeded for {client_ip} on {bucket}: {counts[key]} requests")
            return False
        return True

    def rate_limited(self, bucket: str):
        """Decorator enforcing the per-minute limit configured for `bucket`."""
        def decorator(f):
            @wraps(f)
            def decorated_function(*args, **kwargs):
                if current_app.config.get('RATELIMIT_ENABLED', True):
                    limit = RATE_LIMITS[bucket]
                    if not self.check_rate_limit(bucket, limit, get_client_ip()):
                        raise RateLimitError(ERROR_MESSAGES['RATE_LIMIT_EXCEEDED'])
                return f(*args, **kwargs)
            return decorated_function
        return decorator


# Global instances
request_validator = APIRequestValidator()
rate_limiter = APIRateLimiter()

"""
Input Validation and Security Utilities

FLOW OVERVIEW
- validate_email(email)
  • RFC-like syntax checks and basic security checks; returns sanitized lowercased value.
- validate_password(password)
  • Enforce minimum/maximum length.
- validate_content(content, max_length)
  • Non-empty string within the character budget, no <script> blocks.
- validate_confidence(value) / validate_user_id(value)
  • Numeric bound [0, 1] / positive integer id.
- validate_topics(topics) / validate_difficulty(value) / validate_match_status(value)
  • Card generation and match lifecycle inputs.
- sanitize_input(input, max_length)
  • Trim, bound length, normalize, and remove null bytes and markup.

Each validator returns a ValidationResult; `require(result)` converts a failed
result into a ValidationError for route and service code.
"""

import re
from typing import Any, Optional
from dataclasses import dataclass

from ..constants import (
    DIFFICULTY_LEVELS, ERROR_MESSAGES, MAX_TOPICS_PER_REQUEST,
    MIN_PASSWORD_LENGTH, UPDATABLE_MATCH_STATUSES,
)
from .error_handlers import ValidationError


@dataclass
class ValidationResult:
    """Result of validation operation"""
    is_valid: bool
    error_message: Optional[str] = None
    sanitized_value: Any = None


class InputValidator:
    """Input validation for the study API"""

    # RFC 5322 compliant email regex (simplified but secure)
    EMAIL_PATTERN = re.compile(
        r'^[a-zA-Z0-9.!#$%&\'*+/=?^_`{|}~-]+@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)+$'
    )

    SCRIPT_PATTERN = re.compile(r'<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>', re.IGNORECASE)

    @classmethod
    def validate_email(cls, email: str) -> ValidationResult:
        """
        Validate email address

        Args:
            email: Email address to validate

        Returns:
            ValidationResult with validation status and sanitized value
        """
        if not email or not isinstance(email, str):
            return ValidationResult(False, "Email must be a non-empty string")

        email = email.strip()
        if email == "":
            return ValidationResult(False, "Email cannot be empty")

        # Length validation (RFC 5321 limits)
        if len(email) > 254:
            return ValidationResult(False, "Email address too long (max 254 characters)")

        if not cls.EMAIL_PATTERN.match(email):
            return ValidationResult(False, "Invalid email format")

        local_part, domain = email.split('@')
        if len(local_part) > 64:
            return ValidationResult(False, "Email local part too long (max 64 characters)")

        if local_part.startswith('.') or local_part.endswith('.') or '..' in local_part:
            return ValidationResult(False, "Invalid email format")

        if '..' in domain:
            return ValidationResult(False, "Invalid email format")

        return ValidationResult(True, sanitized_value=email.lower())

    @classmethod
    def validate_password(cls, password: str) -> ValidationResult:
        """Validate password length requirements"""
        if not password or not isinstance(password, str):
            return ValidationResult(False, "Password must be a non-empty string")

        if len(password) < MIN_PASSWORD_LENGTH:
            return ValidationResult(
                False, f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")

        if len(password) > 128:
            return ValidationResult(False, "Password too long (max 128 characters)")

        return ValidationResult(True, sanitized_value=password)

    @classmethod
    def validate_content(cls, content: Any, max_length: int = 10000) -> ValidationResult:
        """
        Validate learning content submitted for analysis

        Args:
            content: Raw content value from the request
            max_length: Maximum number of characters

        Returns:
            ValidationResult whose sanitized value is the stripped content
        """
        if content is None or content == '':
            return ValidationResult(False, ERROR_MESSAGES['CONTENT_REQUIRED'])

        if not isinstance(content, str):
            return ValidationResult(False, ERROR_MESSAGES['CONTENT_NOT_STRING'])

        stripped = content.strip()
        if not stripped:
            return ValidationResult(False, ERROR_MESSAGES['CONTENT_EMPTY'])

        if len(content) > max_length:
            return ValidationResult(False, ERROR_MESSAGES['CONTENT_TOO_LONG'].format(max_length=max_length))

        if cls.SCRIPT_PATTERN.search(content):
            return ValidationResult(False, ERROR_MESSAGES['CONTENT_SCRIPT'])

        return ValidationResult(True, sanitized_value=stripped.replace('\x00', ''))

    @classmethod
    def validate_confidence(cls, value: Any) -> ValidationResult:
        """Confidence must be a real number in [0, 1]"""
        # bool is an int subclass; reject it explicitly
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value != value:
            return ValidationResult(False, ERROR_MESSAGES['INVALID_CONFIDENCE'])

        if value < 0 or value > 1:
            return ValidationResult(False, ERROR_MESSAGES['INVALID_CONFIDENCE'])

        return ValidationResult(True, sanitized_value=float(value))

    @classmethod
    def validate_id(cls, value: Any, required_message: str, invalid_message: str) -> ValidationResult:
        """Row ids are positive integers, given as int or digit string"""
        if value is None or value == '':
            return ValidationResult(False, required_message)

        if isinstance(value, bool):
            return ValidationResult(False, invalid_message)

        if isinstance(value, int):
            row_id = value
        elif isinstance(value, str) and value.strip().isdecimal():
            row_id = int(value.strip())
        else:
            return ValidationResult(False, invalid_message)

        if row_id <= 0:
            return ValidationResult(False, invalid_message)

        return ValidationResult(True, sanitized_value=row_id)

    @classmethod
    def validate_user_id(cls, value: Any) -> ValidationResult:
        return cls.validate_id(value, ERROR_MESSAGES['USER_ID_REQUIRED'], ERROR_MESSAGES['INVALID_USER_ID'])

    @classmethod
    def validate_match_id(cls, value: Any) -> ValidationResult:
        return cls.validate_id(value, ERROR_MESSAGES['MATCH_ID_REQUIRED'], ERROR_MESSAGES['INVALID_MATCH_ID'])

    @classmethod
    def validate_topics(cls, topics: Any) -> ValidationResult:
        """Topics must be a non-empty list of at most ten non-empty strings"""
        if not topics or not isinstance(topics, list):
            return ValidationResult(False, ERROR_MESSAGES['TOPICS_REQUIRED'])

        if len(topics) > MAX_TOPICS_PER_REQUEST:
            return ValidationResult(False, ERROR_MESSAGES['TOO_MANY_TOPICS'])

        cleaned = []
        for topic in topics:
            if not isinstance(topic, str) or not topic.strip():
                return ValidationResult(False, "Each topic must be a non-empty string")
            cleaned.append(cls.sanitize_input(topic, max_length=255))

        return ValidationResult(True, sanitized_value=cleaned)

    @classmethod
    def validate_difficulty(cls, value: Any) -> ValidationResult:
        if value not in DIFFICULTY_LEVELS:
            return ValidationResult(False, ERROR_MESSAGES['INVALID_DIFFICULTY'])
        return ValidationResult(True, sanitized_value=value)

    @classmethod
    def validate_match_status(cls, value: Any) -> ValidationResult:
        if value not in UPDATABLE_MATCH_STATUSES:
            return ValidationResult(False, ERROR_MESSAGES['INVALID_STATUS'])
        return ValidationResult(True, sanitized_value=value)

    @classmethod
    def sanitize_input(cls, input_string: str, max_length: int = 1000) -> str:
        """
        Sanitize short user input (names, topics, tags)

        Args:
            input_string: Input string to sanitize
            max_length: Maximum allowed length

        Returns:
            Sanitized string
        """
        if not input_string:
            return ""

        # Convert to string if needed
        sanitized = str(input_string)

        # Remove null bytes, markup brackets, script protocols and inline handlers
        sanitized = sanitized.replace('\x00', '')
        sanitized = re.sub(r'[<>]', '', sanitized)
        sanitized = re.sub(r'javascript:', '', sanitized, flags=re.IGNORECASE)
        sanitized = re.sub(r'on\w+\s*=', '', sanitized, flags=re.IGNORECASE)

        # Normalize line endings
        sanitized = sanitized.replace('\r\n', '\n').replace('\r', '\n').strip()

        # Limit length
        if len(sanitized) > max_length:
            sanitized = sanitized[:max_length]

        return sanitized


def require(result: ValidationResult, field: str = None):
    """Return the sanitized value of a passing result, else raise ValidationError"""
    if not result.is_valid:
        raise ValidationError(result.error_message, field)
    return result.sanitized_value


# Convenience functions for common validations
def validate_email(email: str) -> ValidationResult:
    """Validate email address"""
    return InputValidator.validate_email(email)


def validate_password(password: str) -> ValidationResult:
    """Validate password"""
    return InputValidator.validate_password(password)


def validate_content(content: Any, max_length: int = 10000) -> ValidationResult:
    """Validate learning content"""
    return InputValidator.validate_content(content, max_length)


def validate_confidence(value: Any) -> ValidationResult:
    """Validate a confidence score"""
    return InputValidator.validate_confidence(value)


def validate_user_id(value: Any) -> ValidationResult:
    """Validate a user id"""
    return InputValidator.validate_user_id(value)


def validate_match_id(value: Any) -> ValidationResult:
    """Validate a match id"""
    return InputValidator.validate_match_id(value)


def validate_topics(topics: Any) -> ValidationResult:
    """Validate card generation topics"""
    return InputValidator.validate_topics(topics)


def validate_difficulty(value: Any) -> ValidationResult:
    """Validate card difficulty"""
    return InputValidator.validate_difficulty(value)


def validate_match_status(value: Any) -> ValidationResult:
    """Validate a requested match status"""
    return InputValidator.validate_match_status(value)


def sanitize_input(input_string: str, max_length: int = 1000) -> str:
    """Sanitize user input"""
    return InputValidator.sanitize_input(input_string, max_length)

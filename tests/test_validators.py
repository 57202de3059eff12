"""
Tests for Input Validation and Security Utilities

This module tests the validation functions for request inputs, ensuring
malformed values are rejected with the messages the API returns.
"""

import pytest
from studymate.utils.error_handlers import ValidationError
from studymate.utils.validators import (
    InputValidator, validate_email, validate_password, validate_content,
    validate_confidence, validate_user_id, validate_match_id, validate_topics,
    validate_difficulty, validate_match_status, sanitize_input, require,
)


class TestEmailValidation:
    """Test email validation"""

    def test_valid_emails(self):
        for email in ["test@example.com", "user.name@domain.co.uk", "user+tag@example.org", "a@b.c"]:
            result = validate_email(email)
            assert result.is_valid, f"Email '{email}' should be valid: {result.error_message}"
            assert result.sanitized_value == email.lower()

    def test_invalid_emails(self):
        invalid_emails = [
            "",
            "   ",
            "invalid-email",
            "@example.com",
            "user@",
            "user name@example.com",
            "user@example..com",
            ".user@example.com",
            None,
        ]
        for email in invalid_emails:
            result = validate_email(email)
            assert not result.is_valid, f"Email '{email}' should be invalid"
            assert result.error_message is not None

    def test_email_length_limits(self):
        assert not validate_email("a" * 65 + "@example.com").is_valid
        assert validate_email("a" * 64 + "@example.com").is_valid


class TestPasswordValidation:

    def test_length_bounds(self):
        assert not validate_password("12345").is_valid
        assert validate_password("123456").is_valid
        assert not validate_password("x" * 129).is_valid

    def test_non_string(self):
        assert not validate_password(None).is_valid
        assert not validate_password(123456).is_valid


class TestContentValidation:

    def test_valid_content_is_stripped(self):
        result = validate_content("  Machine learning notes  ")
        assert result.is_valid
        assert result.sanitized_value == "Machine learning notes"

    @pytest.mark.parametrize("content, message", [
        (None, "Content is required"),
        ("", "Content is required"),
        (42, "Content must be a string"),
        ("   \n\t ", "Content cannot be empty"),
        ("<script>alert(1)</script> notes", "Content contains potentially malicious script tags"),
    ])
    def test_invalid_content(self, content, message):
        result = validate_content(content)
        assert not result.is_valid
        assert result.error_message == message

    def test_too_long(self):
        assert validate_content("x" * 10000).is_valid
        result = validate_content("x" * 10001)
        assert not result.is_valid
        assert result.error_message == "Content too long. Maximum 10,000 characters allowed."

    def test_custom_max_length(self):
        assert not validate_content("abcdef", max_length=5).is_valid


class TestNumericValidation:

    @pytest.mark.parametrize("value", [0, 1, 0.5, 0.0, 1.0])
    def test_valid_confidence(self, value):
        result = validate_confidence(value)
        assert result.is_valid
        assert isinstance(result.sanitized_value, float)

    @pytest.mark.parametrize("value", [-0.1, 1.01, True, "0.5", None, float('nan')])
    def test_invalid_confidence(self, value):
        assert not validate_confidence(value).is_valid

    def test_user_id(self):
        assert validate_user_id(7).sanitized_value == 7
        assert validate_user_id(" 12 ").sanitized_value == 12
        assert validate_user_id(None).error_message == "User ID is required"
        assert validate_user_id("").error_message == "User ID is required"
        for value in ("abc", -1, 0, True, 1.5, "1e3"):
            assert validate_user_id(value).error_message == "Invalid user ID"

    def test_match_id_messages(self):
        assert validate_match_id("3").sanitized_value == 3
        assert validate_match_id(None).error_message == "Match ID is required"
        assert validate_match_id("x").error_message == "Invalid match ID"

    def test_generic_id(self):
        result = InputValidator.validate_id("nope", "Card ID is required", "Invalid card ID")
        assert result.error_message == "Invalid card ID"


class TestCardInputs:

    def test_topics(self):
        result = validate_topics(["  algebra ", "geometry"])
        assert result.is_valid
        assert result.sanitized_value == ["algebra", "geometry"]

    def test_topics_required(self):
        for value in (None, [], "algebra"):
            assert validate_topics(value).error_message == "Topics array is required and cannot be empty"

    def test_too_many_topics(self):
        assert validate_topics([f"t{i}" for i in range(10)]).is_valid
        result = validate_topics([f"t{i}" for i in range(11)])
        assert result.error_message == "Too many topics. Maximum 10 topics allowed."

    def test_blank_topic(self):
        assert not validate_topics(["algebra", "  "]).is_valid
        assert not validate_topics(["algebra", 3]).is_valid

    def test_difficulty(self):
        for level in ("beginner", "intermediate", "advanced"):
            assert validate_difficulty(level).is_valid
        assert not validate_difficulty("expert").is_valid

    def test_match_status(self):
        for status in ("accepted", "rejected", "active"):
            assert validate_match_status(status).is_valid
        assert not validate_match_status("pending").is_valid
        assert not validate_match_status(None).is_valid


class TestSanitization:

    def test_strips_markup_and_handlers(self):
        assert sanitize_input("<b>bold</b>") == "bbold/b"
        assert sanitize_input("javascript:alert(1)") == "alert(1)"
        assert sanitize_input('x onclick="y"') == 'x "y"'
        assert sanitize_input("a\x00b") == "ab"

    def test_normalizes_and_truncates(self):
        assert sanitize_input("  line\r\nnext  ") == "line\nnext"
        assert sanitize_input("abcdef", max_length=3) == "abc"
        assert sanitize_input(None) == ""


class TestRequire:

    def test_returns_value(self):
        assert require(validate_user_id("5")) == 5

    def test_raises_validation_error(self):
        with pytest.raises(ValidationError) as exc:
            require(validate_user_id("abc"), "userId")
        assert exc.value.status_code == 400
        assert exc.value.field == "userId"
        assert exc.value.message == "Invalid user ID"

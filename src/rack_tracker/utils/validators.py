"""
Input validation functions for the Rack Tracker application.

Each validator returns a (is_valid, error_message) tuple so callers can
collect every problem before raising a single ValidationError.
"""

from typing import Any, Optional, Tuple

from .constants import (
    MAX_TEXT_LENGTH,
    ERROR_REQUIRED_FIELD,
    ERROR_INVALID_INTEGER,
    ERROR_INVALID_NON_NEGATIVE,
    ERROR_INVALID_POSITIVE,
    ERROR_TEXT_TOO_LONG,
)


def validate_required_string(value: Optional[str], field_name: str = "Field") -> Tuple[bool, str]:
    """
    Validate that a string field is present and not blank.

    Args:
        value: The string value to validate
        field_name: Name of the field for error messages

    Returns:
        Tuple of (is_valid, error_message)
    """
    if value is None or not isinstance(value, str) or value.strip() == "":
        return False, f"{field_name}: {ERROR_REQUIRED_FIELD}"
    if len(value) > MAX_TEXT_LENGTH:
        return False, f"{field_name}: {ERROR_TEXT_TOO_LONG}"
    return True, ""


def validate_integer(value: Any, field_name: str = "Field") -> Tuple[bool, str]:
    """
    Validate that a value is a whole number.

    Booleans are rejected even though they subclass int. Integral floats
    such as 3.0 are rejected too; quantities are counts.

    Args:
        value: Value to validate
        field_name: Name of the field for error messages

    Returns:
        Tuple of (is_valid, error_message)
    """
    if isinstance(value, bool) or not isinstance(value, int):
        return False, f"{field_name}: {ERROR_INVALID_INTEGER}"
    return True, ""


def validate_non_negative_integer(value: Any, field_name: str = "Field") -> Tuple[bool, str]:
    """
    Validate that a value is a whole number >= 0.

    Returns:
        Tuple of (is_valid, error_message)
    """
    is_valid, error = validate_integer(value, field_name)
    if not is_valid:
        return is_valid, error
    if value < 0:
        return False, f"{field_name}: {ERROR_INVALID_NON_NEGATIVE}"
    return True, ""


def validate_positive_integer(value: Any, field_name: str = "Field") -> Tuple[bool, str]:
    """
    Validate that a value is a whole number > 0.

    Returns:
        Tuple of (is_valid, error_message)
    """
    is_valid, error = validate_integer(value, field_name)
    if not is_valid:
        return is_valid, error
    if value <= 0:
        return False, f"{field_name}: {ERROR_INVALID_POSITIVE}"
    return True, ""


def validate_actor(actor: Any) -> Tuple[bool, str]:
    """Validate the already-authenticated actor identifier."""
    return validate_required_string(actor, "actor")

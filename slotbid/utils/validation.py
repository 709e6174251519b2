"""
Input Validation - sanitization of data handed to the engine by collaborators.

Validators never raise; they return (is_valid, error_message) so the engine
can turn a failure into an error value without touching auction state.
"""

import math
import re
from typing import Tuple, Any, Optional

# =============================================================================
# Constants
# =============================================================================

MAX_IDENTITY_LENGTH = 128
MAX_TITLE_LENGTH = 256
MAX_DESCRIPTION_LENGTH = 4096

# Field bounds
MIN_AMOUNT = 1
MAX_AMOUNT = 2**63 - 1
MIN_DURATION = 1
MAX_DURATION = 7 * 24 * 3600  # one week of footage

IDENTITY_PATTERN = r"^\S(.*\S)?$"


# =============================================================================
# Validation Functions
# =============================================================================


def validate_integer(
    value: Any,
    name: str,
    min_val: int = MIN_AMOUNT,
    max_val: int = MAX_AMOUNT,
) -> Tuple[bool, str]:
    """
    Validate integer within bounds.

    Args:
        value: Value to validate
        name: Field name for errors
        min_val: Minimum allowed value
        max_val: Maximum allowed value

    Returns:
        (is_valid, error_message)
    """
    # bool is an int subclass but never a meaningful amount
    if isinstance(value, bool) or not isinstance(value, int):
        return False, f"{name} must be int, got {type(value).__name__}"

    if value < min_val:
        return False, f"{name} must be >= {min_val}, got {value}"

    if value > max_val:
        return False, f"{name} must be <= {max_val}, got {value}"

    return True, ""


def validate_amount(amount: Any) -> Tuple[bool, str]:
    """Validate a bid or price amount."""
    return validate_integer(amount, "amount", MIN_AMOUNT, MAX_AMOUNT)


def validate_duration(duration: Any, name: str = "duration") -> Tuple[bool, str]:
    """Validate an artifact duration in seconds."""
    return validate_integer(duration, name, MIN_DURATION, MAX_DURATION)


def validate_string(
    value: Any,
    name: str,
    max_length: int = MAX_TITLE_LENGTH,
    pattern: Optional[str] = None,
    allow_empty: bool = False,
) -> Tuple[bool, str]:
    """
    Validate string input.

    Args:
        value: Value to validate
        name: Field name for errors
        max_length: Maximum string length
        pattern: Optional regex pattern
        allow_empty: Whether "" is acceptable

    Returns:
        (is_valid, error_message)
    """
    if not isinstance(value, str):
        return False, f"{name} must be str, got {type(value).__name__}"

    if not value and not allow_empty:
        return False, f"{name} must not be empty"

    if len(value) > max_length:
        return False, f"{name} exceeds max length {max_length}"

    if value and pattern and not re.match(pattern, value):
        return False, f"{name} does not match required pattern"

    return True, ""


def validate_timestamp(value: Any, name: str) -> Tuple[bool, str]:
    """Validate an optional unix timestamp (int or float seconds, None allowed)."""
    if value is None:
        return True, ""

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False, f"{name} must be a number, got {type(value).__name__}"

    if not math.isfinite(value):
        return False, f"{name} must be finite"

    return True, ""


def validate_identity(value: Any, name: str = "identity") -> Tuple[bool, str]:
    """Validate a bidder or creator identity (no surrounding whitespace)."""
    return validate_string(value, name, MAX_IDENTITY_LENGTH, IDENTITY_PATTERN)


# =============================================================================
# Composite Validators
# =============================================================================


def validate_bid_data(bidder: Any, amount: Any) -> Tuple[bool, str]:
    """Validate the inputs of a bid."""
    valid, err = validate_identity(bidder, "bidder")
    if not valid:
        return False, err

    return validate_amount(amount)


def validate_listing_data(data: Any) -> Tuple[bool, str]:
    """Validate listing data structure."""
    if not isinstance(data, dict):
        return False, "Listing data must be dict"

    required_fields = ["creator", "title", "starting_price", "max_winners"]
    for field in required_fields:
        if field not in data:
            return False, f"Missing required field: {field}"

    valid, err = validate_identity(data["creator"], "creator")
    if not valid:
        return False, err

    valid, err = validate_string(data["title"], "title", MAX_TITLE_LENGTH)
    if not valid:
        return False, err

    valid, err = validate_string(
        data.get("description", ""), "description", MAX_DESCRIPTION_LENGTH, allow_empty=True
    )
    if not valid:
        return False, err

    # A free listing starts at zero; any positive bid beats it
    valid, err = validate_integer(data["starting_price"], "starting_price", 0, MAX_AMOUNT)
    if not valid:
        return False, err

    valid, err = validate_integer(data["max_winners"], "max_winners", 1, MAX_DURATION)
    if not valid:
        return False, err

    if data.get("total_duration") is not None:
        valid, err = validate_duration(data["total_duration"], "total_duration")
        if not valid:
            return False, err

    for field in ("ends_at", "work_starts_at", "work_ends_at"):
        valid, err = validate_timestamp(data.get(field), field)
        if not valid:
            return False, err

    work_start = data.get("work_starts_at")
    work_end = data.get("work_ends_at")
    if work_start is not None and work_end is not None and work_end < work_start:
        return False, "work_ends_at precedes work_starts_at"

    return True, ""


# =============================================================================
# Module Exports
# =============================================================================

__all__ = [
    "validate_integer",
    "validate_amount",
    "validate_duration",
    "validate_string",
    "validate_timestamp",
    "validate_identity",
    "validate_bid_data",
    "validate_listing_data",
    "MAX_IDENTITY_LENGTH",
    "MAX_TITLE_LENGTH",
    "MAX_AMOUNT",
    "MAX_DURATION",
]

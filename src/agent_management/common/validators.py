from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from ..core.constants import LONG_TEXT_MAX_LENGTH
from ..core.exceptions import ValidationError

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _check_length(value: str, field_name: str, max_length: Optional[int]) -> str:
    if max_length is not None and len(value) > max_length:
        raise ValidationError(f"{field_name} must be at most {max_length} characters")
    return value


def require_non_empty(value: Any, field_name: str, max_length: Optional[int] = None) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return _check_length(value.strip(), field_name, max_length)


def require_min_length(value: Any, field_name: str, min_len: int) -> str:
    if not isinstance(value, str) or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_email(value: Any, field_name: str = "Email") -> str:
    email = require_non_empty(value, field_name, LONG_TEXT_MAX_LENGTH)
    if not _EMAIL_RE.match(email):
        raise ValidationError("Please enter a valid email")
    return email.lower()


def require_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")


def optional_str(value: Any, field_name: str, max_length: Optional[int] = None) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string")
    value = value.strip()
    if not value:
        return None
    return _check_length(value, field_name, max_length)


def optional_decimal(
    value: Any, field_name: str, max_digits: Optional[int] = None, places: Optional[int] = None
) -> Optional[Decimal]:
    """Parse a non-negative amount that fits a DECIMAL(max_digits, places) column."""
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number")
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        raise ValidationError(f"{field_name} must be a number")
    if not amount.is_finite() or amount < 0:
        raise ValidationError(f"{field_name} must be a non-negative number")
    if places is not None and amount.normalize().as_tuple().exponent < -places:
        raise ValidationError(f"{field_name} allows at most {places} decimal places")
    if max_digits is not None:
        limit = Decimal(10) ** (max_digits - (places or 0))
        if amount >= limit:
            raise ValidationError(f"{field_name} must be less than {limit}")
    return amount


def optional_bool(value: Any, field_name: str) -> Optional[bool]:
    if value is None:
        return None
    if not isinstance(value, bool):
        raise ValidationError(f"{field_name} must be true or false")
    return value

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from ..core.exceptions import ValidationError

_PHONE_RE = re.compile(r"^[0-9]{10}$")


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_min_length(value: Optional[str], field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_max_length(value: str, field_name: str, max_len: int) -> str:
    if len(value) > max_len:
        raise ValidationError(f"{field_name} cannot exceed {max_len} characters")
    return value


def require_phone(value: Optional[str]) -> str:
    phone = require_non_empty(value, "Phone number")
    if not _PHONE_RE.match(phone):
        raise ValidationError("Please enter a valid 10-digit phone number")
    return phone


def parse_amount(value: Any, field_name: str = "Amount") -> Decimal:
    if value is None or isinstance(value, bool) or value == "":
        raise ValidationError(f"{field_name} is required")
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field_name} must be a number") from None
    if not amount.is_finite():
        raise ValidationError(f"{field_name} must be a number")
    return amount


def parse_optional_int(value: Any, field_name: str) -> Optional[int]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a whole number")
    try:
        return int(str(value))
    except ValueError:
        raise ValidationError(f"{field_name} must be a whole number") from None

from __future__ import annotations

from datetime import date, datetime

from ..core.constants import RECEIPT_PREFIX, RECEIPT_SEQUENCE_DIGITS


def receipt_prefix(day: date | datetime) -> str:
    """Receipts are numbered per calendar month: RCP + YYYY + MM."""
    return f"{RECEIPT_PREFIX}{day.year:04d}{day.month:02d}"


def format_receipt_number(prefix: str, sequence: int) -> str:
    if sequence < 1:
        raise ValueError(f"Receipt sequence must be positive, got {sequence}")
    return f"{prefix}{sequence:0{RECEIPT_SEQUENCE_DIGITS}d}"

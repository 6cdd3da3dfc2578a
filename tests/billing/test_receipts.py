from datetime import date

import pytest

from src.gym_system.gym_system.billing.receipts import format_receipt_number, receipt_prefix


def test_prefix_uses_year_and_month():
    assert receipt_prefix(date(2025, 1, 31)) == "RCP202501"
    assert receipt_prefix(date(2025, 12, 1)) == "RCP202512"


def test_sequence_is_padded_to_four_digits():
    assert format_receipt_number("RCP202501", 1) == "RCP2025010001"
    assert format_receipt_number("RCP202501", 42) == "RCP2025010042"


def test_sequence_beyond_four_digits_is_not_truncated():
    assert format_receipt_number("RCP202501", 12345) == "RCP20250112345"


def test_sequence_must_be_positive():
    with pytest.raises(ValueError):
        format_receipt_number("RCP202501", 0)

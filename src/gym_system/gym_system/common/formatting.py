from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional


def iso(value: Optional[date | datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def money(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..core.constants import DEFAULT_TIMEZONE

MINUTES_PER_DAY = 24 * 60


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 date or datetime; naive values are taken as UTC."""
    value = value.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def now_utc() -> datetime:
    """Current time, timezone-aware.

    Note: Wrapped so tests can patch/mock easier.
    """
    return datetime.now(timezone.utc)


def gym_zone(name: Optional[str]) -> tzinfo:
    try:
        return ZoneInfo(name or DEFAULT_TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError):
        return ZoneInfo(DEFAULT_TIMEZONE)


def to_local(moment: datetime, tz: tzinfo) -> datetime:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(tz)


def local_today(moment: datetime, tz: tzinfo) -> date:
    """Calendar day of `moment` as seen on the gym's wall clock."""
    return to_local(moment, tz).date()


def parse_hhmm(value: object) -> Optional[int]:
    """'HH:MM' -> minutes since midnight, or None when the value is unusable."""
    if not isinstance(value, str):
        return None
    parts = value.strip().split(":")
    if len(parts) != 2:
        return None
    try:
        hours, minutes = int(parts[0]), int(parts[1])
    except ValueError:
        return None
    if not (0 <= hours < 24 and 0 <= minutes < 60):
        return None
    return hours * 60 + minutes


def minutes_of_day(moment: datetime | int) -> int:
    if isinstance(moment, int):
        return moment % MINUTES_PER_DAY
    return moment.hour * 60 + moment.minute


def add_calendar_days(moment: datetime, days: int, tz: tzinfo) -> datetime:
    """Add whole days on the gym's wall clock.

    Time of day is preserved in `tz` even across DST changes; the result is
    returned in the timezone of `moment`.
    """
    if moment.tzinfo is None:
        return moment + timedelta(days=days)
    local = moment.astimezone(tz).replace(tzinfo=None) + timedelta(days=days)
    return local.replace(tzinfo=tz).astimezone(moment.tzinfo)

from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..common.datetime_utils import minutes_of_day
from ..configuration.model import OperatingConfig
from ..core.enums import SessionLabel
from .factory import SessionStrategyFactory

_factory = SessionStrategyFactory()


def resolve_session(config: OperatingConfig, now: datetime | int) -> Optional[SessionLabel]:
    """Which session is running at `now`, or None when the gym is closed.

    `now` must already be on the gym's wall clock (or be a minute of day).
    Pure: the same config and clock always give the same answer, and bad
    window strings fall back to the built-in defaults instead of raising.
    """
    strategy = _factory.for_mode(config.operating_mode)
    return strategy.resolve(config=config, minute=minutes_of_day(now))


def session_display_name(config: OperatingConfig, label: SessionLabel) -> str:
    if label == SessionLabel.FULL_DAY:
        return "Full Day"
    if label == SessionLabel.CONTINUOUS:
        return "Day"
    if label == SessionLabel.MORNING:
        return config.morning.name or "Morning"
    return config.evening.name or "Evening"

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Mapping, Optional

from ...common.datetime_utils import parse_hhmm
from ...configuration.model import OperatingConfig, SessionWindow
from ...core.enums import SessionLabel


def in_window(minute: int, start: int, end: int) -> bool:
    """Inclusive on both bounds; start > end means the window crosses midnight."""
    if start <= end:
        return start <= minute <= end
    return minute >= start or minute <= end


def window_minutes(window: SessionWindow, default: Mapping[str, str]) -> tuple[int, int]:
    start = parse_hhmm(window.start)
    end = parse_hhmm(window.end)
    if start is None:
        start = parse_hhmm(default["start"])
    if end is None:
        end = parse_hhmm(default["end"])
    return start, end


class SessionStrategy(ABC):
    """Strategy Pattern: how one operating mode maps a minute of day to a session."""

    @abstractmethod
    def resolve(self, *, config: OperatingConfig, minute: int) -> Optional[SessionLabel]:
        raise NotImplementedError

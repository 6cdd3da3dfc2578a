from __future__ import annotations

from typing import Optional

from ...configuration.defaults import DEFAULT_DOCUMENT
from ...configuration.model import OperatingConfig
from ...core.enums import SessionLabel
from .base import SessionStrategy, in_window, window_minutes


class SplitSessionsStrategy(SessionStrategy):
    """Morning and evening windows. Morning wins where they overlap."""

    def resolve(self, *, config: OperatingConfig, minute: int) -> Optional[SessionLabel]:
        defaults = DEFAULT_DOCUMENT["sessions"]

        start, end = window_minutes(config.morning, defaults["morning"])
        if in_window(minute, start, end):
            return SessionLabel.MORNING

        start, end = window_minutes(config.evening, defaults["evening"])
        if in_window(minute, start, end):
            return SessionLabel.EVENING

        return None

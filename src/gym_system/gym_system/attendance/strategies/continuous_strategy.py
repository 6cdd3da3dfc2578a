from __future__ import annotations

from typing import Optional

from ...configuration.defaults import DEFAULT_DOCUMENT
from ...configuration.model import OperatingConfig
from ...core.enums import SessionLabel
from .base import SessionStrategy, in_window, window_minutes


class ContinuousStrategy(SessionStrategy):
    """One opening window for the whole day."""

    def resolve(self, *, config: OperatingConfig, minute: int) -> Optional[SessionLabel]:
        start, end = window_minutes(config.continuous, DEFAULT_DOCUMENT["continuousSession"])
        if in_window(minute, start, end):
            return SessionLabel.CONTINUOUS
        return None

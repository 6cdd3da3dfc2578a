from __future__ import annotations

from typing import Optional

from ...configuration.model import OperatingConfig
from ...core.enums import SessionLabel
from .base import SessionStrategy


class FullDayStrategy(SessionStrategy):
    """24-hour gyms are always open."""

    def resolve(self, *, config: OperatingConfig, minute: int) -> Optional[SessionLabel]:
        return SessionLabel.FULL_DAY

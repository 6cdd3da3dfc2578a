from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import OperatingMode
from .strategies.base import SessionStrategy
from .strategies.continuous_strategy import ContinuousStrategy
from .strategies.full_day_strategy import FullDayStrategy
from .strategies.split_sessions_strategy import SplitSessionsStrategy


@dataclass
class SessionStrategyFactory:
    """Factory Pattern: choose the session strategy for the configured operating mode."""

    def for_mode(self, mode: OperatingMode) -> SessionStrategy:
        if mode == OperatingMode.TWENTY_FOUR_HOURS:
            return FullDayStrategy()
        if mode == OperatingMode.CONTINUOUS:
            return ContinuousStrategy()
        return SplitSessionsStrategy()

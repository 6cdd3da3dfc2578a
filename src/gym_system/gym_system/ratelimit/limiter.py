from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from ..common.datetime_utils import now_utc
from ..core.constants import RATE_LIMIT_MAX, RATE_LIMIT_WINDOW_SECONDS


def window_start(moment: datetime, window_seconds: int) -> int:
    """Epoch second at which the fixed window containing `moment` begins."""
    epoch = int(moment.timestamp())
    return epoch - (epoch % window_seconds)


class RateLimiter(Protocol):
    def hit(self, key: str, *, now: Optional[datetime] = None) -> bool:
        """Count one request for `key`. Returns False when it is over the limit."""

        raise NotImplementedError


class InMemoryFixedWindowRateLimiter(RateLimiter):
    """Process-local fixed-window limiter (tests and single-process development)."""

    def __init__(self, *, max_requests: int = RATE_LIMIT_MAX, window_seconds: int = RATE_LIMIT_WINDOW_SECONDS):
        self._max = int(max_requests)
        self._window = int(window_seconds)
        self._hits: dict[str, tuple[int, int]] = {}

    def hit(self, key: str, *, now: Optional[datetime] = None) -> bool:
        start = window_start(now or now_utc(), self._window)
        current_start, count = self._hits.get(key, (start, 0))
        if current_start != start:
            count = 0
        count += 1
        self._hits[key] = (start, count)
        # drop keys whose window has passed
        if len(self._hits) > 10_000:
            self._hits = {k: v for k, v in self._hits.items() if v[0] == start}
        return count <= self._max

from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..common.datetime_utils import now_utc
from ..core.constants import RATE_LIMIT_MAX, RATE_LIMIT_WINDOW_SECONDS
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .limiter import RateLimiter, window_start


class MySQLFixedWindowRateLimiter(RateLimiter):
    """Fixed-window limiter shared by every process that talks to the same database."""

    def __init__(
        self,
        conn_factory: DatabaseConnection,
        *,
        max_requests: int = RATE_LIMIT_MAX,
        window_seconds: int = RATE_LIMIT_WINDOW_SECONDS,
    ):
        self._conn_factory = conn_factory
        self._max = int(max_requests)
        self._window = int(window_seconds)

    def hit(self, key: str, *, now: Optional[datetime] = None) -> bool:
        start = window_start(now or now_utc(), self._window)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO rate_limit_hits(rate_key, window_start, hits) VALUES(%s, %s, 1)
                ON DUPLICATE KEY UPDATE
                    hits = IF(window_start = VALUES(window_start), hits + 1, 1),
                    window_start = VALUES(window_start)
                """,
                (key[:191], start),
            )
            cur.execute("SELECT hits FROM rate_limit_hits WHERE rate_key=%s", (key[:191],))
            row = fetchone(cur)
            return int(row["hits"]) <= self._max if row else True

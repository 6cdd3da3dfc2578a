from __future__ import annotations

import json
from typing import Any, Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .repository import ConfigRepository

_CONFIG_ROW_ID = 1


class MySQLConfigRepository(ConfigRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_document(self) -> Optional[dict[str, Any]]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT document FROM gym_config WHERE config_id=%s", (_CONFIG_ROW_ID,))
            row = fetchone(cur)
            if not row or row.get("document") is None:
                return None
            raw = row["document"]
            if isinstance(raw, (bytes, bytearray)):
                raw = raw.decode("utf-8")
            doc = json.loads(raw) if isinstance(raw, str) else raw
            return doc if isinstance(doc, dict) else None

    def save_document(self, document: dict[str, Any]) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO gym_config(config_id, document)
                VALUES(%s, %s)
                ON DUPLICATE KEY UPDATE document=VALUES(document)
                """,
                (_CONFIG_ROW_ID, json.dumps(document)),
            )

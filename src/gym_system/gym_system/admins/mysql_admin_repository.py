from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..core.enums import AdminRole
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, from_db_datetime, to_db_datetime
from .model import Admin
from .repository import AdminRepository

_COLUMNS = "admin_id, username, email, password_hash, role, is_active, last_login"


def _to_admin(row: dict) -> Admin:
    return Admin(
        admin_id=int(row["admin_id"]),
        username=row["username"],
        email=row["email"],
        password_hash=row["password_hash"],
        role=AdminRole(row["role"]),
        is_active=bool(row.get("is_active", True)),
        last_login=from_db_datetime(row.get("last_login")),
    )


class MySQLAdminRepository(AdminRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, admin_id: int) -> Optional[Admin]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM admins WHERE admin_id=%s", (int(admin_id),))
            row = fetchone(cur)
            return _to_admin(row) if row else None

    def get_by_login(self, username_or_email: str) -> Optional[Admin]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM admins WHERE username=%s OR email=%s LIMIT 1",
                (username_or_email, username_or_email.lower()),
            )
            row = fetchone(cur)
            return _to_admin(row) if row else None

    def count(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM admins")
            return int(fetchone(cur)["n"])

    def create(self, *, username: str, email: str, password_hash: str, role: AdminRole) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO admins(username, email, password_hash, role, is_active)
                VALUES(%s,%s,%s,%s,1)
                """,
                (username, email, password_hash, role.value),
            )
            return int(cur.lastrowid)

    def touch_last_login(self, admin_id: int, at: datetime) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE admins SET last_login=%s WHERE admin_id=%s", (to_db_datetime(at), int(admin_id)))

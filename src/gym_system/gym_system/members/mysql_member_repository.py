from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Sequence

from ..common.pagination import Page, PageRequest
from ..core.enums import MemberStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_db_datetime, to_db_datetime, to_db_value, to_decimal
from .model import Member
from .repository import MemberRepository

_COLUMNS = """
    member_id, full_name, phone, address, registration_number, join_date, membership_plan, status,
    membership_start_date, membership_expiry_date, outstanding_balance, notes, created_at, updated_at
"""

SORTABLE_COLUMNS = frozenset(
    {"created_at", "full_name", "join_date", "membership_expiry_date", "registration_number", "status"}
)

UPDATABLE_COLUMNS = frozenset(
    {
        "full_name",
        "phone",
        "status",
        "membership_plan",
        "membership_start_date",
        "membership_expiry_date",
        "outstanding_balance",
        "notes",
    }
)


def _to_member(r: dict) -> Member:
    return Member(
        member_id=int(r["member_id"]),
        full_name=r["full_name"],
        phone=r["phone"],
        address=r["address"],
        registration_number=r["registration_number"],
        join_date=from_db_datetime(r["join_date"]),
        membership_plan=r["membership_plan"],
        status=MemberStatus(r["status"]),
        membership_start_date=from_db_datetime(r.get("membership_start_date")),
        membership_expiry_date=from_db_datetime(r.get("membership_expiry_date")),
        outstanding_balance=to_decimal(r.get("outstanding_balance")),
        notes=r.get("notes") or "",
        created_at=from_db_datetime(r.get("created_at")),
        updated_at=from_db_datetime(r.get("updated_at")),
    )


class MySQLMemberRepository(MemberRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_one(self, where: str, params: tuple) -> Optional[Member]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM members WHERE {where}", params)
            row = fetchone(cur)
            return _to_member(row) if row else None

    def get_by_id(self, member_id: int) -> Optional[Member]:
        return self._get_one("member_id=%s", (int(member_id),))

    def get_by_registration_number(self, registration_number: str) -> Optional[Member]:
        return self._get_one("registration_number=%s", (registration_number,))

    def get_by_phone(self, phone: str) -> Optional[Member]:
        return self._get_one("phone=%s", (phone,))

    def create(
        self,
        *,
        full_name: str,
        phone: str,
        address: str,
        registration_number: str,
        join_date: datetime,
        membership_plan: str,
        status: MemberStatus,
        notes: str,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO members(full_name, phone, address, registration_number, join_date,
                                    membership_plan, status, outstanding_balance, notes)
                VALUES(%s,%s,%s,%s,%s,%s,%s,0,%s)
                """,
                (
                    full_name,
                    phone,
                    address,
                    registration_number,
                    to_db_datetime(join_date),
                    membership_plan,
                    status.value,
                    notes,
                ),
            )
            return int(cur.lastrowid)

    def update_fields(self, member_id: int, fields: dict[str, Any]) -> bool:
        unknown = set(fields) - UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Not updatable: {sorted(unknown)}")
        if not fields:
            return self.get_by_id(member_id) is not None

        assignments = ", ".join(f"{col}=%s" for col in fields)
        params = [to_db_value(v) for v in fields.values()]
        params.append(int(member_id))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE members SET {assignments} WHERE member_id=%s", tuple(params))
            # rowcount is 0 when values are unchanged, so confirm existence separately
            if cur.rowcount > 0:
                return True
            cur.execute("SELECT 1 AS found FROM members WHERE member_id=%s", (int(member_id),))
            return fetchone(cur) is not None

    def delete(self, member_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM members WHERE member_id=%s", (int(member_id),))
            return cur.rowcount > 0

    def search(
        self,
        *,
        text: str,
        status: Optional[MemberStatus],
        sort_by: str,
        descending: bool,
        page: PageRequest,
    ) -> Page[Member]:
        clauses = ["1=1"]
        params: list[object] = []

        if text:
            like = f"%{text}%"
            clauses.append("(full_name LIKE %s OR phone LIKE %s OR registration_number LIKE %s)")
            params.extend([like, like, like])
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)

        order_col = sort_by if sort_by in SORTABLE_COLUMNS else "created_at"
        direction = "DESC" if descending else "ASC"
        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS n FROM members WHERE {where}", tuple(params))
            total = int(fetchone(cur)["n"])

            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM members
                WHERE {where}
                ORDER BY {order_col} {direction}, member_id {direction}
                LIMIT %s OFFSET %s
                """,
                tuple(params + [page.limit, page.offset]),
            )
            items = [_to_member(r) for r in fetchall(cur)]

        return Page(items=items, page=page.page, limit=page.limit, total=total)

    def expire_lapsed(self, now: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE members
                SET status=%s
                WHERE status=%s AND membership_expiry_date IS NOT NULL AND membership_expiry_date < %s
                """,
                (MemberStatus.EXPIRED.value, MemberStatus.ACTIVE.value, to_db_datetime(now)),
            )
            return int(cur.rowcount)

    def count(self, *, status: Optional[MemberStatus] = None) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            if status is None:
                cur.execute("SELECT COUNT(*) AS n FROM members")
            else:
                cur.execute("SELECT COUNT(*) AS n FROM members WHERE status=%s", (status.value,))
            return int(fetchone(cur)["n"])

    def count_with_balance(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM members WHERE outstanding_balance > 0")
            return int(fetchone(cur)["n"])

    def _expiring_where(self, statuses: Sequence[MemberStatus]) -> str:
        marks = ",".join(["%s"] * len(statuses))
        return f"status IN ({marks}) AND membership_expiry_date BETWEEN %s AND %s"

    def list_expiring(
        self,
        *,
        statuses: Sequence[MemberStatus],
        start: datetime,
        end: datetime,
        limit: Optional[int] = None,
    ) -> Sequence[Member]:
        params: list[object] = [s.value for s in statuses] + [to_db_datetime(start), to_db_datetime(end)]
        sql = f"SELECT {_COLUMNS} FROM members WHERE {self._expiring_where(statuses)} ORDER BY membership_expiry_date ASC"
        if limit is not None:
            sql += " LIMIT %s"
            params.append(int(limit))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_member(r) for r in fetchall(cur)]

    def count_expiring(self, *, statuses: Sequence[MemberStatus], start: datetime, end: datetime) -> int:
        params = [s.value for s in statuses] + [to_db_datetime(start), to_db_datetime(end)]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS n FROM members WHERE {self._expiring_where(statuses)}", tuple(params))
            return int(fetchone(cur)["n"])

from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..common.pagination import Page, PageRequest
from ..core.enums import SessionLabel
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_db_datetime, to_db_datetime
from ..members.model import MemberRef
from .model import AttendanceRecord, AttendanceRow
from .repository import AttendanceRepository

_COLUMNS = "a.attendance_id, a.member_id, a.attendance_date, a.session, a.check_in_time, a.check_out_time, a.is_auto_checkout"

_MEMBER_COLUMNS = """
    m.full_name AS m_full_name, m.registration_number AS m_registration_number, m.phone AS m_phone
"""


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        member_id=int(r["member_id"]),
        date=r["attendance_date"],
        session=SessionLabel(r["session"]),
        check_in_time=from_db_datetime(r["check_in_time"]),
        check_out_time=from_db_datetime(r.get("check_out_time")),
        is_auto_checkout=bool(r.get("is_auto_checkout")),
    )


def _to_row(r: dict) -> AttendanceRow:
    member = None
    if r.get("m_full_name") is not None:
        member = MemberRef(
            member_id=int(r["member_id"]),
            full_name=r["m_full_name"],
            registration_number=r["m_registration_number"],
            phone=r["m_phone"],
        )
    return AttendanceRow(record=_to_record(r), member=member)


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_member_and_date(self, member_id: int, day: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records a
                WHERE a.member_id=%s AND a.attendance_date=%s
                ORDER BY a.check_in_time ASC
                """,
                (int(member_id), day),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def create_checkin(
        self,
        *,
        member_id: int,
        day: date,
        session: SessionLabel,
        check_in_time: datetime,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(member_id, attendance_date, session, check_in_time, is_auto_checkout)
                VALUES(%s,%s,%s,%s,0)
                """,
                (int(member_id), day, session.value, to_db_datetime(check_in_time)),
            )
            return int(cur.lastrowid)

    def update_checkout(self, *, attendance_id: int, check_out_time: datetime, is_auto: bool = False) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_out_time=%s, is_auto_checkout=%s
                WHERE attendance_id=%s AND check_out_time IS NULL
                """,
                (to_db_datetime(check_out_time), 1 if is_auto else 0, int(attendance_id)),
            )
            return cur.rowcount > 0

    def close_open_for_date(self, day: date, check_out_time: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_out_time=%s, is_auto_checkout=1
                WHERE attendance_date=%s AND check_out_time IS NULL
                """,
                (to_db_datetime(check_out_time), day),
            )
            return int(cur.rowcount)

    def list_rows(self, *, day: Optional[date], member_id: Optional[int], page: PageRequest) -> Page[AttendanceRow]:
        clauses = ["1=1"]
        params: list[object] = []
        if day is not None:
            clauses.append("a.attendance_date=%s")
            params.append(day)
        if member_id is not None:
            clauses.append("a.member_id=%s")
            params.append(int(member_id))
        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS n FROM attendance_records a WHERE {where}", tuple(params))
            total = int(fetchone(cur)["n"])

            cur.execute(
                f"""
                SELECT {_COLUMNS}, {_MEMBER_COLUMNS}
                FROM attendance_records a
                LEFT JOIN members m ON m.member_id = a.member_id
                WHERE {where}
                ORDER BY a.check_in_time DESC, a.attendance_id DESC
                LIMIT %s OFFSET %s
                """,
                tuple(params + [page.limit, page.offset]),
            )
            items = [_to_row(r) for r in fetchall(cur)]

        return Page(items=items, page=page.page, limit=page.limit, total=total)

    def list_open_for_date(self, day: date) -> Sequence[AttendanceRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}, {_MEMBER_COLUMNS}
                FROM attendance_records a
                LEFT JOIN members m ON m.member_id = a.member_id
                WHERE a.attendance_date=%s AND a.check_out_time IS NULL
                ORDER BY a.check_in_time DESC
                """,
                (day,),
            )
            return [_to_row(r) for r in fetchall(cur)]

    def list_recent_for_member(self, member_id: int, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records a
                WHERE a.member_id=%s
                ORDER BY a.check_in_time DESC
                LIMIT %s
                """,
                (int(member_id), int(limit)),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def count_for_date(self, day: date) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM attendance_records WHERE attendance_date=%s", (day,))
            return int(fetchone(cur)["n"])

    def count_open_for_date(self, day: date) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT COUNT(*) AS n FROM attendance_records WHERE attendance_date=%s AND check_out_time IS NULL",
                (day,),
            )
            return int(fetchone(cur)["n"])

    def delete_for_member(self, member_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_records WHERE member_id=%s", (int(member_id),))
            return int(cur.rowcount)

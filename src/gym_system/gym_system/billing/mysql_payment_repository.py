from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence

from ..common.pagination import Page, PageRequest
from ..database.connection import DatabaseConnection
from ..core.exceptions import NotFoundError
from ..database.mysql_base import (
    db_cursor,
    fetchall,
    fetchone,
    from_db_datetime,
    to_db_datetime,
    to_db_value,
    to_decimal,
)
from ..members.model import MemberRef
from .model import MemberUpdate, Payment, PaymentRow
from .repository import PaymentRepository

_COLUMNS = """
    p.payment_id, p.member_id, p.amount, p.payment_date, p.payment_mode, p.plan_id, p.plan_name,
    p.plan_duration, p.start_date, p.expiry_date, p.next_due_date, p.is_partial_payment,
    p.total_plan_amount, p.balance_remaining, p.receipt_number, p.notes, p.is_deleted
"""


def _to_payment(r: dict) -> Payment:
    return Payment(
        payment_id=int(r["payment_id"]),
        member_id=int(r["member_id"]),
        amount=to_decimal(r["amount"]),
        payment_date=from_db_datetime(r["payment_date"]),
        payment_mode=r["payment_mode"],
        plan_id=r["plan_id"],
        plan_name=r["plan_name"],
        plan_duration=int(r["plan_duration"]),
        start_date=from_db_datetime(r["start_date"]),
        expiry_date=from_db_datetime(r["expiry_date"]),
        next_due_date=from_db_datetime(r["next_due_date"]),
        is_partial_payment=bool(r["is_partial_payment"]),
        total_plan_amount=to_decimal(r["total_plan_amount"]),
        balance_remaining=to_decimal(r["balance_remaining"]),
        receipt_number=r["receipt_number"],
        notes=r.get("notes") or "",
        is_deleted=bool(r.get("is_deleted")),
    )


class MySQLPaymentRepository(PaymentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def next_receipt_sequence(self, prefix: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            # LAST_INSERT_ID(expr) makes the incremented value visible to this connection only
            cur.execute(
                """
                INSERT INTO receipt_counters(prefix, counter) VALUES(%s, LAST_INSERT_ID(1))
                ON DUPLICATE KEY UPDATE counter = LAST_INSERT_ID(counter + 1)
                """,
                (prefix,),
            )
            cur.execute("SELECT LAST_INSERT_ID() AS seq")
            return int(fetchone(cur)["seq"])

    def create_with_member_update(self, payment: Payment, update: MemberUpdate) -> int:
        fields = update.as_fields()
        assignments = "".join(f"{col}=%s, " for col in fields)
        member_id = int(payment.member_id)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT member_id FROM members WHERE member_id=%s FOR UPDATE", (member_id,))
            if fetchone(cur) is None:
                raise NotFoundError("Member not found")

            payment_id = self._insert(cur, payment)
            cur.execute(
                f"""
                UPDATE members
                SET {assignments}outstanding_balance = GREATEST(0, outstanding_balance + %s)
                WHERE member_id=%s
                """,
                (*[to_db_value(v) for v in fields.values()], str(update.balance_delta), member_id),
            )
            return payment_id

    def _insert(self, cur, payment: Payment) -> int:
        cur.execute(
            """
            INSERT INTO payments(member_id, amount, payment_date, payment_mode, plan_id, plan_name,
                                 plan_duration, start_date, expiry_date, next_due_date,
                                 is_partial_payment, total_plan_amount, balance_remaining,
                                 receipt_number, notes)
            VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
            """,
            (
                int(payment.member_id),
                str(payment.amount),
                to_db_datetime(payment.payment_date),
                payment.payment_mode,
                payment.plan_id,
                payment.plan_name,
                int(payment.plan_duration),
                to_db_datetime(payment.start_date),
                to_db_datetime(payment.expiry_date),
                to_db_datetime(payment.next_due_date),
                1 if payment.is_partial_payment else 0,
                str(payment.total_plan_amount),
                str(payment.balance_remaining),
                payment.receipt_number,
                payment.notes,
            ),
        )
        return int(cur.lastrowid)

    def get_by_id(self, payment_id: int) -> Optional[Payment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM payments p WHERE p.payment_id=%s", (int(payment_id),))
            row = fetchone(cur)
            return _to_payment(row) if row else None

    def soft_delete(self, payment_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE payments SET is_deleted=1 WHERE payment_id=%s AND is_deleted=0",
                (int(payment_id),),
            )
            return cur.rowcount > 0

    def search(
        self,
        *,
        member_id: Optional[int],
        start: Optional[datetime],
        end: Optional[datetime],
        page: PageRequest,
    ) -> Page[PaymentRow]:
        clauses = ["p.is_deleted=0"]
        params: list[object] = []
        if member_id is not None:
            clauses.append("p.member_id=%s")
            params.append(int(member_id))
        if start is not None:
            clauses.append("p.payment_date >= %s")
            params.append(to_db_datetime(start))
        if end is not None:
            clauses.append("p.payment_date <= %s")
            params.append(to_db_datetime(end))
        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS n FROM payments p WHERE {where}", tuple(params))
            total = int(fetchone(cur)["n"])

            cur.execute(
                f"""
                SELECT {_COLUMNS},
                       m.full_name AS m_full_name, m.registration_number AS m_registration_number,
                       m.phone AS m_phone
                FROM payments p
                LEFT JOIN members m ON m.member_id = p.member_id
                WHERE {where}
                ORDER BY p.payment_date DESC, p.payment_id DESC
                LIMIT %s OFFSET %s
                """,
                tuple(params + [page.limit, page.offset]),
            )
            items = []
            for r in fetchall(cur):
                member = None
                if r.get("m_full_name") is not None:
                    member = MemberRef(
                        member_id=int(r["member_id"]),
                        full_name=r["m_full_name"],
                        registration_number=r["m_registration_number"],
                        phone=r["m_phone"],
                    )
                items.append(PaymentRow(payment=_to_payment(r), member=member))

        return Page(items=items, page=page.page, limit=page.limit, total=total)

    def list_recent_for_member(self, member_id: int, limit: int) -> Sequence[Payment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM payments p
                WHERE p.member_id=%s AND p.is_deleted=0
                ORDER BY p.payment_date DESC, p.payment_id DESC
                LIMIT %s
                """,
                (int(member_id), int(limit)),
            )
            return [_to_payment(r) for r in fetchall(cur)]

    def revenue_between(self, start: datetime, end: datetime) -> tuple[Decimal, int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT COALESCE(SUM(amount), 0) AS total, COUNT(*) AS n
                FROM payments
                WHERE is_deleted=0 AND payment_date >= %s AND payment_date < %s
                """,
                (to_db_datetime(start), to_db_datetime(end)),
            )
            row = fetchone(cur) or {"total": 0, "n": 0}
            return to_decimal(row["total"]), int(row["n"])

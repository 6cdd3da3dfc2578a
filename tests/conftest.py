from __future__ import annotations

import copy
from dataclasses import replace
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Optional

import pytest

from src.gym_system.gym_system.admins.model import Admin
from src.gym_system.gym_system.admins.service import AuthService
from src.gym_system.gym_system.attendance.model import AttendanceRecord, AttendanceRow
from src.gym_system.gym_system.attendance.service import AttendanceService
from src.gym_system.gym_system.billing.model import Payment, PaymentRow
from src.gym_system.gym_system.billing.service import PaymentService
from src.gym_system.gym_system.common.pagination import Page
from src.gym_system.gym_system.configuration.defaults import default_document
from src.gym_system.gym_system.configuration.service import ConfigService
from src.gym_system.gym_system.container import Container
from src.gym_system.gym_system.core.enums import MemberStatus
from src.gym_system.gym_system.core.exceptions import ConflictError, NotFoundError
from src.gym_system.gym_system.dashboard.service import DashboardService
from src.gym_system.gym_system.members.model import Member, MemberRef
from src.gym_system.gym_system.members.service import MemberService
from src.gym_system.gym_system.ratelimit.limiter import InMemoryFixedWindowRateLimiter


class InMemoryConfigs:
    def __init__(self, document: Optional[dict] = None):
        self.document = copy.deepcopy(document)
        self.saves = 0

    def get_document(self):
        return copy.deepcopy(self.document)

    def save_document(self, document):
        self.document = copy.deepcopy(document)
        self.saves += 1


class InMemoryMembers:
    def __init__(self):
        self._next_id = 1
        self.rows: dict[int, Member] = {}

    def add(self, member: Member) -> Member:
        self.rows[member.member_id] = member
        self._next_id = max(self._next_id, member.member_id + 1)
        return member

    def get_by_id(self, member_id):
        return self.rows.get(int(member_id))

    def get_by_registration_number(self, registration_number):
        return next((m for m in self.rows.values() if m.registration_number == registration_number), None)

    def get_by_phone(self, phone):
        return next((m for m in self.rows.values() if m.phone == phone), None)

    def create(self, *, full_name, phone, address, registration_number, join_date, membership_plan, status, notes):
        if self.get_by_phone(phone) or self.get_by_registration_number(registration_number):
            raise ConflictError("Record already exists")
        member_id = self._next_id
        self._next_id += 1
        self.rows[member_id] = Member(
            member_id=member_id,
            full_name=full_name,
            phone=phone,
            address=address,
            registration_number=registration_number,
            join_date=join_date,
            membership_plan=membership_plan,
            status=status,
            notes=notes,
            created_at=join_date,
            updated_at=join_date,
        )
        return member_id

    def update_fields(self, member_id, fields):
        member = self.rows.get(int(member_id))
        if not member:
            return False
        self.rows[int(member_id)] = replace(member, **fields)
        return True

    def delete(self, member_id):
        return self.rows.pop(int(member_id), None) is not None

    def search(self, *, text, status, sort_by, descending, page):
        items = list(self.rows.values())
        if text:
            needle = text.lower()
            items = [
                m
                for m in items
                if needle in m.full_name.lower() or needle in m.phone or needle in m.registration_number.lower()
            ]
        if status is not None:
            items = [m for m in items if m.status == status]
        items.sort(key=lambda m: (getattr(m, sort_by) or "", m.member_id), reverse=descending)
        total = len(items)
        return Page(items=items[page.offset : page.offset + page.limit], page=page.page, limit=page.limit, total=total)

    def expire_lapsed(self, now):
        count = 0
        for m in list(self.rows.values()):
            if m.status == MemberStatus.ACTIVE and m.membership_expiry_date and m.membership_expiry_date < now:
                self.rows[m.member_id] = replace(m, status=MemberStatus.EXPIRED)
                count += 1
        return count

    def count(self, *, status=None):
        return sum(1 for m in self.rows.values() if status is None or m.status == status)

    def count_with_balance(self):
        return sum(1 for m in self.rows.values() if m.outstanding_balance > 0)

    def _expiring(self, statuses, start, end):
        found = [
            m
            for m in self.rows.values()
            if m.status in statuses
            and m.membership_expiry_date is not None
            and start <= m.membership_expiry_date <= end
        ]
        return sorted(found, key=lambda m: m.membership_expiry_date)

    def list_expiring(self, *, statuses, start, end, limit=None):
        found = self._expiring(statuses, start, end)
        return found[:limit] if limit is not None else found

    def count_expiring(self, *, statuses, start, end):
        return len(self._expiring(statuses, start, end))


class InMemoryPayments:
    def __init__(self, members: Optional[InMemoryMembers] = None):
        self._members = members
        self._next_id = 1
        self.rows: dict[int, Payment] = {}
        self.counters: dict[str, int] = {}

    def next_receipt_sequence(self, prefix):
        self.counters[prefix] = self.counters.get(prefix, 0) + 1
        return self.counters[prefix]

    def create_with_member_update(self, payment, update):
        member = self._members.rows.get(int(payment.member_id))
        if member is None:
            raise NotFoundError("Member not found")
        if any(p.receipt_number == payment.receipt_number for p in self.rows.values()):
            raise ConflictError("Record already exists")
        payment_id = self._next_id
        self.rows[payment_id] = replace(payment, payment_id=payment_id)
        try:
            fields = dict(update.as_fields())
            fields["outstanding_balance"] = max(Decimal("0"), member.outstanding_balance + update.balance_delta)
            self._members.update_fields(member.member_id, fields)
        except Exception:
            del self.rows[payment_id]
            raise
        self._next_id += 1
        return payment_id

    def get_by_id(self, payment_id):
        return self.rows.get(int(payment_id))

    def soft_delete(self, payment_id):
        p = self.rows.get(int(payment_id))
        if not p or p.is_deleted:
            return False
        self.rows[int(payment_id)] = replace(p, is_deleted=True)
        return True

    def _live(self):
        return sorted(
            (p for p in self.rows.values() if not p.is_deleted),
            key=lambda p: (p.payment_date, p.payment_id),
            reverse=True,
        )

    def _ref(self, member_id):
        m = self._members.get_by_id(member_id) if self._members else None
        return MemberRef(m.member_id, m.full_name, m.registration_number, m.phone) if m else None

    def search(self, *, member_id, start, end, page):
        items = [
            p
            for p in self._live()
            if (member_id is None or p.member_id == member_id)
            and (start is None or p.payment_date >= start)
            and (end is None or p.payment_date <= end)
        ]
        rows = [PaymentRow(payment=p, member=self._ref(p.member_id)) for p in items]
        return Page(items=rows[page.offset : page.offset + page.limit], page=page.page, limit=page.limit, total=len(rows))

    def list_recent_for_member(self, member_id, limit):
        return [p for p in self._live() if p.member_id == member_id][:limit]

    def revenue_between(self, start, end):
        hits = [p for p in self._live() if start <= p.payment_date < end]
        return sum((p.amount for p in hits), Decimal("0")), len(hits)


class InMemoryAttendance:
    def __init__(self, members: Optional[InMemoryMembers] = None):
        self._members = members
        self._next_id = 1
        self.rows: dict[int, AttendanceRecord] = {}

    def add(self, record: AttendanceRecord) -> AttendanceRecord:
        self.rows[record.attendance_id] = record
        self._next_id = max(self._next_id, record.attendance_id + 1)
        return record

    def list_for_member_and_date(self, member_id, day):
        found = [r for r in self.rows.values() if r.member_id == member_id and r.date == day]
        return sorted(found, key=lambda r: r.check_in_time)

    def create_checkin(self, *, member_id, day, session, check_in_time):
        if any(r.member_id == member_id and r.date == day and r.session == session for r in self.rows.values()):
            raise ConflictError("Record already exists")
        attendance_id = self._next_id
        self._next_id += 1
        self.rows[attendance_id] = AttendanceRecord(
            attendance_id=attendance_id,
            member_id=member_id,
            date=day,
            session=session,
            check_in_time=check_in_time,
        )
        return attendance_id

    def update_checkout(self, *, attendance_id, check_out_time, is_auto=False):
        r = self.rows.get(int(attendance_id))
        if not r or r.check_out_time is not None:
            return False
        self.rows[int(attendance_id)] = replace(r, check_out_time=check_out_time, is_auto_checkout=is_auto)
        return True

    def close_open_for_date(self, day, check_out_time):
        closed = 0
        for r in list(self.rows.values()):
            if r.date == day and r.check_out_time is None:
                self.rows[r.attendance_id] = replace(r, check_out_time=check_out_time, is_auto_checkout=True)
                closed += 1
        return closed

    def _row(self, r):
        m = self._members.get_by_id(r.member_id) if self._members else None
        ref = MemberRef(m.member_id, m.full_name, m.registration_number, m.phone) if m else None
        return AttendanceRow(record=r, member=ref)

    def list_rows(self, *, day, member_id, page):
        found = [
            r
            for r in self.rows.values()
            if (day is None or r.date == day) and (member_id is None or r.member_id == member_id)
        ]
        found.sort(key=lambda r: (r.check_in_time, r.attendance_id), reverse=True)
        rows = [self._row(r) for r in found]
        return Page(items=rows[page.offset : page.offset + page.limit], page=page.page, limit=page.limit, total=len(rows))

    def list_open_for_date(self, day):
        found = [r for r in self.rows.values() if r.date == day and r.check_out_time is None]
        return [self._row(r) for r in sorted(found, key=lambda r: r.check_in_time, reverse=True)]

    def list_recent_for_member(self, member_id, limit):
        found = sorted((r for r in self.rows.values() if r.member_id == member_id), key=lambda r: r.check_in_time, reverse=True)
        return found[:limit]

    def count_for_date(self, day):
        return sum(1 for r in self.rows.values() if r.date == day)

    def count_open_for_date(self, day):
        return sum(1 for r in self.rows.values() if r.date == day and r.check_out_time is None)

    def delete_for_member(self, member_id):
        doomed = [k for k, r in self.rows.items() if r.member_id == member_id]
        for k in doomed:
            del self.rows[k]
        return len(doomed)


class InMemoryAdmins:
    def __init__(self):
        self._next_id = 1
        self.rows: dict[int, Admin] = {}

    def get_by_id(self, admin_id):
        return self.rows.get(int(admin_id))

    def get_by_login(self, username_or_email):
        return next(
            (a for a in self.rows.values() if a.username == username_or_email or a.email == username_or_email.lower()),
            None,
        )

    def count(self):
        return len(self.rows)

    def create(self, *, username, email, password_hash, role):
        admin_id = self._next_id
        self._next_id += 1
        self.rows[admin_id] = Admin(
            admin_id=admin_id, username=username, email=email, password_hash=password_hash, role=role
        )
        return admin_id

    def touch_last_login(self, admin_id, at):
        self.rows[int(admin_id)] = replace(self.rows[int(admin_id)], last_login=at)


@pytest.fixture
def fixed_now() -> datetime:
    # 10:00 in Asia/Kolkata on Monday 2025-03-10
    return datetime(2025, 3, 10, 4, 30, tzinfo=timezone.utc)


@pytest.fixture
def config_doc() -> dict[str, Any]:
    doc = default_document()
    # keep morning out of the evening window so both sessions are reachable
    doc["sessions"]["morning"] = {"name": "Morning", "start": "05:00", "end": "11:00"}
    return doc


@pytest.fixture
def configs(config_doc) -> InMemoryConfigs:
    return InMemoryConfigs(config_doc)


@pytest.fixture
def members() -> InMemoryMembers:
    return InMemoryMembers()


@pytest.fixture
def payments(members) -> InMemoryPayments:
    return InMemoryPayments(members)


@pytest.fixture
def attendance(members) -> InMemoryAttendance:
    return InMemoryAttendance(members)


@pytest.fixture
def admins() -> InMemoryAdmins:
    return InMemoryAdmins()


@pytest.fixture
def make_member(members, fixed_now):
    def _make(
        member_id: int = 1,
        *,
        registration_number: str = "HF001",
        full_name: str = "Asha Rao",
        phone: Optional[str] = None,
        status: MemberStatus = MemberStatus.ACTIVE,
        expiry: Optional[datetime] = None,
        balance: Decimal = Decimal("0"),
    ) -> Member:
        return members.add(
            Member(
                member_id=member_id,
                full_name=full_name,
                phone=phone or f"98765{member_id:05d}",
                address="12 MG Road",
                registration_number=registration_number,
                join_date=datetime(2025, 1, 1, tzinfo=timezone.utc),
                membership_plan="monthly",
                status=status,
                membership_start_date=None if expiry is None else datetime(2025, 1, 1, tzinfo=timezone.utc),
                membership_expiry_date=expiry,
                outstanding_balance=balance,
            )
        )

    return _make


@pytest.fixture
def config_service(configs) -> ConfigService:
    return ConfigService(configs)


@pytest.fixture
def container(admins, configs, members, payments, attendance) -> Container:
    config_service = ConfigService(configs)
    return Container(
        auth_service=AuthService(admins),
        config_service=config_service,
        member_service=MemberService(members, payments, attendance),
        payment_service=PaymentService(payments, members, config_service),
        attendance_service=AttendanceService(attendance, members, config_service),
        dashboard_service=DashboardService(members, payments, attendance, config_service),
        rate_limiter=InMemoryFixedWindowRateLimiter(max_requests=10, window_seconds=60),
    )


@pytest.fixture
def app(container, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    from src.gym_system.gym_system.main import create_app

    return create_app(container=container)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_client(client):
    client.post("/api/auth/setup", json={"username": "owner", "email": "owner@gym.test", "password": "secret1"})
    resp = client.post("/api/auth/login", json={"username": "owner", "password": "secret1"})
    assert resp.status_code == 200
    return client


@pytest.fixture
def today(fixed_now) -> date:
    return date(2025, 3, 10)

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time, timedelta
from decimal import Decimal
from typing import Optional, Sequence

from ..attendance.repository import AttendanceRepository
from ..billing.repository import PaymentRepository
from ..common.datetime_utils import gym_zone, now_utc, to_local
from ..common.formatting import iso, money
from ..configuration.service import ConfigService
from ..core.constants import (
    DASHBOARD_EXPIRING_DAYS,
    DASHBOARD_EXPIRING_LIMIT,
    DASHBOARD_PRIORITY_LIMIT,
    DASHBOARD_PRIORITY_LOOKBACK_DAYS,
)
from ..core.enums import MemberStatus
from ..members.model import Member
from ..members.repository import MemberRepository


def _member_summary(m: Member) -> dict:
    return {
        "id": m.member_id,
        "fullName": m.full_name,
        "registrationNumber": m.registration_number,
        "phone": m.phone,
        "membershipExpiryDate": iso(m.membership_expiry_date),
        "outstandingBalance": money(m.outstanding_balance),
        "status": m.status.value,
    }


@dataclass(frozen=True)
class DashboardStats:
    total_members: int
    active_members: int
    expired_members: int
    paused_members: int
    expiring_this_week: int
    pending_payments: int
    attendance_today: int
    currently_in_gym: int
    revenue_this_month: Decimal
    payments_this_month: int
    priority_list: Sequence[Member]
    expiring_list: Sequence[Member]

    def to_dict(self) -> dict:
        return {
            "members": {
                "total": self.total_members,
                "active": self.active_members,
                "expired": self.expired_members,
                "paused": self.paused_members,
            },
            "alerts": {
                "expiringThisWeek": self.expiring_this_week,
                "pendingPayments": self.pending_payments,
            },
            "attendance": {
                "today": self.attendance_today,
                "currentlyInGym": self.currently_in_gym,
            },
            "revenue": {
                "thisMonth": money(self.revenue_this_month),
                "paymentsThisMonth": self.payments_this_month,
            },
            "priorityList": [_member_summary(m) for m in self.priority_list],
            "expiringList": [_member_summary(m) for m in self.expiring_list],
        }


class DashboardService:
    """Read-only aggregation for the admin dashboard. Day, week and month follow the gym's calendar."""

    def __init__(
        self,
        members: MemberRepository,
        payments: PaymentRepository,
        attendance: AttendanceRepository,
        configs: ConfigService,
    ):
        self._members = members
        self._payments = payments
        self._attendance = attendance
        self._configs = configs

    def stats(self, *, now: Optional[datetime] = None) -> DashboardStats:
        now = now or now_utc()
        tz = gym_zone(self._configs.get_effective().timezone)
        local = to_local(now, tz)
        today = local.date()

        today_start = datetime.combine(today, time.min, tzinfo=tz)
        # weeks start on Sunday
        week_start = today_start - timedelta(days=(today.weekday() + 1) % 7)
        week_end = week_start + timedelta(days=7)
        month_start = today_start.replace(day=1)
        month_end = (month_start + timedelta(days=32)).replace(day=1)

        revenue, payment_count = self._payments.revenue_between(month_start, month_end)

        return DashboardStats(
            total_members=self._members.count(),
            active_members=self._members.count(status=MemberStatus.ACTIVE),
            expired_members=self._members.count(status=MemberStatus.EXPIRED),
            paused_members=self._members.count(status=MemberStatus.PAUSED),
            expiring_this_week=self._members.count_expiring(
                statuses=[MemberStatus.ACTIVE], start=today_start, end=week_end
            ),
            pending_payments=self._members.count_with_balance(),
            attendance_today=self._attendance.count_for_date(today),
            currently_in_gym=self._attendance.count_open_for_date(today),
            revenue_this_month=revenue,
            payments_this_month=payment_count,
            priority_list=self._members.list_expiring(
                statuses=[MemberStatus.ACTIVE, MemberStatus.EXPIRED],
                start=now - timedelta(days=DASHBOARD_PRIORITY_LOOKBACK_DAYS),
                end=week_end,
                limit=DASHBOARD_PRIORITY_LIMIT,
            ),
            expiring_list=self._members.list_expiring(
                statuses=[MemberStatus.ACTIVE],
                start=today_start,
                end=now + timedelta(days=DASHBOARD_EXPIRING_DAYS),
                limit=DASHBOARD_EXPIRING_LIMIT,
            ),
        )

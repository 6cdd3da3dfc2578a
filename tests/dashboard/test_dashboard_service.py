from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

from src.gym_system.gym_system.attendance.model import AttendanceRecord
from src.gym_system.gym_system.billing.model import PaymentRequest
from src.gym_system.gym_system.billing.service import PaymentService
from src.gym_system.gym_system.configuration.service import ConfigService
from src.gym_system.gym_system.core.enums import MemberStatus, SessionLabel
from src.gym_system.gym_system.dashboard.service import DashboardService


def test_stats_aggregate_members_attendance_and_revenue(
    members, payments, attendance, configs, make_member, fixed_now
):
    make_member(1, registration_number="A", expiry=fixed_now + timedelta(days=3), balance=Decimal("200"))
    make_member(2, registration_number="B", expiry=fixed_now - timedelta(days=2), status=MemberStatus.EXPIRED)
    make_member(3, registration_number="C", status=MemberStatus.PAUSED)
    make_member(4, registration_number="D", expiry=fixed_now + timedelta(days=10))

    attendance.add(AttendanceRecord(1, 1, date(2025, 3, 10), SessionLabel.MORNING, fixed_now))
    attendance.add(
        AttendanceRecord(2, 4, date(2025, 3, 10), SessionLabel.MORNING, fixed_now, fixed_now + timedelta(hours=1))
    )
    attendance.add(AttendanceRecord(3, 4, date(2025, 3, 9), SessionLabel.EVENING, fixed_now - timedelta(days=1)))

    config_service = ConfigService(configs)
    billing = PaymentService(payments, members, config_service)
    billing.record_payment(4, PaymentRequest("monthly", Decimal("1000"), "Cash"), now=fixed_now)
    billing.record_payment(4, PaymentRequest("monthly", Decimal("1000"), "Cash"), now=fixed_now - timedelta(days=40))

    stats = DashboardService(members, payments, attendance, config_service).stats(now=fixed_now).to_dict()

    assert stats["members"] == {"total": 4, "active": 2, "expired": 1, "paused": 1}
    # Monday 10 March: the week runs Sunday 9th to Sunday 16th
    assert stats["alerts"]["expiringThisWeek"] == 1
    assert stats["alerts"]["pendingPayments"] == 1
    assert stats["attendance"] == {"today": 2, "currentlyInGym": 1}
    assert stats["revenue"] == {"thisMonth": 1000.0, "paymentsThisMonth": 1}
    assert [m["registrationNumber"] for m in stats["priorityList"]] == ["B", "A"]
    assert [m["registrationNumber"] for m in stats["expiringList"]] == ["A"]

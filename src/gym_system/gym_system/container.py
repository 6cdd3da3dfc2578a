from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .admins.mysql_admin_repository import MySQLAdminRepository
from .admins.service import AuthService
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .billing.calculator.standard_calculator import StandardBillingCalculator
from .billing.mysql_payment_repository import MySQLPaymentRepository
from .billing.service import PaymentService
from .configuration.mysql_config_repository import MySQLConfigRepository
from .configuration.service import ConfigService
from .core.constants import RATE_LIMIT_MAX, RATE_LIMIT_WINDOW_SECONDS
from .dashboard.service import DashboardService
from .database.connection import DBConfig, DatabaseConnection
from .members.mysql_member_repository import MySQLMemberRepository
from .members.service import MemberService
from .ratelimit.limiter import InMemoryFixedWindowRateLimiter, RateLimiter
from .ratelimit.mysql_rate_limiter import MySQLFixedWindowRateLimiter


@dataclass(frozen=True)
class Container:
    """Services the controllers need. Tests build one around in-memory repositories."""

    auth_service: AuthService
    config_service: ConfigService
    member_service: MemberService
    payment_service: PaymentService
    attendance_service: AttendanceService
    dashboard_service: DashboardService
    rate_limiter: RateLimiter

    conn: Optional[DatabaseConnection] = None


def build_container(
    *,
    db_config: dict,
    rate_limit_backend: str = "mysql",
    rate_limit_max: int = RATE_LIMIT_MAX,
    rate_limit_window_seconds: int = RATE_LIMIT_WINDOW_SECONDS,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    admins_repo = MySQLAdminRepository(conn)
    configs_repo = MySQLConfigRepository(conn)
    members_repo = MySQLMemberRepository(conn)
    payments_repo = MySQLPaymentRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)

    if rate_limit_backend == "memory":
        rate_limiter: RateLimiter = InMemoryFixedWindowRateLimiter(
            max_requests=rate_limit_max, window_seconds=rate_limit_window_seconds
        )
    else:
        rate_limiter = MySQLFixedWindowRateLimiter(
            conn, max_requests=rate_limit_max, window_seconds=rate_limit_window_seconds
        )

    config_service = ConfigService(configs_repo)

    return Container(
        auth_service=AuthService(admins_repo),
        config_service=config_service,
        member_service=MemberService(members_repo, payments_repo, attendance_repo),
        payment_service=PaymentService(
            payments_repo, members_repo, config_service, calculator=StandardBillingCalculator()
        ),
        attendance_service=AttendanceService(attendance_repo, members_repo, config_service),
        dashboard_service=DashboardService(members_repo, payments_repo, attendance_repo, config_service),
        rate_limiter=rate_limiter,
        conn=conn,
    )

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import gym_zone, local_today, now_utc, to_local
from ..common.pagination import Page, PageRequest
from ..configuration.model import OperatingConfig
from ..configuration.service import ConfigService
from ..core.enums import KioskAction, MemberStatus, RejectionReason, SessionLabel
from ..core.exceptions import BusinessRuleError, NotFoundError, ValidationError
from ..members.repository import MemberRepository
from .model import AttendanceRow, AutoExitResult, MarkResult
from .repository import AttendanceRepository
from .resolver import resolve_session, session_display_name

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionStatus:
    session: Optional[SessionLabel]
    session_name: Optional[str]
    operating_mode: str

    def to_dict(self) -> dict:
        return {
            "session": self.session.value if self.session else None,
            "sessionName": self.session_name,
            "isOpen": self.session is not None,
            "operatingMode": self.operating_mode,
        }


class AttendanceService:
    """Kiosk check-in/check-out and attendance queries."""

    def __init__(self, attendance: AttendanceRepository, members: MemberRepository, configs: ConfigService):
        self._attendance = attendance
        self._members = members
        self._configs = configs

    def _today(self, config: OperatingConfig, now: datetime) -> date:
        return local_today(now, gym_zone(config.timezone))

    def current_session(self, *, now: Optional[datetime] = None) -> SessionStatus:
        now = now or now_utc()
        config = self._configs.get_effective()
        local = to_local(now, gym_zone(config.timezone))
        label = resolve_session(config, local)
        return SessionStatus(
            session=label,
            session_name=session_display_name(config, label) if label else None,
            operating_mode=config.operating_mode.value,
        )

    def mark(self, registration_number: str, *, now: Optional[datetime] = None) -> MarkResult:
        """Check a member in or out of the current session.

        The order of checks matters: a closed gym is reported before the member
        is looked up, and a paused membership before an expired one.
        """
        reg = (registration_number or "").strip().upper()
        if not reg:
            raise ValidationError("Registration number is required")

        now = now or now_utc()
        config = self._configs.get_effective()
        local = to_local(now, gym_zone(config.timezone))

        session = resolve_session(config, local)
        if session is None:
            raise BusinessRuleError(
                RejectionReason.GYM_CLOSED,
                "Gym is currently closed. Please come during session hours.",
                details={
                    "sessions": {
                        "morning": config.morning.to_document(),
                        "evening": config.evening.to_document(),
                    }
                },
            )

        member = self._members.get_by_registration_number(reg)
        if not member:
            raise NotFoundError("Member not found. Please check your registration number.")

        if member.status == MemberStatus.PAUSED:
            raise BusinessRuleError(
                RejectionReason.MEMBERSHIP_PAUSED,
                "Your membership is paused. Please contact the gym.",
                details={"memberName": member.full_name},
            )
        if member.is_expired(now):
            raise BusinessRuleError(
                RejectionReason.MEMBERSHIP_EXPIRED,
                "Your membership has expired. Please renew to continue.",
                details={"memberName": member.full_name, "isExpired": True},
            )

        # Records are keyed by the local day of each tap. A session window that
        # wraps past midnight therefore starts a new record after 00:00.
        today = local.date()
        records = self._attendance.list_for_member_and_date(member.member_id, today)
        session_name = session_display_name(config, session)
        current = next((r for r in records if r.session == session), None)

        if current is not None:
            if not current.is_open:
                raise BusinessRuleError(
                    RejectionReason.SESSION_COMPLETED,
                    f"You have already completed your {session_name} session.",
                    details={"memberName": member.full_name},
                )
            self._attendance.update_checkout(attendance_id=current.attendance_id, check_out_time=now)
            logger.info("Member %s checked out of %s", reg, session.value)
            return MarkResult(
                action=KioskAction.CHECKOUT,
                member_name=member.full_name,
                session=session,
                session_name=session_name,
                at=now,
                message=f"Goodbye, {member.full_name}! Checked out from {session_name} session.",
            )

        max_sessions = config.attendance.max_sessions_per_day
        if len({r.session for r in records}) >= max_sessions:
            raise BusinessRuleError(
                RejectionReason.SESSION_LIMIT_REACHED,
                f"You have reached the maximum {max_sessions} sessions for today.",
                details={"memberName": member.full_name},
            )

        self._attendance.create_checkin(member_id=member.member_id, day=today, session=session, check_in_time=now)
        logger.info("Member %s checked in for %s", reg, session.value)
        return MarkResult(
            action=KioskAction.CHECKIN,
            member_name=member.full_name,
            session=session,
            session_name=session_name,
            at=now,
            message=f"Welcome, {member.full_name}! Checked in for {session_name} session.",
        )

    def list_records(
        self,
        *,
        day: Optional[date] = None,
        member_id: Optional[int] = None,
        page: PageRequest,
    ) -> Page[AttendanceRow]:
        return self._attendance.list_rows(day=day, member_id=member_id, page=page)

    def currently_inside(self, *, now: Optional[datetime] = None) -> Sequence[AttendanceRow]:
        now = now or now_utc()
        config = self._configs.get_effective()
        return self._attendance.list_open_for_date(self._today(config, now))

    def auto_checkout(self, *, now: Optional[datetime] = None) -> AutoExitResult:
        """Close today's open visits. Meant to run at closing time."""
        now = now or now_utc()
        config = self._configs.get_effective()
        if not config.attendance.auto_exit_enabled:
            return AutoExitResult(enabled=False, processed=0, closing_time=config.closing_time)

        processed = self._attendance.close_open_for_date(self._today(config, now), now)
        logger.info("Auto-exit closed %d open attendance record(s)", processed)
        return AutoExitResult(enabled=True, processed=processed, closing_time=config.closing_time)

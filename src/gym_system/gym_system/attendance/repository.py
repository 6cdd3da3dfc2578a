from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..common.pagination import Page, PageRequest
from ..core.enums import SessionLabel
from .model import AttendanceRecord, AttendanceRow


class AttendanceRepository(Protocol):
    def list_for_member_and_date(self, member_id: int, day: date) -> Sequence[AttendanceRecord]:
        """Records ordered by check-in time."""

        raise NotImplementedError

    def create_checkin(
        self,
        *,
        member_id: int,
        day: date,
        session: SessionLabel,
        check_in_time: datetime,
    ) -> int:
        """Raises ConflictError when (member, day, session) already exists."""

        raise NotImplementedError

    def update_checkout(self, *, attendance_id: int, check_out_time: datetime, is_auto: bool = False) -> bool:
        raise NotImplementedError

    def close_open_for_date(self, day: date, check_out_time: datetime) -> int:
        """Auto-checkout every open record of `day`. Returns the number closed."""

        raise NotImplementedError

    def list_rows(self, *, day: Optional[date], member_id: Optional[int], page: PageRequest) -> Page[AttendanceRow]:
        raise NotImplementedError

    def list_open_for_date(self, day: date) -> Sequence[AttendanceRow]:
        raise NotImplementedError

    def list_recent_for_member(self, member_id: int, limit: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def count_for_date(self, day: date) -> int:
        raise NotImplementedError

    def count_open_for_date(self, day: date) -> int:
        raise NotImplementedError

    def delete_for_member(self, member_id: int) -> int:
        raise NotImplementedError

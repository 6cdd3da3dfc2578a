from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.formatting import iso
from ..core.enums import KioskAction, SessionLabel
from ..members.model import MemberRef


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one member's visit in one session of one gym-local day."""

    attendance_id: int
    member_id: int
    date: date
    session: SessionLabel
    check_in_time: datetime
    check_out_time: Optional[datetime] = None
    is_auto_checkout: bool = False

    @property
    def is_open(self) -> bool:
        return self.check_out_time is None

    def to_dict(self) -> dict:
        return {
            "id": self.attendance_id,
            "memberId": self.member_id,
            "date": iso(self.date),
            "session": self.session.value,
            "checkInTime": iso(self.check_in_time),
            "checkOutTime": iso(self.check_out_time),
            "isAutoCheckout": self.is_auto_checkout,
        }


@dataclass(frozen=True)
class AttendanceRow:
    """Read-model for attendance listings (record plus member summary)."""

    record: AttendanceRecord
    member: Optional[MemberRef]

    def to_dict(self) -> dict:
        data = self.record.to_dict()
        data["member"] = self.member.to_dict() if self.member else None
        return data


@dataclass(frozen=True)
class MarkResult:
    action: KioskAction
    member_name: str
    session: SessionLabel
    session_name: str
    at: datetime
    message: str

    def to_dict(self) -> dict:
        data = {
            "message": self.message,
            "memberName": self.member_name,
            "action": self.action.value,
            "session": self.session.value,
            "sessionName": self.session_name,
        }
        key = "checkInTime" if self.action == KioskAction.CHECKIN else "checkOutTime"
        data[key] = iso(self.at)
        return data


@dataclass(frozen=True)
class AutoExitResult:
    enabled: bool
    processed: int
    closing_time: str

    @property
    def message(self) -> str:
        if not self.enabled:
            return "Auto-exit is disabled"
        return f"Auto-exit completed at {self.closing_time}"

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional, Sequence

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..billing.model import Payment
from ..billing.repository import PaymentRepository
from ..common.datetime_utils import now_utc
from ..common.pagination import Page, PageRequest
from ..common.validators import require_max_length, require_non_empty, require_phone
from ..core.constants import MEMBER_DETAIL_ATTENDANCE, MEMBER_DETAIL_PAYMENTS
from ..core.enums import MemberStatus
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from .model import Member
from .repository import MemberRepository

logger = logging.getLogger(__name__)

# API sort keys -> columns
SORT_FIELDS = {
    "createdAt": "created_at",
    "fullName": "full_name",
    "joinDate": "join_date",
    "membershipExpiryDate": "membership_expiry_date",
    "registrationNumber": "registration_number",
    "status": "status",
}


@dataclass(frozen=True)
class MemberDetail:
    member: Member
    payments: Sequence[Payment]
    attendance: Sequence[AttendanceRecord]

    def to_dict(self) -> dict:
        data = self.member.to_dict()
        data["payments"] = [p.to_dict() for p in self.payments]
        data["attendance"] = [a.to_dict() for a in self.attendance]
        return data


@dataclass(frozen=True)
class MemberLookup:
    """What the kiosk is allowed to see about a member."""

    member_id: int
    full_name: str
    registration_number: str
    status: MemberStatus
    membership_expiry_date: Optional[datetime]
    is_expired: bool

    def to_dict(self) -> dict:
        return {
            "id": self.member_id,
            "fullName": self.full_name,
            "registrationNumber": self.registration_number,
            "status": self.status.value,
            "membershipExpiryDate": self.membership_expiry_date.isoformat() if self.membership_expiry_date else None,
            "isExpired": self.is_expired,
        }


def _parse_status(value: Any) -> MemberStatus:
    try:
        return MemberStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in MemberStatus)
        raise ValidationError(f"Status must be one of: {allowed}") from None


class MemberService:
    """Use case: member records, kiosk lookup and the membership expiry job."""

    def __init__(self, members: MemberRepository, payments: PaymentRepository, attendance: AttendanceRepository):
        self._members = members
        self._payments = payments
        self._attendance = attendance

    def create(
        self,
        *,
        full_name: str,
        phone: str,
        address: str,
        registration_number: str,
        join_date: Optional[datetime] = None,
        membership_plan: Optional[str] = None,
        notes: str = "",
        now: Optional[datetime] = None,
    ) -> Member:
        full_name = require_max_length(require_non_empty(full_name, "Full name"), "Name", 100)
        phone = require_phone(phone)
        address = require_max_length(require_non_empty(address, "Address"), "Address", 200)
        reg = require_non_empty(registration_number, "Registration number").upper()
        notes = require_max_length(notes or "", "Notes", 500)

        if self._members.get_by_phone(phone):
            raise ConflictError("A member with this phone number already exists")
        if self._members.get_by_registration_number(reg):
            raise ConflictError("A member with this registration number already exists")

        member_id = self._members.create(
            full_name=full_name,
            phone=phone,
            address=address,
            registration_number=reg,
            join_date=join_date or now or now_utc(),
            membership_plan=membership_plan or "monthly",
            status=MemberStatus.ACTIVE,
            notes=notes,
        )
        logger.info("Member %s created (id=%s)", reg, member_id)
        return self._get(member_id)

    def update(self, member_id: int, changes: Mapping[str, Any]) -> Member:
        """Partial update of fullName, phone, status, membershipPlan and notes."""
        fields: dict[str, Any] = {}
        if changes.get("fullName") is not None:
            fields["full_name"] = require_max_length(require_non_empty(changes["fullName"], "Full name"), "Name", 100)
        if changes.get("phone") is not None:
            phone = require_phone(changes["phone"])
            existing = self._members.get_by_phone(phone)
            if existing and existing.member_id != member_id:
                raise ConflictError("A member with this phone number already exists")
            fields["phone"] = phone
        if changes.get("status") is not None:
            fields["status"] = _parse_status(changes["status"])
        if changes.get("membershipPlan") is not None:
            fields["membership_plan"] = require_non_empty(changes["membershipPlan"], "Membership plan")
        if changes.get("notes") is not None:
            fields["notes"] = require_max_length(str(changes["notes"]), "Notes", 500)

        if not self._members.update_fields(member_id, fields):
            raise NotFoundError("Member not found")
        return self._get(member_id)

    def delete(self, member_id: int) -> None:
        """Remove the member and their attendance. Payments stay for the books."""
        self._get(member_id)
        removed = self._attendance.delete_for_member(member_id)
        if not self._members.delete(member_id):
            raise NotFoundError("Member not found")
        logger.info("Member %s deleted with %d attendance record(s)", member_id, removed)

    def get_detail(self, member_id: int) -> MemberDetail:
        member = self._get(member_id)
        return MemberDetail(
            member=member,
            payments=self._payments.list_recent_for_member(member_id, MEMBER_DETAIL_PAYMENTS),
            attendance=self._attendance.list_recent_for_member(member_id, MEMBER_DETAIL_ATTENDANCE),
        )

    def list(
        self,
        *,
        search: str = "",
        status: Optional[str] = None,
        sort_by: str = "createdAt",
        sort_order: str = "desc",
        page: PageRequest,
    ) -> Page[Member]:
        status_filter = None if not status or status == "all" else _parse_status(status)
        return self._members.search(
            text=(search or "").strip(),
            status=status_filter,
            sort_by=SORT_FIELDS.get(sort_by, "created_at"),
            descending=sort_order != "asc",
            page=page,
        )

    def lookup(self, registration_number: str, *, now: Optional[datetime] = None) -> MemberLookup:
        reg = require_non_empty(registration_number, "Registration number").upper()
        member = self._members.get_by_registration_number(reg)
        if not member:
            raise NotFoundError("Member not found")
        return MemberLookup(
            member_id=member.member_id,
            full_name=member.full_name,
            registration_number=member.registration_number,
            status=member.status,
            membership_expiry_date=member.membership_expiry_date,
            is_expired=member.is_expired(now or now_utc()),
        )

    def expire_memberships(self, *, now: Optional[datetime] = None) -> int:
        count = self._members.expire_lapsed(now or now_utc())
        logger.info("Membership expiry check marked %d member(s) as Expired", count)
        return count

    def _get(self, member_id: int) -> Member:
        member = self._members.get_by_id(member_id)
        if not member:
            raise NotFoundError("Member not found")
        return member

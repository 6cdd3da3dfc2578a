from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..common.formatting import iso, money
from ..core.enums import MemberStatus


@dataclass(frozen=True)
class Member:
    """Domain entity: a gym member. Plain data, no DB access."""

    member_id: int
    full_name: str
    phone: str
    address: str
    registration_number: str
    join_date: datetime
    membership_plan: str
    status: MemberStatus
    membership_start_date: Optional[datetime] = None
    membership_expiry_date: Optional[datetime] = None
    outstanding_balance: Decimal = Decimal("0")
    notes: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def is_expired(self, now: datetime) -> bool:
        if self.status == MemberStatus.EXPIRED:
            return True
        return self.membership_expiry_date is not None and self.membership_expiry_date < now

    def to_dict(self) -> dict:
        return {
            "id": self.member_id,
            "fullName": self.full_name,
            "phone": self.phone,
            "address": self.address,
            "registrationNumber": self.registration_number,
            "joinDate": iso(self.join_date),
            "membershipPlan": self.membership_plan,
            "status": self.status.value,
            "membershipStartDate": iso(self.membership_start_date),
            "membershipExpiryDate": iso(self.membership_expiry_date),
            "outstandingBalance": money(self.outstanding_balance),
            "notes": self.notes,
            "createdAt": iso(self.created_at),
            "updatedAt": iso(self.updated_at),
        }


@dataclass(frozen=True)
class MemberRef:
    """The few member fields shown next to payments and attendance rows."""

    member_id: int
    full_name: str
    registration_number: str
    phone: str

    def to_dict(self) -> dict:
        return {
            "id": self.member_id,
            "fullName": self.full_name,
            "registrationNumber": self.registration_number,
            "phone": self.phone,
        }

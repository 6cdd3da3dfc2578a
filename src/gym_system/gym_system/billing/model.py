from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..common.formatting import iso, money
from ..core.enums import MemberStatus
from ..members.model import MemberRef


@dataclass(frozen=True)
class PaymentRequest:
    """What the front desk entered for one payment."""

    plan_id: str
    amount: Decimal
    payment_mode: str
    custom_duration: Optional[int] = None
    custom_amount: Optional[Decimal] = None
    custom_plan_name: Optional[str] = None
    start_date: Optional[datetime] = None
    notes: str = ""


@dataclass(frozen=True)
class Payment:
    """Value object for one payment event. Never mutated after it is written."""

    member_id: int
    amount: Decimal
    payment_date: datetime
    payment_mode: str
    plan_id: str
    plan_name: str
    plan_duration: int
    start_date: datetime
    expiry_date: datetime
    next_due_date: datetime
    is_partial_payment: bool
    total_plan_amount: Decimal
    balance_remaining: Decimal
    receipt_number: str
    notes: str = ""
    payment_id: Optional[int] = None
    is_deleted: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.payment_id,
            "memberId": self.member_id,
            "amount": money(self.amount),
            "paymentDate": iso(self.payment_date),
            "paymentMode": self.payment_mode,
            "planId": self.plan_id,
            "planName": self.plan_name,
            "planDuration": self.plan_duration,
            "startDate": iso(self.start_date),
            "expiryDate": iso(self.expiry_date),
            "nextDueDate": iso(self.next_due_date),
            "isPartialPayment": self.is_partial_payment,
            "totalPlanAmount": money(self.total_plan_amount),
            "balanceRemaining": money(self.balance_remaining),
            "receiptNumber": self.receipt_number,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class MemberUpdate:
    """Member fields a payment changes. Membership fields stay None for balance clearance.

    `outstanding_balance` is the balance as computed from the member read before
    the payment; storage applies `balance_delta` to the current balance instead.
    """

    status: MemberStatus
    outstanding_balance: Decimal
    balance_delta: Decimal = Decimal("0")
    membership_plan: Optional[str] = None
    membership_start_date: Optional[datetime] = None
    membership_expiry_date: Optional[datetime] = None

    def as_fields(self) -> dict:
        """Columns to overwrite. The balance is not among them."""
        fields: dict = {"status": self.status}
        if self.membership_expiry_date is not None:
            fields["membership_plan"] = self.membership_plan
            fields["membership_start_date"] = self.membership_start_date
            fields["membership_expiry_date"] = self.membership_expiry_date
        return fields


@dataclass(frozen=True)
class PaymentProposal:
    payment: Payment
    member_update: MemberUpdate


@dataclass(frozen=True)
class PaymentRow:
    """Read-model for payment listings."""

    payment: Payment
    member: Optional[MemberRef]

    def to_dict(self) -> dict:
        data = self.payment.to_dict()
        data["member"] = self.member.to_dict() if self.member else None
        return data

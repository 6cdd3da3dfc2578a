from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, tzinfo
from decimal import Decimal
from typing import Optional, Sequence

from ...common.datetime_utils import add_calendar_days, to_local
from ...configuration.model import Plan
from ...core.constants import (
    BALANCE_CLEARANCE_DURATION_DAYS,
    BALANCE_CLEARANCE_PLAN_ID,
    BALANCE_CLEARANCE_PLAN_NAME,
    CUSTOM_PLAN_ID,
    DEFAULT_CUSTOM_PLAN_NAME,
    MAX_PAYMENT_AMOUNT,
    MAX_PLAN_DURATION_DAYS,
    RENEWAL_REMINDER_DAYS,
)
from ...core.enums import MemberStatus
from ...core.exceptions import ValidationError
from ...members.model import Member
from ..model import MemberUpdate, Payment, PaymentProposal, PaymentRequest
from ..receipts import format_receipt_number, receipt_prefix
from .base import BillingCalculator, ReceiptSequence

ZERO = Decimal("0")


@dataclass(frozen=True)
class _Terms:
    plan_id: str
    plan_name: str
    duration: int
    total: Decimal
    extends_membership: bool
    member_plan: Optional[str] = None


class StandardBillingCalculator(BillingCalculator):
    """Standard rules.

    - price is the plan's offer price when set, else its list price
    - renewals start at the current expiry while it is still in the future
    - a partial payment adds its shortfall to the member's balance; any surplus
      over the plan price pays down existing balance
    - balance clearance only reduces the balance, membership dates stay put
    """

    def calculate(
        self,
        *,
        member: Member,
        request: PaymentRequest,
        plans: Sequence[Plan],
        now: datetime,
        tz: tzinfo,
        next_receipt_sequence: ReceiptSequence,
    ) -> PaymentProposal:
        amount = request.amount
        if amount <= ZERO:
            raise ValidationError("Amount must be greater than zero")
        if amount > MAX_PAYMENT_AMOUNT:
            raise ValidationError("Amount is too large")

        terms = self._resolve_terms(member, request, plans)
        start = self._start_date(member, request, now, extends=terms.extends_membership)

        if terms.extends_membership:
            try:
                expiry = add_calendar_days(start, terms.duration, tz)
                next_due = add_calendar_days(expiry, -RENEWAL_REMINDER_DAYS, tz)
            except OverflowError:
                raise ValidationError("Membership dates are out of range") from None
        else:
            expiry = start
            next_due = expiry

        is_partial = amount < terms.total
        balance_remaining = max(ZERO, terms.total - amount)
        existing = member.outstanding_balance or ZERO

        if not terms.extends_membership:
            # total is the existing balance, so what remains is the new balance
            new_balance = balance_remaining
        elif is_partial:
            new_balance = existing + balance_remaining
        else:
            new_balance = max(ZERO, existing - (amount - terms.total))

        # Allocate the receipt last so a rejected payment never burns a number.
        prefix = receipt_prefix(to_local(now, tz))
        receipt_number = format_receipt_number(prefix, next_receipt_sequence(prefix))

        payment = Payment(
            member_id=member.member_id,
            amount=amount,
            payment_date=now,
            payment_mode=request.payment_mode,
            plan_id=terms.plan_id,
            plan_name=terms.plan_name,
            plan_duration=terms.duration,
            start_date=start,
            expiry_date=expiry,
            next_due_date=next_due,
            is_partial_payment=is_partial,
            total_plan_amount=terms.total,
            balance_remaining=balance_remaining,
            receipt_number=receipt_number,
            notes=request.notes or "",
        )

        if terms.extends_membership:
            update = MemberUpdate(
                status=MemberStatus.ACTIVE,
                outstanding_balance=new_balance,
                balance_delta=new_balance - existing,
                membership_plan=terms.member_plan,
                membership_start_date=start,
                membership_expiry_date=expiry,
            )
        else:
            update = MemberUpdate(
                status=MemberStatus.ACTIVE,
                outstanding_balance=new_balance,
                balance_delta=new_balance - existing,
            )

        return PaymentProposal(payment=payment, member_update=update)

    def _resolve_terms(self, member: Member, request: PaymentRequest, plans: Sequence[Plan]) -> _Terms:
        plan_id = request.plan_id

        if plan_id == BALANCE_CLEARANCE_PLAN_ID:
            outstanding = member.outstanding_balance or ZERO
            if outstanding <= ZERO:
                raise ValidationError("Member has no outstanding balance to clear")
            return _Terms(
                plan_id=plan_id,
                plan_name=BALANCE_CLEARANCE_PLAN_NAME,
                duration=BALANCE_CLEARANCE_DURATION_DAYS,
                total=outstanding,
                extends_membership=False,
            )

        if plan_id == CUSTOM_PLAN_ID:
            duration = request.custom_duration
            if not duration or duration < 1:
                raise ValidationError("Custom plan requires a duration of at least 1 day")
            if duration > MAX_PLAN_DURATION_DAYS:
                raise ValidationError(f"Custom plan duration cannot exceed {MAX_PLAN_DURATION_DAYS} days")
            custom_amount = request.custom_amount
            if custom_amount is not None and custom_amount > MAX_PAYMENT_AMOUNT:
                raise ValidationError("Custom amount is too large")
            total = custom_amount if custom_amount is not None and custom_amount > ZERO else request.amount
            name = (request.custom_plan_name or "").strip()
            return _Terms(
                plan_id=plan_id,
                plan_name=name or DEFAULT_CUSTOM_PLAN_NAME,
                duration=int(duration),
                total=total,
                extends_membership=True,
                member_plan=name or CUSTOM_PLAN_ID,
            )

        plan = next((p for p in plans if p.id == plan_id), None)
        if plan is None:
            raise ValidationError("Invalid plan")
        if not 1 <= plan.duration <= MAX_PLAN_DURATION_DAYS:
            raise ValidationError("Invalid plan duration")
        return _Terms(
            plan_id=plan.id,
            plan_name=plan.name,
            duration=plan.duration,
            total=plan.effective_price,
            extends_membership=True,
            member_plan=plan.id,
        )

    def _start_date(self, member: Member, request: PaymentRequest, now: datetime, *, extends: bool) -> datetime:
        if request.start_date is not None:
            return request.start_date
        expiry = member.membership_expiry_date
        if extends and expiry is not None and expiry > now:
            return expiry
        return now

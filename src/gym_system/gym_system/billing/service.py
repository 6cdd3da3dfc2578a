from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..common.datetime_utils import gym_zone, now_utc
from ..common.pagination import Page, PageRequest
from ..configuration.service import ConfigService
from ..core.constants import BALANCE_CLEARANCE_PLAN_ID
from ..core.enums import AdminRole
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..members.model import Member
from ..members.repository import MemberRepository
from .calculator.base import BillingCalculator
from .calculator.standard_calculator import StandardBillingCalculator
from .model import Payment, PaymentRequest, PaymentRow
from .repository import PaymentRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaymentOutcome:
    payment: Payment
    member: Member
    previous_balance: Decimal

    def to_dict(self) -> dict:
        data = self.payment.to_dict()
        data["member"] = self.member.to_dict()
        return data


class PaymentService:
    """Use case: record membership payments and query the payment ledger."""

    def __init__(
        self,
        payments: PaymentRepository,
        members: MemberRepository,
        configs: ConfigService,
        *,
        calculator: Optional[BillingCalculator] = None,
    ):
        self._payments = payments
        self._members = members
        self._configs = configs
        self._calculator = calculator or StandardBillingCalculator()

    def record_payment(self, member_id: int, request: PaymentRequest, *, now: Optional[datetime] = None) -> PaymentOutcome:
        now = now or now_utc()
        if not request.plan_id:
            raise ValidationError("Plan is required")
        if not request.payment_mode:
            raise ValidationError("Payment mode is required")

        member = self._members.get_by_id(member_id)
        if not member:
            raise NotFoundError("Member not found")

        config = self._configs.get_effective()
        proposal = self._calculator.calculate(
            member=member,
            request=request,
            plans=config.plans,
            now=now,
            tz=gym_zone(config.timezone),
            next_receipt_sequence=self._payments.next_receipt_sequence,
        )

        payment_id = self._payments.create_with_member_update(proposal.payment, proposal.member_update)

        payment = replace(proposal.payment, payment_id=payment_id)
        updated = self._members.get_by_id(member_id) or member
        logger.info(
            "Payment %s recorded for member %s: %s (%s, partial=%s)",
            payment.receipt_number,
            member.registration_number,
            payment.amount,
            payment.plan_id,
            payment.is_partial_payment,
        )
        return PaymentOutcome(payment=payment, member=updated, previous_balance=member.outstanding_balance)

    def pay_balance(
        self,
        member_id: int,
        amount: Decimal,
        *,
        payment_mode: str,
        notes: str = "",
        now: Optional[datetime] = None,
    ) -> PaymentOutcome:
        request = PaymentRequest(
            plan_id=BALANCE_CLEARANCE_PLAN_ID,
            amount=amount,
            payment_mode=payment_mode,
            notes=notes,
        )
        return self.record_payment(member_id, request, now=now)

    def list(
        self,
        *,
        member_id: Optional[int] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        page: PageRequest,
    ) -> Page[PaymentRow]:
        if start and end and start > end:
            raise ValidationError("startDate must be before endDate")
        return self._payments.search(member_id=member_id, start=start, end=end, page=page)

    def soft_delete(self, payment_id: int, *, current_role: AdminRole) -> None:
        if current_role != AdminRole.OWNER:
            raise AuthorizationError("Only the owner can delete payments")
        if not self._payments.soft_delete(payment_id):
            raise NotFoundError("Payment not found")
        logger.info("Payment %s marked as deleted", payment_id)

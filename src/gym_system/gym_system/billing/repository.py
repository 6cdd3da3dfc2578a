from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..common.pagination import Page, PageRequest
from .model import MemberUpdate, Payment, PaymentRow


class PaymentRepository(Protocol):
    def next_receipt_sequence(self, prefix: str) -> int:
        """Atomically reserve the next sequence number for a receipt prefix (starts at 1)."""

        raise NotImplementedError

    def create_with_member_update(self, payment: Payment, update: MemberUpdate) -> int:
        """Insert the payment and apply `update` to its member in one transaction.

        The balance moves by `update.balance_delta` (never below zero) from whatever
        is stored at write time. Raises NotFoundError when the member is gone.
        """

        raise NotImplementedError

    def get_by_id(self, payment_id: int) -> Optional[Payment]:
        raise NotImplementedError

    def soft_delete(self, payment_id: int) -> bool:
        raise NotImplementedError

    def search(
        self,
        *,
        member_id: Optional[int],
        start: Optional[datetime],
        end: Optional[datetime],
        page: PageRequest,
    ) -> Page[PaymentRow]:
        """Non-deleted payments, newest first."""

        raise NotImplementedError

    def list_recent_for_member(self, member_id: int, limit: int) -> Sequence[Payment]:
        raise NotImplementedError

    def revenue_between(self, start: datetime, end: datetime) -> tuple[Decimal, int]:
        """Sum and count of non-deleted payments with start <= payment_date < end."""

        raise NotImplementedError

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, tzinfo
from typing import Callable, Sequence

from ...configuration.model import Plan
from ...members.model import Member
from ..model import PaymentProposal, PaymentRequest

# Called with the month's receipt prefix, returns the next sequence number for it.
ReceiptSequence = Callable[[str], int]


class BillingCalculator(ABC):
    """Calculator interface (Strategy Pattern for membership billing)."""

    @abstractmethod
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
        raise NotImplementedError

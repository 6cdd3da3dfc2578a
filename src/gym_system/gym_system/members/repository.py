from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Protocol, Sequence

from ..common.pagination import Page, PageRequest
from ..core.enums import MemberStatus
from .model import Member


class MemberRepository(Protocol):
    def get_by_id(self, member_id: int) -> Optional[Member]:
        raise NotImplementedError

    def get_by_registration_number(self, registration_number: str) -> Optional[Member]:
        raise NotImplementedError

    def get_by_phone(self, phone: str) -> Optional[Member]:
        raise NotImplementedError

    def create(
        self,
        *,
        full_name: str,
        phone: str,
        address: str,
        registration_number: str,
        join_date: datetime,
        membership_plan: str,
        status: MemberStatus,
        notes: str,
    ) -> int:
        raise NotImplementedError

    def update_fields(self, member_id: int, fields: dict[str, Any]) -> bool:
        """Update the given columns (full_name, phone, status, membership_plan,
        membership_start_date, membership_expiry_date, outstanding_balance, notes)."""

        raise NotImplementedError

    def delete(self, member_id: int) -> bool:
        raise NotImplementedError

    def search(
        self,
        *,
        text: str,
        status: Optional[MemberStatus],
        sort_by: str,
        descending: bool,
        page: PageRequest,
    ) -> Page[Member]:
        raise NotImplementedError

    def expire_lapsed(self, now: datetime) -> int:
        """Active members whose expiry is before `now` become Expired. Returns the count."""

        raise NotImplementedError

    def count(self, *, status: Optional[MemberStatus] = None) -> int:
        raise NotImplementedError

    def count_with_balance(self) -> int:
        raise NotImplementedError

    def list_expiring(
        self,
        *,
        statuses: Sequence[MemberStatus],
        start: datetime,
        end: datetime,
        limit: Optional[int] = None,
    ) -> Sequence[Member]:
        raise NotImplementedError

    def count_expiring(self, *, statuses: Sequence[MemberStatus], start: datetime, end: datetime) -> int:
        raise NotImplementedError

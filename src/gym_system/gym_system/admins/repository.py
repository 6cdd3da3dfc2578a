from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from ..core.enums import AdminRole
from .model import Admin


class AdminRepository(Protocol):
    def get_by_id(self, admin_id: int) -> Optional[Admin]:
        raise NotImplementedError

    def get_by_login(self, username_or_email: str) -> Optional[Admin]:
        """Match on username or email."""

        raise NotImplementedError

    def count(self) -> int:
        raise NotImplementedError

    def create(self, *, username: str, email: str, password_hash: str, role: AdminRole) -> int:
        raise NotImplementedError

    def touch_last_login(self, admin_id: int, at: datetime) -> None:
        raise NotImplementedError

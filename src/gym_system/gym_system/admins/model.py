from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import AdminRole


@dataclass(frozen=True)
class Admin:
    """Domain entity: a dashboard account.

    Note: plain data object, never serialised with the password hash.
    """

    admin_id: int
    username: str
    email: str
    password_hash: str
    role: AdminRole
    is_active: bool = True
    last_login: Optional[datetime] = None

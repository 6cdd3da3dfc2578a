from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.datetime_utils import now_utc
from ..common.validators import require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import AdminRole
from ..core.exceptions import AuthenticationError, ValidationError
from .repository import AdminRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionAdmin:
    """What we store into Flask session after login."""

    admin_id: int
    username: str
    role: AdminRole

    def to_dict(self) -> dict:
        return {"userId": self.admin_id, "username": self.username, "role": self.role.value}


class AuthService:
    """Use case: first-run setup and login for dashboard accounts."""

    def __init__(self, admins: AdminRepository):
        self._admins = admins

    def setup_required(self) -> bool:
        return self._admins.count() == 0

    def create_initial_admin(self, *, username: str, email: str, password: str) -> SessionAdmin:
        if not self.setup_required():
            raise ValidationError("Admin already exists")
        if not username or not email or not password:
            raise ValidationError("All fields are required")
        username = require_non_empty(username, "Username")
        email = require_non_empty(email, "Email").lower()
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)

        admin_id = self._admins.create(
            username=username,
            email=email,
            password_hash=generate_password_hash(password),
            role=AdminRole.OWNER,
        )
        logger.info("Initial admin %s created", username)
        return SessionAdmin(admin_id=admin_id, username=username, role=AdminRole.OWNER)

    def authenticate(self, username: str, password: str, *, now: Optional[datetime] = None) -> SessionAdmin:
        if not username or not password:
            raise ValidationError("Username and password are required")

        admin = self._admins.get_by_login(username.strip())
        if not admin or not admin.is_active:
            raise AuthenticationError("Invalid credentials")

        try:
            ok = check_password_hash(admin.password_hash, password)
        except ValueError:
            # unrecognised hash format
            ok = False

        if not ok:
            raise AuthenticationError("Invalid credentials")

        self._admins.touch_last_login(admin.admin_id, now or now_utc())
        return SessionAdmin(admin_id=admin.admin_id, username=admin.username, role=admin.role)

    def get_session_admin(self, admin_id: int) -> SessionAdmin:
        admin = self._admins.get_by_id(admin_id)
        if not admin or not admin.is_active:
            raise AuthenticationError("Session is no longer valid")
        return SessionAdmin(admin_id=admin.admin_id, username=admin.username, role=admin.role)

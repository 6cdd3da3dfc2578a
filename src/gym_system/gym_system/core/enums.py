from __future__ import annotations

from enum import Enum


class AdminRole(str, Enum):
    """Roles for dashboard accounts."""

    OWNER = "owner"
    TRAINER = "trainer"
    STAFF = "staff"


class MemberStatus(str, Enum):
    ACTIVE = "Active"
    EXPIRED = "Expired"
    PAUSED = "Paused"


class OperatingMode(str, Enum):
    SESSIONS = "sessions"
    CONTINUOUS = "continuous"
    TWENTY_FOUR_HOURS = "24hours"


class SessionLabel(str, Enum):
    """Which session a check-in belongs to. Recomputed on every evaluation."""

    MORNING = "morning"
    EVENING = "evening"
    CONTINUOUS = "continuous"
    FULL_DAY = "full-day"


class KioskAction(str, Enum):
    CHECKIN = "checkin"
    CHECKOUT = "checkout"


class RejectionReason(str, Enum):
    """Machine-readable reasons for business-rule rejections (kiosk UI branches on these)."""

    GYM_CLOSED = "gym_closed"
    MEMBERSHIP_PAUSED = "membership_paused"
    MEMBERSHIP_EXPIRED = "membership_expired"
    SESSION_COMPLETED = "session_completed"
    SESSION_LIMIT_REACHED = "session_limit_reached"

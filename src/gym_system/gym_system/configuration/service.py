from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..common.datetime_utils import parse_hhmm
from ..core.constants import MAX_PLAN_DURATION_DAYS, MAX_PLAN_NAME_LENGTH
from ..core.enums import AdminRole, OperatingMode
from ..core.exceptions import AuthorizationError, ValidationError
from .defaults import DEFAULT_DOCUMENT, default_document
from .effective import build_effective_config
from .model import OperatingConfig
from .repository import ConfigRepository

logger = logging.getLogger(__name__)

EDITABLE_KEYS = frozenset(DEFAULT_DOCUMENT)


class ConfigService:
    """Use case: read and edit the gym's operating rules."""

    def __init__(self, configs: ConfigRepository):
        self._configs = configs

    def get_effective(self) -> OperatingConfig:
        """Build the effective config once per request; never writes."""
        return build_effective_config(self._configs.get_document())

    def get_or_seed(self) -> OperatingConfig:
        doc = self._configs.get_document()
        if doc is None:
            doc = default_document()
            self._configs.save_document(doc)
            logger.info("Seeded default gym configuration")
        return build_effective_config(doc)

    def update(self, changes: Mapping[str, Any], *, current_role: AdminRole) -> OperatingConfig:
        if current_role != AdminRole.OWNER:
            raise AuthorizationError("Only the owner can change gym settings")
        unknown = sorted(set(changes) - EDITABLE_KEYS)
        if unknown:
            raise ValidationError(f"Unknown configuration field(s): {', '.join(unknown)}")

        doc = self._configs.get_document() or default_document()
        doc.update(changes)
        _validate_document(doc)

        self._configs.save_document(doc)
        logger.info("Gym configuration updated (%s)", ", ".join(sorted(changes)))
        return build_effective_config(doc)


def _require_time(value: Any, label: str) -> None:
    if parse_hhmm(value) is None:
        raise ValidationError(f"{label} must be a time in HH:MM format")


def _require_window(window: Any, label: str) -> None:
    if not isinstance(window, Mapping):
        raise ValidationError(f"{label} must be an object with start and end")
    _require_time(window.get("start"), f"{label} start")
    _require_time(window.get("end"), f"{label} end")


def _require_number(value: Any, label: str, *, minimum: Decimal) -> Decimal:
    if isinstance(value, bool):
        raise ValidationError(f"{label} must be a number")
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{label} must be a number") from None
    if not number.is_finite() or number < minimum:
        raise ValidationError(f"{label} must be at least {minimum}")
    return number


def _validate_plans(plans: Any) -> None:
    if not isinstance(plans, list):
        raise ValidationError("plans must be a list")
    seen: set[str] = set()
    for i, plan in enumerate(plans):
        if not isinstance(plan, Mapping):
            raise ValidationError(f"plans[{i}] must be an object")
        plan_id = str(plan.get("id") or "").strip()
        if not plan_id or not str(plan.get("name") or "").strip():
            raise ValidationError(f"plans[{i}] requires id and name")
        if plan_id in seen:
            raise ValidationError(f"Duplicate plan id: {plan_id}")
        seen.add(plan_id)
        duration = _require_number(plan.get("duration"), f"plans[{i}].duration", minimum=Decimal("0"))
        if duration != duration.to_integral_value():
            raise ValidationError(f"plans[{i}].duration must be a whole number of days")
        if duration > MAX_PLAN_DURATION_DAYS:
            raise ValidationError(f"plans[{i}].duration cannot exceed {MAX_PLAN_DURATION_DAYS} days")
        if len(str(plan.get("name")).strip()) > MAX_PLAN_NAME_LENGTH:
            raise ValidationError(f"plans[{i}].name must be at most {MAX_PLAN_NAME_LENGTH} characters")
        _require_number(plan.get("price"), f"plans[{i}].price", minimum=Decimal("0"))
        if plan.get("offerPrice") is not None:
            _require_number(plan.get("offerPrice"), f"plans[{i}].offerPrice", minimum=Decimal("0"))


def _validate_document(doc: Mapping[str, Any]) -> None:
    try:
        OperatingMode(doc.get("operatingMode"))
    except ValueError:
        allowed = ", ".join(m.value for m in OperatingMode)
        raise ValidationError(f"operatingMode must be one of: {allowed}") from None

    sessions = doc.get("sessions")
    if not isinstance(sessions, Mapping):
        raise ValidationError("sessions must be an object")
    _require_window(sessions.get("morning"), "Morning session")
    _require_window(sessions.get("evening"), "Evening session")
    _require_window(doc.get("continuousSession"), "Continuous session")
    _require_time(doc.get("closingTime"), "closingTime")

    attendance = doc.get("attendance")
    if not isinstance(attendance, Mapping):
        raise ValidationError("attendance must be an object")
    max_sessions = attendance.get("maxSessionsPerDay")
    if isinstance(max_sessions, bool) or not isinstance(max_sessions, int) or max_sessions < 1:
        raise ValidationError("attendance.maxSessionsPerDay must be a whole number of at least 1")

    _validate_plans(doc.get("plans"))

    tz_name = doc.get("timezone")
    if tz_name is not None:
        try:
            ZoneInfo(str(tz_name))
        except (ZoneInfoNotFoundError, ValueError):
            raise ValidationError(f"Unknown timezone: {tz_name}") from None

"""Effective config construction.

The persisted document may be missing fields or carry junk; every field falls
back to the built-in default on its own, so downstream code (the session
resolver in particular) always sees a complete config.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional

from ..core.enums import OperatingMode
from .defaults import DEFAULT_DOCUMENT
from .model import AttendanceRules, Contact, OperatingConfig, Plan, SessionWindow


def _section(doc: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = doc.get(key)
    return value if isinstance(value, Mapping) else {}


def _str(value: Any, default: str) -> str:
    return value if isinstance(value, str) and value.strip() else default


def _decimal(value: Any, default: Decimal) -> Decimal:
    if value is None or isinstance(value, bool):
        return default
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return default


def _window(raw: Mapping[str, Any], default: Mapping[str, Any]) -> SessionWindow:
    # Times are kept verbatim; the resolver parses them and falls back per bound.
    return SessionWindow(
        start=raw["start"] if isinstance(raw.get("start"), str) else default["start"],
        end=raw["end"] if isinstance(raw.get("end"), str) else default["end"],
        name=_str(raw.get("name"), default.get("name", "")),
    )


def parse_plan(raw: Any) -> Optional[Plan]:
    if not isinstance(raw, Mapping) or not raw.get("id"):
        return None
    try:
        duration = int(raw.get("duration") or 0)
    except (TypeError, ValueError):
        duration = 0
    return Plan(
        id=str(raw["id"]),
        name=_str(raw.get("name"), str(raw["id"])),
        duration=duration,
        price=_decimal(raw.get("price"), Decimal("0")),
        offer_price=_decimal(raw.get("offerPrice"), Decimal("0")),
    )


def _plans(raw: Any) -> tuple[Plan, ...]:
    if not isinstance(raw, list):
        raw = DEFAULT_DOCUMENT["plans"]
    return tuple(p for p in (parse_plan(r) for r in raw) if p is not None)


def _mode(value: Any) -> OperatingMode:
    try:
        return OperatingMode(value)
    except ValueError:
        return OperatingMode.SESSIONS


def _max_sessions(value: Any, default: int) -> int:
    if isinstance(value, bool):
        return default
    try:
        n = int(value)
    except (TypeError, ValueError):
        return default
    return n if n >= 1 else default


def _strings(value: Any, default: list[str]) -> tuple[str, ...]:
    if isinstance(value, list) and value and all(isinstance(v, str) for v in value):
        return tuple(value)
    return tuple(default)


def build_effective_config(document: Optional[Mapping[str, Any]]) -> OperatingConfig:
    doc: Mapping[str, Any] = document or {}
    d = DEFAULT_DOCUMENT

    sessions = _section(doc, "sessions")
    contact = _section(doc, "contact")
    attendance = _section(doc, "attendance")
    auto_exit = attendance.get("autoExitEnabled")

    return OperatingConfig(
        name=_str(doc.get("name"), d["name"]),
        tagline=_str(doc.get("tagline"), d["tagline"]),
        logo=_str(doc.get("logo"), d["logo"]),
        contact=Contact(
            phone=_str(contact.get("phone"), d["contact"]["phone"]),
            email=_str(contact.get("email"), d["contact"]["email"]),
            address=_str(contact.get("address"), d["contact"]["address"]),
        ),
        operating_mode=_mode(doc.get("operatingMode", d["operatingMode"])),
        morning=_window(_section(sessions, "morning"), d["sessions"]["morning"]),
        evening=_window(_section(sessions, "evening"), d["sessions"]["evening"]),
        continuous=_window(_section(doc, "continuousSession"), d["continuousSession"]),
        closing_time=_str(doc.get("closingTime"), d["closingTime"]),
        attendance=AttendanceRules(
            max_sessions_per_day=_max_sessions(
                attendance.get("maxSessionsPerDay"), d["attendance"]["maxSessionsPerDay"]
            ),
            auto_exit_enabled=auto_exit if isinstance(auto_exit, bool) else d["attendance"]["autoExitEnabled"],
        ),
        plans=_plans(doc.get("plans")),
        payment_modes=_strings(doc.get("paymentModes"), d["paymentModes"]),
        member_statuses=_strings(doc.get("memberStatus"), d["memberStatus"]),
        reg_number_prefix=_str(doc.get("regNumberPrefix"), d["regNumberPrefix"]),
        timezone=_str(doc.get("timezone"), d["timezone"]),
    )

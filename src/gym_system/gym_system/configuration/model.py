from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from ..core.enums import OperatingMode


@dataclass(frozen=True)
class Plan:
    id: str
    name: str
    duration: int
    price: Decimal
    offer_price: Decimal = Decimal("0")

    @property
    def effective_price(self) -> Decimal:
        return self.offer_price if self.offer_price and self.offer_price > 0 else self.price

    def to_document(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "duration": self.duration,
            "price": float(self.price),
            "offerPrice": float(self.offer_price),
        }


@dataclass(frozen=True)
class SessionWindow:
    """An operating window in 'HH:MM' wall-clock time; end < start wraps past midnight."""

    start: str
    end: str
    name: str = ""

    def to_document(self) -> dict[str, Any]:
        doc: dict[str, Any] = {"start": self.start, "end": self.end}
        if self.name:
            doc["name"] = self.name
        return doc


@dataclass(frozen=True)
class Contact:
    phone: str = ""
    email: str = ""
    address: str = ""


@dataclass(frozen=True)
class AttendanceRules:
    max_sessions_per_day: int = 2
    auto_exit_enabled: bool = True


@dataclass(frozen=True)
class OperatingConfig:
    """Effective gym configuration: persisted values with defaults filled in."""

    name: str
    tagline: str
    logo: str
    contact: Contact
    operating_mode: OperatingMode
    morning: SessionWindow
    evening: SessionWindow
    continuous: SessionWindow
    closing_time: str
    attendance: AttendanceRules
    plans: tuple[Plan, ...]
    payment_modes: tuple[str, ...]
    member_statuses: tuple[str, ...]
    reg_number_prefix: str
    timezone: str

    def to_document(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "tagline": self.tagline,
            "logo": self.logo,
            "contact": {
                "phone": self.contact.phone,
                "email": self.contact.email,
                "address": self.contact.address,
            },
            "operatingMode": self.operating_mode.value,
            "sessions": {
                "morning": self.morning.to_document(),
                "evening": self.evening.to_document(),
            },
            "continuousSession": self.continuous.to_document(),
            "closingTime": self.closing_time,
            "attendance": {
                "maxSessionsPerDay": self.attendance.max_sessions_per_day,
                "autoExitEnabled": self.attendance.auto_exit_enabled,
            },
            "plans": [p.to_document() for p in self.plans],
            "paymentModes": list(self.payment_modes),
            "memberStatus": list(self.member_statuses),
            "regNumberPrefix": self.reg_number_prefix,
            "timezone": self.timezone,
        }

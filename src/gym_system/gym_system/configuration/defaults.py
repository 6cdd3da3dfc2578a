"""Built-in gym configuration, used to seed storage and to fill missing fields."""

from __future__ import annotations

import copy
from typing import Any

from ..core.constants import DEFAULT_TIMEZONE

DEFAULT_DOCUMENT: dict[str, Any] = {
    "name": "Helios Fit Studio",
    "tagline": "Your Strength, Our Mission",
    "logo": "/logo.png",
    "contact": {
        "phone": "+91 98765 43210",
        "email": "info@heliosfitness.com",
        "address": "123 Fitness Street, Gym City",
    },
    "sessions": {
        "morning": {"name": "Morning", "start": "05:00", "end": "01:30"},
        "evening": {"name": "Evening", "start": "16:00", "end": "21:30"},
    },
    "closingTime": "21:30",
    "plans": [
        {"id": "monthly", "name": "Monthly", "duration": 30, "price": 1000},
        {"id": "quarterly", "name": "Quarterly", "duration": 90, "price": 2700},
        {"id": "half-yearly", "name": "Half Yearly", "duration": 180, "price": 5000},
        {"id": "yearly", "name": "Yearly", "duration": 365, "price": 9000},
        {"id": "custom", "name": "Custom", "duration": 0, "price": 0},
    ],
    "paymentModes": ["Cash", "UPI", "Card", "Bank Transfer"],
    "memberStatus": ["Active", "Expired", "Paused"],
    "attendance": {"maxSessionsPerDay": 2, "autoExitEnabled": True},
    "regNumberPrefix": "HF",
    "operatingMode": "sessions",
    "continuousSession": {"start": "06:00", "end": "22:00"},
    "timezone": DEFAULT_TIMEZONE,
}


def default_document() -> dict[str, Any]:
    return copy.deepcopy(DEFAULT_DOCUMENT)

from decimal import Decimal

from src.gym_system.gym_system.configuration.defaults import DEFAULT_DOCUMENT, default_document
from src.gym_system.gym_system.configuration.effective import build_effective_config
from src.gym_system.gym_system.core.enums import OperatingMode


def test_missing_document_gives_defaults():
    config = build_effective_config(None)

    assert config.operating_mode == OperatingMode.SESSIONS
    assert config.morning.start == "05:00"
    assert config.attendance.max_sessions_per_day == 2
    assert [p.id for p in config.plans] == [p["id"] for p in DEFAULT_DOCUMENT["plans"]]
    assert config.timezone == "Asia/Kolkata"


def test_fields_fall_back_independently():
    config = build_effective_config(
        {
            "name": "Iron Temple",
            "sessions": {"evening": {"start": "17:00"}},
            "attendance": {"maxSessionsPerDay": 0, "autoExitEnabled": False},
            "operatingMode": "continuous",
        }
    )

    assert config.name == "Iron Temple"
    assert config.tagline == DEFAULT_DOCUMENT["tagline"]
    assert config.evening.start == "17:00"
    assert config.evening.end == "21:30"
    assert config.evening.name == "Evening"
    assert config.morning.start == "05:00"
    assert config.attendance.max_sessions_per_day == 2
    assert config.attendance.auto_exit_enabled is False
    assert config.operating_mode == OperatingMode.CONTINUOUS


def test_junk_values_are_ignored():
    config = build_effective_config(
        {"sessions": "nope", "plans": "also nope", "paymentModes": [1, 2], "operatingMode": 42}
    )

    assert config.morning.start == "05:00"
    assert len(config.plans) == len(DEFAULT_DOCUMENT["plans"])
    assert config.payment_modes == tuple(DEFAULT_DOCUMENT["paymentModes"])
    assert config.operating_mode == OperatingMode.SESSIONS


def test_plans_parse_prices_as_decimal():
    config = build_effective_config(
        {"plans": [{"id": "monthly", "name": "Monthly", "duration": 30, "price": 1000, "offerPrice": 899.5}]}
    )

    [plan] = config.plans
    assert plan.price == Decimal("1000")
    assert plan.effective_price == Decimal("899.5")


def test_document_round_trip_of_defaults():
    doc = build_effective_config(default_document()).to_document()

    assert doc["sessions"]["morning"] == {"name": "Morning", "start": "05:00", "end": "01:30"}
    assert doc["continuousSession"] == {"start": "06:00", "end": "22:00"}
    assert doc["operatingMode"] == "sessions"

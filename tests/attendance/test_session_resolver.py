from __future__ import annotations

from datetime import datetime

import pytest

from src.gym_system.gym_system.attendance.resolver import resolve_session, session_display_name
from src.gym_system.gym_system.attendance.strategies.base import in_window
from src.gym_system.gym_system.configuration.defaults import default_document
from src.gym_system.gym_system.configuration.effective import build_effective_config
from src.gym_system.gym_system.core.enums import SessionLabel


def _config(**overrides):
    doc = default_document()
    doc["sessions"]["morning"] = {"name": "Morning", "start": "05:00", "end": "11:00"}
    doc.update(overrides)
    return build_effective_config(doc)


def _hm(hh: int, mm: int) -> int:
    return hh * 60 + mm


def test_morning_window_bounds_are_inclusive():
    config = _config()

    assert resolve_session(config, _hm(5, 0)) == SessionLabel.MORNING
    assert resolve_session(config, _hm(11, 0)) == SessionLabel.MORNING
    assert resolve_session(config, _hm(4, 59)) is None


def test_evening_window_and_gap_between_sessions():
    config = _config()

    assert resolve_session(config, _hm(16, 0)) == SessionLabel.EVENING
    assert resolve_session(config, _hm(21, 30)) == SessionLabel.EVENING
    assert resolve_session(config, _hm(13, 0)) is None
    assert resolve_session(config, _hm(21, 31)) is None


def test_morning_wins_when_windows_overlap():
    doc_sessions = {
        "morning": {"name": "Morning", "start": "05:00", "end": "17:00"},
        "evening": {"name": "Evening", "start": "16:00", "end": "21:30"},
    }
    config = _config(sessions=doc_sessions)

    assert resolve_session(config, _hm(16, 30)) == SessionLabel.MORNING
    assert resolve_session(config, _hm(17, 1)) == SessionLabel.EVENING


def test_shipped_default_morning_wraps_past_midnight():
    config = build_effective_config(default_document())

    assert resolve_session(config, _hm(0, 45)) == SessionLabel.MORNING
    assert resolve_session(config, _hm(1, 30)) == SessionLabel.MORNING
    assert resolve_session(config, _hm(1, 31)) is None
    # 05:00-01:30 swallows the evening window entirely
    assert resolve_session(config, _hm(18, 0)) == SessionLabel.MORNING


def test_24_hours_mode_is_always_full_day():
    config = _config(operatingMode="24hours")

    for minute in (0, _hm(3, 0), _hm(12, 0), _hm(23, 59)):
        assert resolve_session(config, minute) == SessionLabel.FULL_DAY


def test_continuous_mode_uses_continuous_window():
    config = _config(operatingMode="continuous", continuousSession={"start": "06:00", "end": "22:00"})

    assert resolve_session(config, _hm(6, 0)) == SessionLabel.CONTINUOUS
    assert resolve_session(config, _hm(22, 0)) == SessionLabel.CONTINUOUS
    assert resolve_session(config, _hm(22, 1)) is None
    assert resolve_session(config, _hm(5, 59)) is None


def test_continuous_window_can_wrap_midnight():
    config = _config(operatingMode="continuous", continuousSession={"start": "20:00", "end": "02:00"})

    assert resolve_session(config, _hm(23, 0)) == SessionLabel.CONTINUOUS
    assert resolve_session(config, _hm(1, 0)) == SessionLabel.CONTINUOUS
    assert resolve_session(config, _hm(12, 0)) is None


def test_unknown_mode_behaves_like_sessions():
    config = _config(operatingMode="weekends-only")

    assert resolve_session(config, _hm(6, 0)) == SessionLabel.MORNING


@pytest.mark.parametrize("bad", ["25:00", "ab:cd", "", "7", None])
def test_malformed_bound_falls_back_to_default(bad):
    config = _config(
        sessions={
            "morning": {"name": "Morning", "start": bad, "end": "11:00"},
            "evening": {"name": "Evening", "start": "16:00", "end": "21:30"},
        }
    )

    # default morning start is 05:00
    assert resolve_session(config, _hm(5, 0)) == SessionLabel.MORNING
    assert resolve_session(config, _hm(4, 59)) is None


def test_resolver_accepts_wall_clock_datetime():
    config = _config()

    assert resolve_session(config, datetime(2025, 3, 10, 17, 15)) == SessionLabel.EVENING


def test_resolver_is_deterministic():
    config = _config()

    results = {resolve_session(config, _hm(10, 0)) for _ in range(5)}
    assert results == {SessionLabel.MORNING}


def test_in_window_wraparound_includes_both_ends():
    assert in_window(_hm(22, 0), _hm(22, 0), _hm(2, 0))
    assert in_window(_hm(2, 0), _hm(22, 0), _hm(2, 0))
    assert not in_window(_hm(2, 1), _hm(22, 0), _hm(2, 0))


def test_display_names():
    config = _config(
        sessions={
            "morning": {"name": "Sunrise", "start": "05:00", "end": "11:00"},
            "evening": {"name": "Evening", "start": "16:00", "end": "21:30"},
        }
    )

    assert session_display_name(config, SessionLabel.MORNING) == "Sunrise"
    assert session_display_name(config, SessionLabel.EVENING) == "Evening"
    assert session_display_name(config, SessionLabel.CONTINUOUS) == "Day"
    assert session_display_name(config, SessionLabel.FULL_DAY) == "Full Day"

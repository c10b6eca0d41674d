"""
Unit tests for gasfinder.core.indicator.indicator_machine.

These tests validate:
- the pure state function (strict greater-than, offline dominance)
- transition events (RAISED / CLEARED / WENT_OFFLINE / CAME_ONLINE)
- latest value retention across threshold changes and reset on offline
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

import pytest

from gasfinder.core.indicator.indicator_machine import IndicatorStateMachine, compute_state
from gasfinder.domain.events import IndicatorTransition
from gasfinder.domain.models import COLOR_ALARM, COLOR_OFFLINE, COLOR_ONLINE, IndicatorState, Reading

NOW = datetime(2026, 1, 1, 10, 0, 0, tzinfo=timezone.utc)


def _reading(value: Optional[float], raw: Any = None) -> Reading:
    return Reading(
        id="r",
        timestamp=NOW,
        indicator_key="los_ppm",
        value=value,
        raw_value=value if raw is None else raw,
        fingerprint="fp",
    )


def _machine() -> IndicatorStateMachine:
    return IndicatorStateMachine(serial="GF-001", clock=lambda: NOW)


@pytest.mark.parametrize(
    "online, value, threshold, expected",
    [
        (False, 100.0, 10.0, IndicatorState.OFFLINE),
        (True, 11.0, 10.0, IndicatorState.ALARM),
        (True, 10.0, 10.0, IndicatorState.OK),
        (True, 9.0, 10.0, IndicatorState.OK),
        (True, None, 10.0, IndicatorState.OK),
        (True, 50.0, None, IndicatorState.OK),
    ],
)
def test_compute_state(online: bool, value, threshold, expected: IndicatorState) -> None:
    assert compute_state(online, value, threshold) is expected


def test_state_colors() -> None:
    assert IndicatorState.OFFLINE.color == COLOR_OFFLINE
    assert IndicatorState.OK.color == COLOR_ONLINE
    assert IndicatorState.ALARM.color == COLOR_ALARM


def test_starts_offline() -> None:
    m = _machine()
    snap = m.snapshot()

    assert snap.state is IndicatorState.OFFLINE
    assert snap.value is None


def test_came_online_then_raised_then_cleared() -> None:
    m = _machine()
    m.on_threshold(10.0)

    evs = m.on_connectivity(True)
    assert [e.transition for e in evs] == [IndicatorTransition.CAME_ONLINE]

    evs = m.on_reading(_reading(15.0))
    assert [e.transition for e in evs] == [IndicatorTransition.RAISED]
    assert evs[0].value == 15.0
    assert evs[0].threshold == 10.0
    assert evs[0].timestamp == NOW
    assert "above threshold" in evs[0].message

    evs = m.on_reading(_reading(5.0))
    assert [e.transition for e in evs] == [IndicatorTransition.CLEARED]


def test_no_event_without_state_change() -> None:
    m = _machine()
    m.on_connectivity(True)

    assert m.on_reading(_reading(1.0)) == []
    assert m.on_reading(_reading(2.0)) == []
    assert m.snapshot().value == 2.0


def test_threshold_change_reevaluates_retained_value() -> None:
    m = _machine()
    m.on_connectivity(True)
    m.on_reading(_reading(20.0))

    evs = m.on_threshold(10.0)
    assert [e.transition for e in evs] == [IndicatorTransition.RAISED]

    evs = m.on_threshold(None)
    assert [e.transition for e in evs] == [IndicatorTransition.CLEARED]
    assert m.snapshot().value == 20.0


def test_going_offline_drops_latest_value() -> None:
    m = _machine()
    m.on_threshold(10.0)
    m.on_connectivity(True)
    m.on_reading(_reading(50.0))

    evs = m.on_connectivity(False)

    assert [e.transition for e in evs] == [IndicatorTransition.WENT_OFFLINE]
    snap = m.snapshot()
    assert snap.state is IndicatorState.OFFLINE
    assert snap.value is None
    assert snap.raw_value is None

    # back online: no stale value, so OK rather than ALARM
    m.on_connectivity(True)
    assert m.snapshot().state is IndicatorState.OK


def test_non_numeric_reading_is_shown_but_never_alarms() -> None:
    m = _machine()
    m.on_threshold(0.0)
    m.on_connectivity(True)

    m.on_reading(_reading(None, raw="ERR"))

    snap = m.snapshot()
    assert snap.state is IndicatorState.OK
    assert snap.raw_value == "ERR"

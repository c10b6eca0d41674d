"""
Unit tests for gasfinder.ui.adapters.session_snapshots (pure row formatting,
no Qt involved).
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from gasfinder.domain.models import (
    COLOR_DISCONNECTED,
    COLOR_ONLINE,
    AlarmView,
    ConnectivityState,
    IndicatorSnapshot,
    IndicatorState,
    Reading,
)
from gasfinder.ui.adapters.session_snapshots import (
    NO_ALARMS_TEXT,
    NOT_CONFIGURED_TEXT,
    alarm_placeholder,
    alarm_rows,
    connectivity_text,
    format_timestamp,
    format_value,
    graph_series,
    indicator_text,
    reading_rows,
    threshold_text,
)

UTC = timezone.utc
T0 = datetime(2026, 3, 4, 15, 6, 7, tzinfo=UTC)


def _r(value, raw=None) -> Reading:
    return Reading(id="r", timestamp=T0, indicator_key="los_ppm", value=value, raw_value=raw if raw is not None else value, fingerprint="fp")


def test_format_timestamp_day_first_12h() -> None:
    assert format_timestamp(T0, UTC) == "04/03/2026 03:06:07 PM"
    assert format_timestamp(T0.replace(hour=0), UTC) == "04/03/2026 12:06:07 AM"


def test_format_value() -> None:
    assert format_value(75.0, 75) == "75 PPM"
    assert format_value(12.5, "12.5") == "12.5 PPM"
    assert format_value(None, "ERR") == "ERR"
    assert format_value(None, None) == ""


def test_reading_rows() -> None:
    assert reading_rows([_r(3.0)], UTC) == [("04/03/2026 03:06:07 PM", "3 PPM")]


def test_alarm_rows_and_placeholder() -> None:
    unconfigured = AlarmView.unconfigured()
    empty = AlarmView(configured=True)
    full = AlarmView(configured=True, readings=(_r(99.0),))

    assert alarm_rows(unconfigured, UTC) == []
    assert alarm_placeholder(unconfigured) == NOT_CONFIGURED_TEXT
    assert alarm_placeholder(empty) == NO_ALARMS_TEXT
    assert alarm_placeholder(full) is None
    assert alarm_rows(full, UTC) == [("04/03/2026 03:06:07 PM", "99 PPM")]


def test_indicator_text() -> None:
    assert indicator_text(IndicatorSnapshot(IndicatorState.OFFLINE, None, None, 10.0)) == "Offline"
    assert indicator_text(IndicatorSnapshot(IndicatorState.OK, None, None, None)) == "-- PPM"
    assert indicator_text(IndicatorSnapshot(IndicatorState.ALARM, 75.4, 75.4, 50.0)) == "75 PPM"
    assert indicator_text(IndicatorSnapshot(IndicatorState.OK, None, "ERR", 50.0)) == "ERR"


def test_connectivity_text() -> None:
    assert connectivity_text(ConnectivityState("A", True)) == ("Online", COLOR_ONLINE)
    assert connectivity_text(ConnectivityState("A", False)) == ("Offline", COLOR_DISCONNECTED)
    assert connectivity_text(ConnectivityState("A", False, stream_lost=True)) == ("Disconnected", COLOR_DISCONNECTED)


def test_threshold_text() -> None:
    assert threshold_text(None) == NOT_CONFIGURED_TEXT
    assert threshold_text(50.0) == "Threshold: 50 PPM"


def test_graph_series_keeps_last_points_oldest_first() -> None:
    points = [(T0 + timedelta(seconds=i), float(i)) for i in range(100)]

    xs, ys = graph_series(points)

    assert len(xs) == len(ys) == 80
    assert ys[0] == 20.0
    assert ys[-1] == 99.0
    assert xs[-1] == (T0 + timedelta(seconds=99)).timestamp()

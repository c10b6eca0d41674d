from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from gasfinder.core.session import GraphPoint
from gasfinder.domain.models import (
    COLOR_DISCONNECTED,
    AlarmView,
    ConnectivityState,
    IndicatorSnapshot,
    IndicatorState,
    Reading,
)

ReadingRow = Tuple[str, str]  # time, value
StatusText = Tuple[str, str]  # text, color

GRAPH_POINTS = 80
NOT_CONFIGURED_TEXT = "Threshold not configured"
NO_ALARMS_TEXT = "No alarms"


def format_timestamp(ts: datetime, tz: Optional[tzinfo] = None) -> str:
    """
    ``dd/mm/yyyy hh:mm:ss AM/PM`` in ``tz`` (local time when None).
    """
    return ts.astimezone(tz).strftime("%d/%m/%Y %I:%M:%S %p")


def format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


def format_value(value: Optional[float], raw_value: Any) -> str:
    """
    ``"<n> PPM"`` for numeric values, the raw value as text otherwise.
    """
    if value is None:
        return "" if raw_value is None else str(raw_value)
    return f"{format_number(value)} PPM"


def reading_rows(readings: Iterable[Reading], tz: Optional[tzinfo] = None) -> List[ReadingRow]:
    return [(format_timestamp(r.timestamp, tz), format_value(r.value, r.raw_value)) for r in readings]


def alarm_rows(view: AlarmView, tz: Optional[tzinfo] = None) -> List[ReadingRow]:
    """
    Rows of the alarm tab; empty for an unconfigured view (see :func:`alarm_placeholder`).
    """
    if not view.configured:
        return []
    return reading_rows(view.readings, tz)


def alarm_placeholder(view: AlarmView) -> Optional[str]:
    """
    Text shown instead of the alarm table, or None when rows are shown.
    """
    if not view.configured:
        return NOT_CONFIGURED_TEXT
    if view.is_empty:
        return NO_ALARMS_TEXT
    return None


def indicator_text(snapshot: IndicatorSnapshot) -> str:
    """
    Label of the big indicator (numeric values rounded).
    """
    if snapshot.state is IndicatorState.OFFLINE:
        return "Offline"
    if snapshot.value is None:
        return "-- PPM" if snapshot.raw_value is None else str(snapshot.raw_value)
    return f"{round(snapshot.value)} PPM"


def connectivity_text(state: ConnectivityState) -> StatusText:
    if state.stream_lost:
        return "Disconnected", COLOR_DISCONNECTED
    if state.is_online:
        return "Online", IndicatorState.OK.color
    return "Offline", COLOR_DISCONNECTED


def threshold_text(threshold: Optional[float]) -> str:
    if threshold is None:
        return NOT_CONFIGURED_TEXT
    return f"Threshold: {format_number(threshold)} PPM"


def graph_series(points: Sequence[GraphPoint], limit: int = GRAPH_POINTS) -> Tuple[List[float], List[float]]:
    """
    Last ``limit`` points as (epoch seconds, values), oldest first.
    """
    tail = points[-limit:] if limit > 0 else []
    xs = [ts.timestamp() for ts, _ in tail]
    ys = [v for _, v in tail]
    return xs, ys

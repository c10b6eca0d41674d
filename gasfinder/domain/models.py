"""
Domain models and enums.

This module defines the core domain-level types used across the client:
- Indicator states and their display colors
- Normalized telemetry fields and accepted PPM readings
- Connectivity state of the selected device
- Snapshots handed to presentation sinks (big indicator, alarm view)
- Remote station rows returned by the configuration API

These are designed as immutable (frozen) dataclasses where appropriate to
support safe sharing across layers and threads.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Tuple

COLOR_ONLINE = "#16b800"
COLOR_ALARM = "#b10303"
COLOR_OFFLINE = "#888888"
COLOR_DISCONNECTED = "#ff2323"


class IndicatorState(str, Enum):
    """
    State of the big PPM indicator.

    Members
    -------
    OFFLINE : str
        The device is not reachable; no value is shown (gray).
    OK : str
        The latest value is at or below the threshold, or no comparison is
        possible (green).
    ALARM : str
        The latest numeric value is strictly above the threshold (red).
    """

    OFFLINE = "OFFLINE"
    OK = "OK"
    ALARM = "ALARM"

    @property
    def color(self) -> str:
        return _STATE_COLORS[self]


_STATE_COLORS = {
    IndicatorState.OFFLINE: COLOR_OFFLINE,
    IndicatorState.OK: COLOR_ONLINE,
    IndicatorState.ALARM: COLOR_ALARM,
}


class TimestampSource(str, Enum):
    """
    Where the canonical timestamp of an envelope came from.

    Members
    -------
    RECEIVED_AT : str
        Server receipt time (ISO-8601 string).
    EPOCH : str
        Explicit epoch field in milliseconds.
    CLIENT : str
        Client-observed time (only under the permissive policy).
    """

    RECEIVED_AT = "received_at"
    EPOCH = "ts"
    CLIENT = "client"


@dataclass(frozen=True)
class TelemetryField:
    """
    One keyed value extracted from a telemetry envelope.

    Parameters
    ----------
    key
        Original field name (e.g., "los_ppm").
    raw_value
        Value exactly as delivered, kept for display.
    value
        Numeric value if the raw value could be coerced, otherwise None.
    """

    key: str
    raw_value: Any
    value: Optional[float]


@dataclass(frozen=True)
class NormalizedEnvelope:
    """
    Canonical form of one relevant telemetry envelope.

    Parameters
    ----------
    timestamp
        Timezone-aware instant assigned to every field of the envelope.
    timestamp_source
        Which envelope field (or the client clock) produced the timestamp.
    fields
        PPM fields found in the envelope, in envelope order.
    """

    timestamp: datetime
    timestamp_source: TimestampSource
    fields: Tuple[TelemetryField, ...]


@dataclass(frozen=True)
class Reading:
    """
    Accepted PPM reading as stored in the history.

    Parameters
    ----------
    id
        Opaque identifier, unique per accepted reading.
    timestamp
        Server-asserted instant (or reception time under the permissive policy).
    indicator_key
        Field name the value was read from.
    value
        Numeric value, or None when the raw value is not alarm-computable.
    raw_value
        Original value for display.
    fingerprint
        Stable identity used by the replay guard.

    Notes
    -----
    Readings are immutable once created; they leave the history only through
    capacity eviction or a clear.
    """

    id: str
    timestamp: datetime
    indicator_key: str
    value: Optional[float]
    raw_value: Any
    fingerprint: str

    @property
    def is_numeric(self) -> bool:
        return self.value is not None


@dataclass(frozen=True)
class ConnectivityState:
    """
    Online/offline state of the selected device.

    Parameters
    ----------
    serial
        Serial number of the device this state belongs to.
    is_online
        Whether the device is currently reachable.
    stream_lost
        The push stream gave up reconnecting; the device stays offline for
        the rest of the session.
    """

    serial: str
    is_online: bool = False
    stream_lost: bool = False


@dataclass(frozen=True)
class IndicatorSnapshot:
    """
    Everything the big indicator needs to render.

    Parameters
    ----------
    state
        Current indicator state.
    value
        Numeric latest value, or None.
    raw_value
        Latest raw value (shown when it is not numeric), or None.
    threshold
        Threshold the state was computed against.
    """

    state: IndicatorState
    value: Optional[float]
    raw_value: Any
    threshold: Optional[float]

    @property
    def color(self) -> str:
        return self.state.color


@dataclass(frozen=True)
class AlarmView:
    """
    Derived alarm subset of the history.

    ``configured=False`` is the explicit "threshold not configured" marker.
    It is distinct from a configured view that simply holds no readings.
    """

    configured: bool
    readings: Tuple[Reading, ...] = ()

    @classmethod
    def unconfigured(cls) -> "AlarmView":
        return cls(configured=False, readings=())

    @property
    def is_empty(self) -> bool:
        return self.configured and not self.readings


@dataclass(frozen=True)
class Station:
    """
    Remote station row as listed by the configuration API.

    Parameters
    ----------
    station_id
        Backend row id (used for renames).
    serial_number
        Device serial the session subscribes to.
    name
        Display name.
    category
        Product category (the client lists only its own category).
    """

    station_id: Any
    serial_number: str
    name: str
    category: Optional[str] = None

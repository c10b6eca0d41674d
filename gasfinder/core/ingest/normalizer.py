"""
Telemetry envelope normalization.

The push relay forwards device telemetry in several historical shapes:

- ``{"received_at": ..., "payload": {"params": {"los_ppm": 75}}}``
- ``{"ts": 1767261600000, "payload": {"los_ppm": "75"}}``
- ``{"received_at": ..., "params": {"los_ppm": 75}, "serial_number": "SN1"}``

This module turns any of them into a canonical :class:`NormalizedEnvelope`
holding only the fields relevant to the monitored quantity, or reports why
the envelope was dropped. It never raises on malformed input.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from gasfinder.domain.models import NormalizedEnvelope, TelemetryField, TimestampSource

logger = logging.getLogger(__name__)


class TimestampPolicy(str, Enum):
    """
    What to do with an envelope that carries no server timestamp.

    Members
    -------
    DISCARD : str
        Drop the envelope (keeps the history's temporal meaning intact).
    CLIENT_TIME : str
        Fall back to the client clock.
    """

    DISCARD = "DISCARD"
    CLIENT_TIME = "CLIENT_TIME"


class DropReason(str, Enum):
    """Why an envelope produced no readings."""

    NOT_AN_OBJECT = "not_an_object"
    OTHER_DEVICE = "other_device"
    NO_PARAMS = "no_params"
    NO_MATCHING_KEYS = "no_matching_keys"
    NO_TIMESTAMP = "no_timestamp"


@dataclass(frozen=True)
class NormalizeOutcome:
    """
    Result of normalizing one envelope.

    Exactly one of ``envelope`` / ``reason`` is set.
    """

    envelope: Optional[NormalizedEnvelope] = None
    reason: Optional[DropReason] = None

    @property
    def dropped(self) -> bool:
        return self.envelope is None


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def is_ppm_key(key: Any) -> bool:
    """
    Decide whether an envelope field carries a PPM reading.

    Matching is case-insensitive on the substring ``"ppm"``, which covers
    ``los_ppm``, ``LOS_PPM``, ``ppm`` and ``ppmValue``.
    """
    if not key:
        return False
    return "ppm" in str(key).lower()


def coerce_value(raw: Any) -> Optional[float]:
    """
    Convert a raw field value to a finite float.

    Parameters
    ----------
    raw
        Value as delivered by the device.

    Returns
    -------
    float or None
        None when the value is missing, boolean, non-numeric, NaN or infinite.
        Such values are still displayed but never compared to a threshold.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        n = float(raw)
    elif isinstance(raw, str):
        s = raw.strip()
        if not s:
            return None
        try:
            n = float(s)
        except ValueError:
            return None
    else:
        return None
    return n if math.isfinite(n) else None


def _as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _from_epoch_ms(raw: Any) -> Optional[datetime]:
    if isinstance(raw, bool):
        return None
    try:
        ms = float(raw)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(ms):
        return None
    try:
        return datetime.fromtimestamp(ms / 1000.0, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def _from_iso(raw: Any) -> Optional[datetime]:
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return _from_epoch_ms(raw)
    if not isinstance(raw, str):
        return None
    s = raw.strip()
    if s.endswith(("Z", "z")):
        s = s[:-1] + "+00:00"
    try:
        return _as_utc(datetime.fromisoformat(s))
    except ValueError:
        return None


def resolve_server_timestamp(envelope: Mapping[str, Any]) -> Optional[Tuple[datetime, TimestampSource]]:
    """
    Find the server-asserted timestamp of an envelope.

    Preference order: ``received_at`` (ISO-8601 or epoch ms), then ``ts``
    (epoch ms). Unparseable candidates are skipped.

    Returns
    -------
    tuple of (datetime, TimestampSource) or None
    """
    received_at = envelope.get("received_at")
    if received_at is not None:
        dt = _from_iso(received_at)
        if dt is not None:
            return dt, TimestampSource.RECEIVED_AT

    ts = envelope.get("ts")
    if ts is not None:
        dt = _from_epoch_ms(ts)
        if dt is not None:
            return dt, TimestampSource.EPOCH

    return None


def extract_params(envelope: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Locate the key/value mapping carrying the readings.

    Candidates, in order: ``payload.params``, ``payload``, ``params``.
    """
    payload = envelope.get("payload")
    if isinstance(payload, dict):
        params = payload.get("params")
        if isinstance(params, dict):
            return params
        return payload
    params = envelope.get("params")
    if isinstance(params, dict):
        return params
    return None


def envelope_serial(envelope: Mapping[str, Any]) -> Optional[str]:
    """
    Return the source device identifier carried by the envelope, if any.
    """
    sn = envelope.get("serial_number")
    if sn is None:
        payload = envelope.get("payload")
        if isinstance(payload, dict):
            sn = payload.get("serial_number") or payload.get("serial")
    if sn is None or sn == "":
        return None
    return str(sn)


@dataclass
class EventNormalizer:
    """
    Turn raw telemetry envelopes into canonical PPM fields.

    Parameters
    ----------
    serial
        Serial number of the selected device. Envelopes that name another
        device are dropped.
    key_predicate
        Decides which fields belong to the monitored quantity.
    timestamp_policy
        Handling of envelopes without a server timestamp.
    clock
        Source of client time for the permissive policy.
    """

    serial: str
    key_predicate: Callable[[Any], bool] = is_ppm_key
    timestamp_policy: TimestampPolicy = TimestampPolicy.DISCARD
    clock: Callable[[], datetime] = field(default=utc_now, repr=False)

    def normalize(self, envelope: Any) -> NormalizeOutcome:
        """
        Normalize one envelope.

        Parameters
        ----------
        envelope
            JSON-decoded message from the push stream.

        Returns
        -------
        NormalizeOutcome
            The canonical envelope, or the reason it was dropped.
        """
        if not isinstance(envelope, dict):
            return NormalizeOutcome(reason=DropReason.NOT_AN_OBJECT)

        source = envelope_serial(envelope)
        if source is not None and source != str(self.serial):
            logger.debug("telemetry for another device ignored", extra={"serial": source})
            return NormalizeOutcome(reason=DropReason.OTHER_DEVICE)

        params = extract_params(envelope)
        if params is None:
            return NormalizeOutcome(reason=DropReason.NO_PARAMS)

        fields = tuple(
            TelemetryField(key=str(k), raw_value=v, value=coerce_value(v))
            for k, v in params.items()
            if self.key_predicate(k)
        )
        if not fields:
            return NormalizeOutcome(reason=DropReason.NO_MATCHING_KEYS)

        resolved = resolve_server_timestamp(envelope)
        if resolved is None:
            if self.timestamp_policy is TimestampPolicy.DISCARD:
                logger.debug("telemetry without server timestamp dropped", extra={"serial": self.serial})
                return NormalizeOutcome(reason=DropReason.NO_TIMESTAMP)
            resolved = (_as_utc(self.clock()), TimestampSource.CLIENT)

        ts, ts_source = resolved
        return NormalizeOutcome(
            envelope=NormalizedEnvelope(timestamp=ts, timestamp_source=ts_source, fields=fields)
        )

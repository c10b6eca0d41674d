"""
Alarm threshold for the monitored quantity.

The threshold is remote configuration. It is read from the configuration API
on mount/focus, changed by push "threshold_updated" events, or set locally
after a confirmed save. ``None`` means "not configured".

The configuration API has answered in several shapes over time; all of them
are accepted by :func:`parse_threshold_response`:

- flat object: ``{"los_ppm": 50}``
- nested object: ``{"thresholds": {"los_ppm": 50}}``
- rows: ``[{"indicator": "los_ppm", "threshold": 50}, ...]``
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Protocol

import requests

from gasfinder.core.ingest.normalizer import coerce_value
from gasfinder.domain.errors import ConfigApiError

logger = logging.getLogger(__name__)

DEFAULT_QUANTITY_KEY = "los_ppm"

_FLAT_ALIASES = ("los_ppm", "losPpm", "los_ppm_value")


class ThresholdSource(Protocol):
    """Anything that can fetch the raw threshold document of a device."""

    def get_thresholds(self, serial: str) -> Any:
        ...


@dataclass(frozen=True)
class ThresholdUpdate:
    """
    Push-delivered threshold change.

    Parameters
    ----------
    serial
        Device the change applies to.
    indicator
        Quantity the change applies to (e.g., "los_ppm").
    threshold
        New value; None when the pushed value is not numeric.
    """

    serial: Optional[str]
    indicator: Optional[str]
    threshold: Optional[float]

    @classmethod
    def from_payload(cls, payload: Any) -> "ThresholdUpdate":
        if not isinstance(payload, dict):
            return cls(serial=None, indicator=None, threshold=None)
        sn = payload.get("serial_number", payload.get("serialNumber"))
        indicator = payload.get("indicator")
        return cls(
            serial=None if sn is None else str(sn),
            indicator=None if indicator is None else str(indicator),
            threshold=coerce_value(payload.get("threshold")),
        )


def _from_mapping(obj: Mapping[str, Any], quantity_key: str) -> Any:
    for key in (quantity_key, *_FLAT_ALIASES):
        if key in obj:
            return obj[key]
    for key, value in obj.items():
        if "ppm" in str(key).lower():
            return value
    return None


def parse_threshold_response(body: Any, quantity_key: str = DEFAULT_QUANTITY_KEY) -> Optional[float]:
    """
    Resolve a configuration API threshold document to a single value.

    Parameters
    ----------
    body
        JSON-decoded response body.
    quantity_key
        Preferred field name of the monitored quantity.

    Returns
    -------
    float or None
        The numeric threshold, or None when absent or not numeric.
    """
    raw: Any = None

    if isinstance(body, list):
        for row in body:
            if not isinstance(row, dict):
                continue
            indicator = row.get("indicator")
            if not isinstance(indicator, str):
                continue
            name = indicator.lower()
            if "ppm" in name or "los" in name:
                raw = row.get("threshold")
                break
    elif isinstance(body, dict):
        nested = body.get("thresholds")
        obj = nested if isinstance(nested, dict) else body
        raw = _from_mapping(obj, quantity_key)

    return coerce_value(raw)


@dataclass
class ThresholdRegister:
    """
    Current alarm threshold of one device and quantity.

    Parameters
    ----------
    serial
        Selected device.
    quantity_key
        Monitored quantity (push updates for other quantities are ignored).

    Notes
    -----
    Thread-safety is not handled here; the owning `MonitoringSession` is
    responsible for synchronization. `fetch` does network I/O and touches no
    state, so callers can run it outside their lock.
    """

    serial: str
    quantity_key: str = DEFAULT_QUANTITY_KEY
    value: Optional[float] = None

    @property
    def configured(self) -> bool:
        return self.value is not None

    def set(self, value: Optional[float]) -> bool:
        """
        Set the threshold.

        Returns
        -------
        bool
            True if the stored value changed.
        """
        value = coerce_value(value)
        changed = value != self.value
        self.value = value
        return changed

    def fetch(self, api: ThresholdSource) -> Optional[float]:
        """
        Read the threshold from the configuration API.

        Any failure resolves to None so a stale threshold is never kept.
        """
        try:
            body = api.get_thresholds(self.serial)
        except ConfigApiError as e:
            logger.warning("threshold fetch returned %s", e.status, extra={"serial": self.serial})
            return None
        except (requests.RequestException, ValueError) as e:
            logger.warning("threshold fetch failed: %r", e, extra={"serial": self.serial})
            return None
        return parse_threshold_response(body, self.quantity_key)

    def matches(self, update: ThresholdUpdate) -> bool:
        """
        Whether a push update is scoped to this device and quantity.
        """
        if update.serial is None or update.serial != str(self.serial):
            return False
        return update.indicator is not None and update.indicator.lower() == self.quantity_key.lower()

    def apply_push(self, update: ThresholdUpdate) -> bool:
        """
        Apply a push update if it is in scope.

        Returns
        -------
        bool
            True if the update was in scope and applied (even when the value
            is unchanged).
        """
        if not self.matches(update):
            return False
        self.value = update.threshold
        return True

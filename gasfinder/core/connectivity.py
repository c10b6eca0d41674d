"""
Connectivity tracking for the selected device.

Online/offline state comes from two sources that are treated the same way:

- a periodic ping of the configuration API (``GET /api/ping/{serial}``)
- push status events (``device_status``, ``device_ping``, ``ping_result``,
  ``ping``) and the ``device_status_snapshot`` list sent on connect

Status payloads come from several firmware/back-end generations and use
different field names and truthy encodings; :func:`coerce_online` and
:func:`status_serial` normalize them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Protocol

import requests

from gasfinder.domain.errors import ConfigApiError
from gasfinder.domain.models import ConnectivityState

logger = logging.getLogger(__name__)

_SERIAL_FIELDS = ("serial_number", "serialNumber", "serial", "sn")
_ONLINE_FIELDS = ("online", "isOnline", "is_online", "status", "up")


class PingSource(Protocol):
    """Anything that can ping a device and report whether it is online."""

    def ping(self, serial: str) -> bool:
        ...


def coerce_online(value: Any) -> bool:
    """
    Interpret a heterogeneous online flag.

    ``True``, numeric ``1`` and the strings ``"online"``, ``"true"``, ``"1"``
    (case-insensitive) mean online; everything else means offline.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value == 1
    if isinstance(value, str):
        return value.strip().lower() in ("online", "true", "1")
    return False


def _first(payload: Mapping[str, Any], names: Iterable[str]) -> Any:
    for name in names:
        v = payload.get(name)
        if v is not None:
            return v
    return None


def status_serial(payload: Mapping[str, Any]) -> Optional[str]:
    """
    Serial number named by a status payload, if any.
    """
    sn = _first(payload, _SERIAL_FIELDS)
    if sn is None or sn == "":
        return None
    return str(sn)


def status_online(payload: Mapping[str, Any]) -> bool:
    """
    Online flag of a status payload.
    """
    return coerce_online(_first(payload, _ONLINE_FIELDS))


@dataclass
class ConnectivityMonitor:
    """
    Online/offline state scoped to one device.

    Parameters
    ----------
    serial
        Selected device; events naming another device are ignored.

    Notes
    -----
    The device starts offline until a poll or a status event says otherwise.
    Once the push stream is lost, later online reports are ignored for the
    rest of the session.
    Thread-safety is not handled here; the owning `MonitoringSession` is
    responsible for synchronization. `poll` does network I/O and touches no
    state.
    """

    serial: str
    is_online: bool = False
    stream_lost: bool = False

    @property
    def state(self) -> ConnectivityState:
        return ConnectivityState(serial=str(self.serial), is_online=self.is_online, stream_lost=self.stream_lost)

    def mark_stream_lost(self) -> bool:
        """
        Hold the device offline from now on.

        Returns
        -------
        bool
            True if the device was online.
        """
        self.stream_lost = True
        return self.set_online(False)

    def set_online(self, online: bool) -> bool:
        """
        Set connectivity.

        Returns
        -------
        bool
            True if the state changed.
        """
        online = bool(online) and not self.stream_lost
        changed = online != self.is_online
        self.is_online = online
        return changed

    def status_from_event(self, payload: Any) -> Optional[bool]:
        """
        Extract the online flag of a push status event for this device.

        Returns
        -------
        bool or None
            None when the payload is malformed, has no serial, or belongs to
            another device.
        """
        if not isinstance(payload, dict):
            return None
        sn = status_serial(payload)
        if sn is None or sn != str(self.serial):
            return None
        return status_online(payload)

    def status_from_snapshot(self, items: Any) -> Optional[bool]:
        """
        Find this device in a ``device_status_snapshot`` list.
        """
        if not isinstance(items, list):
            return None
        for item in items:
            if isinstance(item, dict) and status_serial(item) == str(self.serial):
                return self.status_from_event(item)
        return None

    def poll(self, api: PingSource) -> bool:
        """
        Ping the device through the configuration API.

        Any failure resolves to offline.
        """
        try:
            return bool(api.ping(self.serial))
        except ConfigApiError as e:
            logger.info("ping returned %s", e.status, extra={"serial": self.serial})
            return False
        except (requests.RequestException, ValueError) as e:
            logger.warning("ping failed: %r", e, extra={"serial": self.serial})
            return False

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from gasfinder.domain.errors import ConfigApiError
from gasfinder.domain.models import Station

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://boreal.soniciot.com"
DEFAULT_CATEGORY = "boreal"


@dataclass(frozen=True)
class ConfigApiConfig:
    """
    Connection settings for the configuration API.

    Parameters
    ----------
    base_url
        Scheme + host of the back end (no trailing slash needed).
    timeout_s
        HTTP request timeout in seconds.
    verify_tls
        Whether to verify TLS certificates.
    """

    base_url: str = DEFAULT_BASE_URL
    timeout_s: float = 10.0
    verify_tls: bool = True


def _decode_body(r: requests.Response) -> Any:
    try:
        return r.json()
    except ValueError:
        return r.text


class ConfigApiClient:
    """
    Request/response client for the remote configuration API.

    Covers the device list, station names, thresholds, indicator display
    names, the device ping and the reverse-indicator flag.

    Notes
    -----
    - This class performs side effects (network I/O).
    - Non-success statuses raise :class:`ConfigApiError` carrying the status
      and decoded body; transport failures propagate as
      ``requests.RequestException``. Callers decide which failures are fatal.
    """

    def __init__(self, cfg: Optional[ConfigApiConfig] = None) -> None:
        """
        Parameters
        ----------
        cfg
            API configuration; defaults to the production back end.
        """
        self._cfg = cfg or ConfigApiConfig()

    @property
    def base_url(self) -> str:
        return self._cfg.base_url.rstrip("/")

    def _url(self, path: str) -> str:
        return f"{self.base_url}/api/{path.lstrip('/')}"

    def _get(self, path: str) -> Any:
        url = self._url(path)
        r = requests.get(url, timeout=self._cfg.timeout_s, verify=self._cfg.verify_tls)
        if not r.ok:
            raise ConfigApiError(r.status_code, _decode_body(r), url=url)
        return r.json()

    def _put(self, path: str, payload: Dict[str, Any]) -> Any:
        url = self._url(path)
        r = requests.put(
            url,
            json=payload,
            headers={"Content-Type": "application/json"},
            timeout=self._cfg.timeout_s,
            verify=self._cfg.verify_tls,
        )
        body = _decode_body(r)
        if not r.ok:
            logger.error("PUT %s failed with %s", url, r.status_code)
            raise ConfigApiError(r.status_code, body, url=url)
        return body

    # --- Stations ---
    def list_stations(self, category: Optional[str] = DEFAULT_CATEGORY) -> List[Station]:
        """
        List remote stations, filtered by product category and sorted by name.

        Parameters
        ----------
        category
            Only stations of this category are returned; None returns all.

        Returns
        -------
        list of Station
            Empty when the API answers with an unexpected shape.
        """
        data = self._get("remote_stations")
        if not isinstance(data, list):
            logger.warning("remote_stations returned unexpected shape: %r", type(data).__name__)
            return []

        stations: List[Station] = []
        for item in data:
            if not isinstance(item, dict) or item.get("serial_number") is None:
                continue
            if category is not None and item.get("category") != category:
                continue
            stations.append(
                Station(
                    station_id=item.get("id"),
                    serial_number=str(item["serial_number"]),
                    name=str(item.get("name") or item["serial_number"]),
                    category=item.get("category"),
                )
            )
        stations.sort(key=lambda s: s.name.lower())
        return stations

    def rename_station(self, station_id: Any, name: str) -> Any:
        """
        Change the display name of a station.
        """
        return self._put(f"remote_stations/{station_id}", {"name": name})

    # --- Thresholds ---
    def get_thresholds(self, serial: str) -> Any:
        """
        Raw threshold document of a device (shape varies, see
        :func:`gasfinder.core.state.threshold_register.parse_threshold_response`).
        """
        return self._get(f"thresholds/{serial}")

    def put_threshold(self, serial: str, value: Optional[float], key: str = "los_ppm") -> Any:
        """
        Save a threshold; None unsets it (an empty document is sent).
        """
        payload: Dict[str, Any] = {} if value is None else {key: value}
        return self._put(f"thresholds/{serial}", payload)

    # --- Indicator names ---
    def get_indicator_names(self, serial: str) -> Dict[str, str]:
        """
        Display names of the device's indicators, keyed by indicator.
        """
        data = self._get(f"indicator_names/{serial}")
        if isinstance(data, list):
            return {
                str(row["indicator"]): str(row.get("name", ""))
                for row in data
                if isinstance(row, dict) and "indicator" in row
            }
        if isinstance(data, dict):
            names = data.get("names", data)
            if isinstance(names, dict):
                return {str(k): str(v) for k, v in names.items()}
        return {}

    def put_indicator_names(self, serial: str, names: Dict[str, str]) -> Any:
        return self._put(f"indicator_names/{serial}", {"names": dict(names)})

    # --- Device ---
    def ping(self, serial: str) -> bool:
        """
        Ask the back end whether the device is online.

        Returns
        -------
        bool
            True when the body reports ``status == "online"``, ``online`` or
            ``isOnline``.
        """
        body = self._get(f"ping/{serial}")
        if not isinstance(body, dict):
            return False
        return body.get("status") == "online" or body.get("online") is True or body.get("isOnline") is True

    def put_reverse_indicator(self, serial: str, reversed_: bool) -> Any:
        return self._put(f"reverse_indicator/{serial}", {"reverse": bool(reversed_)})

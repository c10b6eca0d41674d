from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

import requests

from gasfinder.domain.errors import ConfigApiError

logger = logging.getLogger(__name__)


class IndicatorSettingsApi(Protocol):
    def get_indicator_names(self, serial: str) -> Dict[str, str]: ...

    def put_indicator_names(self, serial: str, names: Dict[str, str]) -> Any: ...

    def put_reverse_indicator(self, serial: str, reversed_: bool) -> Any: ...


@dataclass(frozen=True)
class IndicatorSettings:
    """
    Display settings of the monitored indicator.

    Parameters
    ----------
    display_name
        Label shown above the big indicator.
    reversed_
        Reverse-indicator flag last written to the device. The back end has
        no read endpoint for it, so None means "unknown".
    """

    display_name: str
    reversed_: Optional[bool] = None


class IndicatorSettingsEditor:
    """
    Read and write the display name and reverse flag of one device.

    Parameters
    ----------
    serial
        Device being edited.
    api
        Configuration API client.
    quantity_key
        Indicator the display name belongs to.
    """

    def __init__(self, serial: str, api: IndicatorSettingsApi, quantity_key: str = "los_ppm") -> None:
        self._serial = str(serial)
        self._api = api
        self._key = quantity_key
        self._names: Dict[str, str] = {}
        self._current = IndicatorSettings(display_name=quantity_key)

    @property
    def current(self) -> IndicatorSettings:
        return self._current

    def load(self) -> IndicatorSettings:
        """
        Fetch the display names. A failed fetch keeps the last known settings.
        """
        try:
            names = self._api.get_indicator_names(self._serial)
        except (ConfigApiError, requests.RequestException, ValueError) as e:
            logger.warning("indicator names fetch failed: %r", e, extra={"serial": self._serial})
            return self._current
        self._names = dict(names)
        name = self._names.get(self._key, "").strip() or self._key
        self._current = IndicatorSettings(display_name=name, reversed_=self._current.reversed_)
        return self._current

    def save(self, display_name: str, reversed_: bool) -> IndicatorSettings:
        """
        Write the display name (other indicators' names are preserved), then
        the reverse flag.

        Raises
        ------
        ConfigApiError, requests.RequestException
            A write failed; the current settings are left unchanged.
        """
        name = display_name.strip() or self._key
        names = {**self._names, self._key: name}
        self._api.put_indicator_names(self._serial, names)
        self._names = names
        self._api.put_reverse_indicator(self._serial, reversed_)
        self._current = IndicatorSettings(display_name=name, reversed_=bool(reversed_))
        logger.info("indicator settings saved: %r reverse=%s", name, reversed_, extra={"serial": self._serial})
        return self._current

from __future__ import annotations

import logging
import math
from typing import Any, List, Optional, Protocol

from gasfinder.core.session import MonitoringSession
from gasfinder.domain.errors import ThresholdValidationError
from gasfinder.domain.events import IndicatorEvent

logger = logging.getLogger(__name__)


class ThresholdSink(Protocol):
    def put_threshold(self, serial: str, value: Optional[float], key: str = ...) -> Any: ...


class ThresholdEditor:
    """
    Edit the monitored quantity's threshold of one device.

    The new value is written to the configuration API first; the session
    only sees it once the save succeeded, so the UI never shows a threshold
    the back end does not have.

    Parameters
    ----------
    session
        Session of the device being edited.
    api
        Anything with ``put_threshold(serial, value, key)``.
    """

    def __init__(self, session: MonitoringSession, api: ThresholdSink) -> None:
        self._session = session
        self._api = api

    @staticmethod
    def parse(text: Optional[str]) -> Optional[float]:
        """
        Parse user input. Blank input means "unset".

        Raises
        ------
        ThresholdValidationError
            If the text is not a finite number.
        """
        if text is None or not text.strip():
            return None
        try:
            value = float(text.strip().replace(",", "."))
        except ValueError:
            raise ThresholdValidationError(f"'{text.strip()}' is not a number") from None
        if not math.isfinite(value):
            raise ThresholdValidationError("threshold must be a finite number")
        return value

    def save(self, text: Optional[str]) -> List[IndicatorEvent]:
        """
        Validate, persist, then apply a threshold.

        Raises
        ------
        ThresholdValidationError
            Invalid input; nothing is sent.
        ConfigApiError, requests.RequestException
            The save failed; the session is left unchanged.
        """
        value = self.parse(text)
        serial = self._session.serial
        self._api.put_threshold(serial, value, key=self._session.settings.quantity_key)
        logger.info("threshold saved: %s", value, extra={"serial": serial})
        return self._session.set_threshold(value)

from __future__ import annotations

import logging
import threading

from gasfinder.api.config_api import ConfigApiClient
from gasfinder.services.controller import MonitoringController

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL_S = 15.0


class StatusPollerThread:
    """
    Periodic device ping plus threshold refresh on (re)focus.

    Responsibilities
    ----------------
    - On start: fetch the threshold and ping the device.
    - Every `interval_s`: ping the device.
    - On :meth:`request_refresh` (screen focus regained): fetch the threshold
      and ping immediately.

    Network failures are resolved by the session (threshold -> not
    configured, device -> offline); they never stop the loop.

    Parameters
    ----------
    controller
        Controller that applies results to the session and publishes events.
    api
        Configuration API client.
    stop_event
        Shared stop event used to stop all runtime threads.
    interval_s
        Ping interval in seconds.
    """

    def __init__(
        self,
        controller: MonitoringController,
        api: ConfigApiClient,
        stop_event: threading.Event,
        interval_s: float = DEFAULT_POLL_INTERVAL_S,
    ):
        self._controller = controller
        self._api = api
        self._stop = stop_event
        self._interval_s = interval_s
        self._wake = threading.Event()
        self._thread = threading.Thread(target=self._run, name="status-poller", daemon=True)

    def start(self) -> None:
        """
        Start the poller thread if it is not already running.
        """
        if not self._thread.is_alive():
            self._thread.start()

    def request_refresh(self) -> None:
        """
        Refetch the threshold and ping now (focus regained).
        """
        self._wake.set()

    def stop(self) -> None:
        """
        Signal the poller to stop and wake it from its wait.
        """
        self._stop.set()
        self._wake.set()

    def join(self, timeout: float | None = 2.0) -> None:
        self._thread.join(timeout=timeout)

    def _run(self) -> None:
        refresh = True
        while not self._stop.is_set():
            try:
                if refresh:
                    self._controller.refresh_threshold(self._api)
                self._controller.poll_connectivity(self._api)
            except Exception:
                logger.exception("status poll failed")

            refresh = self._wake.wait(timeout=self._interval_s)
            self._wake.clear()

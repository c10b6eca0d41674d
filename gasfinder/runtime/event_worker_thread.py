from __future__ import annotations

import logging
import threading
from queue import Empty, Queue

from gasfinder.domain.events import PushEvent
from gasfinder.services.controller import MonitoringController

logger = logging.getLogger(__name__)


class EventWorkerThread:
    """
    Single consumer of decoded push events.

    Responsibilities
    ----------------
    - Consume push events from a queue in arrival order.
    - Delegate processing to `MonitoringController.handle_event(...)`, which
      updates the session and publishes indicator events.

    Concurrency Model
    -----------------
    - Being the only consumer keeps accepted readings in delivery order.
    - The thread polls the queue with a timeout to remain responsive to stop signals.
    - Exceptions in controller handling are logged so a bad event cannot kill the thread.

    Parameters
    ----------
    controller
        Monitoring controller used to process incoming events.
    events_q
        Queue of decoded push events.
    stop_event
        Thread stop signal. When set, the worker exits its loop.
    """

    def __init__(
        self,
        controller: MonitoringController,
        events_q: "Queue[PushEvent]",
        stop_event: threading.Event,
    ):
        self._controller = controller
        self._q = events_q
        self._stop = stop_event
        self._thread = threading.Thread(target=self._run, name="event-worker", daemon=True)

    def start(self) -> None:
        """
        Start the worker thread if it is not already running.
        """
        if not self._thread.is_alive():
            self._thread.start()

    def stop(self) -> None:
        """
        Signal the worker thread to stop.
        """
        self._stop.set()

    def join(self, timeout: float | None = 2.0) -> None:
        """
        Join the worker thread.

        Parameters
        ----------
        timeout
            Maximum time to wait for the thread to exit.
        """
        self._thread.join(timeout=timeout)

    def _run(self) -> None:
        while not self._stop.is_set():
            try:
                ev = self._q.get(timeout=0.5)
            except Empty:
                continue

            try:
                self._controller.handle_event(ev)
            except Exception:
                logger.exception("handle_event failed for %s", ev.name.value)

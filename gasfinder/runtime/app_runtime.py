from __future__ import annotations

import threading
from dataclasses import dataclass
from queue import Queue

from gasfinder.api.config_api import ConfigApiClient
from gasfinder.domain.events import PushEvent
from gasfinder.services.controller import MonitoringController
from gasfinder.transport.client_config import HOST, PORT, RECONNECT_ATTEMPTS, RECONNECT_DELAY_S, TIMEOUT_S

from gasfinder.runtime.event_worker_thread import EventWorkerThread
from gasfinder.runtime.push_receiver_thread import PushReceiverConfig, PushReceiverThread
from gasfinder.runtime.status_poller_thread import DEFAULT_POLL_INTERVAL_S, StatusPollerThread


@dataclass(frozen=True)
class AppRuntimeConfig:
    """
    Runtime configuration for thread orchestration and transport connection.

    Parameters
    ----------
    relay_host
        TCP host of the push relay.
    relay_port
        TCP port of the push relay.
    connect_timeout_s
        TCP connect timeout (seconds).
    reconnect_delay_s
        Delay (seconds) between reconnect attempts after network errors.
    reconnect_attempts
        Consecutive failed attempts before the device is reported offline.
    poll_interval_s
        Device ping interval (seconds).
    """

    relay_host: str = HOST
    relay_port: int = PORT
    connect_timeout_s: float = TIMEOUT_S
    reconnect_delay_s: float = RECONNECT_DELAY_S
    reconnect_attempts: int = RECONNECT_ATTEMPTS
    poll_interval_s: float = DEFAULT_POLL_INTERVAL_S


class AppRuntime:
    """
    Thread supervisor for one monitoring session.

    This class owns:
    - a shared stop event
    - the queue between receiver and worker
    - thread lifecycles (start/stop/join)

    Thread Topology
    ---------------
    1) PushReceiverThread (I/O)
       - owns the TCP connection to the push relay
       - decodes NDJSON push events
       - pushes them into `events_q`
       - reports a persistent disconnect to the controller

    2) EventWorkerThread (business logic)
       - consumes push events in order
       - invokes MonitoringController.handle_event()

    3) StatusPollerThread (I/O)
       - pings the device periodically
       - refetches the threshold on start and on focus

    Notes
    -----
    - All threads are daemon threads; `stop()` + `join()` are still used for clean shutdown.
    - `stop()` also closes the session, so events still queued are rejected.
    """

    def __init__(
        self,
        cfg: AppRuntimeConfig,
        controller: MonitoringController,
        api: ConfigApiClient,
    ):
        """
        Parameters
        ----------
        cfg
            Runtime configuration (network connection + reconnect policy).
        controller
            Routes push events to the monitoring session.
        api
            Configuration API client used by the status poller.
        """
        self._cfg = cfg
        self._controller = controller
        self._stop = threading.Event()

        self.events_q: "Queue[PushEvent]" = Queue(maxsize=5000)

        self._receiver = PushReceiverThread(
            PushReceiverConfig(
                host=cfg.relay_host,
                port=cfg.relay_port,
                connect_timeout_s=cfg.connect_timeout_s,
                reconnect_delay_s=cfg.reconnect_delay_s,
                reconnect_attempts=cfg.reconnect_attempts,
            ),
            events_q=self.events_q,
            stop_event=self._stop,
            on_disconnected=controller.handle_disconnected,
        )

        self._worker = EventWorkerThread(
            controller=controller,
            events_q=self.events_q,
            stop_event=self._stop,
        )

        self._poller = StatusPollerThread(
            controller=controller,
            api=api,
            stop_event=self._stop,
            interval_s=cfg.poll_interval_s,
        )

    @property
    def stream_gave_up(self) -> bool:
        return self._receiver.gave_up

    def start(self) -> None:
        """
        Start all runtime threads.

        Notes
        -----
        The worker starts before the receiver so the queue is drained from
        the first event; the poller starts last.
        """
        self._worker.start()
        self._receiver.start()
        self._poller.start()

    def request_refresh(self) -> None:
        """
        Ask the poller to refetch threshold and connectivity now.
        """
        self._poller.request_refresh()

    def stop(self) -> None:
        """
        Stop all runtime threads, close the session and wait briefly for shutdown.
        """
        self._controller.session.close()

        self._receiver.stop()
        self._worker.stop()
        self._poller.stop()

        self._receiver.join(timeout=2.0)
        self._worker.join(timeout=2.0)
        self._poller.join(timeout=2.0)

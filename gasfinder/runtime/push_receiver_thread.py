from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from queue import Full, Queue
from typing import Callable, Optional

from gasfinder.domain.events import PushEvent
from gasfinder.transport.client_config import HOST, PORT, RECONNECT_ATTEMPTS, RECONNECT_DELAY_S, TIMEOUT_S
from gasfinder.transport.tcp_client import TCPNDJSONClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PushReceiverConfig:
    """
    Configuration for the push receiver thread.

    Parameters
    ----------
    host
        Push relay host.
    port
        Push relay port.
    connect_timeout_s
        TCP connect timeout (seconds). After connecting, the socket is placed
        in blocking mode for streaming.
    reconnect_delay_s
        Fixed delay in seconds between reconnect attempts.
    reconnect_attempts
        Consecutive failures after which the receiver gives up and reports a
        persistent disconnect.
    """

    host: str = HOST
    port: int = PORT
    connect_timeout_s: float = TIMEOUT_S
    reconnect_delay_s: float = RECONNECT_DELAY_S
    reconnect_attempts: int = RECONNECT_ATTEMPTS


class PushReceiverThread:
    """
    Dedicated I/O thread that receives push events from the relay.

    Responsibilities
    ----------------
    - Own and manage the TCP connection lifecycle.
    - Reconnect with a fixed delay, at most `reconnect_attempts` times in a
      row; the counter resets after every successful connect.
    - Push decoded events into `events_q` using non-blocking put (drops
      newest event if the queue is full).
    - When the attempt cap is exceeded, call `on_disconnected` once and exit.

    Stop Behavior
    -------------
    :meth:`stop` sets the shared stop event and closes the TCP client socket
    to break any blocking receive.
    """

    def __init__(
        self,
        cfg: PushReceiverConfig,
        events_q: "Queue[PushEvent]",
        stop_event: threading.Event,
        on_disconnected: Optional[Callable[[], object]] = None,
        client_factory: Callable[..., TCPNDJSONClient] = TCPNDJSONClient,
    ):
        """
        Parameters
        ----------
        cfg
            Receiver configuration (host/port/reconnect policy).
        events_q
            Queue that receives decoded push events.
        stop_event
            Shared stop event used to stop all runtime threads.
        on_disconnected
            Called when the reconnect cap is exceeded.
        client_factory
            Builds the transport client (tests inject fakes).
        """
        self._cfg = cfg
        self._q = events_q
        self._stop = stop_event
        self._on_disconnected = on_disconnected
        self._client_factory = client_factory
        self._thread = threading.Thread(target=self._run, name="push-receiver", daemon=True)
        self._client: Optional[TCPNDJSONClient] = None
        self._gave_up = threading.Event()

    @property
    def gave_up(self) -> bool:
        """Whether the receiver exceeded its reconnect cap."""
        return self._gave_up.is_set()

    def start(self) -> None:
        """
        Start the receiver thread if not already running.
        """
        if not self._thread.is_alive():
            self._thread.start()

    def stop(self) -> None:
        """
        Signal the receiver thread to stop and close the TCP client if present.
        """
        self._stop.set()
        client = self._client
        if client is not None:
            client.close()

    def join(self, timeout: float | None = 2.0) -> None:
        """
        Join the receiver thread.

        Parameters
        ----------
        timeout
            Maximum time to wait for the thread to exit.
        """
        self._thread.join(timeout=timeout)

    def _run(self) -> None:
        """
        Connection loop: connect, receive events, and reconnect on errors.
        """
        failures = 0

        while not self._stop.is_set():
            try:
                self._client = self._client_factory(
                    host=self._cfg.host,
                    port=self._cfg.port,
                    timeout_s=self._cfg.connect_timeout_s,
                )
                self._client.connect()
                failures = 0

                for ev in self._client.events():
                    if self._stop.is_set():
                        break
                    try:
                        self._q.put_nowait(ev)
                    except Full:
                        logger.warning("event queue full, dropping %s", ev.name.value)

            except (OSError, RuntimeError) as e:
                if self._stop.is_set():
                    break
                failures += 1
                logger.warning(
                    "push stream error (attempt %d/%d): %r",
                    failures, self._cfg.reconnect_attempts, e,
                )
                if failures >= self._cfg.reconnect_attempts:
                    logger.error("push stream gave up after %d attempts", failures)
                    self._gave_up.set()
                    if self._on_disconnected is not None:
                        self._on_disconnected()
                    break
                self._stop.wait(self._cfg.reconnect_delay_s)

            finally:
                if self._client is not None:
                    self._client.close()
                self._client = None

from __future__ import annotations

import logging
import socket
from dataclasses import dataclass
from typing import Iterator, Optional

from gasfinder.domain.events import PushEvent
from gasfinder.transport.client_config import HOST, PORT, TIMEOUT_S
from gasfinder.transport.ndjson import decode_events

logger = logging.getLogger(__name__)


@dataclass
class TCPNDJSONClient:
    """
    TCP client that receives NDJSON push events from the relay.

    This transport adapter connects to the push relay and yields:
    - raw NDJSON lines via :meth:`lines`
    - decoded push events via :meth:`events`

    Notes
    -----
    - This class is an infrastructure component. It does not implement
      ingestion logic and never touches session state.
    - Error handling in :meth:`events` is intentionally tolerant: malformed
      lines are logged and skipped.

    Parameters
    ----------
    host
        Remote host address of the push relay.
    port
        Remote TCP port.
    timeout_s
        Connection timeout (seconds) used for initial connect only.

    Attributes
    ----------
    _sock
        Active socket once connected; None when not connected.
    """

    host: str = HOST
    port: int = PORT
    timeout_s: float = TIMEOUT_S

    _sock: Optional[socket.socket] = None

    def connect(self) -> None:
        """
        Open a TCP connection to the configured host/port.

        Notes
        -----
        - A timeout is applied for the connect operation.
        - After connecting, timeout is cleared (blocking mode) to support
          continuous streaming.
        """
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.settimeout(self.timeout_s)
        sock.connect((self.host, self.port))
        sock.settimeout(None)  # streaming mode
        self._sock = sock
        logger.info("connected to push relay at %s:%s", self.host, self.port)

    def lines(self) -> Iterator[str]:
        """
        Yield complete NDJSON lines from the socket stream.

        Yields
        ------
        str
            A single NDJSON line (without the trailing newline).

        Raises
        ------
        RuntimeError
            If called before :meth:`connect`.
        ConnectionError
            If the remote side closes the connection.
        """
        if not self._sock:
            raise RuntimeError("Not connected")

        buf = b""
        while True:
            chunk = self._sock.recv(4096)
            if not chunk:
                raise ConnectionError("Relay closed connection")
            buf += chunk

            while b"\n" in buf:
                line, buf = buf.split(b"\n", 1)
                s = line.decode("utf-8", errors="replace").strip()
                if s:
                    yield s

    def events(self) -> Iterator[PushEvent]:
        """
        Yield decoded push events from the NDJSON stream.

        Malformed lines are logged and skipped (best-effort streaming); the
        events decoded before the bad part of a line are still delivered.

        Yields
        ------
        PushEvent
            Decoded events.
        """
        for line in self.lines():
            try:
                for ev in decode_events(line):
                    yield ev
            except ValueError:
                logger.warning("bad line from push relay: %r", line[:200])
                continue

    def close(self) -> None:
        """
        Close the underlying socket if open.

        Notes
        -----
        Close errors are logged at debug level because this is a shutdown path.
        """
        if self._sock:
            try:
                self._sock.close()
            except OSError as e:
                logger.debug("socket close failed: %r", e)
            self._sock = None

from __future__ import annotations

"""
Default push relay connection settings.

These values are used by the TCP client when no explicit arguments are given;
`config.yaml` overrides them in the running app.

Attributes
----------
HOST
    Default push relay host.
PORT
    Default push relay TCP port.
TIMEOUT_S
    Default connect timeout (seconds).
RECONNECT_DELAY_S
    Fixed delay between reconnect attempts (seconds).
RECONNECT_ATTEMPTS
    Consecutive failed attempts after which the stream is given up.
"""

HOST: str = "127.0.0.1"
PORT: int = 9010
TIMEOUT_S: float = 20.0
RECONNECT_DELAY_S: float = 2.0
RECONNECT_ATTEMPTS: int = 5

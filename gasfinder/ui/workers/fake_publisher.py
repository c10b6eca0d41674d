from __future__ import annotations

import random
from datetime import datetime, timezone

from PySide6.QtCore import QThread, Signal

from gasfinder.domain.events import PushEvent, PushEventName


class FakePublisher(QThread):
    """
    Publishes fake push events to test the GUI + controller without a relay.

    Emits, for one device:
    - a status snapshot (online) and the initial threshold
    - ``mqtt_message`` telemetry with a slowly drifting ``los_ppm`` value and
      an occasional spike above the threshold
    - every `duplicate_every` envelopes, the previous envelope again
      (exercises duplicate suppression)
    """

    event = Signal(object)  # emits PushEvent

    def __init__(
        self,
        serial: str,
        threshold: float = 50.0,
        hz: float = 1.0,
        duplicate_every: int = 7,
        parent=None,
    ) -> None:
        super().__init__(parent)
        self._running = True
        self.serial = serial
        self.threshold = threshold
        self.hz = hz
        self.duplicate_every = duplicate_every

        self._rng = random.Random(123)
        self._ppm = threshold * 0.5

    def stop(self) -> None:
        self._running = False

    def run(self) -> None:
        period = 1.0 / max(self.hz, 1e-6)

        self.event.emit(
            PushEvent(PushEventName.STATUS_SNAPSHOT, [{"serial_number": self.serial, "online": True}])
        )
        self.event.emit(
            PushEvent(
                PushEventName.THRESHOLD_UPDATED,
                {"serial_number": self.serial, "indicator": "los_ppm", "threshold": self.threshold},
            )
        )

        previous = None
        n = 0
        while self._running:
            n += 1
            if previous is not None and n % self.duplicate_every == 0:
                self.event.emit(previous)
            else:
                previous = PushEvent(PushEventName.TELEMETRY, self._envelope())
                self.event.emit(previous)
            self.msleep(int(period * 1000))

    def _envelope(self) -> dict:
        # drift around 60% of the threshold
        self._ppm += (self.threshold * 0.6 - self._ppm) * 0.2 + self._rng.gauss(0.0, self.threshold * 0.05)
        if self._rng.random() < 0.08:
            self._ppm = self.threshold * 1.5  # spike
        self._ppm = max(self._ppm, 0.0)

        return {
            "topic": f"devices/{self.serial}/telemetry",
            "serial_number": self.serial,
            "received_at": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "payload": {"params": {"los_ppm": round(self._ppm, 1)}},
        }

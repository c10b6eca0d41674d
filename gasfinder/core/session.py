from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, List, Optional, Tuple

from gasfinder.config.settings import SessionSettings
from gasfinder.core.alarm_view import project_alarms
from gasfinder.core.connectivity import ConnectivityMonitor, PingSource
from gasfinder.core.indicator.indicator_machine import IndicatorStateMachine
from gasfinder.core.ingest.normalizer import EventNormalizer, utc_now
from gasfinder.core.ingest.replay_guard import GuardDecision, ReplayGuard, fingerprint
from gasfinder.core.state.history_store import HistoryStore
from gasfinder.core.state.threshold_register import ThresholdRegister, ThresholdSource, ThresholdUpdate
from gasfinder.domain.events import IndicatorEvent
from gasfinder.domain.models import AlarmView, ConnectivityState, IndicatorSnapshot, Reading

logger = logging.getLogger(__name__)

GraphPoint = Tuple[datetime, float]

INACTIVE = "inactive"
CLOSED = "closed"


@dataclass(frozen=True)
class IngestResult:
    """
    Outcome of ingesting one telemetry envelope.

    Parameters
    ----------
    accepted
        Readings recorded in the history, in envelope order.
    duplicates
        Fields dropped as duplicate deliveries.
    replays
        Fields dropped as replays of cleared readings.
    skipped
        Fields consumed by the post-clear/refocus skip flag.
    dropped_reason
        Why the whole envelope was dropped (normalizer reason, "inactive" or
        "closed"), or None.
    events
        Indicator transitions caused by the accepted readings.
    """

    accepted: Tuple[Reading, ...] = ()
    duplicates: int = 0
    replays: int = 0
    skipped: int = 0
    dropped_reason: Optional[str] = None
    events: Tuple[IndicatorEvent, ...] = ()


class MonitoringSession:
    """
    Thread-safe owner of all monitoring state for one selected device.

    'MonitoringSession' aggregates and coordinates:
    - envelope normalization and the replay guard
    - the bounded reading history
    - the threshold register
    - the indicator state machine
    - the connectivity monitor

    Every push handler and every UI action goes through this object, so no
    other component holds a reference to mutable session state.

    Concurrency Model
    -----------------
    All reads/writes are guarded by a single re-entrant lock
    (`threading.RLock`). Network calls (`refresh_threshold`,
    `poll_connectivity`) run outside the lock and only apply their result
    under it, so ingestion never waits on the configuration API.

    Session Gate
    ------------
    - `activate()` / `deactivate()` model screen focus; while inactive,
      telemetry is dropped.
    - `close()` ends the session; every later call is a no-op so that late
      callbacks from threads or timers cannot mutate a destroyed session.

    Parameters
    ----------
    serial
        Serial number of the selected device.
    settings
        Session tunables (capacity, guard strictness, timestamp policy).
    clock
        Source of "now" (client time fallback, event timestamps).
    """

    def __init__(
        self,
        serial: str,
        settings: Optional[SessionSettings] = None,
        clock=utc_now,
    ) -> None:
        self.serial = str(serial)
        self.settings = settings or SessionSettings()
        self._clock = clock

        self._normalizer = EventNormalizer(
            serial=self.serial,
            timestamp_policy=self.settings.timestamp_policy,
            clock=clock,
        )
        self._guard = ReplayGuard(
            strictness=self.settings.guard_strictness,
            max_seen=self.settings.history_capacity * 10,
            max_cleared=self.settings.history_capacity * 10,
        )
        self._history = HistoryStore(capacity=self.settings.history_capacity)
        self._threshold = ThresholdRegister(serial=self.serial, quantity_key=self.settings.quantity_key)
        self._indicator = IndicatorStateMachine(serial=self.serial, clock=clock)
        self._connectivity = ConnectivityMonitor(serial=self.serial)

        self._lock = threading.RLock()
        self._active = False
        self._focused_before = False
        self._closed = False
        self._threshold_generation = 0

    # --- Session gate ---
    @property
    def is_active(self) -> bool:
        with self._lock:
            return self._active and not self._closed

    @property
    def is_closed(self) -> bool:
        with self._lock:
            return self._closed

    def activate(self) -> None:
        """
        Open the ingestion gate (screen gained focus).

        Notes
        -----
        On a refocus the SeenSet is optionally reset, and in STRICT mode the
        next accepted reading is skipped.
        """
        with self._lock:
            if self._closed:
                return
            if self._focused_before and self.settings.reset_seen_on_focus:
                self._guard.reset_seen()
            self._guard.arm_skip()
            self._focused_before = True
            self._active = True

    def deactivate(self) -> None:
        """
        Close the ingestion gate (screen lost focus).
        """
        with self._lock:
            self._active = False

    def close(self) -> None:
        """
        End the session. All later calls are ignored.
        """
        with self._lock:
            self._closed = True
            self._active = False
        logger.info("monitoring session closed", extra={"serial": self.serial})

    # --- Telemetry ---
    def ingest(self, envelope: Any) -> IngestResult:
        """
        Run one telemetry envelope through normalizer, guard and history.

        Parameters
        ----------
        envelope
            JSON-decoded ``mqtt_message`` payload.

        Returns
        -------
        IngestResult
            What was recorded and what was dropped.
        """
        with self._lock:
            if self._closed:
                return IngestResult(dropped_reason=CLOSED)
            if not self._active:
                return IngestResult(dropped_reason=INACTIVE)

            outcome = self._normalizer.normalize(envelope)
            if outcome.envelope is None:
                reason = outcome.reason.value if outcome.reason else None
                return IngestResult(dropped_reason=reason)

            env = outcome.envelope
            accepted: List[Reading] = []
            events: List[IndicatorEvent] = []
            counts = {GuardDecision.DUPLICATE: 0, GuardDecision.REPLAY: 0, GuardDecision.SKIPPED: 0}

            for f in env.fields:
                fp = fingerprint(self.serial, f.key, f.raw_value, env.timestamp_source, env.timestamp)
                decision = self._guard.check(fp)
                if decision is not GuardDecision.ACCEPTED:
                    counts[decision] += 1
                    continue

                reading = Reading(
                    id=uuid.uuid4().hex,
                    timestamp=env.timestamp,
                    indicator_key=f.key,
                    value=f.value,
                    raw_value=f.raw_value,
                    fingerprint=fp,
                )
                self._history.append(reading)
                accepted.append(reading)
                events.extend(self._indicator.on_reading(reading))

            return IngestResult(
                accepted=tuple(accepted),
                duplicates=counts[GuardDecision.DUPLICATE],
                replays=counts[GuardDecision.REPLAY],
                skipped=counts[GuardDecision.SKIPPED],
                events=tuple(events),
            )

    def clear(self) -> None:
        """
        User "Clear": forget the visible readings and refuse their replays.

        The visible fingerprints are captured before the history is truncated.
        """
        with self._lock:
            if self._closed:
                return
            self._guard.mark_cleared(self._history.fingerprints())
            self._history.clear()

    # --- Connectivity ---
    def set_online(self, online: bool) -> List[IndicatorEvent]:
        """
        Apply a connectivity state.

        Going offline synchronously drops the latest value, turns the
        indicator OFFLINE and clears the history. After `mark_stream_lost`
        an online report is applied as offline.
        """
        with self._lock:
            if self._closed:
                return []
            changed = self._connectivity.set_online(online)
            online = self._connectivity.is_online
            if not online:
                self._history.clear()
            if changed:
                logger.info(
                    "device %s", "online" if online else "offline",
                    extra={"serial": self.serial},
                )
            return self._indicator.on_connectivity(online)

    def mark_stream_lost(self) -> List[IndicatorEvent]:
        """
        The push stream gave up reconnecting: hold the device offline for the
        rest of the session, whatever later pings or status events report.
        """
        with self._lock:
            if self._closed:
                return []
            self._connectivity.mark_stream_lost()
            self._history.clear()
            logger.warning("push stream lost, device held offline", extra={"serial": self.serial})
            return self._indicator.on_connectivity(False)

    @property
    def stream_lost(self) -> bool:
        with self._lock:
            return self._connectivity.stream_lost

    def apply_device_status(self, payload: Any) -> List[IndicatorEvent]:
        """
        Apply a push status event; events for other devices are ignored.
        """
        with self._lock:
            online = self._connectivity.status_from_event(payload)
            if online is None:
                return []
            return self.set_online(online)

    def apply_status_snapshot(self, items: Any) -> List[IndicatorEvent]:
        """
        Apply the status list the relay sends on connect.
        """
        with self._lock:
            online = self._connectivity.status_from_snapshot(items)
            if online is None:
                return []
            return self.set_online(online)

    def poll_connectivity(self, api: PingSource) -> List[IndicatorEvent]:
        """
        Ping the device and apply the result.
        """
        if self.is_closed:
            return []
        online = self._connectivity.poll(api)
        return self.set_online(online)

    # --- Threshold ---
    def set_threshold(self, value: Optional[float]) -> List[IndicatorEvent]:
        """
        Set the threshold; a change clears the history and recomputes the
        indicator against the retained last value.

        Every call supersedes a fetch that is still in flight.
        """
        with self._lock:
            if self._closed:
                return []
            self._threshold_generation += 1
            if not self._threshold.set(value):
                return []
            self._history.clear()
            return self._indicator.on_threshold(self._threshold.value)

    def apply_threshold_update(self, payload: Any) -> List[IndicatorEvent]:
        """
        Apply a push ``threshold_updated`` event scoped to this device and
        quantity. An in-scope update always clears the history.
        """
        update = ThresholdUpdate.from_payload(payload)
        with self._lock:
            if self._closed:
                return []
            if not self._threshold.apply_push(update):
                return []
            self._threshold_generation += 1
            self._history.clear()
            return self._indicator.on_threshold(self._threshold.value)

    def refresh_threshold(self, api: ThresholdSource) -> List[IndicatorEvent]:
        """
        Fetch the threshold from the configuration API and apply it.

        Failures resolve to "not configured". The result is discarded when a
        push update or a local set landed while the request was in flight.
        """
        with self._lock:
            if self._closed:
                return []
            generation = self._threshold_generation
        value = self._threshold.fetch(api)
        with self._lock:
            if generation != self._threshold_generation:
                logger.info("stale threshold fetch discarded", extra={"serial": self.serial})
                return []
            return self.set_threshold(value)

    # --- Presentation snapshots ---
    @property
    def threshold(self) -> Optional[float]:
        with self._lock:
            return self._threshold.value

    @property
    def threshold_configured(self) -> bool:
        with self._lock:
            return self._threshold.configured

    @property
    def connectivity(self) -> ConnectivityState:
        with self._lock:
            return self._connectivity.state

    @property
    def history_size(self) -> int:
        with self._lock:
            return len(self._history)

    def readings(self, newest_first: bool = True) -> Tuple[Reading, ...]:
        """
        Copy of the history (newest-first for the live table).
        """
        with self._lock:
            return self._history.snapshot(newest_first=newest_first)

    def graph_points(self) -> List[GraphPoint]:
        """
        Oldest-first ``(timestamp, value)`` pairs of numeric readings.
        """
        with self._lock:
            return [(r.timestamp, r.value) for r in self._history.snapshot(newest_first=False) if r.value is not None]

    def indicator(self) -> IndicatorSnapshot:
        with self._lock:
            return self._indicator.snapshot()

    def alarm_view(self) -> AlarmView:
        """
        Alarm subset of the history against the current threshold.
        """
        with self._lock:
            return project_alarms(
                self._history.snapshot(newest_first=True),
                self._threshold.value,
                self.settings.history_capacity,
            )

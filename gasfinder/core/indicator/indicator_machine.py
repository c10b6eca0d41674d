"""
Big-indicator state machine.

This module derives the single current display value and its
OFFLINE / OK / ALARM state from three inputs:

- the most recently accepted reading
- the current threshold
- the device connectivity

Every input change recomputes the state and, when it changed, emits an
`IndicatorEvent` (RAISED / CLEARED / WENT_OFFLINE / CAME_ONLINE).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, List, Optional

from gasfinder.domain.events import IndicatorEvent, transition_between
from gasfinder.domain.models import IndicatorSnapshot, IndicatorState, Reading


def compute_state(online: bool, value: Optional[float], threshold: Optional[float]) -> IndicatorState:
    """
    Pure transition function of the indicator.

    Parameters
    ----------
    online
        Device connectivity.
    value
        Latest numeric value, or None.
    threshold
        Current threshold, or None when not configured.

    Returns
    -------
    IndicatorState
        OFFLINE when offline; ALARM when ``value > threshold`` (strictly);
        OK otherwise, including when no comparison is possible.
    """
    if not online:
        return IndicatorState.OFFLINE
    if value is not None and threshold is not None and value > threshold:
        return IndicatorState.ALARM
    return IndicatorState.OK


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class IndicatorStateMachine:
    """
    Stateful indicator (latest value + alarm state).

    Lifecycle Model
    ---------------
    - any -> OFFLINE:    connectivity lost; latest value is reset to None
    - OFFLINE -> OK/ALARM: connectivity regained
    - OK -> ALARM:       RAISED
    - ALARM -> OK:       CLEARED

    Notes
    -----
    - The latest value is kept independently of the reading history, so a
      threshold change (which clears the history) is re-evaluated against the
      retained last numeric reading.
    - Thread-safety is not handled here; the owning `MonitoringSession` is
      responsible for synchronization.

    Parameters
    ----------
    serial
        Device the indicator belongs to (copied into events).
    clock
        Timestamp source for emitted events.
    """

    serial: str
    clock: Callable[[], datetime] = field(default=_utc_now, repr=False)

    online: bool = False
    threshold: Optional[float] = None
    latest_value: Optional[float] = None
    latest_raw: Any = None
    state: IndicatorState = IndicatorState.OFFLINE

    def snapshot(self) -> IndicatorSnapshot:
        """
        Current indicator state for the presentation layer.
        """
        return IndicatorSnapshot(
            state=self.state,
            value=self.latest_value,
            raw_value=self.latest_raw,
            threshold=self.threshold,
        )

    def on_reading(self, reading: Reading) -> List[IndicatorEvent]:
        """
        Make an accepted reading the latest value.

        Non-numeric readings are shown raw and can never raise an alarm.
        """
        self.latest_value = reading.value
        self.latest_raw = reading.raw_value
        return self._recompute()

    def on_threshold(self, threshold: Optional[float]) -> List[IndicatorEvent]:
        """
        Re-evaluate against a new threshold.
        """
        self.threshold = threshold
        return self._recompute()

    def on_connectivity(self, online: bool) -> List[IndicatorEvent]:
        """
        Apply a connectivity change.

        Going offline drops the latest value so a stale reading is never
        presented as live.
        """
        self.online = bool(online)
        if not self.online:
            self.latest_value = None
            self.latest_raw = None
        return self._recompute()

    def _recompute(self) -> List[IndicatorEvent]:
        previous = self.state
        self.state = compute_state(self.online, self.latest_value, self.threshold)

        transition = transition_between(previous, self.state)
        if transition is None:
            return []

        return [
            IndicatorEvent(
                serial=self.serial,
                transition=transition,
                previous=previous,
                current=self.state,
                timestamp=self.clock(),
                value=self.latest_value,
                threshold=self.threshold,
            )
        ]

"""
Indicator event domain models.

An `IndicatorEvent` represents *what happened* to the big indicator at a
specific time, while `IndicatorSnapshot` (in models.py) represents *what is
currently true*.

Events are used for logging and for observers subscribed to the event bus.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from gasfinder.domain.models import IndicatorState


class IndicatorTransition(str, Enum):
    """
    Indicator lifecycle transition.

    Members
    -------
    RAISED : str
        OK -> ALARM, the latest value rose above the threshold.
    CLEARED : str
        ALARM -> OK, the latest value is back at or below the threshold.
    WENT_OFFLINE : str
        Any state -> OFFLINE.
    CAME_ONLINE : str
        OFFLINE -> OK or ALARM.
    """

    RAISED = "RAISED"
    CLEARED = "CLEARED"
    WENT_OFFLINE = "WENT_OFFLINE"
    CAME_ONLINE = "CAME_ONLINE"


def transition_between(previous: IndicatorState, current: IndicatorState) -> Optional[IndicatorTransition]:
    """
    Classify a state change.

    Returns
    -------
    IndicatorTransition or None
        None when the state did not change.
    """
    if previous is current:
        return None
    if current is IndicatorState.OFFLINE:
        return IndicatorTransition.WENT_OFFLINE
    if previous is IndicatorState.OFFLINE:
        return IndicatorTransition.CAME_ONLINE
    if current is IndicatorState.ALARM:
        return IndicatorTransition.RAISED
    return IndicatorTransition.CLEARED


@dataclass(frozen=True)
class IndicatorEvent:
    """
    Event emitted when the indicator changes state.

    Parameters
    ----------
    serial
        Device the indicator belongs to.
    transition
        Lifecycle transition.
    previous
        State before the change.
    current
        State after the change.
    timestamp
        When the change was computed.
    value
        Latest numeric value at the time of the change.
    threshold
        Threshold at the time of the change.
    """

    serial: str
    transition: IndicatorTransition
    previous: IndicatorState
    current: IndicatorState
    timestamp: datetime
    value: Optional[float] = None
    threshold: Optional[float] = None

    @property
    def message(self) -> str:
        if self.transition is IndicatorTransition.RAISED:
            return f"{self.serial}: {self.value:g} PPM above threshold {self.threshold:g}"
        if self.transition is IndicatorTransition.CLEARED:
            return f"{self.serial}: back to normal"
        if self.transition is IndicatorTransition.WENT_OFFLINE:
            return f"{self.serial}: device offline"
        return f"{self.serial}: device online"


class PushEventName(str, Enum):
    """
    Event names emitted by the push relay.

    Members
    -------
    TELEMETRY : str
        Telemetry envelope forwarded from the broker.
    DEVICE_STATUS, DEVICE_PING, PING_RESULT, PING : str
        Device connectivity reports (all handled the same way).
    STATUS_SNAPSHOT : str
        List of current device statuses, sent on connect.
    THRESHOLD_UPDATED : str
        Threshold changed for a device and quantity.
    """

    TELEMETRY = "mqtt_message"
    DEVICE_STATUS = "device_status"
    DEVICE_PING = "device_ping"
    PING_RESULT = "ping_result"
    PING = "ping"
    STATUS_SNAPSHOT = "device_status_snapshot"
    THRESHOLD_UPDATED = "threshold_updated"


STATUS_EVENTS = frozenset(
    {
        PushEventName.DEVICE_STATUS,
        PushEventName.DEVICE_PING,
        PushEventName.PING_RESULT,
        PushEventName.PING,
    }
)


@dataclass(frozen=True)
class PushEvent:
    """
    One message delivered by the push relay.

    Parameters
    ----------
    name
        Event name.
    data
        JSON-decoded event body (shape depends on the event).
    """

    name: PushEventName
    data: Any = None

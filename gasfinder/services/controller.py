from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from gasfinder.core.connectivity import PingSource
from gasfinder.core.session import MonitoringSession
from gasfinder.core.state.threshold_register import ThresholdSource
from gasfinder.domain.events import STATUS_EVENTS, IndicatorEvent, PushEvent, PushEventName
from gasfinder.runtime.event_bus import EventBus

logger = logging.getLogger(__name__)


@dataclass
class MonitoringController:
    """
    Route decoded push events to the monitoring session.

    Responsibilities
    ----------------
    - Dispatch each push event by name (telemetry, device status, status
      snapshot, threshold update) to the matching session operation.
    - Optionally publish resulting indicator events to an `EventBus`.

    Notes
    -----
    This controller contains orchestration logic only. Normalization,
    deduplication and state transitions live in the session and its parts.

    Parameters
    ----------
    session
        Monitoring session of the selected device.
    bus
        Optional event bus used to publish IndicatorEvents to observers. If
        None, publishing is skipped.
    """

    session: MonitoringSession
    bus: Optional[EventBus] = None

    def handle_event(self, event: PushEvent) -> List[IndicatorEvent]:
        """
        Handle one push event and return emitted indicator events.

        Parameters
        ----------
        event
            Decoded push event.

        Returns
        -------
        list of IndicatorEvent
            Indicator transitions caused by this event.
        """
        if event.name is PushEventName.TELEMETRY:
            result = self.session.ingest(event.data)
            if result.dropped_reason:
                logger.debug(
                    "telemetry dropped",
                    extra={"serial": self.session.serial, "reason": result.dropped_reason},
                )
            elif result.duplicates or result.replays:
                logger.debug(
                    "suppressed %d duplicate(s), %d replay(s)", result.duplicates, result.replays,
                    extra={"serial": self.session.serial},
                )
            events = list(result.events)
        elif event.name in STATUS_EVENTS:
            events = self.session.apply_device_status(event.data)
        elif event.name is PushEventName.STATUS_SNAPSHOT:
            events = self.session.apply_status_snapshot(event.data)
        elif event.name is PushEventName.THRESHOLD_UPDATED:
            events = self.session.apply_threshold_update(event.data)
        else:
            events = []

        return self._publish(events)

    def handle_disconnected(self) -> List[IndicatorEvent]:
        """
        The push stream gave up reconnecting: hold the device offline.
        """
        return self._publish(self.session.mark_stream_lost())

    def refresh_threshold(self, api: ThresholdSource) -> List[IndicatorEvent]:
        """
        Re-read the threshold from the configuration API (mount/focus).
        """
        return self._publish(self.session.refresh_threshold(api))

    def poll_connectivity(self, api: PingSource) -> List[IndicatorEvent]:
        """
        Ping the device and apply the result.
        """
        return self._publish(self.session.poll_connectivity(api))

    def _publish(self, events: List[IndicatorEvent]) -> List[IndicatorEvent]:
        for ev in events:
            logger.info(ev.message, extra={"serial": ev.serial, "event": ev.transition.value})
            if self.bus is not None:
                self.bus.publish(ev)
        return events

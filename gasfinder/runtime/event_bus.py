from __future__ import annotations

import queue
from dataclasses import dataclass, field
from queue import Queue
from typing import List

from gasfinder.domain.events import IndicatorEvent


@dataclass
class EventBus:
    """
    In-process event bus for indicator events using a thread-safe queue.

    The bus provides a simple producer/consumer mechanism:
    - Producers publish :class:`~gasfinder.domain.events.IndicatorEvent` via :meth:`publish`.
    - Consumers (e.g., the UI refresh timer) drain :attr:`indicator_events_q`.

    Concurrency Model
    -----------------
    Python's :class:`queue.Queue` is thread-safe. Multiple producers may call
    :meth:`publish` concurrently without additional locking.

    Backpressure Policy
    -------------------
    If the queue is full, events are dropped (best-effort). Observers must
    never be able to block ingestion.

    Attributes
    ----------
    indicator_events_q
        Bounded queue of indicator events.
    """

    indicator_events_q: "Queue[IndicatorEvent]" = field(default_factory=lambda: Queue(maxsize=5000))

    def publish(self, ev: IndicatorEvent) -> None:
        """
        Publish an indicator event to the queue (non-blocking).

        Parameters
        ----------
        ev
            IndicatorEvent to publish.
        """
        try:
            self.indicator_events_q.put_nowait(ev)
        except queue.Full:
            # Drop if overloaded to protect ingestion.
            pass

    def drain(self, limit: int = 1000) -> List[IndicatorEvent]:
        """
        Take up to ``limit`` queued events without blocking.
        """
        out: List[IndicatorEvent] = []
        while len(out) < limit:
            try:
                out.append(self.indicator_events_q.get_nowait())
            except queue.Empty:
                break
        return out

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Deque, List, Optional, Tuple

from gasfinder.domain.models import Reading

DEFAULT_CAPACITY = 1000


@dataclass
class HistoryStore:
    """
    In-memory, size-bounded history of accepted PPM readings.

    Readings are kept newest-first. Appending beyond capacity evicts the
    oldest reading.

    Notes
    -----
    - This store does not attempt to order by timestamp; insertion order is
      the order in which readings were accepted, which is delivery order.
    - Thread-safety is not handled here; the enclosing `MonitoringSession` is
      responsible for synchronization.

    Attributes
    ----------
    capacity
        Maximum number of readings kept.
    """

    capacity: int = DEFAULT_CAPACITY
    _items: Deque[Reading] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.capacity <= 0:
            raise ValueError("capacity must be positive")
        self._items = deque(maxlen=self.capacity)

    def __len__(self) -> int:
        return len(self._items)

    def append(self, reading: Reading) -> None:
        """
        Prepend a reading, evicting the oldest one when full.

        Parameters
        ----------
        reading
            Accepted reading to store.
        """
        self._items.appendleft(reading)

    def clear(self) -> None:
        """
        Drop all readings.
        """
        self._items.clear()

    def latest(self) -> Optional[Reading]:
        """
        Return the most recently accepted reading.

        Returns
        -------
        Reading or None
            Newest reading if the store is not empty.
        """
        return self._items[0] if self._items else None

    def snapshot(self, newest_first: bool = True) -> Tuple[Reading, ...]:
        """
        Return a copy of the stored readings.

        Parameters
        ----------
        newest_first
            True for the live table order, False for the graph order.

        Returns
        -------
        tuple of Reading
            Immutable copy, safe to iterate outside the session lock.
        """
        if newest_first:
            return tuple(self._items)
        return tuple(reversed(self._items))

    def fingerprints(self) -> List[str]:
        """
        Fingerprints of all currently stored readings.
        """
        return [r.fingerprint for r in self._items]

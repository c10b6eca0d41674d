"""
Duplicate and replay suppression for PPM readings.

The push relay may deliver the same telemetry message more than once
(reconnects, retained messages). Each candidate reading gets a stable
fingerprint and is checked against two sets:

- SeenSet: fingerprints already accepted in this session (duplicate delivery)
- ClearedSet: fingerprints that were visible when the user pressed "Clear"
  (replay of something explicitly dismissed)

How much of this applies is a configurable strictness level.
"""

from __future__ import annotations

import hashlib
import json
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Iterable

from gasfinder.domain.models import TimestampSource


class GuardStrictness(str, Enum):
    """
    Strictness level of the replay guard.

    Members
    -------
    NONE : str
        Accept every reading.
    SEEN : str
        Drop duplicates of readings already accepted in this session.
    CLEARED : str
        SEEN, plus drop replays of readings the user cleared.
    STRICT : str
        CLEARED, plus skip the first accepted reading after a clear or a
        refocus (guards against brief replay storms).
    """

    NONE = "NONE"
    SEEN = "SEEN"
    CLEARED = "CLEARED"
    STRICT = "STRICT"


class GuardDecision(str, Enum):
    """Outcome of checking one fingerprint."""

    ACCEPTED = "ACCEPTED"
    DUPLICATE = "DUPLICATE"
    REPLAY = "REPLAY"
    SKIPPED = "SKIPPED"


def fingerprint(
    device_id: str,
    indicator_key: str,
    raw_value: Any,
    timestamp_source: TimestampSource,
    timestamp: datetime,
) -> str:
    """
    Compute the identity of a reading.

    Two readings with the same device, key, raw value, timestamp source and
    timestamp are the same logical event.

    Returns
    -------
    str
        Hex sha1 digest of a canonical JSON encoding of the inputs.
    """
    canonical = json.dumps(
        [str(device_id), str(indicator_key), raw_value, str(timestamp_source.value), timestamp.isoformat()],
        sort_keys=True,
        default=str,
        separators=(",", ":"),
    )
    return hashlib.sha1(canonical.encode("utf-8")).hexdigest()


@dataclass
class ReplayGuard:
    """
    Stateful duplicate/replay filter.

    Parameters
    ----------
    strictness
        Which checks are active.
    max_seen
        Upper bound of the SeenSet; the oldest fingerprints are forgotten first.
    max_cleared
        Upper bound of the ClearedSet, evicted the same way.

    Notes
    -----
    Thread-safety is not handled here; the owning `MonitoringSession` is
    responsible for synchronization.
    """

    strictness: GuardStrictness = GuardStrictness.CLEARED
    max_seen: int = 10_000
    max_cleared: int = 10_000

    _seen: "OrderedDict[str, None]" = field(default_factory=OrderedDict, init=False, repr=False)
    _cleared: "OrderedDict[str, None]" = field(default_factory=OrderedDict, init=False, repr=False)
    _skip_next: bool = field(default=False, init=False, repr=False)

    @property
    def skip_armed(self) -> bool:
        return self._skip_next

    def check(self, fp: str) -> GuardDecision:
        """
        Decide whether a reading with fingerprint ``fp`` may be recorded.

        An accepted or skipped fingerprint is added to the SeenSet.
        """
        if self.strictness is GuardStrictness.NONE:
            return GuardDecision.ACCEPTED

        if self.strictness in (GuardStrictness.CLEARED, GuardStrictness.STRICT) and fp in self._cleared:
            return GuardDecision.REPLAY

        if fp in self._seen:
            return GuardDecision.DUPLICATE

        self._remember(fp)

        if self._skip_next:
            self._skip_next = False
            return GuardDecision.SKIPPED

        return GuardDecision.ACCEPTED

    def mark_cleared(self, fingerprints: Iterable[str]) -> None:
        """
        Record the fingerprints visible at the moment of a user clear.

        Must be called before the history is truncated.
        """
        if self.strictness in (GuardStrictness.CLEARED, GuardStrictness.STRICT):
            for fp in fingerprints:
                self._cleared[fp] = None
                self._cleared.move_to_end(fp)
            while len(self._cleared) > self.max_cleared:
                self._cleared.popitem(last=False)
        self.arm_skip()

    def arm_skip(self) -> None:
        """Skip the next accepted reading (STRICT only)."""
        if self.strictness is GuardStrictness.STRICT:
            self._skip_next = True

    def reset_seen(self) -> None:
        """Forget which readings were displayed (e.g., on refocus)."""
        self._seen.clear()

    def reset(self) -> None:
        """Forget everything, including cleared fingerprints."""
        self._seen.clear()
        self._cleared.clear()
        self._skip_next = False

    def _remember(self, fp: str) -> None:
        self._seen[fp] = None
        while len(self._seen) > self.max_seen:
            self._seen.popitem(last=False)

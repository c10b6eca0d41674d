from __future__ import annotations

from itertools import islice
from typing import Iterable, Optional

from gasfinder.core.state.history_store import DEFAULT_CAPACITY
from gasfinder.domain.models import AlarmView, Reading


def is_alarm(reading: Reading, threshold: Optional[float]) -> bool:
    """
    Whether a reading is an alarm against ``threshold`` (strictly greater).
    """
    return threshold is not None and reading.value is not None and reading.value > threshold


def project_alarms(
    readings: Iterable[Reading],
    threshold: Optional[float],
    capacity: int = DEFAULT_CAPACITY,
) -> AlarmView:
    """
    Derive the alarm subset of a history snapshot.

    Parameters
    ----------
    readings
        History snapshot in the order the caller wants to display.
    threshold
        Current threshold. Classification always uses the current threshold,
        never the one in force when a reading was stored.
    capacity
        Maximum number of alarms returned.

    Returns
    -------
    AlarmView
        ``AlarmView.unconfigured()`` when the threshold is None, otherwise the
        readings with a numeric value strictly above the threshold, order
        preserved.
    """
    if threshold is None:
        return AlarmView.unconfigured()
    alarms = (r for r in readings if is_alarm(r, threshold))
    return AlarmView(configured=True, readings=tuple(islice(alarms, capacity)))

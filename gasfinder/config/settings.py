from __future__ import annotations

from dataclasses import dataclass

from gasfinder.core.ingest.normalizer import TimestampPolicy
from gasfinder.core.ingest.replay_guard import GuardStrictness
from gasfinder.core.state.history_store import DEFAULT_CAPACITY
from gasfinder.core.state.threshold_register import DEFAULT_QUANTITY_KEY


@dataclass(frozen=True)
class SessionSettings:
    """
    Tunables of one monitoring session.
    """

    # Field name of the monitored quantity (threshold key, push scope)
    quantity_key: str = DEFAULT_QUANTITY_KEY
    # How many accepted readings the history (and the alarm view) keeps
    history_capacity: int = DEFAULT_CAPACITY
    guard_strictness: GuardStrictness = GuardStrictness.CLEARED
    timestamp_policy: TimestampPolicy = TimestampPolicy.DISCARD
    # Forget displayed fingerprints when the screen regains focus
    reset_seen_on_focus: bool = False

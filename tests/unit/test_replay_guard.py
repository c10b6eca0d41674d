"""
Unit tests for gasfinder.core.ingest.replay_guard.

These tests validate:
- fingerprint stability and sensitivity to each identity component
- duplicate suppression (SeenSet), replay suppression (ClearedSet)
- the STRICT skip flag and the NONE pass-through mode
- SeenSet bounding
"""

from __future__ import annotations

from datetime import datetime, timezone

from gasfinder.core.ingest.replay_guard import GuardDecision, GuardStrictness, ReplayGuard, fingerprint
from gasfinder.domain.models import TimestampSource

TS = datetime(2026, 1, 1, 10, 0, 0, tzinfo=timezone.utc)


def _fp(value=1.0, key="los_ppm", ts=TS, source=TimestampSource.RECEIVED_AT, device="GF-001") -> str:
    return fingerprint(device, key, value, source, ts)


def test_fingerprint_is_stable() -> None:
    assert _fp() == _fp()


def test_fingerprint_changes_with_each_component() -> None:
    base = _fp()
    assert _fp(value=2.0) != base
    assert _fp(key="ppm") != base
    assert _fp(ts=TS.replace(second=1)) != base
    assert _fp(source=TimestampSource.EPOCH) != base
    assert _fp(device="GF-002") != base


def test_fingerprint_keeps_same_value_at_different_times_distinct() -> None:
    assert _fp(value=5, ts=TS) != _fp(value=5, ts=TS.replace(minute=1))


def test_duplicate_delivery_is_suppressed() -> None:
    guard = ReplayGuard()
    fp = _fp()

    assert guard.check(fp) is GuardDecision.ACCEPTED
    assert guard.check(fp) is GuardDecision.DUPLICATE


def test_cleared_fingerprints_are_replays() -> None:
    guard = ReplayGuard(strictness=GuardStrictness.CLEARED)
    fp = _fp()
    guard.check(fp)

    guard.mark_cleared([fp])
    guard.reset_seen()

    assert guard.check(fp) is GuardDecision.REPLAY
    assert guard.check(_fp(value=9.0)) is GuardDecision.ACCEPTED


def test_seen_mode_ignores_cleared_set() -> None:
    guard = ReplayGuard(strictness=GuardStrictness.SEEN)
    fp = _fp()
    guard.mark_cleared([fp])

    assert guard.check(fp) is GuardDecision.ACCEPTED


def test_none_mode_accepts_everything() -> None:
    guard = ReplayGuard(strictness=GuardStrictness.NONE)
    fp = _fp()

    assert guard.check(fp) is GuardDecision.ACCEPTED
    assert guard.check(fp) is GuardDecision.ACCEPTED


def test_strict_skips_next_reading_after_clear() -> None:
    guard = ReplayGuard(strictness=GuardStrictness.STRICT)
    guard.mark_cleared([])

    assert guard.skip_armed
    first = _fp(value=1.0)
    assert guard.check(first) is GuardDecision.SKIPPED
    assert not guard.skip_armed
    assert guard.check(_fp(value=2.0)) is GuardDecision.ACCEPTED
    # the skipped reading counts as seen
    assert guard.check(first) is GuardDecision.DUPLICATE


def test_arm_skip_only_applies_to_strict() -> None:
    guard = ReplayGuard(strictness=GuardStrictness.CLEARED)
    guard.arm_skip()

    assert not guard.skip_armed
    assert guard.check(_fp()) is GuardDecision.ACCEPTED


def test_seen_set_is_bounded_oldest_first() -> None:
    guard = ReplayGuard(max_seen=2)
    a, b, c = _fp(value=1), _fp(value=2), _fp(value=3)
    for fp in (a, b, c):
        guard.check(fp)

    assert guard.check(a) is GuardDecision.ACCEPTED
    assert guard.check(c) is GuardDecision.DUPLICATE


def test_cleared_set_is_bounded_oldest_first() -> None:
    guard = ReplayGuard(strictness=GuardStrictness.CLEARED, max_cleared=2)
    a, b, c = _fp(value=1), _fp(value=2), _fp(value=3)
    guard.mark_cleared([a])
    guard.mark_cleared([b, c])

    assert guard.check(a) is GuardDecision.ACCEPTED
    assert guard.check(c) is GuardDecision.REPLAY


def test_clearing_again_refreshes_cleared_entry() -> None:
    guard = ReplayGuard(strictness=GuardStrictness.CLEARED, max_cleared=2)
    a, b, c = _fp(value=1), _fp(value=2), _fp(value=3)
    guard.mark_cleared([a, b])
    guard.mark_cleared([a, c])

    assert guard.check(b) is GuardDecision.ACCEPTED
    assert guard.check(a) is GuardDecision.REPLAY


def test_reset_forgets_cleared_and_seen() -> None:
    guard = ReplayGuard(strictness=GuardStrictness.STRICT)
    fp = _fp()
    guard.check(fp)
    guard.mark_cleared([fp])

    guard.reset()

    assert not guard.skip_armed
    assert guard.check(fp) is GuardDecision.ACCEPTED

"""
Stress tests for MonitoringSession concurrency.

These tests attempt to surface race conditions by exercising one session
from several threads at once (telemetry, status flaps, threshold changes,
clears and UI-style snapshot reads). They validate safety properties such as:
- no exceptions during concurrent use
- the history never exceeds its capacity
- snapshots are copies, safe to iterate while writers continue

Notes
-----
Threading tests are probabilistic: they increase confidence but do not prove
the absence of races.
"""

from __future__ import annotations

import threading
from datetime import datetime, timedelta, timezone
from typing import List

import pytest

from gasfinder.config.settings import SessionSettings
from gasfinder.core.session import MonitoringSession

SERIAL = "GF-001"
T0 = datetime(2026, 1, 1, tzinfo=timezone.utc)
CAPACITY = 50


def _env(tid: int, k: int) -> dict:
    ts = (T0 + timedelta(seconds=tid * 100_000 + k)).isoformat()
    return {"serial_number": SERIAL, "received_at": ts, "payload": {"params": {"los_ppm": float(k % 120)}}}


@pytest.mark.stress
def test_session_concurrent_use_no_exceptions() -> None:
    session = MonitoringSession(serial=SERIAL, settings=SessionSettings(history_capacity=CAPACITY))
    session.activate()
    session.set_online(True)

    start = threading.Barrier(6)
    errors: List[BaseException] = []
    writers_done = threading.Event()

    def ingester(tid: int) -> None:
        try:
            start.wait()
            for k in range(1500):
                session.ingest(_env(tid, k))
        except BaseException as e:
            errors.append(e)

    def status_flapper() -> None:
        try:
            start.wait()
            for k in range(300):
                session.apply_device_status({"serial_number": SERIAL, "online": k % 3 != 0})
        except BaseException as e:
            errors.append(e)

    def threshold_changer() -> None:
        try:
            start.wait()
            for k in range(300):
                session.set_threshold(float(k % 100))
                if k % 10 == 0:
                    session.clear()
        except BaseException as e:
            errors.append(e)

    def reader() -> None:
        try:
            start.wait()
            while not writers_done.is_set():
                rows = session.readings()
                assert len(rows) <= CAPACITY
                for r in rows:
                    _ = r.value
                _ = session.graph_points()
                _ = session.alarm_view()
                _ = session.indicator()
                assert session.history_size <= CAPACITY
        except BaseException as e:
            errors.append(e)

    writers = [threading.Thread(target=ingester, args=(i,)) for i in range(3)]
    writers += [threading.Thread(target=status_flapper), threading.Thread(target=threshold_changer)]
    readers = [threading.Thread(target=reader)]

    for t in writers + readers:
        t.start()
    for t in writers:
        t.join(timeout=30)
    writers_done.set()
    for t in readers:
        t.join(timeout=5)

    assert errors == []
    assert session.history_size <= CAPACITY

    # still usable afterwards
    session.set_online(True)
    session.ingest(_env(9, 1))
    assert session.history_size >= 1


@pytest.mark.stress
def test_duplicates_from_many_threads_are_recorded_once() -> None:
    session = MonitoringSession(serial=SERIAL)
    session.activate()
    env = _env(0, 1)

    start = threading.Barrier(8)
    errors: List[BaseException] = []

    def deliver() -> None:
        try:
            start.wait()
            for _ in range(200):
                session.ingest(dict(env))
        except BaseException as e:
            errors.append(e)

    threads = [threading.Thread(target=deliver) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)

    assert errors == []
    assert session.history_size == 1


@pytest.mark.stress
def test_close_during_ingestion_stops_mutation() -> None:
    session = MonitoringSession(serial=SERIAL)
    session.activate()
    errors: List[BaseException] = []
    closed = threading.Event()

    def ingester() -> None:
        try:
            for k in range(5000):
                session.ingest(_env(1, k))
                if k == 100:
                    closed.wait(timeout=5)
        except BaseException as e:
            errors.append(e)

    t = threading.Thread(target=ingester)
    t.start()
    session.close()
    size_at_close = session.history_size
    closed.set()
    t.join(timeout=30)

    assert errors == []
    assert session.history_size == size_at_close

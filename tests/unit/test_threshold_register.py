"""
Unit tests for gasfinder.core.state.threshold_register.

These tests validate:
- parsing of every accepted threshold document shape
- fetch failure resolution to "not configured"
- push update scoping
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import pytest
import requests

from gasfinder.core.state.threshold_register import (
    ThresholdRegister,
    ThresholdUpdate,
    parse_threshold_response,
)
from gasfinder.domain.errors import ConfigApiError


@dataclass
class FakeThresholdApi:
    """Returns a fixed body or raises a fixed error."""

    body: Any = None
    error: Exception = None
    calls: int = 0

    def get_thresholds(self, serial: str) -> Any:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.body


@pytest.mark.parametrize(
    "body, expected",
    [
        ({"los_ppm": 50}, 50.0),
        ({"los_ppm": "42.5"}, 42.5),
        ({"losPpm": 10}, 10.0),
        ({"thresholds": {"los_ppm": 7}}, 7.0),
        ({"some_ppm_limit": 3}, 3.0),
        ([{"indicator": "temp", "threshold": 1}, {"indicator": "los_ppm", "threshold": 25}], 25.0),
        ({"los_ppm": None}, None),
        ({"los_ppm": "abc"}, None),
        ({}, None),
        ([], None),
        ("nope", None),
        (None, None),
    ],
)
def test_parse_threshold_response_shapes(body: Any, expected) -> None:
    assert parse_threshold_response(body) == expected


def test_parse_prefers_configured_quantity_key() -> None:
    assert parse_threshold_response({"ch4_ppm": 5, "los_ppm": 9}, quantity_key="ch4_ppm") == 5.0


def test_set_reports_change() -> None:
    reg = ThresholdRegister(serial="GF-001")

    assert reg.set(10) is True
    assert reg.configured
    assert reg.set(10.0) is False
    assert reg.set(None) is True
    assert not reg.configured


def test_fetch_parses_body() -> None:
    reg = ThresholdRegister(serial="GF-001")
    api = FakeThresholdApi(body={"los_ppm": 30})

    assert reg.fetch(api) == 30.0
    assert reg.value is None


@pytest.mark.parametrize(
    "error",
    [ConfigApiError(500, "boom"), requests.ConnectionError("down"), ValueError("bad json")],
)
def test_fetch_failure_resolves_to_not_configured(error: Exception) -> None:
    reg = ThresholdRegister(serial="GF-001", value=30.0)

    assert reg.fetch(FakeThresholdApi(error=error)) is None


def test_push_update_scope() -> None:
    reg = ThresholdRegister(serial="GF-001", quantity_key="los_ppm")

    assert not reg.apply_push(ThresholdUpdate.from_payload({"serial_number": "OTHER", "indicator": "los_ppm", "threshold": 1}))
    assert not reg.apply_push(ThresholdUpdate.from_payload({"serial_number": "GF-001", "indicator": "temp", "threshold": 1}))
    assert not reg.apply_push(ThresholdUpdate.from_payload("garbage"))
    assert reg.value is None

    assert reg.apply_push(ThresholdUpdate.from_payload({"serial_number": "GF-001", "indicator": "LOS_PPM", "threshold": "12"}))
    assert reg.value == 12.0


def test_push_update_applies_even_when_unchanged() -> None:
    reg = ThresholdRegister(serial="GF-001", value=12.0)

    assert reg.apply_push(ThresholdUpdate(serial="GF-001", indicator="los_ppm", threshold=12.0))

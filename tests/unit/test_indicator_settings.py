"""
Unit tests for gasfinder.services.indicator_settings.IndicatorSettingsEditor.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import pytest
import requests

from gasfinder.domain.errors import ConfigApiError
from gasfinder.services.indicator_settings import IndicatorSettings, IndicatorSettingsEditor

SERIAL = "GF-001"


@dataclass
class FakeApi:
    names: Dict[str, str] = field(default_factory=dict)
    fail_get: Optional[Exception] = None
    fail_reverse: Optional[Exception] = None
    calls: List[tuple] = field(default_factory=list)

    def get_indicator_names(self, serial: str) -> Dict[str, str]:
        if self.fail_get is not None:
            raise self.fail_get
        return dict(self.names)

    def put_indicator_names(self, serial: str, names: Dict[str, str]) -> Any:
        self.calls.append(("names", serial, dict(names)))
        self.names = dict(names)

    def put_reverse_indicator(self, serial: str, reversed_: bool) -> Any:
        if self.fail_reverse is not None:
            raise self.fail_reverse
        self.calls.append(("reverse", serial, reversed_))


def test_load_uses_name_of_monitored_indicator() -> None:
    editor = IndicatorSettingsEditor(SERIAL, FakeApi(names={"los_ppm": "Methane", "temp": "Temp"}))

    assert editor.load() == IndicatorSettings(display_name="Methane")


def test_load_falls_back_to_key_when_unnamed() -> None:
    editor = IndicatorSettingsEditor(SERIAL, FakeApi(names={"los_ppm": "  "}))

    assert editor.load().display_name == "los_ppm"


def test_failed_load_keeps_last_settings() -> None:
    api = FakeApi(names={"los_ppm": "Methane"})
    editor = IndicatorSettingsEditor(SERIAL, api)
    editor.load()

    api.fail_get = requests.ConnectionError("down")

    assert editor.load().display_name == "Methane"


def test_save_preserves_other_names_and_sends_reverse_flag() -> None:
    api = FakeApi(names={"los_ppm": "Methane", "temp": "Temp"})
    editor = IndicatorSettingsEditor(SERIAL, api)
    editor.load()

    saved = editor.save(" CH4 ", True)

    assert saved == IndicatorSettings(display_name="CH4", reversed_=True)
    assert api.calls == [
        ("names", SERIAL, {"los_ppm": "CH4", "temp": "Temp"}),
        ("reverse", SERIAL, True),
    ]
    assert editor.current == saved


def test_failed_save_leaves_settings_unchanged() -> None:
    api = FakeApi(names={"los_ppm": "Methane"}, fail_reverse=ConfigApiError(500, "boom"))
    editor = IndicatorSettingsEditor(SERIAL, api)
    editor.load()

    with pytest.raises(ConfigApiError):
        editor.save("CH4", True)

    assert editor.current == IndicatorSettings(display_name="Methane")

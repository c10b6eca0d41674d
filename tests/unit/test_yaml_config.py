"""
Unit tests for gasfinder.core.config.yaml_config.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from gasfinder.core.config.yaml_config import CONFIG_ENV_VAR, load_app_config, parse_app_config
from gasfinder.core.ingest.normalizer import TimestampPolicy
from gasfinder.core.ingest.replay_guard import GuardStrictness
from gasfinder.domain.errors import ConfigError

FULL_YAML = """
device:
  serial_number: GF-42
  station_category: boreal
api:
  base_url: https://api.example.com/
  timeout_s: 3
  verify_tls: false
transport:
  push_relay:
    host: relay.local
    port: 9100
    timeout_s: 5
    reconnect_delay_s: 1.5
    reconnect_attempts: 3
session:
  quantity_key: ch4_ppm
  history_capacity: 200
  guard_strictness: strict
  timestamp_policy: CLIENT_TIME
  reset_seen_on_focus: true
connectivity:
  poll_interval_s: 30
logging:
  level: debug
"""


def _write(tmp_path: Path, text: str) -> Path:
    p = tmp_path / "config.yaml"
    p.write_text(text, encoding="utf-8")
    return p


def test_load_full_config(tmp_path: Path) -> None:
    cfg = load_app_config(str(_write(tmp_path, FULL_YAML)))

    assert cfg.device.serial_number == "GF-42"
    assert cfg.api.base_url == "https://api.example.com"
    assert cfg.api.timeout_s == 3.0
    assert cfg.api.verify_tls is False
    assert cfg.runtime.relay_host == "relay.local"
    assert cfg.runtime.relay_port == 9100
    assert cfg.runtime.reconnect_delay_s == 1.5
    assert cfg.runtime.reconnect_attempts == 3
    assert cfg.runtime.poll_interval_s == 30.0
    assert cfg.session.quantity_key == "ch4_ppm"
    assert cfg.session.history_capacity == 200
    assert cfg.session.guard_strictness is GuardStrictness.STRICT
    assert cfg.session.timestamp_policy is TimestampPolicy.CLIENT_TIME
    assert cfg.session.reset_seen_on_focus is True
    assert cfg.log_level == "DEBUG"


def test_empty_file_takes_defaults(tmp_path: Path) -> None:
    cfg = load_app_config(str(_write(tmp_path, "")))

    assert cfg.device.serial_number is None
    assert cfg.api.base_url == "https://boreal.soniciot.com"
    assert cfg.runtime.relay_port == 9010
    assert cfg.runtime.reconnect_delay_s == 2.0
    assert cfg.runtime.reconnect_attempts == 5
    assert cfg.runtime.poll_interval_s == 15.0
    assert cfg.session.history_capacity == 1000
    assert cfg.session.guard_strictness is GuardStrictness.CLEARED
    assert cfg.session.timestamp_policy is TimestampPolicy.DISCARD
    assert cfg.log_level == "INFO"


def test_env_var_selects_config(tmp_path: Path, monkeypatch) -> None:
    path = _write(tmp_path, "device:\n  serial_number: FROM-ENV\n")
    monkeypatch.setenv(CONFIG_ENV_VAR, str(path))

    assert load_app_config().device.serial_number == "FROM-ENV"


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_app_config(str(tmp_path / "nope.yaml"))


@pytest.mark.parametrize(
    "raw",
    [
        {"session": {"guard_strictness": "PARANOID"}},
        {"session": {"timestamp_policy": "whenever"}},
        {"session": {"history_capacity": 0}},
        {"session": {"history_capacity": "lots"}},
        {"transport": {"push_relay": {"reconnect_attempts": 0}}},
        {"device": ["not", "a", "mapping"]},
    ],
)
def test_invalid_values_raise_config_error(raw) -> None:
    with pytest.raises(ConfigError):
        parse_app_config(raw)


def test_non_mapping_root_raises(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_app_config(str(_write(tmp_path, "- a\n- b\n")))

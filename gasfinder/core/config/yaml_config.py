from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Type, TypeVar

import yaml

from gasfinder.api.config_api import ConfigApiConfig
from gasfinder.config.settings import SessionSettings
from gasfinder.core.ingest.normalizer import TimestampPolicy
from gasfinder.core.ingest.replay_guard import GuardStrictness
from gasfinder.domain.errors import ConfigError
from gasfinder.runtime.app_runtime import AppRuntimeConfig

CONFIG_ENV_VAR = "GASFINDER_CONFIG"

E = TypeVar("E", bound=Enum)


@dataclass(frozen=True)
class DeviceConfig:
    """Which device to monitor. A None serial means: ask the user."""
    serial_number: Optional[str] = None
    station_category: str = "boreal"


@dataclass(frozen=True)
class AppConfig:
    """
    Root application configuration loaded from YAML.

    Every section is optional; missing sections take their defaults.
    """
    device: DeviceConfig = field(default_factory=DeviceConfig)
    api: ConfigApiConfig = field(default_factory=ConfigApiConfig)
    runtime: AppRuntimeConfig = field(default_factory=AppRuntimeConfig)
    session: SessionSettings = field(default_factory=SessionSettings)
    log_level: str = "INFO"


def _read_yaml(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigError("config.yaml must contain a YAML mapping at the root")
    return data


def _resolve_default_config_path() -> Path:
    """
    Resolve config.yaml location.

    Priority:
    1) GASFINDER_CONFIG env var if provided
    2) config.yaml next to the executable
    3) ./config.yaml in current working directory
    """
    env = os.getenv(CONFIG_ENV_VAR)
    if env:
        return Path(env).expanduser().resolve()

    exe_dir = Path(sys.executable).resolve().parent
    candidate = exe_dir / "config.yaml"
    if candidate.exists():
        return candidate

    return Path("config.yaml").resolve()


def _section(raw: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = raw.get(name) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"'{name}' must be a mapping")
    return value


def _enum(enum_cls: Type[E], value: Any, key: str) -> E:
    try:
        return enum_cls(str(value).upper())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ConfigError(f"{key}: {value!r} is not one of {allowed}") from None


def load_app_config(path: Optional[str] = None) -> AppConfig:
    """
    Load application configuration from YAML and convert into typed config objects.

    Parameters
    ----------
    path
        Explicit path to config.yaml. If None, uses default resolution.

    Returns
    -------
    AppConfig
        Parsed and validated configuration.

    Raises
    ------
    FileNotFoundError
        If config file does not exist.
    ConfigError
        If a section has the wrong shape or a value is invalid.
    """
    cfg_path = Path(path).expanduser().resolve() if path else _resolve_default_config_path()
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config not found: {cfg_path}")

    return parse_app_config(_read_yaml(cfg_path))


def parse_app_config(raw: Dict[str, Any]) -> AppConfig:
    """
    Build :class:`AppConfig` from an already parsed YAML mapping.
    """
    try:
        # ---- device ----
        d = _section(raw, "device")
        serial = d.get("serial_number")
        device = DeviceConfig(
            serial_number=str(serial) if serial not in (None, "") else None,
            station_category=str(d.get("station_category", "boreal")),
        )

        # ---- api ----
        a = _section(raw, "api")
        api = ConfigApiConfig(
            base_url=str(a.get("base_url", ConfigApiConfig.base_url)).rstrip("/"),
            timeout_s=float(a.get("timeout_s", ConfigApiConfig.timeout_s)),
            verify_tls=bool(a.get("verify_tls", True)),
        )

        # ---- transport + connectivity ----
        t = _section(_section(raw, "transport"), "push_relay")
        c = _section(raw, "connectivity")
        defaults = AppRuntimeConfig()
        runtime = AppRuntimeConfig(
            relay_host=str(t.get("host", defaults.relay_host)),
            relay_port=int(t.get("port", defaults.relay_port)),
            connect_timeout_s=float(t.get("timeout_s", defaults.connect_timeout_s)),
            reconnect_delay_s=float(t.get("reconnect_delay_s", defaults.reconnect_delay_s)),
            reconnect_attempts=int(t.get("reconnect_attempts", defaults.reconnect_attempts)),
            poll_interval_s=float(c.get("poll_interval_s", defaults.poll_interval_s)),
        )

        # ---- session ----
        s = _section(raw, "session")
        session = SessionSettings(
            quantity_key=str(s.get("quantity_key", SessionSettings.quantity_key)),
            history_capacity=int(s.get("history_capacity", SessionSettings.history_capacity)),
            guard_strictness=_enum(
                GuardStrictness, s.get("guard_strictness", "CLEARED"), "session.guard_strictness"
            ),
            timestamp_policy=_enum(
                TimestampPolicy, s.get("timestamp_policy", "DISCARD"), "session.timestamp_policy"
            ),
            reset_seen_on_focus=bool(s.get("reset_seen_on_focus", False)),
        )

        # ---- logging ----
        log_level = str(_section(raw, "logging").get("level", "INFO")).upper()
    except (TypeError, ValueError) as e:
        raise ConfigError(f"invalid configuration value: {e}") from e

    if session.history_capacity <= 0:
        raise ConfigError("session.history_capacity must be positive")
    if runtime.reconnect_attempts <= 0:
        raise ConfigError("transport.push_relay.reconnect_attempts must be positive")

    return AppConfig(device=device, api=api, runtime=runtime, session=session, log_level=log_level)

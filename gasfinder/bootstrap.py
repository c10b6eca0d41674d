from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from gasfinder.api.config_api import ConfigApiClient
from gasfinder.core.config.yaml_config import AppConfig, load_app_config
from gasfinder.core.session import MonitoringSession
from gasfinder.logging_config import configure_logging
from gasfinder.runtime.app_runtime import AppRuntime
from gasfinder.runtime.event_bus import EventBus
from gasfinder.services.controller import MonitoringController
from gasfinder.services.indicator_settings import IndicatorSettingsEditor
from gasfinder.services.threshold_editor import ThresholdEditor


@dataclass(frozen=True)
class AppWiring:
    """Everything the UI layer needs to monitor one device."""
    config: AppConfig
    api: ConfigApiClient
    session: MonitoringSession
    bus: EventBus
    controller: MonitoringController
    editor: ThresholdEditor
    indicator_settings: IndicatorSettingsEditor
    runtime: AppRuntime


def load_system_config(config_path: Optional[str] = None) -> AppConfig:
    """Load config.yaml and install logging at its level."""
    cfg = load_app_config(config_path)
    configure_logging(cfg.log_level)
    return cfg


def build_api(cfg: AppConfig) -> ConfigApiClient:
    return ConfigApiClient(cfg.api)


def build_monitoring_system(cfg: AppConfig, serial: str, api: Optional[ConfigApiClient] = None) -> AppWiring:
    """
    Wire session, controller and runtime threads for the device ``serial``.

    Threads are not started; the caller owns ``runtime.start()``/``stop()``.
    """
    api = api or build_api(cfg)

    # --- STATE ---
    session = MonitoringSession(serial=serial, settings=cfg.session)

    # --- EVENT BUS ---
    bus = EventBus()

    # --- CONTROLLER ---
    controller = MonitoringController(session=session, bus=bus)

    # --- RUNTIME ---
    runtime = AppRuntime(cfg=cfg.runtime, controller=controller, api=api)

    return AppWiring(
        config=cfg,
        api=api,
        session=session,
        bus=bus,
        controller=controller,
        editor=ThresholdEditor(session=session, api=api),
        indicator_settings=IndicatorSettingsEditor(serial=serial, api=api, quantity_key=cfg.session.quantity_key),
        runtime=runtime,
    )

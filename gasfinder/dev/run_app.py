from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Tuple

from PySide6.QtWidgets import QApplication, QDialog

from gasfinder.bootstrap import build_api, build_monitoring_system, load_system_config
from gasfinder.core.config.yaml_config import AppConfig
from gasfinder.ui.main_dashboard import MonitorWindow
from gasfinder.ui.station_picker import StationPickerDialog
from gasfinder.ui.theme import APP_QSS
from gasfinder.ui.workers.fake_publisher import FakePublisher

logger = logging.getLogger(__name__)

DEMO_SERIAL = "DEMO-0001"


def _parse_args(argv) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="gasfinder", description="Gas Finder PPM monitor")
    parser.add_argument("--config", help="path to config.yaml")
    parser.add_argument("--serial", help="device serial number (skips the station picker)")
    parser.add_argument(
        "--demo",
        action="store_true",
        help="feed the screen from a local fake publisher instead of the push relay",
    )
    return parser.parse_args(argv)


def _choose_device(cfg: AppConfig, api, serial: Optional[str]) -> Optional[Tuple[str, str]]:
    serial = serial or cfg.device.serial_number
    if serial:
        return serial, serial

    picker = StationPickerDialog(api, category=cfg.device.station_category)
    if picker.exec() != QDialog.Accepted:
        return None
    st = picker.selected_station()
    if st is None:
        return None
    return st.serial_number, st.name


def main() -> None:
    """
    Start the desktop UI and runtime threads.

    Notes
    -----
    - Loads configuration from `config.yaml` by default.
    - Optional CLI usage:
        python -m gasfinder.dev.run_app --config path/to/config.yaml
        python -m gasfinder.dev.run_app --demo
    """
    args = _parse_args(sys.argv[1:])
    app = QApplication(sys.argv[:1])
    app.setStyleSheet(APP_QSS)

    cfg = load_system_config(args.config)
    api = build_api(cfg)

    if args.demo:
        chosen = (args.serial or DEMO_SERIAL, "Demo station")
    else:
        chosen = _choose_device(cfg, api, args.serial)
    if chosen is None:
        logger.info("no station selected, exiting")
        return
    serial, name = chosen

    wiring = build_monitoring_system(cfg, serial, api=api)
    win = MonitorWindow(wiring, station_name=name)
    win.show()

    if args.demo:
        pub = FakePublisher(serial=serial)
        pub.event.connect(lambda ev: wiring.controller.handle_event(ev))
        pub.start()

        def _stop_demo() -> None:
            pub.stop()
            pub.wait(1000)
            wiring.session.close()

        app.aboutToQuit.connect(_stop_demo)
    else:
        wiring.runtime.start()
        app.aboutToQuit.connect(wiring.runtime.stop)

    sys.exit(app.exec())


if __name__ == "__main__":
    main()

from __future__ import annotations

from datetime import datetime

import requests
from PySide6.QtCore import QEvent, Qt, QTimer
from PySide6.QtWidgets import (
    QDialog,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QTabWidget,
    QVBoxLayout,
    QWidget,
)

from gasfinder.bootstrap import AppWiring
from gasfinder.domain.errors import ConfigApiError, ThresholdValidationError
from gasfinder.ui.adapters.session_snapshots import (
    alarm_placeholder,
    alarm_rows,
    connectivity_text,
    format_number,
    graph_series,
    indicator_text,
    reading_rows,
    threshold_text,
)
from gasfinder.ui.indicator_settings_dialog import IndicatorSettingsDialog
from gasfinder.ui.theme import COLOR_CRIT, COLOR_TEXT_MUTED
from gasfinder.ui.widgets.ppm_indicator import ConnectivityBadge, PpmIndicator
from gasfinder.ui.widgets.ppm_plot import PpmPlot
from gasfinder.ui.widgets.reading_table import ReadingTable


class MonitorWindow(QMainWindow):
    """
    Monitoring screen of one device.
    - Top: station name + connectivity badge
    - Left: big PPM indicator, threshold editor, Clear button
    - Right: "Real time" (table + graph) and "Alarms" tabs

    Being shown (or restored) opens the session's ingestion gate and asks the
    runtime to refetch threshold and connectivity; being hidden or minimized
    closes it.
    """

    def __init__(self, wiring: AppWiring, station_name: str = "") -> None:
        super().__init__()
        self.wiring = wiring
        self.session = wiring.session
        self.setWindowTitle(f"Gas Finder - {station_name or self.session.serial}")
        self.resize(1200, 760)

        root = QWidget()
        self.setCentralWidget(root)
        layout = QVBoxLayout(root)
        layout.setContentsMargins(16, 16, 16, 16)
        layout.setSpacing(12)

        # Top bar
        top = QHBoxLayout()
        title = QLabel(station_name or self.session.serial)
        title.setStyleSheet("font-size: 18px; font-weight: 700;")
        self.badge = ConnectivityBadge()
        self.clock = QLabel("")
        self.clock.setStyleSheet(f"color: {COLOR_TEXT_MUTED}; font-weight: 600;")
        top.addWidget(title)
        top.addStretch(1)
        top.addWidget(self.clock)
        top.addWidget(self.badge)
        layout.addLayout(top)

        body = QHBoxLayout()
        layout.addLayout(body, stretch=1)

        # Left column
        left = QVBoxLayout()
        self.indicator = PpmIndicator()
        left.addWidget(self.indicator)

        editor_row = QHBoxLayout()
        self.threshold_edit = QLineEdit()
        self.threshold_edit.setPlaceholderText("Threshold (PPM)")
        self.save_button = QPushButton("Save")
        self.save_button.clicked.connect(self.save_threshold)
        editor_row.addWidget(self.threshold_edit)
        editor_row.addWidget(self.save_button)
        left.addLayout(editor_row)

        self.clear_button = QPushButton("Clear")
        self.clear_button.clicked.connect(self.clear_readings)
        left.addWidget(self.clear_button)

        self.settings_button = QPushButton("Indicator settings")
        self.settings_button.clicked.connect(self.edit_indicator_settings)
        left.addWidget(self.settings_button)

        self.last_event = QLabel("")
        self.last_event.setWordWrap(True)
        self.last_event.setStyleSheet(f"color: {COLOR_TEXT_MUTED};")
        left.addWidget(self.last_event)
        left.addStretch(1)
        body.addLayout(left, stretch=1)

        # Right column
        self.tabs = QTabWidget()
        realtime = QWidget()
        realtime_layout = QVBoxLayout(realtime)
        self.reading_table = ReadingTable("Readings")
        self.plot = PpmPlot()
        realtime_layout.addWidget(self.plot, stretch=2)
        realtime_layout.addWidget(self.reading_table, stretch=3)
        self.alarm_table = ReadingTable("Readings above threshold", value_color=COLOR_CRIT)
        self.tabs.addTab(realtime, "Real time")
        self.tabs.addTab(self.alarm_table, "Alarms")
        body.addWidget(self.tabs, stretch=2)

        self._threshold_shown = object()
        self.indicator.set_caption(wiring.indicator_settings.load().display_name)

        # UI refresh timer
        self.timer = QTimer(self)
        self.timer.setInterval(200)  # 5 Hz refresh
        self.timer.timeout.connect(self.refresh_ui)
        self.timer.start()

    # --- Focus gate ---
    def showEvent(self, event) -> None:
        super().showEvent(event)
        self._focus_gained()

    def hideEvent(self, event) -> None:
        super().hideEvent(event)
        self.session.deactivate()

    def changeEvent(self, event) -> None:
        super().changeEvent(event)
        if event.type() == QEvent.WindowStateChange:
            if self.windowState() & Qt.WindowMinimized:
                self.session.deactivate()
            else:
                self._focus_gained()

    def _focus_gained(self) -> None:
        if self.session.is_active:
            return
        self.session.activate()
        self.wiring.runtime.request_refresh()

    # --- Actions ---
    def clear_readings(self) -> None:
        self.session.clear()
        self.refresh_ui()

    def save_threshold(self) -> None:
        try:
            self.wiring.editor.save(self.threshold_edit.text())
        except ThresholdValidationError as e:
            QMessageBox.warning(self, "Invalid threshold", str(e))
            return
        except (ConfigApiError, requests.RequestException) as e:
            QMessageBox.critical(self, "Save failed", f"The threshold could not be saved.\n{e}")
            return
        QMessageBox.information(self, "Threshold", "Threshold saved.")
        self.refresh_ui()

    def edit_indicator_settings(self) -> None:
        dialog = IndicatorSettingsDialog(self.wiring.indicator_settings, parent=self)
        if dialog.exec() == QDialog.Accepted:
            self.indicator.set_caption(self.wiring.indicator_settings.current.display_name)

    # --- Rendering ---
    def refresh_ui(self) -> None:
        for ev in self.wiring.bus.drain():
            self.last_event.setText(ev.message)

        snap = self.session.indicator()
        self.indicator.set_state(snap.color, indicator_text(snap))

        threshold = self.session.threshold
        self.indicator.set_threshold_text(threshold_text(threshold))
        self.plot.set_threshold(threshold)
        if threshold != self._threshold_shown and not self.threshold_edit.hasFocus():
            self.threshold_edit.setText("" if threshold is None else format_number(threshold))
            self._threshold_shown = threshold

        self.badge.set_status(*connectivity_text(self.session.connectivity))
        self.clock.setText(datetime.now().strftime("%I:%M:%S %p"))

        self.reading_table.set_rows(reading_rows(self.session.readings()))
        self.plot.set_series(*graph_series(self.session.graph_points()))

        view = self.session.alarm_view()
        self.alarm_table.set_rows(alarm_rows(view), placeholder=alarm_placeholder(view))

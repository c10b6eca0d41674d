from __future__ import annotations

import logging
from typing import List, Optional

import requests
from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QDialog,
    QDialogButtonBox,
    QHBoxLayout,
    QInputDialog,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QMessageBox,
    QPushButton,
    QVBoxLayout,
)

from gasfinder.api.config_api import ConfigApiClient
from gasfinder.domain.errors import ConfigApiError
from gasfinder.domain.models import Station

logger = logging.getLogger(__name__)


class StationPickerDialog(QDialog):
    """
    Pick the device to monitor from the remote station list.

    The list is loaded from the configuration API (own category only,
    sorted by name). A selected station can be renamed in place.
    """

    def __init__(self, api: ConfigApiClient, category: Optional[str] = "boreal", parent=None) -> None:
        super().__init__(parent)
        self.setWindowTitle("Choose a station")
        self.resize(420, 480)

        self._api = api
        self._category = category
        self._stations: List[Station] = []

        self.list = QListWidget()
        self.list.itemDoubleClicked.connect(lambda _item: self.accept())

        self.status = QLabel("")
        rename = QPushButton("Rename")
        rename.clicked.connect(self.rename_selected)
        reload_ = QPushButton("Reload")
        reload_.clicked.connect(self.reload)

        buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)

        actions = QHBoxLayout()
        actions.addWidget(rename)
        actions.addWidget(reload_)
        actions.addStretch(1)

        layout = QVBoxLayout(self)
        layout.addWidget(self.list)
        layout.addWidget(self.status)
        layout.addLayout(actions)
        layout.addWidget(buttons)

        self.reload()

    def reload(self) -> None:
        try:
            self._stations = self._api.list_stations(self._category)
        except (ConfigApiError, requests.RequestException) as e:
            logger.warning("could not list stations: %s", e)
            self._stations = []
            self.status.setText("Could not load stations.")
        else:
            self.status.setText(f"{len(self._stations)} station(s)")

        self.list.clear()
        for st in self._stations:
            item = QListWidgetItem(f"{st.name}  ({st.serial_number})")
            item.setData(Qt.UserRole, st)
            self.list.addItem(item)
        if self._stations:
            self.list.setCurrentRow(0)

    def selected_station(self) -> Optional[Station]:
        item = self.list.currentItem()
        return None if item is None else item.data(Qt.UserRole)

    def rename_selected(self) -> None:
        st = self.selected_station()
        if st is None:
            return
        name, ok = QInputDialog.getText(self, "Rename station", "Name:", text=st.name)
        name = name.strip()
        if not ok or not name or name == st.name:
            return
        try:
            self._api.rename_station(st.station_id, name)
        except (ConfigApiError, requests.RequestException) as e:
            QMessageBox.critical(self, "Rename failed", str(e))
            return
        logger.info("station renamed to %r", name, extra={"serial": st.serial_number})
        self.reload()

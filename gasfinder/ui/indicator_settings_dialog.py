from __future__ import annotations

import requests
from PySide6.QtWidgets import (
    QCheckBox,
    QDialog,
    QDialogButtonBox,
    QFormLayout,
    QLineEdit,
    QMessageBox,
    QVBoxLayout,
)

from gasfinder.domain.errors import ConfigApiError
from gasfinder.services.indicator_settings import IndicatorSettingsEditor


class IndicatorSettingsDialog(QDialog):
    """
    Edit the indicator display name and the device's reverse-indicator flag.

    The dialog closes only once both writes succeeded.
    """

    def __init__(self, editor: IndicatorSettingsEditor, parent=None) -> None:
        super().__init__(parent)
        self.setWindowTitle("Indicator settings")
        self._editor = editor

        current = editor.load()
        self.name_edit = QLineEdit(current.display_name)
        self.reverse_check = QCheckBox("Reverse indicator on the device")
        self.reverse_check.setChecked(bool(current.reversed_))

        form = QFormLayout()
        form.addRow("Display name", self.name_edit)
        form.addRow("", self.reverse_check)

        buttons = QDialogButtonBox(QDialogButtonBox.Save | QDialogButtonBox.Cancel)
        buttons.accepted.connect(self.save)
        buttons.rejected.connect(self.reject)

        layout = QVBoxLayout(self)
        layout.addLayout(form)
        layout.addWidget(buttons)

    def save(self) -> None:
        try:
            self._editor.save(self.name_edit.text(), self.reverse_check.isChecked())
        except (ConfigApiError, requests.RequestException) as e:
            QMessageBox.critical(self, "Save failed", f"The indicator settings could not be saved.\n{e}")
            return
        self.accept()

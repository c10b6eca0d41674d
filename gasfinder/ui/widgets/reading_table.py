from __future__ import annotations

from typing import List, Optional, Tuple

from PySide6.QtCore import Qt
from PySide6.QtGui import QBrush, QColor
from PySide6.QtWidgets import QAbstractItemView, QFrame, QLabel, QStackedWidget, QTableWidget, QTableWidgetItem, QVBoxLayout

from gasfinder.ui.theme import COLOR_TEXT_MUTED

Row = Tuple[str, str]  # time, value


class ReadingTable(QFrame):
    """
    Two-column table of readings (time, value), newest first.

    When a placeholder text is set, it replaces the table (used for the
    "threshold not configured" and "no alarms" states).
    """

    def __init__(self, title: str, value_color: Optional[str] = None, parent=None) -> None:
        super().__init__(parent)
        self.setObjectName("Card")
        self._value_color = value_color

        header = QLabel(title)
        header.setStyleSheet("font-size: 14px; font-weight: 700;")

        self.table = QTableWidget(0, 2)
        self.table.setHorizontalHeaderLabels(["Time", "Value"])
        self.table.verticalHeader().setVisible(False)
        self.table.setAlternatingRowColors(True)
        self.table.setEditTriggers(QAbstractItemView.NoEditTriggers)
        self.table.setSelectionBehavior(QAbstractItemView.SelectRows)
        self.table.horizontalHeader().setStretchLastSection(True)

        self._placeholder = QLabel("")
        self._placeholder.setAlignment(Qt.AlignCenter)
        self._placeholder.setStyleSheet(f"color: {COLOR_TEXT_MUTED}; font-size: 14px;")

        self._stack = QStackedWidget()
        self._stack.addWidget(self.table)
        self._stack.addWidget(self._placeholder)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(12, 12, 12, 12)
        layout.setSpacing(10)
        layout.addWidget(header)
        layout.addWidget(self._stack)

    def set_rows(self, rows: List[Row], placeholder: Optional[str] = None) -> None:
        if placeholder:
            self._placeholder.setText(placeholder)
            self._stack.setCurrentWidget(self._placeholder)
            self.table.setRowCount(0)
            return

        self._stack.setCurrentWidget(self.table)
        self.table.setRowCount(len(rows))
        for i, (ts, value) in enumerate(rows):
            self._item(i, 0, ts)
            self._item(i, 1, value, colored=True)

    def _item(self, r: int, c: int, text: str, colored: bool = False) -> None:
        it = QTableWidgetItem(text)
        it.setFlags(it.flags() & ~Qt.ItemIsEditable)
        it.setTextAlignment(Qt.AlignCenter)
        if colored and self._value_color:
            it.setForeground(QBrush(QColor(self._value_color)))
        self.table.setItem(r, c, it)

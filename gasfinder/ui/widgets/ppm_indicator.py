from __future__ import annotations

from PySide6.QtCore import Qt
from PySide6.QtWidgets import QFrame, QHBoxLayout, QLabel, QVBoxLayout

from gasfinder.ui.theme import COLOR_IDLE, COLOR_TEXT_MUTED

_DIAMETER = 180


class PpmIndicator(QFrame):
    """
    Big round indicator: latest PPM value on a state-colored disc.
    """

    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self.setObjectName("Card")

        self._caption = QLabel("")
        self._caption.setAlignment(Qt.AlignCenter)
        self._caption.setStyleSheet("font-size: 15px; font-weight: 700;")
        self._disc = QLabel("Offline")
        self._disc.setAlignment(Qt.AlignCenter)
        self._disc.setFixedSize(_DIAMETER, _DIAMETER)
        self._threshold = QLabel("")
        self._threshold.setAlignment(Qt.AlignCenter)
        self._threshold.setStyleSheet(f"color: {COLOR_TEXT_MUTED}; font-weight: 600;")

        layout = QVBoxLayout(self)
        layout.setContentsMargins(12, 12, 12, 12)
        layout.setSpacing(8)
        layout.addWidget(self._caption)
        layout.addWidget(self._disc, 0, Qt.AlignHCenter)
        layout.addWidget(self._threshold)

        self.set_state(COLOR_IDLE, "Offline")

    def set_state(self, color: str, text: str) -> None:
        self._disc.setText(text)
        self._disc.setStyleSheet(
            f"background: {color}; color: #ffffff; font-size: 26px; font-weight: 700;"
            f" border-radius: {_DIAMETER // 2}px;"
        )

    def set_threshold_text(self, text: str) -> None:
        self._threshold.setText(text)

    def set_caption(self, text: str) -> None:
        self._caption.setText(text)


class ConnectivityBadge(QFrame):
    """
    Small status widget: colored dot + label.
    """

    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self.setObjectName("Card")

        self._dot = QLabel("●")
        self._text = QLabel("")
        self._text.setStyleSheet(f"color: {COLOR_TEXT_MUTED}; font-weight: 600;")

        layout = QHBoxLayout(self)
        layout.setContentsMargins(12, 10, 12, 10)
        layout.addWidget(self._dot, 0, Qt.AlignVCenter)
        layout.addWidget(self._text, 0, Qt.AlignVCenter)
        layout.addStretch(1)

        self.set_status("Offline", COLOR_IDLE)

    def set_status(self, text: str, color: str) -> None:
        self._dot.setStyleSheet(f"color: {color}; font-size: 16px;")
        self._text.setText(text)

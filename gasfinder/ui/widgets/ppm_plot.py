from __future__ import annotations

from typing import List, Optional

import pyqtgraph as pg
from PySide6.QtCore import Qt
from PySide6.QtWidgets import QFrame, QLabel, QVBoxLayout

from gasfinder.ui.theme import COLOR_CRIT, COLOR_OK


class PpmPlot(QFrame):
    """
    Line graph of the most recent PPM values with the threshold as a
    horizontal line.
    """

    def __init__(self, title: str = "PPM (last 80 readings)", parent=None) -> None:
        super().__init__(parent)
        self.setObjectName("Card")

        header = QLabel(title)
        header.setStyleSheet("font-size: 14px; font-weight: 700;")

        pg.setConfigOptions(antialias=True)
        self.plot = pg.PlotWidget(axisItems={"bottom": pg.DateAxisItem()})
        self.plot.setBackground(None)
        self.plot.showGrid(x=True, y=True, alpha=0.2)
        self.plot.setLabel("left", "PPM")
        self.curve = self.plot.plot([], [], pen=pg.mkPen(COLOR_OK, width=2))

        self._threshold_line = pg.InfiniteLine(angle=0, pen=pg.mkPen(COLOR_CRIT, style=Qt.DashLine))
        self._threshold_line.setVisible(False)
        self.plot.addItem(self._threshold_line)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(12, 12, 12, 12)
        layout.setSpacing(10)
        layout.addWidget(header)
        layout.addWidget(self.plot)

    def set_series(self, xs: List[float], ys: List[float]) -> None:
        """
        Redraw the curve (call periodically from QTimer).
        """
        self.curve.setData(xs, ys)

    def set_threshold(self, threshold: Optional[float]) -> None:
        if threshold is None:
            self._threshold_line.setVisible(False)
            return
        self._threshold_line.setValue(threshold)
        self._threshold_line.setVisible(True)

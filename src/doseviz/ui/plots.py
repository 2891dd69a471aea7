# src/doseviz/ui/plots.py
from PySide6.QtWidgets import QWidget, QVBoxLayout, QLabel
from PySide6.QtCore import Qt
import pyqtgraph as pg

from doseengine.types import TimeSeries
from doseengine.helpers import time_of_day_bands

EMPTY_MESSAGE = "Add a dose to see the simulation."


class PlotWidget(QWidget):
    def __init__(self, parent=None, night=(22.0, 7.0)):
        super().__init__(parent)
        layout = QVBoxLayout(self)
        self.night = night

        # Main plot area; x values are epoch seconds for the date axis
        self.plot_widget = pg.PlotWidget(axisItems={"bottom": pg.DateAxisItem()})
        self.plot_widget.setTitle("Simulated Plasma Concentration")
        self.plot_widget.setLabel("left", "Relative concentration (proportional to mg)")
        self.plot_widget.setLabel("bottom", "Time")
        self.plot_widget.showGrid(x=True, y=True, alpha=0.3)
        layout.addWidget(self.plot_widget)

        self.empty_label = QLabel(EMPTY_MESSAGE)
        self.empty_label.setAlignment(Qt.AlignCenter)
        layout.addWidget(self.empty_label)

        self.curve = None
        self.show_series(TimeSeries.empty())

    def show_series(self, series: TimeSeries):
        self.plot_widget.clear()
        self.curve = None
        empty = series.is_empty
        self.plot_widget.setVisible(not empty)
        self.empty_label.setVisible(empty)
        if empty:
            return

        # Night bands under the curve
        start_ms, end_ms = int(series.times_ms[0]), int(series.times_ms[-1])
        for s, e in time_of_day_bands(start_ms, end_ms, *self.night):
            band = pg.LinearRegionItem(values=(s / 1000, e / 1000), movable=False,
                                       brush=pg.mkBrush(60, 60, 120, 40), pen=pg.mkPen(None))
            band.setZValue(-10)
            self.plot_widget.addItem(band)

        self.curve = self.plot_widget.plot(
            series.times_ms / 1000, series.values,
            pen=pg.mkPen((75, 192, 192), width=2),
        )

    def clear(self):
        self.show_series(TimeSeries.empty())

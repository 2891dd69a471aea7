# src/doseviz/ui/main_window.py
import logging

from PySide6.QtWidgets import QMainWindow, QWidget, QHBoxLayout, QVBoxLayout, QStatusBar

from .controls import ControlsPanel
from .dose_list import DoseListPanel
from .plots import PlotWidget
from doseengine.types import Regimen
from doseengine.dosing import combine_regimens, remove_dose
from doseengine.simulate import run
from doseengine.metrics import cmax, tmax, auc_trapz, peak_to_trough_ratio, fluctuation_index
from doseengine.helpers import from_epoch_ms

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    def __init__(self):
        super().__init__()
        self.setWindowTitle("Plasma Concentration Simulator")
        self.resize(1100, 680)

        self.regimen = Regimen()

        central = QWidget(self); self.setCentralWidget(central)
        root = QHBoxLayout(central)

        side = QVBoxLayout()
        self.controls = ControlsPanel()
        self.dose_list = DoseListPanel()
        side.addWidget(self.controls)
        side.addWidget(self.dose_list)
        root.addLayout(side, 0)

        self.plot = PlotWidget()
        root.addWidget(self.plot, 1)

        self.status = QStatusBar(); self.setStatusBar(self.status)

        # wire events; every change recomputes the whole series
        self.controls.settingsChanged.connect(lambda _: self.recompute())
        self.controls.dosesAdded.connect(self.on_doses_added)
        self.dose_list.removeRequested.connect(self.on_remove)
        self.dose_list.removeAllRequested.connect(lambda: self.set_regimen(Regimen()))

        self.set_regimen(self.regimen)

    def on_doses_added(self, added: Regimen):
        self.set_regimen(combine_regimens(self.regimen, added))

    def on_remove(self, time_ms: int):
        self.set_regimen(remove_dose(self.regimen, time_ms))

    def set_regimen(self, regimen: Regimen):
        self.regimen = regimen
        self.dose_list.show_regimen(regimen)
        self.recompute()

    def recompute(self):
        try:
            series = run(self.regimen, self.controls.settings())
            self.plot.show_series(series)
            if series.is_empty:
                self.status.clearMessage()
                return
            msg = (f"Cmax {cmax(series):.2f} at {from_epoch_ms(tmax(series)):%a %H:%M} "
                   f"| AUC {auc_trapz(series):.1f} "
                   f"| last 24 h: PTR {peak_to_trough_ratio(series, interval_h=24):.2f} "
                   f"FI {fluctuation_index(series, interval_h=24):.2f}")
            self.status.showMessage(msg)
        except Exception as e:
            logger.exception("simulation failed")
            self.plot.clear()
            self.status.showMessage(f"Error: {e}", 8000)

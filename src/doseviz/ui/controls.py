# src/doseviz/ui/controls.py
from datetime import datetime

from PySide6.QtCore import Signal, QDate, QTime
from PySide6.QtWidgets import (QFrame, QVBoxLayout, QHBoxLayout, QLabel, QPushButton,
                               QDoubleSpinBox, QSpinBox, QDateEdit, QTimeEdit)

from doseengine.types import Regimen, SimulationSettings
from doseengine.dosing import single_dose, daily_doses


class ControlsPanel(QFrame):
    settingsChanged = Signal(SimulationSettings)
    dosesAdded = Signal(Regimen)

    def __init__(self, settings: SimulationSettings = SimulationSettings()):
        super().__init__()
        self.setFrameShape(QFrame.StyledPanel)
        layout = QVBoxLayout(self)

        # --- Configuration ---
        layout.addWidget(QLabel("Configuration"))
        self.half_life = QDoubleSpinBox(); self.half_life.setDecimals(1)
        self.half_life.setRange(0.0, 1000.0); self.half_life.setValue(settings.half_life_h)
        self.half_life.setSuffix(" h")
        layout.addWidget(QLabel("Elimination half-life (h)"))
        layout.addWidget(self.half_life)

        self.tmax = QDoubleSpinBox(); self.tmax.setDecimals(1)
        self.tmax.setRange(0.0, 1000.0); self.tmax.setValue(settings.target_tmax_h)
        self.tmax.setSuffix(" h")
        layout.addWidget(QLabel("Time to peak (h)"))
        layout.addWidget(self.tmax)

        self.days = QSpinBox(); self.days.setRange(3, 10); self.days.setValue(int(settings.simulation_days))
        self.days.setSuffix(" days")
        layout.addWidget(QLabel("Simulation days"))
        layout.addWidget(self.days)

        self._time_step_h = settings.time_step_h
        for box in (self.half_life, self.tmax, self.days):
            box.valueChanged.connect(self._emit_settings)

        # --- Add doses ---
        layout.addWidget(QLabel("Add Doses"))
        self.dose = QDoubleSpinBox(); self.dose.setRange(0.5, 1e4); self.dose.setValue(30)
        self.dose.setSuffix(" mg")
        layout.addWidget(QLabel("Dosage (mg)"))
        layout.addWidget(self.dose)

        self.date = QDateEdit(QDate.currentDate()); self.date.setCalendarPopup(True)
        layout.addWidget(QLabel("Start date"))
        layout.addWidget(self.date)

        self.time = QTimeEdit(QTime(8, 0)); self.time.setDisplayFormat("HH:mm")
        layout.addWidget(QLabel("Time"))
        layout.addWidget(self.time)

        buttons = QHBoxLayout()
        add_one = QPushButton("Add Single Dose"); buttons.addWidget(add_one)
        self.add_daily = QPushButton(); buttons.addWidget(self.add_daily)
        layout.addLayout(buttons)
        layout.addStretch(1)

        add_one.clicked.connect(self._add_single)
        self.add_daily.clicked.connect(self._add_daily)
        self.days.valueChanged.connect(self._update_daily_label)
        self._update_daily_label()

    def settings(self) -> SimulationSettings:
        return SimulationSettings(
            half_life_h=float(self.half_life.value()),
            simulation_days=int(self.days.value()),
            time_step_h=self._time_step_h,
            target_tmax_h=float(self.tmax.value()),
        )

    def _first_dose_time(self) -> datetime:
        d, t = self.date.date(), self.time.time()
        return datetime(d.year(), d.month(), d.day(), t.hour(), t.minute())

    def _update_daily_label(self):
        self.add_daily.setText(f"Add Daily for {self.days.value()} Days")

    def _emit_settings(self):
        self.settingsChanged.emit(self.settings())

    def _add_single(self):
        self.dosesAdded.emit(single_dose(float(self.dose.value()), self._first_dose_time()))

    def _add_daily(self):
        self.dosesAdded.emit(daily_doses(float(self.dose.value()), self._first_dose_time(), int(self.days.value())))

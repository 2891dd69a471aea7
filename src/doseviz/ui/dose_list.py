# src/doseviz/ui/dose_list.py
from PySide6.QtCore import Signal, Qt
from PySide6.QtWidgets import QFrame, QVBoxLayout, QHBoxLayout, QLabel, QPushButton, QListWidget, QListWidgetItem

from doseengine.types import Regimen
from doseengine.helpers import from_epoch_ms


class DoseListPanel(QFrame):
    """Scheduled doses, with per-dose and remove-all buttons."""
    removeRequested = Signal(int)      # time_ms of the dose to drop
    removeAllRequested = Signal()

    def __init__(self):
        super().__init__()
        self.setFrameShape(QFrame.StyledPanel)
        layout = QVBoxLayout(self)

        header = QHBoxLayout()
        header.addWidget(QLabel("Scheduled Doses"))
        remove_all = QPushButton("Remove All"); header.addWidget(remove_all)
        layout.addLayout(header)

        self.list = QListWidget()
        layout.addWidget(self.list)
        remove = QPushButton("Remove"); layout.addWidget(remove)

        remove.clicked.connect(self._remove_selected)
        remove_all.clicked.connect(self.removeAllRequested.emit)

    def show_regimen(self, regimen: Regimen):
        self.list.clear()
        for d in regimen.doses:
            item = QListWidgetItem(f"{d.amount_mg:g}mg on {from_epoch_ms(d.time_ms):%Y-%m-%d %H:%M}")
            item.setData(Qt.UserRole, d.time_ms)
            self.list.addItem(item)
        self.setVisible(len(regimen) > 0)

    def _remove_selected(self):
        item = self.list.currentItem()
        if item is not None:
            self.removeRequested.emit(int(item.data(Qt.UserRole)))

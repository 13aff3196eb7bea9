# vid_data_train_crop/widgets/ranges_panel.py
from __future__ import annotations

from typing import Optional

from PyQt5.QtCore import Qt, pyqtSignal
from PyQt5.QtWidgets import (
    QGroupBox, QHBoxLayout, QListWidget, QListWidgetItem, QPushButton, QVBoxLayout, QWidget,
)

from ..domain import AnnotationList
from ..timeutils import range_label


class RangesPanel(QGroupBox):
    """
    Right panel: the ranges (or crops, for stills) of the loaded file.

    Emits:
      - range_selected(int)
      - add_requested()
      - remove_requested(int)
    """
    range_selected = pyqtSignal(int)
    add_requested = pyqtSignal()
    remove_requested = pyqtSignal(int)

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__("Active Ranges", parent)
        self._build_ui()

    # ---------------- UI ----------------

    def _build_ui(self):
        layout = QVBoxLayout()
        layout.setContentsMargins(6, 6, 6, 6)
        layout.setSpacing(6)
        self.setLayout(layout)

        self.btn_add = QPushButton("Add Range")
        self.btn_add.setFocusPolicy(Qt.NoFocus)
        self.btn_add.clicked.connect(self.add_requested.emit)
        layout.addWidget(self.btn_add)

        self.list = QListWidget()
        self.list.setFocusPolicy(Qt.NoFocus)
        self.list.currentRowChanged.connect(self._on_row_changed)
        layout.addWidget(self.list, stretch=1)

        row = QHBoxLayout()
        self.btn_remove = QPushButton("Remove Selected")
        self.btn_remove.setFocusPolicy(Qt.NoFocus)
        self.btn_remove.clicked.connect(self._on_remove)
        row.addStretch()
        row.addWidget(self.btn_remove)
        layout.addLayout(row)

        for b in (self.btn_add, self.btn_remove):
            b.setCursor(Qt.PointingHandCursor)

    # ---------------- Public API ----------------

    def refresh(self, annotations: AnnotationList, native_fps: float, is_image: bool) -> None:
        self.setTitle("Active Crops" if is_image else "Active Ranges")
        self.btn_add.setText("Add Crop" if is_image else "Add Range")

        self.list.blockSignals(True)
        try:
            self.list.clear()
            for i, rng in enumerate(annotations):
                item = QListWidgetItem(range_label(i, rng, native_fps, is_image))
                item.setData(Qt.UserRole, i)
                self.list.addItem(item)
            self.list.setCurrentRow(annotations.current_index)
        finally:
            self.list.blockSignals(False)

    # ---------------- Internals ----------------

    def _on_row_changed(self, row: int):
        if row >= 0:
            self.range_selected.emit(row)

    def _on_remove(self):
        row = self.list.currentRow()
        if row >= 0:
            self.remove_requested.emit(row)

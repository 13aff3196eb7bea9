# vid_data_train_crop/main_window.py
from __future__ import annotations

import logging
import os
from typing import Optional

from PyQt5.QtCore import Qt, QElapsedTimer, QTimer
from PyQt5.QtWidgets import (
    QApplication,
    QFileDialog,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QMainWindow,
    QPlainTextEdit,
    QPushButton,
    QSplitter,
    QTextEdit,
    QVBoxLayout,
    QWidget,
)

from . import media_source
from .controller import InteractionController, Key
from .export import ExportOrchestrator
from .session import Session, SessionLoader
from .timeutils import ms_to_seconds, seconds_to_ms, target_fps_readout
from .widgets.frame_view import FrameView
from .widgets.range_slider import RangeOverlaySlider
from .widgets.ranges_panel import RangesPanel


logger = logging.getLogger(__name__)

WINDOW_TITLE = "VidDataTrainCrop"
PLAYBACK_TICK_MS = 16
EXPORT_POLL_MS = 100

_KEYMAP = {
    Qt.Key_Space: Key.SPACE,
    Qt.Key_I: Key.I,
    Qt.Key_O: Key.O,
    Qt.Key_R: Key.R,
    Qt.Key_Left: Key.LEFT,
    Qt.Key_Right: Key.RIGHT,
}


class MainWindow(QMainWindow):
    def __init__(self, session: Optional[Session] = None, exporter: Optional[ExportOrchestrator] = None):
        super().__init__()
        self.setWindowTitle(WINDOW_TITLE)
        self.resize(1600, 950)

        self.session: Session = session or Session()
        self.loader = SessionLoader(self.session)
        self.controller = InteractionController(
            self.session, on_changed=self._refresh_view, on_ranges_changed=self._refresh_ranges
        )
        self.exporter = exporter or ExportOrchestrator()

        # Slider update guard
        self._ignore_slider_updates = False

        # Playback clock: one tick per UI frame while playing
        self._elapsed = QElapsedTimer()
        self._play_timer = QTimer(self)
        self._play_timer.setInterval(PLAYBACK_TICK_MS)
        self._play_timer.timeout.connect(self._on_play_tick)

        # Poll the export gate / error cell
        self._export_timer = QTimer(self)
        self._export_timer.setInterval(EXPORT_POLL_MS)
        self._export_timer.timeout.connect(self._update_export_state)
        self._export_timer.start()

        self._build_ui()
        self._refresh_all()
        self._update_export_state()

    # ---------------- UI ----------------

    def _build_ui(self):
        central = QWidget()
        self.setCentralWidget(central)

        main_layout = QVBoxLayout(central)
        main_layout.setContentsMargins(6, 6, 6, 6)
        main_layout.setSpacing(6)

        # ===== Top: input / output folders =====
        top = QHBoxLayout()
        top.setSpacing(10)
        main_layout.addLayout(top)

        self.btn_input = QPushButton("Input Folder")
        self.btn_input.clicked.connect(self._choose_input_dir)
        self.input_label = QLabel("In: None")
        self.input_label.setTextInteractionFlags(Qt.TextSelectableByMouse)

        self.btn_output = QPushButton("Output Folder")
        self.btn_output.clicked.connect(self._choose_output_dir)
        self.output_label = QLabel("Out: None")
        self.output_label.setTextInteractionFlags(Qt.TextSelectableByMouse)

        self.status_label = QLabel("")
        self.status_label.setStyleSheet("color: #C00000;")

        top.addWidget(self.btn_input)
        top.addWidget(self.input_label, stretch=1)
        top.addWidget(self.btn_output)
        top.addWidget(self.output_label, stretch=1)
        top.addWidget(self.status_label)

        # ===== Middle: files | frame + controls | ranges =====
        split = QSplitter(Qt.Horizontal)
        main_layout.addWidget(split, stretch=1)

        files_box = QGroupBox("Files")
        files_lay = QVBoxLayout(files_box)
        files_lay.setContentsMargins(6, 6, 6, 6)
        self.file_list = QListWidget()
        self.file_list.setMinimumWidth(300)
        self.file_list.currentRowChanged.connect(self._on_file_row_changed)
        files_lay.addWidget(self.file_list)

        center = QWidget()
        center_lay = QVBoxLayout(center)
        center_lay.setContentsMargins(0, 0, 0, 0)
        center_lay.setSpacing(6)

        self.frame_view = FrameView()
        self.frame_view.drag_started.connect(self.controller.drag_started)
        self.frame_view.dragged.connect(self.controller.dragged)
        self.frame_view.drag_finished.connect(self.controller.drag_finished)
        center_lay.addWidget(self.frame_view, stretch=1)

        # Timeline widgets (hidden for stills)
        self.timeline_box = QWidget()
        tl_lay = QVBoxLayout(self.timeline_box)
        tl_lay.setContentsMargins(0, 0, 0, 0)
        tl_lay.setSpacing(4)

        frame_row = QHBoxLayout()
        frame_row.addWidget(QLabel("Native Frame:"))
        self.frame_edit = QLineEdit("0")
        self.frame_edit.setFixedWidth(90)
        self.frame_edit.returnPressed.connect(self._on_frame_entered)
        frame_row.addWidget(self.frame_edit)
        frame_row.addStretch()
        self.target_label = QLabel(target_fps_readout(0.0))
        frame_row.addWidget(self.target_label)
        tl_lay.addLayout(frame_row)

        slider_row = QHBoxLayout()
        self.slider = RangeOverlaySlider(Qt.Horizontal)
        self.slider.setRange(0, 0)
        self.slider.valueChanged.connect(self._on_slider_value)
        self.time_label = QLabel("0.000s")
        self.time_label.setMinimumWidth(70)
        slider_row.addWidget(self.slider, stretch=1)
        slider_row.addWidget(self.time_label)
        tl_lay.addLayout(slider_row)

        center_lay.addWidget(self.timeline_box)

        # Playback + range buttons
        controls = QHBoxLayout()
        controls.setSpacing(6)
        self.btn_prev = QPushButton("<< Frame")
        self.btn_play = QPushButton("Play")
        self.btn_next = QPushButton("Frame >>")
        self.btn_set_start = QPushButton("Set Start (I)")
        self.btn_set_end = QPushButton("Set End (O)")
        self.btn_clear_crop = QPushButton("Clear Crop")
        self.btn_play_range = QPushButton("Play Range (R)")

        self.btn_prev.clicked.connect(self.controller.prev_frame)
        self.btn_play.clicked.connect(self._toggle_play)
        self.btn_next.clicked.connect(self.controller.next_frame)
        self.btn_set_start.clicked.connect(self.controller.set_start)
        self.btn_set_end.clicked.connect(self.controller.set_end)
        self.btn_clear_crop.clicked.connect(self.controller.clear_crop)
        self.btn_play_range.clicked.connect(self._play_range)

        self._video_only_buttons = (
            self.btn_prev, self.btn_play, self.btn_next,
            self.btn_set_start, self.btn_set_end, self.btn_play_range,
        )
        for b in (
            self.btn_prev, self.btn_play, self.btn_next, self.btn_set_start,
            self.btn_set_end, self.btn_clear_crop, self.btn_play_range,
        ):
            controls.addWidget(b)
        controls.addStretch()
        center_lay.addLayout(controls)

        # Note for current range
        self.note_label = QLabel("Note for Range 0:")
        self.note_edit = QPlainTextEdit()
        self.note_edit.setFixedHeight(110)
        self.note_edit.textChanged.connect(self._on_note_changed)
        center_lay.addWidget(self.note_label)
        center_lay.addWidget(self.note_edit)

        # Export
        self.btn_export = QPushButton("RUN EXPORT ALL")
        self.btn_export.setMinimumHeight(40)
        self.btn_export.clicked.connect(self._run_export)
        self.export_progress_label = QLabel("Processing ranges with FFmpeg...")
        self.export_error_label = QLabel("")
        self.export_error_label.setWordWrap(True)
        self.export_error_label.setTextInteractionFlags(Qt.TextSelectableByMouse)
        self.export_error_label.setStyleSheet("color: #C00000;")
        center_lay.addWidget(self.btn_export)
        center_lay.addWidget(self.export_progress_label)
        center_lay.addWidget(self.export_error_label)

        self.ranges_panel = RangesPanel()
        self.ranges_panel.setMinimumWidth(240)
        self.ranges_panel.add_requested.connect(self.controller.add_range)
        self.ranges_panel.remove_requested.connect(self.controller.remove_range)
        self.ranges_panel.range_selected.connect(self.controller.select_range)

        split.addWidget(files_box)
        split.addWidget(center)
        split.addWidget(self.ranges_panel)
        split.setStretchFactor(0, 2)
        split.setStretchFactor(1, 10)
        split.setStretchFactor(2, 2)

        # buttons must not take Space away from the frame view
        for b in (self.btn_input, self.btn_output, self.btn_export, self.btn_clear_crop) + self._video_only_buttons:
            b.setFocusPolicy(Qt.NoFocus)
            b.setCursor(Qt.PointingHandCursor)

    # ---------------- Folders / files ----------------

    def _choose_input_dir(self):
        d = QFileDialog.getExistingDirectory(self, "Select Input Folder")
        if not d:
            return
        files = self.loader.choose_input_dir(d)
        self.input_label.setText(f"In: {d}")
        self.status_label.setText(self.session.last_dir_error or "")

        self.file_list.blockSignals(True)
        try:
            self.file_list.clear()
            for p in files:
                self.file_list.addItem(os.path.basename(p))
        finally:
            self.file_list.blockSignals(False)

    def _choose_output_dir(self):
        d = QFileDialog.getExistingDirectory(self, "Select Output Folder")
        self.loader.choose_output_dir(d or None)
        self.output_label.setText(f"Out: {self.session.output_dir or 'None'}")
        self._update_export_state()

    def _on_file_row_changed(self, row: int):
        if row < 0:
            return
        self._play_timer.stop()
        if not self.loader.select_file(row):
            # keep the list pointing at what's actually loaded
            self.file_list.blockSignals(True)
            try:
                prev = self.session.selected_idx
                self.file_list.setCurrentRow(prev if prev is not None else -1)
            finally:
                self.file_list.blockSignals(False)
            return

        self.controller.refresh_frame()
        self._load_note_editor()
        self._refresh_all()
        self.frame_view.setFocus(Qt.OtherFocusReason)

    # ---------------- Playback ----------------

    def _toggle_play(self):
        self.controller.pause_play()
        self._sync_play_timer()

    def _play_range(self):
        self.controller.play_range()
        self._sync_play_timer()

    def _sync_play_timer(self):
        if self.session.playback.is_playing:
            if not self._play_timer.isActive():
                self._elapsed.start()
                self._play_timer.start()
        else:
            self._play_timer.stop()

    def _on_play_tick(self):
        elapsed = self._elapsed.restart() / 1000.0 if self._elapsed.isValid() else 0.0
        if not self.controller.tick(elapsed):
            self._play_timer.stop()
            self._refresh_view()

    def _on_slider_value(self, value: int):
        if self._ignore_slider_updates:
            return
        self.controller.slider_moved(ms_to_seconds(value))

    def _on_frame_entered(self):
        self.controller.frame_text_committed(self.frame_edit.text())
        # Enter releases focus so the field goes back to mirroring the clock
        self.frame_edit.clearFocus()
        self.frame_view.setFocus(Qt.OtherFocusReason)
        self._refresh_view()

    def keyPressEvent(self, event):
        key = _KEYMAP.get(event.key())
        # holding an arrow keeps stepping; every other shortcut fires once per press
        if key is None or (event.isAutoRepeat() and key not in (Key.LEFT, Key.RIGHT)):
            return super().keyPressEvent(event)

        focus = QApplication.focusWidget()
        typing = isinstance(focus, (QLineEdit, QPlainTextEdit, QTextEdit))
        if self.controller.handle_key(key, text_input_active=typing):
            self._sync_play_timer()
            event.accept()
            return
        super().keyPressEvent(event)

    # ---------------- Notes ----------------

    def _load_note_editor(self):
        self.note_edit.blockSignals(True)
        try:
            self.note_edit.setPlainText(self.session.annotations.current.note)
        finally:
            self.note_edit.blockSignals(False)

    def _on_note_changed(self):
        self.controller.set_note(self.note_edit.toPlainText())

    # ---------------- Export ----------------

    def _run_export(self):
        job = self.session.export_job()
        if job is None:
            return
        self.exporter.start(job)
        self._update_export_state()

    def _update_export_state(self):
        exporting = self.exporter.exporting
        can_export = (self.session.selected_path() is not None) and bool(self.session.output_dir)

        self.btn_export.setEnabled(can_export and not exporting)
        self.btn_export.setText("Exporting..." if exporting else "RUN EXPORT ALL")
        self.export_progress_label.setVisible(exporting)

        err = self.exporter.last_error
        self.export_error_label.setText(err or "")
        self.export_error_label.setVisible(bool(err))

    # ---------------- Refresh ----------------

    def _refresh_all(self):
        self._refresh_media_layout()
        self._refresh_ranges()
        self._refresh_view()

    def _refresh_media_layout(self):
        """Per file: which controls exist and the slider's span."""
        s = self.session
        is_image = s.is_image
        has_media = s.has_media()

        self.timeline_box.setVisible(not is_image)
        for b in self._video_only_buttons:
            b.setVisible(not is_image)
            b.setEnabled(has_media)
        self.btn_clear_crop.setEnabled(has_media)

        self._ignore_slider_updates = True
        try:
            self.slider.setRange(0, seconds_to_ms(s.playback.duration))
        finally:
            self._ignore_slider_updates = False

    def _refresh_ranges(self):
        """After an annotation edit: overlays, the note and the ranges list."""
        s = self.session
        rng = s.annotations.current
        is_image = s.is_image

        self.frame_view.set_crop(rng.crop if s.has_media() else None)
        self.slider.set_overlay(seconds_to_ms(rng.start_time), seconds_to_ms(rng.end_time))

        idx = s.annotations.current_index
        self.note_label.setText(f"Note for Crop {idx}:" if is_image else f"Note for Range {idx}:")
        if self.note_edit.toPlainText() != rng.note:
            self._load_note_editor()

        self.ranges_panel.refresh(s.annotations, s.playback.native_fps, is_image)

    def _refresh_view(self):
        """Per clock change (every playback tick): frame, slider knob and readouts."""
        s = self.session
        pb = s.playback

        self.frame_view.set_frame(s.frame_texture, s.intrinsic_size())
        self.btn_play.setText("Pause" if pb.is_playing else "Play")

        self._ignore_slider_updates = True
        try:
            self.slider.setValue(seconds_to_ms(pb.current_time))
        finally:
            self._ignore_slider_updates = False

        self.time_label.setText(f"{pb.current_time:.3f}s")
        self.target_label.setText(target_fps_readout(pb.current_time))

        if not self.frame_edit.hasFocus():
            self.frame_edit.setText(self.controller.frame_text())

    # ---------------- Shutdown ----------------

    def closeEvent(self, event):
        self._play_timer.stop()
        self._export_timer.stop()
        media = self.session.media
        self.session.media = None
        media_source.release(media)
        super().closeEvent(event)

# vid_data_train_crop/widgets/range_slider.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from PyQt5.QtCore import Qt, QPoint, QRect
from PyQt5.QtGui import QColor, QPainter, QPen
from PyQt5.QtWidgets import QSlider, QStyle, QStyleOptionSlider


@dataclass
class OverlayRange:
    """
    The current range drawn over the slider groove, in slider value units (ms).
    """
    start_value: int
    end_value: int
    color_hex: str = "#FFFFFF"
    alpha: int = 40


class RangeOverlaySlider(QSlider):
    """
    Timeline slider (milliseconds) that shows the current range as a
    translucent band with a green start marker and a red end marker.

    Markers are drawn only where they carry information: start when it is
    past 0, end when it is before the end of the media.
    """

    START_COLOR = "#00C800"
    END_COLOR = "#FF0000"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._overlay: Optional[OverlayRange] = None
        # keys belong to the frame view
        self.setFocusPolicy(Qt.NoFocus)

    # -------------
    # Overlay API
    # -------------

    def set_overlay(self, start_value: int, end_value: int) -> None:
        self._overlay = OverlayRange(start_value=int(start_value), end_value=int(end_value))
        self.update()

    def clear_overlay(self) -> None:
        self._overlay = None
        self.update()

    def wheelEvent(self, event):
        # no accidental scrubbing
        event.ignore()

    # -------------
    # Painting
    # -------------

    def _groove_rect(self) -> QRect:
        opt = QStyleOptionSlider()
        self.initStyleOption(opt)
        return self.style().subControlRect(QStyle.CC_Slider, opt, QStyle.SC_SliderGroove, self)

    def _value_to_x(self, value: int, groove: QRect) -> int:
        if self.maximum() <= self.minimum():
            return groove.x()
        v = max(self.minimum(), min(int(value), self.maximum()))
        span = max(1, groove.width())
        return groove.x() + QStyle.sliderPositionFromValue(self.minimum(), self.maximum(), v, span)

    def paintEvent(self, event):
        super().paintEvent(event)

        ov = self._overlay
        if ov is None or self.maximum() <= self.minimum():
            return

        groove = self._groove_rect()
        if groove.isNull():
            return

        s = min(ov.start_value, ov.end_value)
        e = max(ov.start_value, ov.end_value)
        x1 = self._value_to_x(s, groove)
        x2 = self._value_to_x(e, groove)

        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing, True)

        band = QColor(ov.color_hex)
        band.setAlpha(int(max(0, min(ov.alpha, 255))))
        cy = groove.center().y()
        painter.fillRect(QRect(x1, cy - 2, max(0, x2 - x1), 4), band)

        top = self.rect().top()
        bottom = self.rect().bottom()
        if s > self.minimum():
            pen = QPen(QColor(self.START_COLOR))
            pen.setWidth(2)
            painter.setPen(pen)
            painter.drawLine(QPoint(x1, top), QPoint(x1, bottom))
        if e < self.maximum():
            pen = QPen(QColor(self.END_COLOR))
            pen.setWidth(2)
            painter.setPen(pen)
            painter.drawLine(QPoint(x2, top), QPoint(x2, bottom))

        painter.end()

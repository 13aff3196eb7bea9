# vid_data_train_crop/widgets/frame_view.py
from __future__ import annotations

from typing import Optional, Tuple

from PyQt5.QtCore import Qt, QRectF, QSize, pyqtSignal
from PyQt5.QtGui import QColor, QImage, QPainter, QPen
from PyQt5.QtWidgets import QSizePolicy, QWidget

from ..domain import NormalizedRect
from ..geometry import DisplayRect, fit_display_rect


class FrameView(QWidget):
    """
    Paints the current frame letterboxed into the widget and the current
    range's crop on top of it. Left-button drags on the picture are reported
    in widget pixels together with the display rect they were made against.

    Emits:
      - drag_started(DisplayRect, (x, y))
      - dragged(DisplayRect, (x, y))
      - drag_finished()
    """
    drag_started = pyqtSignal(object, object)
    dragged = pyqtSignal(object, object)
    drag_finished = pyqtSignal()

    CROP_COLOR = "#FF0000"

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)
        self.setFocusPolicy(Qt.StrongFocus)
        self.setMouseTracking(False)

        self._texture: Optional[QImage] = None
        self._media_size: Optional[Tuple[int, int]] = None
        self._crop: Optional[NormalizedRect] = None
        self._dragging = False

    # ---------------- Public API ----------------

    def set_frame(self, texture: Optional[QImage], media_size: Optional[Tuple[int, int]]) -> None:
        self._texture = texture
        self._media_size = media_size
        self.update()

    def set_crop(self, crop: Optional[NormalizedRect]) -> None:
        self._crop = crop
        self.update()

    def display_rect(self) -> DisplayRect:
        return fit_display_rect(self.width(), self.height(), self._media_size)

    def sizeHint(self) -> QSize:
        return QSize(960, 540)

    def minimumSizeHint(self) -> QSize:
        return QSize(160, 90)

    # ---------------- Painting ----------------

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.fillRect(self.rect(), QColor("black"))

        rect = self.display_rect()
        target = QRectF(rect.x, rect.y, rect.width, rect.height)

        if self._texture is not None and not self._texture.isNull():
            painter.setRenderHint(QPainter.SmoothPixmapTransform, True)
            painter.drawImage(target, self._texture)

        if self._crop is not None and rect.width > 0 and rect.height > 0:
            x, y, w, h = rect.rect_from_norm(self._crop)
            pen = QPen(QColor(self.CROP_COLOR))
            pen.setWidthF(2.0)
            painter.setPen(pen)
            painter.setBrush(Qt.NoBrush)
            # stroke just outside the crop so the selected pixels stay visible
            painter.drawRect(QRectF(x - 1.0, y - 1.0, w + 2.0, h + 2.0))

        painter.end()

    # ---------------- Pointer ----------------

    def mousePressEvent(self, event):
        self.setFocus(Qt.MouseFocusReason)
        if event.button() != Qt.LeftButton or self._media_size is None:
            return super().mousePressEvent(event)
        rect = self.display_rect()
        pos = (float(event.pos().x()), float(event.pos().y()))
        if not rect.contains(pos):
            return super().mousePressEvent(event)
        self._dragging = True
        self.drag_started.emit(rect, pos)
        event.accept()

    def mouseMoveEvent(self, event):
        if not self._dragging or not (event.buttons() & Qt.LeftButton):
            return super().mouseMoveEvent(event)
        pos = (float(event.pos().x()), float(event.pos().y()))
        self.dragged.emit(self.display_rect(), pos)
        event.accept()

    def mouseReleaseEvent(self, event):
        if self._dragging and event.button() == Qt.LeftButton:
            self._dragging = False
            self.drag_finished.emit()
            event.accept()
            return
        super().mouseReleaseEvent(event)

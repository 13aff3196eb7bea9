# vid_data_train_crop/frames.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

import cv2
import numpy as np
from PyQt5.QtGui import QImage


logger = logging.getLogger(__name__)

# One texture slot, reused on every upload.
TEXTURE_NAME = "video-frame"


@dataclass(frozen=True)
class RgbFrame:
    """Interleaved R,G,B bytes, row-major, no padding."""
    width: int
    height: int
    data: bytes

    @property
    def bytes_per_line(self) -> int:
        return self.width * 3


def to_rgb_frame(frame_bgr: np.ndarray) -> RgbFrame:
    """Convert a decoder frame (BGR, BGRA or gray) to tightly packed RGB."""
    if frame_bgr is None or frame_bgr.size == 0:
        raise ValueError("empty frame")

    if frame_bgr.ndim == 2:
        rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_GRAY2RGB)
    elif frame_bgr.shape[2] == 4:
        rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGRA2RGB)
    else:
        rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)

    rgb = np.ascontiguousarray(rgb, dtype=np.uint8)
    h, w = rgb.shape[:2]
    return RgbFrame(width=int(w), height=int(h), data=rgb.tobytes())


def qimage_from_rgb(frame: RgbFrame) -> QImage:
    img = QImage(frame.data, frame.width, frame.height, frame.bytes_per_line, QImage.Format_RGB888)
    # detach from the python bytes buffer
    return img.copy()


class FrameUploader:
    """
    Holds the display texture. Each upload replaces the slot; a failed
    conversion or upload leaves the previous texture untouched.
    """

    def __init__(self, texture_factory: Optional[Callable[[RgbFrame], Any]] = None):
        self._factory = texture_factory or qimage_from_rgb
        self.name = TEXTURE_NAME
        self.texture: Optional[Any] = None
        self.size: Optional[tuple] = None

    def upload(self, frame_bgr: np.ndarray) -> bool:
        try:
            rgb = to_rgb_frame(frame_bgr)
            texture = self._factory(rgb)
        except (cv2.error, ValueError, TypeError) as e:
            logger.debug("Frame upload failed, keeping previous texture: %s", e)
            return False
        self.texture = texture
        self.size = (rgb.width, rgb.height)
        return True

    def clear(self) -> None:
        self.texture = None
        self.size = None

# vid_data_train_crop/media_source.py
"""
Uniform "read frame at t / report intrinsic size" contract over the two kinds
of media the tool can load.

MediaSource is a tagged union of VideoMedia and ImageMedia; the three call
sites (read a frame, intrinsic size, fps/duration) dispatch on the tag with
plain functions rather than through a class hierarchy.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Optional, Tuple, Union

import cv2
import numpy as np

from .timeutils import DEFAULT_FPS, safe_fps, seconds_to_frame_index


logger = logging.getLogger(__name__)


# -----------------------------
# Errors
# -----------------------------

class MediaError(RuntimeError):
    pass


class DecodeOpenError(MediaError):
    """The file could not be opened or decoded at all."""


class FrameReadError(MediaError):
    """The decoder failed while seeking or reading a frame."""


class FrameOutOfRangeError(MediaError):
    """A frame was requested for a time that can't map to an index."""


# -----------------------------
# Variants
# -----------------------------

@dataclass
class VideoMedia:
    capture: Any  # cv2.VideoCapture
    fps: float
    frame_count: int
    duration_seconds: float
    width: int
    height: int

    kind = "video"


@dataclass
class ImageMedia:
    pixels: np.ndarray  # BGR, as decoded
    width: int
    height: int

    kind = "image"


MediaSource = Union[VideoMedia, ImageMedia]


# -----------------------------
# Open
# -----------------------------

def open_video(path: str) -> VideoMedia:
    cap = cv2.VideoCapture(path)
    if cap is None or not cap.isOpened():
        raise DecodeOpenError(f"Unable to open video: {path}")

    fps = safe_fps(cap.get(cv2.CAP_PROP_FPS) or DEFAULT_FPS)
    frame_count = int(max(0.0, cap.get(cv2.CAP_PROP_FRAME_COUNT) or 0.0))
    width = int(cap.get(cv2.CAP_PROP_FRAME_WIDTH) or 0)
    height = int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT) or 0)

    return VideoMedia(
        capture=cap,
        fps=fps,
        frame_count=frame_count,
        duration_seconds=frame_count / fps,
        width=width,
        height=height,
    )


def open_image(path: str) -> ImageMedia:
    # imdecode via fromfile handles non-ascii paths that imread chokes on
    try:
        raw = np.fromfile(path, dtype=np.uint8)
    except OSError as e:
        raise DecodeOpenError(f"Unable to read image: {path}: {e}") from e
    pixels = cv2.imdecode(raw, cv2.IMREAD_COLOR) if raw.size else None
    if pixels is None or pixels.size == 0:
        raise DecodeOpenError(f"Unable to decode image: {path}")
    height, width = pixels.shape[:2]
    return ImageMedia(pixels=pixels, width=int(width), height=int(height))


def open_media(path: str, is_image: bool) -> MediaSource:
    media = open_image(path) if is_image else open_video(path)
    w, h = intrinsic_size(media)
    fps, duration = timing(media)
    logger.info("Loaded %s %s (%dx%d, %.3f fps, %.3fs)", media.kind, path, w, h, fps, duration)
    return media


def release(media: Optional[MediaSource]) -> None:
    if isinstance(media, VideoMedia):
        try:
            media.capture.release()
        except cv2.error as e:
            logger.debug("Capture release failed: %s", e)


# -----------------------------
# Queries
# -----------------------------

def intrinsic_size(media: MediaSource) -> Tuple[int, int]:
    if isinstance(media, VideoMedia):
        return (media.width, media.height)
    if isinstance(media, ImageMedia):
        return (media.width, media.height)
    raise TypeError(f"Not a media source: {media!r}")


def timing(media: MediaSource) -> Tuple[float, float]:
    """(native_fps, duration_seconds). Stills report (1, 0)."""
    if isinstance(media, VideoMedia):
        return (media.fps, media.duration_seconds)
    if isinstance(media, ImageMedia):
        return (1.0, 0.0)
    raise TypeError(f"Not a media source: {media!r}")


def read_frame_at(media: MediaSource, t_seconds: float) -> Optional[np.ndarray]:
    """
    Decoded BGR frame for time t, or None when the decoder returns nothing.

    Videos map t to floor(t * fps) and seek there; the index is clamped into
    the known frame range. Images ignore t.
    """
    if isinstance(media, ImageMedia):
        return media.pixels

    if not isinstance(media, VideoMedia):
        raise TypeError(f"Not a media source: {media!r}")

    t = float(t_seconds)
    if not math.isfinite(t):
        raise FrameOutOfRangeError(f"Cannot seek to t={t_seconds!r}")

    idx = max(0, seconds_to_frame_index(t, media.fps))
    if media.frame_count > 0:
        idx = min(idx, media.frame_count - 1)

    try:
        media.capture.set(cv2.CAP_PROP_POS_FRAMES, float(idx))
        ok, frame = media.capture.read()
    except cv2.error as e:
        raise FrameReadError(f"Failed reading frame {idx}: {e}") from e

    if not ok or frame is None or frame.size == 0:
        return None
    return frame

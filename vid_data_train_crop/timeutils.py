# vid_data_train_crop/timeutils.py
from __future__ import annotations

import math
from typing import Optional

from .domain import Range


DEFAULT_FPS = 30.0
TARGET_FPS = 16


# -----------------------------
# Time formatting / conversion
# -----------------------------

def safe_fps(fps: Optional[float]) -> float:
    if fps is None:
        return DEFAULT_FPS
    try:
        fps = float(fps)
    except (TypeError, ValueError):
        return DEFAULT_FPS
    if not math.isfinite(fps) or fps <= 0:
        return DEFAULT_FPS
    return fps


def seconds_to_frame_index(seconds: float, fps: float) -> int:
    """Authoritative frame identity for a time: floor(t * fps)."""
    if seconds is None:
        seconds = 0.0
    return int(math.floor(float(seconds) * safe_fps(fps)))


def seconds_to_frames(seconds: float, fps: float) -> int:
    """Nearest frame, used for display labels."""
    if seconds is None:
        seconds = 0.0
    return int(round(float(seconds) * safe_fps(fps)))


def frames_to_seconds(frames: int, fps: float) -> float:
    if frames is None:
        frames = 0
    return float(frames) / safe_fps(fps)


def seconds_to_ms(seconds: float) -> int:
    return int(round(max(0.0, float(seconds or 0.0)) * 1000.0))


def ms_to_seconds(ms: int) -> float:
    return max(0, int(ms or 0)) / 1000.0


def format_seconds_arg(seconds: float) -> str:
    """
    Plain decimal seconds for the ffmpeg command line, never in exponent
    form: 0 -> "0", 5.0 -> "5", 2.5 -> "2.5". Microsecond resolution,
    which is what ffmpeg keeps internally.
    """
    s = f"{float(seconds):.6f}".rstrip("0").rstrip(".")
    if s in ("", "-0"):
        s = "0"
    return s


# -----------------------------
# Frame field
# -----------------------------

def parse_frame_text(text: str) -> Optional[int]:
    """
    Integer frame number typed by the user, or None if it doesn't parse.
    Only an optional sign and ASCII digits are accepted.
    """
    t = (text or "").strip()
    digits = t[1:] if t[:1] in ("+", "-") else t
    if not digits or not (digits.isascii() and digits.isdigit()):
        return None
    return int(t)


def frame_text_for_time(seconds: float, fps: float) -> str:
    return str(seconds_to_frame_index(seconds, fps))


def target_fps_readout(seconds: float) -> str:
    return f"Target 16FPS: {float(seconds) * TARGET_FPS:.1f}"


# -----------------------------
# Range list labels
# -----------------------------

def range_label(idx: int, rng: Range, native_fps: float, is_image: bool) -> str:
    if is_image:
        return f"Crop {idx}"

    length = rng.end_time - rng.start_time
    frames_at_target = int(round(length * TARGET_FPS))
    start_frame = seconds_to_frames(rng.start_time, native_fps)
    end_frame = seconds_to_frames(rng.end_time, native_fps)
    return (
        f"R{idx}: {rng.start_time:.1f}s - {rng.end_time:.1f}s ({length:.1f}s)\n"
        f"      {start_frame} - {end_frame} ({frames_at_target} frames)"
    )

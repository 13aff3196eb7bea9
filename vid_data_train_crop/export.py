# vid_data_train_crop/export.py
"""
Batch export of annotated ranges through ffmpeg.

The UI thread takes the export gate, snapshots the annotation list and the
media's intrinsic size into an ExportJob, and hands it to a worker thread.
The worker touches nothing else: its only way back to the UI is the gate's
"exporting" flag and its error cell, both polled by the window.
"""
from __future__ import annotations

import logging
import math
import os
import threading
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from .domain import NormalizedRect, Range
from .media_import import ext_lower, file_stem, find_ffmpeg, run_cmd
from .persistence import write_note
from .timeutils import TARGET_FPS, format_seconds_arg


logger = logging.getLogger(__name__)

Runner = Callable[[List[str]], Tuple[int, str]]


# -----------------------------
# Crop math
# -----------------------------

def round_down_even(value: float) -> int:
    """Truncate to an int and clear the low bit; encoders reject odd sizes."""
    return int(value) & ~1


@dataclass(frozen=True)
class PixelCrop:
    width: int
    height: int
    x: int
    y: int

    @property
    def filter_expression(self) -> str:
        return f"crop={self.width}:{self.height}:{self.x}:{self.y}"


def pixel_crop(crop: NormalizedRect, width: int, height: int) -> PixelCrop:
    """Normalized crop -> pixel crop over a (width, height) frame."""
    return PixelCrop(
        width=round_down_even(abs(crop.max_x - crop.min_x) * width),
        height=round_down_even(abs(crop.max_y - crop.min_y) * height),
        x=int(math.floor(min(crop.min_x, crop.max_x) * width)),
        y=int(math.floor(min(crop.min_y, crop.max_y) * height)),
    )


# -----------------------------
# Job snapshot + command building
# -----------------------------

@dataclass(frozen=True)
class ExportJob:
    """Everything the worker needs, copied by value at export start."""
    input_path: str
    output_dir: str
    is_image: bool
    width: int
    height: int
    ranges: Tuple[Range, ...]

    @property
    def stem(self) -> str:
        return file_stem(self.input_path)

    @property
    def output_ext(self) -> str:
        return ext_lower(self.input_path) if self.is_image else "mp4"


@dataclass(frozen=True)
class ExportStep:
    index: int
    out_base: str
    output_path: str
    note: str
    args: List[str]


def output_base(job: ExportJob, idx: int) -> str:
    """<out>/<stem>, or <out>/<stem>_range<i> when there is more than one range."""
    if len(job.ranges) > 1:
        name = f"{job.stem}_range{idx}"
    else:
        name = job.stem
    return os.path.join(job.output_dir, name)


def build_filters(job: ExportJob, rng: Range) -> List[str]:
    filters: List[str] = []
    if not job.is_image:
        filters.append(f"fps={TARGET_FPS}")
    if rng.crop is not None:
        filters.append(pixel_crop(rng.crop, job.width, job.height).filter_expression)
    return filters


def build_ffmpeg_args(job: ExportJob, rng: Range, output_path: str, ffmpeg: Optional[str] = None) -> List[str]:
    cmd: List[str] = [ffmpeg or find_ffmpeg(), "-y"]

    # input seeking: -ss/-to must come before -i
    if not job.is_image:
        cmd += ["-ss", format_seconds_arg(rng.start_time), "-to", format_seconds_arg(rng.end_time)]

    cmd += ["-i", job.input_path]

    filters = build_filters(job, rng)
    if filters:
        cmd += ["-vf", ",".join(filters)]

    if not job.is_image:
        cmd += ["-c:v", "libx264", "-preset", "ultrafast"]

    cmd.append(output_path)
    return cmd


def plan_step(job: ExportJob, idx: int, rng: Range, ffmpeg: Optional[str] = None) -> ExportStep:
    base = output_base(job, idx)
    out_path = f"{base}.{job.output_ext}"
    return ExportStep(
        index=idx,
        out_base=base,
        output_path=out_path,
        note=rng.note,
        args=build_ffmpeg_args(job, rng, out_path, ffmpeg=ffmpeg),
    )


def plan_export(job: ExportJob, ffmpeg: Optional[str] = None) -> List[ExportStep]:
    return [plan_step(job, i, rng, ffmpeg=ffmpeg) for i, rng in enumerate(job.ranges)]


# -----------------------------
# Shared cells
# -----------------------------

class ExportGate:
    """
    The two cells shared between the UI and an export worker: the
    "exporting" flag (taken by compare-and-set) and the last error message.
    """

    def __init__(self):
        self._flag_lock = threading.Lock()
        self._exporting = False
        self._error_lock = threading.Lock()
        self._error: Optional[str] = None

    def try_acquire(self) -> bool:
        with self._flag_lock:
            if self._exporting:
                return False
            self._exporting = True
            return True

    def release(self) -> None:
        with self._flag_lock:
            self._exporting = False

    @property
    def exporting(self) -> bool:
        with self._flag_lock:
            return self._exporting

    @property
    def error(self) -> Optional[str]:
        with self._error_lock:
            return self._error

    def set_error(self, message: Optional[str]) -> None:
        with self._error_lock:
            self._error = message


# -----------------------------
# Worker
# -----------------------------

def _fail(gate: ExportGate, msg: str, with_traceback: bool = False) -> bool:
    if with_traceback:
        logger.exception(msg)
    else:
        logger.error(msg)
    gate.set_error(msg)
    return False


def run_export_job(job: ExportJob, gate: ExportGate, runner: Runner = run_cmd) -> bool:
    """
    Export every range in list order, stopping at the first failure. The
    failure message lands in gate's error cell. Returns True if every range
    was exported.
    """
    for i, rng in enumerate(job.ranges):
        try:
            step = plan_step(job, i, rng)
        except Exception as e:
            return _fail(gate, f"Export failed on range {i}: {e}", with_traceback=True)

        if step.note:
            write_note(step.out_base, step.note)

        logger.info("Exporting range %d: %s", i, step.output_path)
        logger.debug("ffmpeg argv: %s", step.args)

        try:
            code, output = runner(step.args)
        except OSError as e:
            return _fail(gate, f"Failed to start ffmpeg on range {i}: {e}")
        except Exception as e:
            return _fail(gate, f"Export failed on range {i}: {e}", with_traceback=True)

        if code != 0:
            logger.error("ffmpeg output for range %d:\n%s", i, (output or "").strip())
            return _fail(gate, f"ffmpeg failed on range {i} with exit code: {code}")

    logger.info("All exports finished (%d range(s)).", len(job.ranges))
    return True


class ExportOrchestrator:
    """Starts at most one export worker at a time."""

    def __init__(self, gate: Optional[ExportGate] = None, runner: Runner = run_cmd):
        self.gate = gate or ExportGate()
        self._runner = runner
        self._thread: Optional[threading.Thread] = None

    @property
    def exporting(self) -> bool:
        return self.gate.exporting

    @property
    def last_error(self) -> Optional[str]:
        return self.gate.error

    def start(self, job: Optional[ExportJob]) -> bool:
        """
        Launch a worker for job. No-op (returns False) when there is nothing
        to export or an export is already running.
        """
        if job is None:
            return False
        if not self.gate.try_acquire():
            logger.info("Export already running; ignoring request.")
            return False

        self.gate.set_error(None)
        logger.info("Starting export of %d range(s) from %s", len(job.ranges), job.input_path)

        thread = threading.Thread(target=self._worker, args=(job,), name="export-worker", daemon=True)
        try:
            thread.start()
        except RuntimeError:
            self.gate.release()
            raise
        self._thread = thread
        return True

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def _worker(self, job: ExportJob) -> None:
        try:
            run_export_job(job, self.gate, self._runner)
        finally:
            self.gate.release()

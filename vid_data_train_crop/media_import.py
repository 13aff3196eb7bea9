# vid_data_train_crop/media_import.py
from __future__ import annotations

import logging
import os
import subprocess
from typing import List, Tuple


logger = logging.getLogger(__name__)


# Allowed extensions (lowercase, no dot)
VIDEO_EXTS = {"mp4", "mkv", "avi", "mov", "webm"}
IMAGE_EXTS = {"jpg", "jpeg", "png", "bmp", "webp"}
MEDIA_EXTS = VIDEO_EXTS | IMAGE_EXTS


def ext_lower(path: str) -> str:
    """Extension without the dot, lowercased ("" if none)."""
    _, ext = os.path.splitext(path.strip())
    return ext.lower().lstrip(".")


def is_media_path(path: str) -> bool:
    return ext_lower(path) in MEDIA_EXTS


def is_image_path(path: str) -> bool:
    return ext_lower(path) in IMAGE_EXTS


def file_stem(path: str) -> str:
    return os.path.splitext(os.path.basename(path))[0]


def list_media_files(input_dir: str) -> List[str]:
    """
    Direct children of input_dir with a supported extension, sorted by name.
    Subdirectories are not descended into. Raises OSError if the directory
    can't be read.
    """
    out: List[str] = []
    with os.scandir(input_dir) as it:
        for entry in it:
            try:
                if not entry.is_file():
                    continue
            except OSError:
                continue
            if is_media_path(entry.name):
                out.append(entry.path)
    out.sort(key=lambda p: os.path.basename(p).lower())
    logger.info("Found %d media file(s) in %s", len(out), input_dir)
    return out


# -----------------------------
# ffmpeg helpers
# -----------------------------

def find_ffmpeg() -> str:
    # rely on PATH; allow override via env
    return os.environ.get("FFMPEG_BIN", "ffmpeg")


def run_cmd(cmd: List[str]) -> Tuple[int, str]:
    """
    Runs a command to completion and returns (returncode, combined_output).
    Raises OSError if the process can't be started.
    """
    proc = subprocess.run(cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE)
    out = (proc.stdout or b"") + b"\n" + (proc.stderr or b"")
    text = out.decode("utf-8", errors="ignore")
    return proc.returncode, text

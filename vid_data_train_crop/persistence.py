# vid_data_train_crop/persistence.py
from __future__ import annotations

import logging
import os
import tempfile


logger = logging.getLogger(__name__)


NOTE_EXT = ".txt"


# -----------------------------
# Atomic file helpers
# -----------------------------

def _atomic_write_text(path: str, text: str, encoding: str = "utf-8") -> None:
    d = os.path.dirname(path) or "."
    os.makedirs(d, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(prefix=".tmp_", dir=d)
    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    finally:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)


# -----------------------------
# Sidecar notes
# -----------------------------

def sidecar_path_for_media(media_path: str) -> str:
    """<dir>/<stem>.txt next to a media file."""
    base, _ = os.path.splitext(media_path)
    return base + NOTE_EXT


def read_sidecar_note(media_path: str) -> str:
    """Note stored next to a media file, or "" if there is none."""
    path = sidecar_path_for_media(media_path)
    if not os.path.isfile(path):
        return ""
    try:
        with open(path, "r", encoding="utf-8", errors="replace", newline="") as f:
            return f.read()
    except OSError as e:
        logger.warning("Could not read note %s: %s", path, e)
        return ""


def write_note(out_base: str, note: str) -> bool:
    """
    Best-effort sidecar write to out_base + ".txt". Failures are logged and
    reported through the return value only; they never stop an export.
    """
    path = out_base + NOTE_EXT
    try:
        _atomic_write_text(path, note)
    except OSError as e:
        logger.warning("Could not write note %s: %s", path, e)
        return False
    return True

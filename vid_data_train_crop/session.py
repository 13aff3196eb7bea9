# vid_data_train_crop/session.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from . import media_source
from .domain import AnnotationList
from .export import ExportJob
from .frames import FrameUploader
from .media_import import is_image_path, list_media_files
from .persistence import read_sidecar_note
from .playback import PlaybackEngine


logger = logging.getLogger(__name__)


@dataclass
class Session:
    """
    In-memory state for the annotation window.

    Owns the loaded media, the playback clock, the annotation list and the
    frame texture. An export worker only ever sees the ExportJob snapshot
    built by export_job().
    """
    input_dir: Optional[str] = None
    output_dir: Optional[str] = None

    file_list: List[str] = field(default_factory=list)
    selected_idx: Optional[int] = None

    media: Optional[media_source.MediaSource] = None
    is_image: bool = False

    playback: PlaybackEngine = field(default_factory=PlaybackEngine)
    annotations: AnnotationList = field(default_factory=AnnotationList)
    uploader: FrameUploader = field(default_factory=FrameUploader)

    # UI scratch state
    drag_anchor_norm: Optional[Tuple[float, float]] = None
    frame_text_buffer: str = "0"
    last_dir_error: Optional[str] = None

    @property
    def current_time(self) -> float:
        return self.playback.current_time

    @property
    def duration(self) -> float:
        return self.playback.duration

    @property
    def native_fps(self) -> float:
        return self.playback.native_fps

    @property
    def frame_texture(self):
        return self.uploader.texture

    def selected_path(self) -> Optional[str]:
        if self.selected_idx is None:
            return None
        if self.selected_idx < 0 or self.selected_idx >= len(self.file_list):
            return None
        return self.file_list[self.selected_idx]

    def has_media(self) -> bool:
        return self.media is not None

    def intrinsic_size(self) -> Optional[Tuple[int, int]]:
        if self.media is None:
            return None
        return media_source.intrinsic_size(self.media)

    def export_job(self) -> Optional[ExportJob]:
        """Snapshot for the export worker, or None if export can't run yet."""
        path = self.selected_path()
        if path is None or not self.output_dir or self.media is None:
            return None
        w, h = media_source.intrinsic_size(self.media)
        return ExportJob(
            input_path=path,
            output_dir=self.output_dir,
            is_image=self.is_image,
            width=int(w),
            height=int(h),
            ranges=self.annotations.snapshot(),
        )


class SessionLoader:
    """Folder selection and per-file loading."""

    def __init__(self, session: Session):
        self.session = session

    def choose_input_dir(self, path: str) -> List[str]:
        s = self.session
        s.input_dir = path
        s.last_dir_error = None
        try:
            s.file_list = list_media_files(path)
        except OSError as e:
            logger.warning("Could not list %s: %s", path, e)
            s.last_dir_error = f"Could not read folder: {e}"
            s.file_list = []
        return list(s.file_list)

    def choose_output_dir(self, path: Optional[str]) -> None:
        self.session.output_dir = path or None

    def select_file(self, idx: int) -> bool:
        """
        Load file idx into the session. On success the previous media is
        released and the annotation list, clock and cursor are reset. If the
        file can't be opened nothing changes.
        """
        s = self.session
        if idx < 0 or idx >= len(s.file_list):
            return False
        path = s.file_list[idx]
        is_image = is_image_path(path)

        try:
            media = media_source.open_media(path, is_image)
        except media_source.DecodeOpenError as e:
            logger.warning("Ignoring selection of %s: %s", path, e)
            return False

        note = read_sidecar_note(path)
        fps, duration = media_source.timing(media)

        old = s.media
        s.media = None
        media_source.release(old)

        s.media = media
        s.selected_idx = idx
        s.is_image = is_image
        s.playback.reset(native_fps=fps, duration=duration, enabled=not is_image)
        s.annotations = AnnotationList.initial(duration, note=note)
        s.drag_anchor_norm = None
        s.frame_text_buffer = "0"
        return True

# vid_data_train_crop/controller.py
from __future__ import annotations

import enum
import logging
from typing import Callable, Optional, Tuple

from . import media_source
from .geometry import DisplayRect, crop_from_drag
from .session import Session
from .timeutils import frame_text_for_time, frames_to_seconds, parse_frame_text


logger = logging.getLogger(__name__)


class Key(enum.Enum):
    SPACE = "space"
    I = "i"
    O = "o"
    R = "r"
    LEFT = "left"
    RIGHT = "right"


class InteractionController:
    """
    Turns input (keys, pointer drags on the frame, slider moves, the frame
    number field, buttons) into changes on the session's clock and
    annotation list. Knows nothing about Qt; the window translates events.

    on_changed is called after any state change the view should repaint for.
    on_ranges_changed is called in addition when the annotation list itself
    changed (ranges, bounds, crop, selection); clock-only changes such as
    playback ticks and seeks do not fire it.
    """

    def __init__(
        self,
        session: Session,
        on_changed: Optional[Callable[[], None]] = None,
        on_ranges_changed: Optional[Callable[[], None]] = None,
    ):
        self.session = session
        self._on_changed = on_changed or (lambda: None)
        self._on_ranges_changed = on_ranges_changed or (lambda: None)

    # ---------------- Frame refresh ----------------

    def refresh_frame(self) -> bool:
        """Decode the frame at current_time into the texture slot."""
        s = self.session
        if s.media is None:
            return False
        try:
            frame = media_source.read_frame_at(s.media, s.playback.current_time)
        except media_source.MediaError as e:
            logger.debug("Frame read failed at t=%.3f: %s", s.playback.current_time, e)
            return False
        if frame is None:
            return False
        return s.uploader.upload(frame)

    def _changed(self, refresh: bool = False, ranges: bool = False) -> None:
        if refresh:
            self.refresh_frame()
        self._on_changed()
        if ranges:
            self._on_ranges_changed()

    # ---------------- Keys ----------------

    def keys_enabled(self, text_input_active: bool = False) -> bool:
        s = self.session
        return (not text_input_active) and s.has_media() and not s.is_image

    def handle_key(self, key: Key, text_input_active: bool = False) -> bool:
        """Returns True if the key was consumed."""
        if not self.keys_enabled(text_input_active):
            return False

        if key is Key.SPACE:
            self.pause_play()
        elif key is Key.I:
            self.set_start()
        elif key is Key.O:
            self.set_end()
        elif key is Key.R:
            self.play_range()
        elif key is Key.LEFT:
            self.prev_frame()
        elif key is Key.RIGHT:
            self.next_frame()
        else:
            return False
        return True

    # ---------------- Playback ----------------

    def pause_play(self) -> None:
        self.session.playback.pause_play()
        self._changed()

    def prev_frame(self) -> None:
        self.session.playback.prev_frame()
        self._changed(refresh=True)

    def next_frame(self) -> None:
        self.session.playback.next_frame()
        self._changed(refresh=True)

    def play_range(self) -> None:
        s = self.session
        rng = s.annotations.current
        s.playback.play_until(rng.start_time, rng.end_time)
        self._changed(refresh=True)

    def tick(self, elapsed_seconds: float) -> bool:
        """Per-UI-tick advance. Returns True while another tick is wanted."""
        s = self.session
        if s.media is None or s.is_image:
            return False
        if s.playback.tick(elapsed_seconds):
            self._changed(refresh=True)
        return s.playback.is_playing

    # ---------------- Slider / frame field ----------------

    def slider_moved(self, t: float) -> None:
        self.session.playback.set_time(t)
        self._changed(refresh=True)

    def frame_text_committed(self, text: str) -> bool:
        """Enter in the frame-number field. Bad input leaves time alone."""
        s = self.session
        s.frame_text_buffer = text
        n = parse_frame_text(text)
        if n is None:
            return False
        s.playback.set_time(frames_to_seconds(n, s.playback.native_fps))
        self._changed(refresh=True)
        return True

    def frame_text(self) -> str:
        """What the frame field shows while unfocused."""
        s = self.session
        s.frame_text_buffer = frame_text_for_time(s.playback.current_time, s.playback.native_fps)
        return s.frame_text_buffer

    # ---------------- Crop drawing ----------------

    def drag_started(self, rect: DisplayRect, pos: Tuple[float, float]) -> None:
        if rect.width <= 0 or rect.height <= 0:
            return
        self.session.drag_anchor_norm = rect.to_norm(pos)

    def dragged(self, rect: DisplayRect, pos: Tuple[float, float]) -> None:
        s = self.session
        if s.drag_anchor_norm is None or rect.width <= 0 or rect.height <= 0:
            return
        now = rect.to_norm(pos)
        if now == s.drag_anchor_norm:
            return
        s.annotations.set_crop(crop_from_drag(s.drag_anchor_norm, now))
        self._changed(ranges=True)

    def drag_finished(self) -> None:
        self.session.drag_anchor_norm = None

    # ---------------- Annotation edits ----------------

    def add_range(self) -> None:
        s = self.session
        s.annotations.add_range(s.playback.current_time, s.playback.duration)
        self._changed(ranges=True)

    def remove_range(self, idx: int) -> None:
        self.session.annotations.remove_range(idx)
        self._changed(ranges=True)

    def select_range(self, idx: int) -> None:
        self.session.annotations.select(idx)
        self._changed(ranges=True)

    def set_start(self) -> None:
        s = self.session
        s.annotations.set_start(s.playback.current_time, s.playback.duration)
        self._changed(ranges=True)

    def set_end(self) -> None:
        s = self.session
        s.annotations.set_end(s.playback.current_time, s.playback.duration)
        self._changed(ranges=True)

    def clear_crop(self) -> None:
        self.session.annotations.clear_crop()
        self._changed(ranges=True)

    def set_note(self, text: str) -> None:
        # no repaint needed; the note editor is the source of the change
        self.session.annotations.set_note(text)

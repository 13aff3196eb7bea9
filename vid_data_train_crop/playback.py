# vid_data_train_crop/playback.py
from __future__ import annotations

from .domain import NOT_PLAYING, PLAYING, NotPlaying, Playing, PlayingUntil, clamp, is_playing
from .timeutils import safe_fps


class PlaybackEngine:
    """
    Clock for the single visible frame.

    Playback is real-time: each tick adds the elapsed wall time rather than a
    whole frame. Frame stepping does not clamp; whoever consumes the time
    (the media source, the slider) clamps it.
    """

    def __init__(self):
        self.current_time: float = 0.0
        self.duration: float = 0.0
        self.native_fps: float = 30.0
        self.play_state = NOT_PLAYING
        self.enabled: bool = True  # False for still images

    def reset(self, native_fps: float, duration: float, enabled: bool = True) -> None:
        self.native_fps = safe_fps(native_fps)
        self.duration = max(0.0, float(duration))
        self.current_time = 0.0
        self.play_state = NOT_PLAYING
        self.enabled = bool(enabled)

    @property
    def is_playing(self) -> bool:
        return is_playing(self.play_state)

    # ---------------- Seeking ----------------

    def prev_frame(self) -> None:
        self.current_time -= 1.0 / self.native_fps

    def next_frame(self) -> None:
        self.current_time += 1.0 / self.native_fps

    def set_time(self, t: float) -> None:
        self.current_time = clamp(t, 0.0, self.duration)

    # ---------------- Play state ----------------

    def pause_play(self) -> None:
        if not self.enabled:
            return
        if isinstance(self.play_state, NotPlaying):
            self.play_state = PLAYING
        else:
            self.play_state = NOT_PLAYING

    def play_until(self, start: float, end: float) -> None:
        """Jump to start and play until the clock passes end."""
        if not self.enabled:
            return
        self.current_time = float(start)
        self.play_state = PlayingUntil(float(end))

    def stop(self) -> None:
        self.play_state = NOT_PLAYING

    def tick(self, elapsed_seconds: float) -> bool:
        """
        Advance the clock by elapsed wall time. Returns True when a frame
        refresh is needed (i.e. the engine was playing at tick start).
        """
        if not self.enabled or not self.is_playing:
            return False

        self.current_time += max(0.0, float(elapsed_seconds))

        state = self.play_state
        if isinstance(state, PlayingUntil) and self.current_time > state.deadline:
            self.play_state = NOT_PLAYING
        if self.current_time >= self.duration:
            self.play_state = NOT_PLAYING
            self.current_time = self.duration
        return True


__all__ = ["PlaybackEngine", "NotPlaying", "Playing", "PlayingUntil", "PLAYING", "NOT_PLAYING"]

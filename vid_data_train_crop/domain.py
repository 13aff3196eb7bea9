# vid_data_train_crop/domain.py
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import List, Optional, Tuple


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(float(value), hi))


def clamp01(value: float) -> float:
    return clamp(value, 0.0, 1.0)


# -----------------------------
# Crop rectangle
# -----------------------------

@dataclass(frozen=True)
class NormalizedRect:
    """
    A crop in fractions of the media's intrinsic frame, origin top-left.

    Components are clamped to [0, 1] and ordered so that min <= max on every
    construction; a rect is never mutated in place.
    """
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    def __post_init__(self) -> None:
        x0, x1 = sorted((clamp01(self.min_x), clamp01(self.max_x)))
        y0, y1 = sorted((clamp01(self.min_y), clamp01(self.max_y)))
        object.__setattr__(self, "min_x", x0)
        object.__setattr__(self, "min_y", y0)
        object.__setattr__(self, "max_x", x1)
        object.__setattr__(self, "max_y", y1)

    @staticmethod
    def from_points(a: Tuple[float, float], b: Tuple[float, float]) -> "NormalizedRect":
        """Bounding rectangle of two normalized points."""
        return NormalizedRect(
            min_x=min(a[0], b[0]),
            min_y=min(a[1], b[1]),
            max_x=max(a[0], b[0]),
            max_y=max(a[1], b[1]),
        )

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y


# -----------------------------
# Ranges
# -----------------------------

@dataclass
class Range:
    """
    One unit of export: a [start, end] interval in seconds, an optional crop
    and a free-text note. For still images both times are 0.
    """
    start_time: float = 0.0
    end_time: float = 0.0
    crop: Optional[NormalizedRect] = None
    note: str = ""

    @property
    def length(self) -> float:
        return max(0.0, self.end_time - self.start_time)


class AnnotationList:
    """
    Ordered, never-empty list of ranges plus a "current range" cursor.

    Every mutation keeps 0 <= start_time <= end_time <= duration; the caller
    passes the media duration in, the list does not own it.
    """

    def __init__(self, ranges: Optional[List[Range]] = None, current_index: int = 0):
        self._ranges: List[Range] = list(ranges or [])
        if not self._ranges:
            self._ranges.append(Range())
        self._current = 0
        self.select(current_index)

    @staticmethod
    def initial(duration: float, note: str = "") -> "AnnotationList":
        """The single range a freshly loaded file starts with."""
        return AnnotationList([Range(start_time=0.0, end_time=max(0.0, float(duration)), note=note or "")])

    # ---------------- Access ----------------

    def __len__(self) -> int:
        return len(self._ranges)

    def __iter__(self):
        return iter(self._ranges)

    def __getitem__(self, idx: int) -> Range:
        return self._ranges[idx]

    @property
    def current_index(self) -> int:
        return self._current

    @property
    def current(self) -> Range:
        return self._ranges[self._current]

    def ranges(self) -> List[Range]:
        return list(self._ranges)

    def snapshot(self) -> Tuple[Range, ...]:
        """By-value copy handed to the export worker."""
        return tuple(replace(r) for r in self._ranges)

    # ---------------- Mutations ----------------

    def select(self, idx: int) -> None:
        self._current = int(max(0, min(int(idx), len(self._ranges) - 1)))

    def add_range(self, current_time: float, duration: float) -> Range:
        duration = max(0.0, float(duration))
        start = clamp(current_time, 0.0, duration)
        rng = Range(start_time=start, end_time=duration)
        self._ranges.append(rng)
        self._current = len(self._ranges) - 1
        return rng

    def remove_range(self, idx: int) -> None:
        if idx < 0 or idx >= len(self._ranges):
            return
        del self._ranges[idx]
        if not self._ranges:
            self._ranges.append(Range())
        if idx < self._current:
            self._current -= 1
        self.select(self._current)

    def set_start(self, t: float, duration: float) -> None:
        rng = self.current
        start = clamp(t, 0.0, max(0.0, float(duration)))
        rng.start_time = start
        if rng.end_time < start:
            rng.end_time = start

    def set_end(self, t: float, duration: float) -> None:
        rng = self.current
        end = clamp(t, 0.0, max(0.0, float(duration)))
        rng.end_time = end
        if rng.start_time > end:
            rng.start_time = end

    def set_crop(self, crop: NormalizedRect) -> None:
        self.current.crop = crop

    def clear_crop(self) -> None:
        self.current.crop = None

    def set_note(self, text: str) -> None:
        self.current.note = str(text or "")


# -----------------------------
# Playback state
# -----------------------------

@dataclass(frozen=True)
class NotPlaying:
    pass


@dataclass(frozen=True)
class Playing:
    pass


@dataclass(frozen=True)
class PlayingUntil:
    deadline: float


NOT_PLAYING = NotPlaying()
PLAYING = Playing()


def is_playing(state) -> bool:
    return isinstance(state, (Playing, PlayingUntil))

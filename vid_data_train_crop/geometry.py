# vid_data_train_crop/geometry.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from .domain import NormalizedRect


FALLBACK_ASPECT = 0.5625  # 16:9 placeholder when nothing is loaded

Point = Tuple[float, float]


@dataclass(frozen=True)
class DisplayRect:
    """
    Where the frame is painted, in widget pixels. Everything that maps
    between the screen and the media goes through this rectangle.
    """
    x: float
    y: float
    width: float
    height: float

    @property
    def min_x(self) -> float:
        return self.x

    @property
    def min_y(self) -> float:
        return self.y

    @property
    def max_x(self) -> float:
        return self.x + self.width

    @property
    def max_y(self) -> float:
        return self.y + self.height

    def contains(self, p: Point) -> bool:
        return self.min_x <= p[0] <= self.max_x and self.min_y <= p[1] <= self.max_y

    def to_norm(self, p: Point) -> Point:
        """Display pixel -> normalized media coordinate (not clamped)."""
        return (
            (p[0] - self.min_x) / self.width,
            (p[1] - self.min_y) / self.height,
        )

    def from_norm(self, p: Point) -> Point:
        """Normalized media coordinate -> display pixel."""
        return (
            p[0] * self.width + self.min_x,
            p[1] * self.height + self.min_y,
        )

    def rect_from_norm(self, r: NormalizedRect) -> Tuple[float, float, float, float]:
        """(x, y, w, h) of a normalized rect on screen."""
        x0, y0 = self.from_norm((r.min_x, r.min_y))
        x1, y1 = self.from_norm((r.max_x, r.max_y))
        return (x0, y0, x1 - x0, y1 - y0)


def fit_display_rect(
    avail_w: float,
    avail_h: float,
    media_size: Optional[Tuple[int, int]],
    origin: Point = (0.0, 0.0),
) -> DisplayRect:
    """
    Largest rectangle with the media's aspect ratio that fits inside
    (avail_w, avail_h), centered. With no media, a 16:9 box as wide as the
    available area is returned for layout only.
    """
    ox, oy = origin
    avail_w = max(0.0, float(avail_w))
    avail_h = max(0.0, float(avail_h))

    if not media_size or media_size[0] <= 0 or media_size[1] <= 0:
        return DisplayRect(ox, oy, avail_w, avail_w * FALLBACK_ASPECT)

    w, h = float(media_size[0]), float(media_size[1])
    scale = min(avail_w / w, avail_h / h)
    disp_w = w * scale
    disp_h = h * scale
    return DisplayRect(
        ox + (avail_w - disp_w) * 0.5,
        oy + (avail_h - disp_h) * 0.5,
        disp_w,
        disp_h,
    )


def crop_from_drag(anchor_norm: Point, current_norm: Point) -> NormalizedRect:
    """Bounding box of the drag anchor and the pointer, clamped to the frame."""
    return NormalizedRect.from_points(anchor_norm, current_norm)

from __future__ import annotations

"""Box/polygon value types, IoU and normalization helpers."""

import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from annostudio.core.types import Point


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box as top-left corner + size."""
    x: float
    y: float
    width: float
    height: float

    def __post_init__(self) -> None:
        # Canvas drags can produce negative extents; store the flipped box.
        if self.width < 0:
            object.__setattr__(self, "x", self.x + self.width)
            object.__setattr__(self, "width", -self.width)
        if self.height < 0:
            object.__setattr__(self, "y", self.y + self.height)
            object.__setattr__(self, "height", -self.height)

    @staticmethod
    def from_xyxy(x1: float, y1: float, x2: float, y2: float) -> "BoundingBox":
        return BoundingBox(min(x1, x2), min(y1, y2), abs(x2 - x1), abs(y2 - y1))

    @staticmethod
    def from_center(cx: float, cy: float, w: float, h: float) -> "BoundingBox":
        return BoundingBox(cx - w / 2.0, cy - h / 2.0, w, h)

    @property
    def x2(self) -> float:
        return self.x + self.width

    @property
    def y2(self) -> float:
        return self.y + self.height

    @property
    def area(self) -> float:
        return self.width * self.height

    def is_finite(self) -> bool:
        return all(math.isfinite(v) for v in (self.x, self.y, self.width, self.height))

    def as_xyxy(self) -> Tuple[float, float, float, float]:
        return (self.x, self.y, self.x2, self.y2)


@dataclass(frozen=True)
class Polygon:
    """Ordered polygon vertices in pixel space."""
    points: Tuple[Point, ...]

    def is_valid(self) -> bool:
        return len(self.points) >= 3 and all(math.isfinite(x) and math.isfinite(y) for x, y in self.points)

    def bounds(self) -> BoundingBox:
        xs = [p[0] for p in self.points]
        ys = [p[1] for p in self.points]
        return BoundingBox.from_xyxy(min(xs), min(ys), max(xs), max(ys))


Geometry = Union[BoundingBox, Polygon]


def iou(a: BoundingBox, b: BoundingBox) -> float:
    """Intersection over union of two boxes in the same coordinate space."""
    if a.area <= 0.0 or b.area <= 0.0:
        return 0.0

    inter_w = max(0.0, min(a.x2, b.x2) - max(a.x, b.x))
    inter_h = max(0.0, min(a.y2, b.y2) - max(a.y, b.y))
    inter = inter_w * inter_h

    union = a.area + b.area - inter
    if union <= 0.0 or not math.isfinite(union):
        return 0.0
    return max(0.0, min(1.0, inter / union))


def _clamp01(v: float) -> float:
    return max(0.0, min(1.0, v))


def normalize_box(box: BoundingBox, image_width: float, image_height: float) -> BoundingBox:
    """Pixel box -> normalized (cx, cy, w, h) stored in a BoundingBox.

    Fields of the result are read as x=cx, y=cy, width=w, height=h.
    """
    cx = (box.x + box.width / 2.0) / image_width
    cy = (box.y + box.height / 2.0) / image_height
    nw = box.width / image_width
    nh = box.height / image_height
    return BoundingBox(_clamp01(cx), _clamp01(cy), _clamp01(nw), _clamp01(nh))


def denormalize_box(norm: BoundingBox, image_width: float, image_height: float) -> BoundingBox:
    """Inverse of `normalize_box` for boxes that were inside the image."""
    w = norm.width * image_width
    h = norm.height * image_height
    return BoundingBox(norm.x * image_width - w / 2.0, norm.y * image_height - h / 2.0, w, h)


def polygon_to_normalized_points(
    points: Sequence[Point], image_width: float, image_height: float
) -> Optional[List[Point]]:
    """Normalize polygon vertices; None when the polygon can't be exported."""
    if len(points) < 3:
        return None
    out: List[Point] = []
    for x, y in points:
        if not (math.isfinite(x) and math.isfinite(y)):
            return None
        out.append((_clamp01(x / image_width), _clamp01(y / image_height)))
    return out


def format_coord(v: float) -> str:
    """Serialize a normalized coordinate with fixed 6-decimal precision."""
    try:
        f = float(v)
    except (TypeError, ValueError):
        return "0"
    if not math.isfinite(f):
        return "0"
    return f"{f:.6f}"


def format_coords(values: Iterable[float]) -> List[str]:
    return [format_coord(v) for v in values]

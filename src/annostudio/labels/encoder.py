from __future__ import annotations

"""Per-image conversion of raw annotations into normalized label lines."""

from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional

from annostudio.core.types import EMPTY_REASON_MESSAGES, EmptyReason, LabelKind, ResolveReason
from annostudio.labels.geometry import (
    BoundingBox,
    Polygon,
    format_coord,
    normalize_box,
    polygon_to_normalized_points,
)
from annostudio.labels.parse import BOX_TYPES, POLYGON_TYPES, parse_annotations
from annostudio.labels.resolver import CatalogLike, as_catalog, resolve_class


@dataclass(frozen=True)
class LabelStats:
    """Data-quality counters for one image (or a fold over many)."""
    total: int = 0
    missing: int = 0
    mismatched: int = 0

    def __add__(self, other: "LabelStats") -> "LabelStats":
        return LabelStats(
            total=self.total + other.total,
            missing=self.missing + other.missing,
            mismatched=self.mismatched + other.mismatched,
        )

    def to_dict(self) -> dict:
        return {"total": self.total, "missing": self.missing, "mismatched": self.mismatched}


def empty_reason_for(stats: LabelStats) -> EmptyReason:
    """Classify why nothing was exported; remediation differs per reason."""
    if stats.mismatched > 0:
        return EmptyReason.CLASS_MISMATCH
    if stats.missing > 0:
        return EmptyReason.MISSING_CLASS
    return EmptyReason.NO_ANNOTATIONS


@dataclass(frozen=True)
class EncodedLabels:
    lines: List[str] = field(default_factory=list)
    stats: LabelStats = field(default_factory=LabelStats)

    @property
    def has_labels(self) -> bool:
        return bool(self.lines)

    @property
    def text(self) -> str:
        return "\n".join(self.lines) + ("\n" if self.lines else "")

    def empty_reason(self) -> Optional[EmptyReason]:
        if self.has_labels:
            return None
        return empty_reason_for(self.stats)

    def empty_message(self) -> Optional[str]:
        r = self.empty_reason()
        return EMPTY_REASON_MESSAGES[r] if r is not None else None


def line_kind(line: str) -> LabelKind:
    """Detection lines have exactly 5 tokens; anything longer is a segment."""
    return LabelKind.BOX if len(line.split()) == 5 else LabelKind.SEGMENT


def _box_line(idx: int, box: BoundingBox, w: float, h: float) -> str:
    n = normalize_box(box, w, h)
    return " ".join([str(idx), format_coord(n.x), format_coord(n.y), format_coord(n.width), format_coord(n.height)])


def _polygon_line(idx: int, poly: Polygon, w: float, h: float) -> Optional[str]:
    pts = polygon_to_normalized_points(poly.points, w, h)
    if pts is None:
        return None
    tokens = [str(idx)]
    for x, y in pts:
        tokens.append(format_coord(x))
        tokens.append(format_coord(y))
    return " ".join(tokens)


def encode_image(
    annotations: Iterable[Any],
    image_width: float,
    image_height: float,
    catalog: CatalogLike,
) -> EncodedLabels:
    """Encode one image's annotations into label lines + quality counters."""
    cat = as_catalog(catalog)
    lines: List[str] = []
    total = missing = mismatched = 0

    for ann in parse_annotations(annotations):
        if ann.excluded:
            continue
        total += 1

        res = resolve_class(ann, cat)
        if not res.ok:
            if res.reason == ResolveReason.MISMATCH:
                mismatched += 1
            else:
                missing += 1
            continue

        if not (image_width and image_height and image_width > 0 and image_height > 0):
            continue

        if ann.type in BOX_TYPES and isinstance(ann.geometry, BoundingBox):
            lines.append(_box_line(res.index, ann.geometry, image_width, image_height))  # type: ignore[arg-type]
        elif ann.type in POLYGON_TYPES and isinstance(ann.geometry, Polygon):
            line = _polygon_line(res.index, ann.geometry, image_width, image_height)  # type: ignore[arg-type]
            if line is not None:
                lines.append(line)

    return EncodedLabels(lines=lines, stats=LabelStats(total=total, missing=missing, mismatched=mismatched))

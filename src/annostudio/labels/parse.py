from __future__ import annotations

"""Ingest freeform annotation records into a tagged `Annotation`.

This is the only place that knows the raw field spellings the canvas,
legacy imports and model outputs use. Everything downstream works on
`Annotation.geometry` (BoundingBox | Polygon | None) and the extracted
class reference.
"""

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, List, Mapping, Optional

from annostudio.core.types import EXCLUDED_STATUSES, Point
from annostudio.labels.geometry import BoundingBox, Geometry, Polygon

BOX_TYPES = frozenset({"bbox", "rectangle", "box", "rect"})
POLYGON_TYPES = frozenset({"polygon", "segmentation", "brush"})

# Direct (name/label) class fields, in lookup order.
CLASS_NAME_FIELDS = ("class", "label", "class_name", "className", "name", "category", "category_name")
# Numeric class-id fields, in lookup order.
CLASS_ID_FIELDS = ("class_id", "classId", "class_index", "category_id")
CONFIDENCE_FIELDS = ("confidence", "score", "conf")


@dataclass(frozen=True)
class Annotation:
    geometry: Optional[Geometry]
    class_ref: Optional[str] = None
    class_id: Optional[int] = None
    has_class_id_field: bool = False
    confidence: Optional[float] = None
    status: Optional[str] = None
    type: Optional[str] = None
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def excluded(self) -> bool:
        return (self.status or "").strip().lower() in EXCLUDED_STATUSES

    @property
    def has_class_info(self) -> bool:
        return self.class_ref is not None or self.has_class_id_field

    @property
    def box(self) -> Optional[BoundingBox]:
        """Axis-aligned extent used for spatial matching."""
        if isinstance(self.geometry, BoundingBox):
            return self.geometry if self.geometry.is_finite() else None
        if isinstance(self.geometry, Polygon) and self.geometry.is_valid():
            return self.geometry.bounds()
        return None


def _as_float(v: Any) -> Optional[float]:
    if v is None or isinstance(v, bool):
        return None
    try:
        return float(v)
    except (TypeError, ValueError):
        return None


def _all_float(rec: Mapping[str, Any], keys: Iterable[str]) -> Optional[List[float]]:
    vals = [_as_float(rec.get(k)) for k in keys]
    if any(v is None for v in vals):
        return None
    return vals  # type: ignore[return-value]


def _has_keys(rec: Mapping[str, Any], keys: Iterable[str]) -> bool:
    return all(k in rec for k in keys)


def parse_box(rec: Mapping[str, Any]) -> Optional[BoundingBox]:
    """Read any supported box encoding; None when fields are missing or non-finite."""
    if _has_keys(rec, ("x", "y")) and ("width" in rec or "w" in rec):
        vals = _all_float(
            rec, ("x", "y", "width" if "width" in rec else "w", "height" if "height" in rec else "h")
        )
        box = BoundingBox(*vals) if vals else None
    elif _has_keys(rec, ("x1", "y1", "x2", "y2")):
        vals = _all_float(rec, ("x1", "y1", "x2", "y2"))
        box = BoundingBox.from_xyxy(*vals) if vals else None
    elif _has_keys(rec, ("cx", "cy")) or _has_keys(rec, ("center_x", "center_y")):
        cx_key, cy_key = ("cx", "cy") if "cx" in rec else ("center_x", "center_y")
        vals = _all_float(rec, (cx_key, cy_key, "width" if "width" in rec else "w", "height" if "height" in rec else "h"))
        box = BoundingBox.from_center(*vals) if vals else None
    else:
        box = None

    if box is None or not box.is_finite():
        return None
    return box


def _parse_point(p: Any) -> Optional[Point]:
    if isinstance(p, Mapping):
        x, y = _as_float(p.get("x")), _as_float(p.get("y"))
    elif isinstance(p, (list, tuple)) and len(p) >= 2:
        x, y = _as_float(p[0]), _as_float(p[1])
    else:
        return None
    if x is None or y is None:
        return None
    return (x, y)


def parse_polygon(rec: Mapping[str, Any]) -> Optional[Polygon]:
    pts = rec.get("points")
    if not isinstance(pts, (list, tuple)):
        return None
    parsed = [_parse_point(p) for p in pts]
    if any(p is None for p in parsed):
        return None
    poly = Polygon(tuple(parsed))  # type: ignore[arg-type]
    return poly if poly.is_valid() else None


def _class_ref(rec: Mapping[str, Any]) -> Optional[str]:
    for k in CLASS_NAME_FIELDS:
        v = rec.get(k)
        if v is None or isinstance(v, bool):
            continue
        if isinstance(v, Mapping):
            v = v.get("name")
            if v is None:
                continue
        s = str(v)
        if s.strip():
            return s
    return None


def _class_id(rec: Mapping[str, Any]) -> tuple[bool, Optional[int]]:
    for k in CLASS_ID_FIELDS:
        if k not in rec or rec[k] is None or rec[k] == "":
            continue
        f = _as_float(rec[k])
        if f is None or not math.isfinite(f) or f != int(f):
            return True, None
        return True, int(f)
    return False, None


def _kind(rec: Mapping[str, Any]) -> Optional[str]:
    t = rec.get("type")
    if isinstance(t, str) and t.strip():
        return t.strip().lower()
    if "points" in rec:
        return "polygon"
    if any(k in rec for k in ("x", "x1", "cx", "center_x")):
        return "bbox"
    return None


def parse_annotation(record: Mapping[str, Any]) -> Annotation:
    """Build an `Annotation` from a raw record. Never mutates `record`."""
    kind = _kind(record)
    geometry: Optional[Geometry] = None
    if kind in BOX_TYPES:
        geometry = parse_box(record)
    elif kind in POLYGON_TYPES:
        geometry = parse_polygon(record)

    has_id, class_id = _class_id(record)
    status = record.get("status")
    return Annotation(
        geometry=geometry,
        class_ref=_class_ref(record),
        class_id=class_id,
        has_class_id_field=has_id,
        confidence=next((c for c in (_as_float(record.get(k)) for k in CONFIDENCE_FIELDS) if c is not None), None),
        status=str(status) if status is not None else None,
        type=kind,
        raw=MappingProxyType(dict(record)),
    )


def parse_annotations(records: Iterable[Any]) -> List[Annotation]:
    """Parse a per-image list, dropping entries that aren't mappings at all."""
    out: List[Annotation] = []
    for r in records or []:
        if isinstance(r, Annotation):
            out.append(r)
        elif isinstance(r, Mapping):
            out.append(parse_annotation(r))
    return out

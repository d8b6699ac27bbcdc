from __future__ import annotations

"""Image-level records exchanged with the storage collaborator."""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, Optional


def _first(rec: Mapping[str, Any], keys: tuple, default: Any = None) -> Any:
    for k in keys:
        v = rec.get(k)
        if v is not None and v != "":
            return v
    return default


def _dim(v: Any) -> Optional[int]:
    try:
        i = int(float(v))
    except (TypeError, ValueError, OverflowError):
        return None
    return i if i > 0 else None


@dataclass
class ImageRecord:
    """One image of an annotation step plus its raw annotation list."""
    image_id: str
    image_path: str
    width: Optional[int] = None
    height: Optional[int] = None
    group: Optional[str] = None
    annotations: List[Dict[str, Any]] = field(default_factory=list)

    @staticmethod
    def from_dict(rec: Mapping[str, Any]) -> "ImageRecord":
        image_path = str(_first(rec, ("image_path", "path", "file", "file_name", "url"), ""))
        image_id = str(_first(rec, ("image_id", "id"), "") or image_path)
        anns = _first(rec, ("annotations", "labels"), [])
        return ImageRecord(
            image_id=image_id,
            image_path=image_path,
            width=_dim(_first(rec, ("width", "image_width", "naturalWidth"))),
            height=_dim(_first(rec, ("height", "image_height", "naturalHeight"))),
            group=_first(rec, ("group", "tag", "split", "image_group")),
            annotations=[a for a in anns if isinstance(a, Mapping)] if isinstance(anns, list) else [],
        )


@dataclass
class ExportRecord:
    """One exported image. `label_path` mirrors `image_path` under the labels root."""
    image_id: str
    image_path: str
    label_path: str
    split: str
    label_lines: List[str] = field(default_factory=list)
    has_labels: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

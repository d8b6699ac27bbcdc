from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from annostudio.core.io.json import read_json
from annostudio.domain.records import ImageRecord


def load_image_records(path: str | Path) -> Tuple[List[ImageRecord], Optional[List[str]]]:
    """Load an image manifest.

    Accepts either a bare list of image objects or
    {"images": [...], "classes": [...]}. Returns (images, classes or None).
    """
    obj = read_json(path)
    classes: Optional[List[str]] = None
    if isinstance(obj, dict):
        raw_classes = obj.get("classes")
        if isinstance(raw_classes, list):
            classes = [str(c) for c in raw_classes]
        items = obj.get("images", [])
    else:
        items = obj
    if not isinstance(items, list):
        raise ValueError(f"Image manifest must hold a list of images: {path}")
    return [ImageRecord.from_dict(it) for it in items if isinstance(it, dict)], classes


def load_annotation_map(path: str | Path) -> Dict[str, List[Dict[str, Any]]]:
    """Load per-image annotations as image_id -> list of raw records.

    Accepts {image_id: [...]} or a list of {"image_id", "annotations"|"predictions"|"detections"}.
    """
    obj = read_json(path)
    out: Dict[str, List[Dict[str, Any]]] = {}
    if isinstance(obj, dict):
        items = obj.items()
        for image_id, anns in items:
            if isinstance(anns, list):
                out[str(image_id)] = [a for a in anns if isinstance(a, dict)]
        return out

    if not isinstance(obj, list):
        raise ValueError(f"Unsupported annotation file layout: {path}")
    for it in obj:
        if not isinstance(it, dict):
            continue
        image_id = str(it.get("image_id", it.get("id", "")))
        anns = it.get("annotations", it.get("predictions", it.get("detections", [])))
        if isinstance(anns, list):
            out.setdefault(image_id, []).extend(a for a in anns if isinstance(a, dict))
    return out

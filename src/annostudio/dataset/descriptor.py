from __future__ import annotations

"""Dataset descriptor (data.yaml) consumed by the training collaborator."""

from pathlib import Path
from typing import Any, Dict, Iterable

import yaml

from annostudio.labels.resolver import CatalogLike, as_catalog


def build_descriptor(
    dataset_root: str | Path,
    catalog: CatalogLike,
    *,
    images_prefix: str = "images",
    used_splits: Iterable[str] = ("train", "val"),
) -> Dict[str, Any]:
    """`names` is built from catalog order; it must match every label line index."""
    cat = as_catalog(catalog)
    used = set(used_splits)
    payload: Dict[str, Any] = {
        "path": str(dataset_root),
        "train": f"{images_prefix}/train",
        # Training needs a val entry; fall back to train when none was tagged.
        "val": f"{images_prefix}/val" if "val" in used else f"{images_prefix}/train",
    }
    if "test" in used:
        payload["test"] = f"{images_prefix}/test"
    payload["nc"] = len(cat)
    payload["names"] = cat.names_mapping()
    return payload


def dump_descriptor(payload: Dict[str, Any]) -> str:
    return yaml.safe_dump(payload, sort_keys=False, allow_unicode=True)


def load_descriptor(path: str | Path) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"dataset descriptor not found: {p}")
    data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    names = data.get("names")
    if isinstance(names, list):
        data["names"] = {i: n for i, n in enumerate(names)}
    elif isinstance(names, dict):
        data["names"] = {int(k): v for k, v in names.items()}
    return data

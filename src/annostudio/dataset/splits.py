from __future__ import annotations

from typing import Any, Dict

from annostudio.core.types import Split

SPLIT_ALIASES: Dict[str, Split] = {
    "training": Split.TRAIN,
    "train": Split.TRAIN,
    "validation": Split.VAL,
    "inference": Split.VAL,
    "val": Split.VAL,
    "test": Split.TEST,
    "testing": Split.TEST,
}


def normalize_split(tag: Any) -> Split:
    """Map a free-text image group tag to a split; unknown tags train."""
    if tag is None:
        return Split.TRAIN
    return SPLIT_ALIASES.get(str(tag).strip().lower(), Split.TRAIN)

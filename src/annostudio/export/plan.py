from __future__ import annotations

import re
from pathlib import PurePosixPath

from annostudio.core.schema import StorageCfg
from annostudio.domain.records import ExportRecord, ImageRecord
from annostudio.labels.encoder import EncodedLabels


def safe_stem(image_id: str) -> str:
    cleaned = re.sub(r"[^a-zA-Z0-9._-]+", "_", image_id.strip())
    cleaned = cleaned.strip("._-")
    return cleaned or "image"


def image_suffix(image: ImageRecord, reencode: bool) -> str:
    if reencode:
        return ".jpg"
    suffix = PurePosixPath(image.image_path.split("?", 1)[0]).suffix.lower()
    return suffix or ".jpg"


def plan_record(image: ImageRecord, split: str, storage: StorageCfg, *, reencode: bool = False) -> ExportRecord:
    """Paths differ only in the top-level directory and the extension."""
    stem = safe_stem(image.image_id)
    return ExportRecord(
        image_id=image.image_id,
        image_path=f"{storage.images_prefix}/{split}/{stem}{image_suffix(image, reencode)}",
        label_path=f"{storage.labels_prefix}/{split}/{stem}.txt",
        split=split,
    )


def with_labels(record: ExportRecord, encoded: EncodedLabels) -> ExportRecord:
    record.label_lines = list(encoded.lines)
    record.has_labels = encoded.has_labels
    return record

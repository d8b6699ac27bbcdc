from __future__ import annotations

"""Pre-training dataset summary: splits, labeled counts, label-type mixing."""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterable, List

from annostudio.core.types import LabelKind, Split
from annostudio.dataset.splits import normalize_split
from annostudio.domain.records import ImageRecord
from annostudio.labels.encoder import LabelStats, encode_image, line_kind
from annostudio.labels.parse import parse_annotations
from annostudio.labels.resolver import CatalogLike, as_catalog


@dataclass
class DatasetSummary:
    total: int = 0
    labeled: int = 0
    splits: Dict[str, int] = field(default_factory=lambda: {s.value: 0 for s in Split})
    classes_count: int = 0
    label_types: Dict[str, int] = field(default_factory=lambda: {"boxes": 0, "segments": 0})
    class_stats: Dict[str, int] = field(default_factory=lambda: LabelStats().to_dict())
    warnings: List[str] = field(default_factory=list)

    @property
    def ready(self) -> bool:
        """Single gate consulted before a training run can start."""
        return self.total > 0 and self.labeled > 0 and self.classes_count > 0

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["ready"] = self.ready
        return d


def _has_raw_annotations(image: ImageRecord) -> bool:
    return any(not a.excluded for a in parse_annotations(image.annotations))


def summarize(images: Iterable[ImageRecord], catalog: CatalogLike) -> DatasetSummary:
    """Scan all images of a step. Pure; performs no I/O."""
    cat = as_catalog(catalog)
    out = DatasetSummary(classes_count=len(cat))
    stats = LabelStats()
    boxes = segments = 0
    annotated_without_classes = 0

    for image in images:
        out.total += 1
        out.splits[normalize_split(image.group).value] += 1

        if len(cat) == 0:
            # Degraded check: annotations exist but no classes are configured.
            if _has_raw_annotations(image):
                out.labeled += 1
                annotated_without_classes += 1
            continue

        # Dimensions only scale coordinates; unknown sizes still count as labeled.
        enc = encode_image(image.annotations, image.width or 1, image.height or 1, cat)
        stats = stats + enc.stats
        if enc.has_labels:
            out.labeled += 1
        for line in enc.lines:
            if line_kind(line) == LabelKind.BOX:
                boxes += 1
            else:
                segments += 1

    out.label_types = {"boxes": boxes, "segments": segments}
    out.class_stats = stats.to_dict()

    if boxes and segments:
        out.warnings.append(
            f"Mixed label types: {boxes} box and {segments} segment labels. "
            "Training will treat every label as a segment; convert to one type."
        )
    if stats.mismatched:
        out.warnings.append(f"{stats.mismatched} annotation(s) use classes that are not in the class list.")
    if stats.missing:
        out.warnings.append(f"{stats.missing} annotation(s) have no class assigned.")
    if annotated_without_classes:
        out.warnings.append(
            f"{annotated_without_classes} image(s) have annotations but no classes are configured."
        )
    if out.total and out.splits[Split.VAL.value] == 0:
        out.warnings.append("No validation images; tag some images as 'validation'.")
    return out

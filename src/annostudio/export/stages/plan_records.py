from __future__ import annotations

from typing import List, Set, Tuple

from annostudio.core.pipeline.base import StageContext
from annostudio.dataset.splits import normalize_split
from annostudio.domain.records import ExportRecord, ImageRecord
from annostudio.export.plan import plan_record


def _dedupe(record: ExportRecord, seen: Set[str]) -> ExportRecord:
    # Distinct image ids can sanitize to the same file stem; a renamed stem
    # is reserved too so a later image can't land on it.
    base = record.label_path.rsplit(".", 1)[0]
    key, n = base, 0
    while key in seen:
        n += 1
        key = f"{base}_{n}"
    seen.add(key)
    if n == 0:
        return record
    img_base, img_ext = record.image_path.rsplit(".", 1)
    lbl_base, lbl_ext = record.label_path.rsplit(".", 1)
    record.image_path = f"{img_base}_{n}.{img_ext}"
    record.label_path = f"{lbl_base}_{n}.{lbl_ext}"
    return record


class PlanRecords:
    name = "PlanRecords"

    def run(self, ctx: StageContext) -> None:
        cfg = ctx.cfg
        images: List[ImageRecord] = ctx.state["images"]
        seen: Set[str] = set()
        planned: List[Tuple[ImageRecord, ExportRecord]] = []
        for image in images:
            split = normalize_split(image.group).value
            rec = plan_record(image, split, cfg.storage, reencode=cfg.reencode_images)
            planned.append((image, _dedupe(rec, seen)))
        ctx.state["planned"] = planned
        ctx.log("planned", {"images": len(planned)})

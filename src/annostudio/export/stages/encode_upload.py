from __future__ import annotations

import threading
from typing import Any, Dict, List, Optional, Tuple

from annostudio.core.errors import (
    AnnotationEngineError,
    EmptyImageLabelsError,
    ExportCancelledError,
    ExportPoolError,
    ImageSourceError,
    NoLabeledImagesError,
)
from annostudio.core.io.images import image_size
from annostudio.core.pipeline.base import StageContext
from annostudio.core.types import EMPTY_REASON_MESSAGES
from annostudio.domain.records import ExportRecord, ImageRecord
from annostudio.export.plan import with_labels
from annostudio.export.pool import run_bounded
from annostudio.labels.encoder import EncodedLabels, LabelStats, empty_reason_for, encode_image
from annostudio.labels.resolver import ClassCatalog

Outcome = Tuple[ExportRecord, EncodedLabels]


def _dimensions(image: ImageRecord) -> Tuple[int, int]:
    if image.width and image.height:
        return image.width, image.height
    size = image_size(image.image_path)
    if size is None:
        raise ImageSourceError(
            f"Image '{image.image_id}' has no dimensions and can't be read: {image.image_path}",
            image_id=image.image_id,
        )
    return size


class EncodeAndUpload:
    """Encode labels and upload image + label file, one image per worker turn."""
    name = "EncodeAndUpload"

    def run(self, ctx: StageContext) -> None:
        cfg = ctx.cfg
        catalog: ClassCatalog = ctx.state["catalog"]
        planned: List[Tuple[ImageRecord, ExportRecord]] = ctx.state["planned"]
        sink = ctx.assets["sink"]
        cancel: Optional[threading.Event] = ctx.assets.get("cancel")

        def work(item: Tuple[ImageRecord, ExportRecord]) -> Outcome:
            image, record = item
            w, h = _dimensions(image)
            encoded = encode_image(image.annotations, w, h, catalog)
            with_labels(record, encoded)

            if not encoded.has_labels:
                reason = encoded.empty_reason()
                if not cfg.skip_unlabeled:
                    raise EmptyImageLabelsError(image.image_id, reason, **encoded.stats.to_dict())
                ctx.log("image_skipped", {"image_id": image.image_id, "reason": reason.value})
                return record, encoded

            sink.put_image(image.image_path, record.image_path)
            sink.put_text(record.label_path, encoded.text)
            ctx.log(
                "image_done",
                {"image_id": image.image_id, "split": record.split, "lines": len(encoded.lines)},
            )
            return record, encoded

        pool = run_bounded(planned, work, concurrency=cfg.concurrency, cancel=cancel)

        if pool.failures:
            failures: List[Dict[str, Any]] = []
            for idx, err in pool.failures:
                image_id = planned[idx][0].image_id
                reason = err.reason if isinstance(err, AnnotationEngineError) else type(err).__name__
                failures.append({"image_id": image_id, "reason": reason, "message": str(err)})
                ctx.log("image_failed", failures[-1])
            raise ExportPoolError(
                completed=pool.completed,
                failed=len(pool.failures),
                not_started=pool.not_started,
                failures=failures,
            )
        if pool.cancelled and pool.not_started:
            raise ExportCancelledError(completed=pool.completed, not_started=pool.not_started)

        stats = LabelStats()
        exported: List[ExportRecord] = []
        skipped: List[Dict[str, Any]] = []
        for out in pool.results:
            if out is None:
                continue
            record, encoded = out
            stats = stats + encoded.stats
            if record.has_labels:
                exported.append(record)
            else:
                reason = encoded.empty_reason()
                skipped.append(
                    {"image_id": record.image_id, "reason": reason.value, "message": EMPTY_REASON_MESSAGES[reason]}
                )

        if not exported:
            raise NoLabeledImagesError(empty_reason_for(stats), images=len(planned), **stats.to_dict())

        ctx.state["exported"] = exported
        ctx.state["skipped"] = skipped
        ctx.state["stats"] = stats

from __future__ import annotations

from typing import Any, Dict, List

from annostudio.core.pipeline.base import StageContext
from annostudio.labels.parse import CONFIDENCE_FIELDS
from annostudio.review.matching import ImageEvaluation, evaluate_image


def _passes_conf(rec: Dict[str, Any], conf_threshold: float) -> bool:
    if conf_threshold <= 0.0:
        return True
    for k in CONFIDENCE_FIELDS:
        v = rec.get(k)
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return float(v) >= conf_threshold
    # Predictions without a score are kept.
    return True


class MatchImages:
    name = "MatchImages"

    def run(self, ctx: StageContext) -> None:
        cfg = ctx.cfg
        preds: Dict[str, List[Dict[str, Any]]] = ctx.state["predictions"]
        gts: Dict[str, List[Dict[str, Any]]] = ctx.state["ground_truths"]
        catalog = cfg.classes or None

        evaluations: List[ImageEvaluation] = []
        for image_id in sorted(set(preds) | set(gts)):
            image_preds = [p for p in preds.get(image_id, []) if _passes_conf(p, cfg.conf_threshold)]
            evaluations.append(
                evaluate_image(
                    image_preds,
                    gts.get(image_id, []),
                    cfg.iou_threshold,
                    image_id=image_id,
                    catalog=catalog,
                )
            )
        ctx.state["evaluations"] = evaluations
        ctx.log("matched", {"images": len(evaluations)})

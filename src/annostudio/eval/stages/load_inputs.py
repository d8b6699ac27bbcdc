from __future__ import annotations

from annostudio.core.io.records import load_annotation_map
from annostudio.core.pipeline.base import StageContext


class LoadInputs:
    """Stage that loads predictions and ground truth keyed by image id."""
    name = "LoadInputs"

    def run(self, ctx: StageContext) -> None:
        cfg = ctx.cfg
        preds = load_annotation_map(cfg.predictions_path)
        gts = load_annotation_map(cfg.ground_truth_path)
        if not gts:
            raise FileNotFoundError(f"No ground truth images found in: {cfg.ground_truth_path}")

        missing_gt = sorted(set(preds) - set(gts))
        if missing_gt:
            ctx.log("gt_missing", {"images": missing_gt[:20], "count": len(missing_gt)})

        ctx.state["predictions"] = preds
        ctx.state["ground_truths"] = gts

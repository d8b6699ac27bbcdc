from __future__ import annotations

from pathlib import Path

from annostudio.core.io import dump_json, ensure_dir, write_csv
from annostudio.core.pipeline.base import StageContext
from annostudio.review.charts import class_metrics_bars, confusion_heatmap

CLASS_METRIC_COLS = ["class_name", "tp", "fp", "fn", "precision", "recall", "f1", "support"]


class ExportReport:
    name = "ExportReport"

    def run(self, ctx: StageContext) -> None:
        cfg = ctx.cfg
        out_root = ensure_dir(Path(cfg.out_dir) / f"review_{cfg.timestamp}")
        matrix = ctx.state["matrix"]
        rows = ctx.state["class_rows"]
        overall = ctx.state["overall"]

        dump_json(out_root / "confusion.json", matrix.to_dict())
        write_csv(
            out_root / "confusion.csv",
            [{"actual": c.actual, "predicted": c.predicted, "count": c.count} for c in matrix.cells],
            ["actual", "predicted", "count"],
        )
        write_csv(
            out_root / "class_metrics.csv",
            [r.to_dict() for r in rows] + [overall.to_dict()],
            CLASS_METRIC_COLS,
        )
        dump_json(
            out_root / "metrics.json",
            {
                "iou_threshold": cfg.iou_threshold,
                "conf_threshold": cfg.conf_threshold,
                "per_class": [r.to_dict() for r in rows],
                "overall": overall.to_dict(),
            },
        )

        if cfg.charts.enabled and matrix.classes:
            charts_dir = ensure_dir(out_root / "charts")
            confusion_heatmap(charts_dir / "confusion.png", "Confusion matrix", matrix)
            if rows:
                class_metrics_bars(charts_dir / "class_metrics.png", "Per-class metrics", rows)

        ctx.state["out_root"] = out_root

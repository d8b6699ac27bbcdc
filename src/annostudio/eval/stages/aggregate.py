from __future__ import annotations

from annostudio.core.pipeline.base import StageContext
from annostudio.review.confusion import aggregate
from annostudio.review.metrics import class_metrics


class AggregateResults:
    name = "AggregateResults"

    def run(self, ctx: StageContext) -> None:
        evaluations = ctx.state["evaluations"]
        matrix = aggregate(evaluations, max_examples=ctx.cfg.max_examples)
        rows, overall = class_metrics(evaluations)
        ctx.state["matrix"] = matrix
        ctx.state["class_rows"] = rows
        ctx.state["overall"] = overall
        ctx.log(
            "aggregated",
            {
                "classes": matrix.classes,
                "total": matrix.total,
                "conserved": matrix.is_conserved(),
                "precision": overall.precision,
                "recall": overall.recall,
            },
        )

from __future__ import annotations

from pathlib import Path
from typing import Optional

from annostudio.core.pipeline.base import PipelineRunner, StageContext
from annostudio.core.pipeline.log import JsonlLogger, LogFn
from annostudio.core.schema import EvalConfig
from annostudio.eval.stages.aggregate import AggregateResults
from annostudio.eval.stages.export_report import ExportReport
from annostudio.eval.stages.load_inputs import LoadInputs
from annostudio.eval.stages.match_images import MatchImages


class EvalPipeline:
    """Review a validation set: match, aggregate, export."""

    def run(self, cfg: EvalConfig, log: Optional[LogFn] = None) -> Path:
        """Run the review and return the output directory."""
        runner = PipelineRunner(
            stages=[
                LoadInputs(),
                MatchImages(),
                AggregateResults(),
                ExportReport(),
            ],
            fail_fast=True,
        )

        out_dir = Path(cfg.out_dir) / f"review_{cfg.timestamp}"
        if log is None:
            log = JsonlLogger(out_dir / "review.log.jsonl")

        ctx = StageContext(cfg=cfg, assets={"log": log})
        runner.run(ctx)
        return ctx.state["out_root"]

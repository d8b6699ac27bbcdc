from __future__ import annotations

import json
from collections import Counter
from typing import List

from annostudio.core.pipeline.base import StageContext
from annostudio.dataset.descriptor import build_descriptor, dump_descriptor
from annostudio.domain.records import ExportRecord


class WriteDescriptor:
    """data.yaml + classes.txt, both in catalog order."""
    name = "WriteDescriptor"

    def run(self, ctx: StageContext) -> None:
        cfg = ctx.cfg
        sink = ctx.assets["sink"]
        exported: List[ExportRecord] = ctx.state["exported"]
        catalog = ctx.state["catalog"]

        splits = Counter(r.split for r in exported)
        descriptor = build_descriptor(
            sink.root,
            catalog,
            images_prefix=cfg.storage.images_prefix,
            used_splits=[s for s, n in splits.items() if n],
        )
        sink.put_text(cfg.descriptor_name, dump_descriptor(descriptor))
        sink.put_text("classes.txt", "\n".join(catalog.names) + "\n")

        ctx.state["splits"] = {s: splits.get(s, 0) for s in ("train", "val", "test")}
        ctx.state["descriptor"] = descriptor


class WriteSummary:
    name = "WriteSummary"

    def run(self, ctx: StageContext) -> None:
        sink = ctx.assets["sink"]
        summary = {
            "dataset_name": ctx.cfg.dataset_name,
            "step": ctx.cfg.step,
            "exported": len(ctx.state["exported"]),
            "skipped": ctx.state["skipped"],
            "splits": ctx.state["splits"],
            "class_stats": ctx.state["stats"].to_dict(),
            "classes": ctx.state["catalog"].names,
        }
        sink.put_text("export_summary.json", json.dumps(summary, ensure_ascii=False, indent=2) + "\n")
        ctx.state["summary"] = summary
        ctx.log("export_done", {k: summary[k] for k in ("exported", "splits", "class_stats")})

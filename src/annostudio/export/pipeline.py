from __future__ import annotations

import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from annostudio.core.pipeline.base import PipelineRunner, StageContext
from annostudio.core.pipeline.log import JsonlLogger, LogFn
from annostudio.core.schema import ExportConfig
from annostudio.domain.records import ExportRecord, ImageRecord
from annostudio.export.sink import DatasetSink, LocalDatasetSink
from annostudio.export.stages.encode_upload import EncodeAndUpload
from annostudio.export.stages.plan_records import PlanRecords
from annostudio.export.stages.validate_catalog import ValidateCatalog
from annostudio.export.stages.write_outputs import WriteDescriptor, WriteSummary
from annostudio.labels.encoder import LabelStats
from annostudio.labels.resolver import CatalogLike


@dataclass
class ExportResult:
    root: Path
    records: List[ExportRecord]
    skipped: List[Dict[str, Any]] = field(default_factory=list)
    splits: Dict[str, int] = field(default_factory=dict)
    stats: LabelStats = field(default_factory=LabelStats)
    descriptor: Dict[str, Any] = field(default_factory=dict)

    @property
    def ready(self) -> bool:
        return bool(self.records)


class ExportPipeline:
    """Export one annotation step as a class-indexed training dataset.

    Configuration is passed in explicitly; nothing is read from the environment.
    """

    def __init__(self, cfg: ExportConfig, sink: Optional[DatasetSink] = None, log: Optional[LogFn] = None) -> None:
        self.cfg = cfg
        if sink is None:
            root = Path(cfg.storage.root) / f"{cfg.dataset_name}_{cfg.timestamp}"
            sink = LocalDatasetSink(root, reencode=cfg.reencode_images, jpeg_quality=cfg.jpeg_quality)
        self.sink = sink
        self.log = log if log is not None else JsonlLogger(Path(sink.root) / "export.log.jsonl")

    def run(
        self,
        images: Iterable[ImageRecord],
        catalog: CatalogLike,
        cancel: Optional[threading.Event] = None,
    ) -> ExportResult:
        """Run all stages; raises a typed AnnotationEngineError on failure."""
        runner = PipelineRunner(
            stages=[
                ValidateCatalog(),
                PlanRecords(),
                EncodeAndUpload(),
                WriteDescriptor(),
                WriteSummary(),
            ],
            fail_fast=True,
        )
        ctx = StageContext(
            cfg=self.cfg,
            state={"images": list(images), "catalog": catalog},
            assets={"log": self.log, "sink": self.sink, "cancel": cancel},
        )
        runner.run(ctx)
        return ExportResult(
            root=Path(self.sink.root),
            records=ctx.state["exported"],
            skipped=ctx.state["skipped"],
            splits=ctx.state["splits"],
            stats=ctx.state["stats"],
            descriptor=ctx.state["descriptor"],
        )

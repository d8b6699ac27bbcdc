from __future__ import annotations

"""Pydantic schema definitions for export and review configuration."""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from annostudio.core.types import IOU_THRESHOLD


class StorageCfg(BaseModel):
    """Where exported images and labels land."""

    kind: Literal["local"] = "local"
    root: str = "exports"
    images_prefix: str = "images"
    labels_prefix: str = "labels"

    @field_validator("images_prefix", "labels_prefix")
    @classmethod
    def _strip_slashes(cls, v: str) -> str:
        v = v.strip().strip("/")
        if not v:
            raise ValueError("prefix must not be empty")
        return v


class ExportConfig(BaseModel):
    """Dataset export settings. Passed explicitly into ExportPipeline."""

    dataset_name: str = "dataset"
    step: Optional[str] = None

    # Collaborator-provided inputs (CLI only; the pipeline takes objects).
    images_path: Optional[str] = None
    classes: List[str] = Field(default_factory=list)

    # Bounded worker pool size for encode + upload.
    concurrency: int = Field(default=4, ge=1, le=64)

    reencode_images: bool = False
    jpeg_quality: int = Field(default=95, ge=1, le=100)

    # Images without label lines are reported and skipped instead of failing.
    skip_unlabeled: bool = True

    descriptor_name: str = "data.yaml"
    storage: StorageCfg = Field(default_factory=StorageCfg)
    timestamp: str = Field(
        default_factory=lambda: datetime.now().strftime("%Y%m%d_%H%M%S"),
        description="Timestamp used to isolate export folders.",
    )


class ChartsCfg(BaseModel):
    """Optional chart generation settings for review."""

    enabled: bool = True


class EvalConfig(BaseModel):
    """Validation review: predictions vs ground truth."""

    predictions_path: str
    ground_truth_path: str
    classes: List[str] = Field(default_factory=list)

    iou_threshold: float = Field(default=IOU_THRESHOLD, gt=0.0, le=1.0)
    conf_threshold: float = Field(default=0.0, ge=0.0, le=1.0)
    max_examples: int = Field(default=3, ge=0)

    out_dir: str = "runs"
    charts: ChartsCfg = Field(default_factory=ChartsCfg)
    timestamp: str = Field(
        default_factory=lambda: datetime.now().strftime("%Y%m%d_%H%M%S"),
        description="Timestamp used to isolate review output folders.",
    )

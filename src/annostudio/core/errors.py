from __future__ import annotations

"""Typed failures raised across the engine's public contracts.

Geometry and class defects on single annotations are counted, never raised.
Everything here is an image-level or catalog-level failure that a caller is
expected to act on through `reason`.
"""

from typing import Any, Dict, List, Optional

from annostudio.core.types import EMPTY_REASON_MESSAGES, EmptyReason


class AnnotationEngineError(Exception):
    """Base class. `reason` is a stable machine-readable code."""

    reason: str = "engine_error"

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.context: Dict[str, Any] = context

    def to_dict(self) -> Dict[str, Any]:
        return {"reason": self.reason, "message": str(self), **self.context}


class CatalogError(AnnotationEngineError):
    """Class catalog is malformed (e.g. duplicate names)."""

    reason = "invalid_catalog"


class NoClassesConfiguredError(AnnotationEngineError):
    """Export cannot produce class indices without a class catalog."""

    reason = "no_classes_configured"

    def __init__(self, step: Optional[str] = None) -> None:
        where = f" for step '{step}'" if step else ""
        super().__init__(
            f"No classes are configured{where}. Add at least one class before exporting.",
            step=step,
        )


class EmptyImageLabelsError(AnnotationEngineError):
    """A single image produced zero label lines."""

    def __init__(self, image_id: str, empty_reason: EmptyReason, *, total: int, missing: int, mismatched: int) -> None:
        self.empty_reason = empty_reason
        self.reason = empty_reason.value
        super().__init__(
            f"Image '{image_id}': {EMPTY_REASON_MESSAGES[empty_reason]}",
            image_id=image_id,
            total=total,
            missing=missing,
            mismatched=mismatched,
        )


class NoLabeledImagesError(AnnotationEngineError):
    """Not a single image in the export produced labels."""

    def __init__(self, empty_reason: EmptyReason, *, images: int, total: int, missing: int, mismatched: int) -> None:
        self.empty_reason = empty_reason
        self.reason = empty_reason.value
        super().__init__(
            f"No labeled images to export ({images} images scanned). {EMPTY_REASON_MESSAGES[empty_reason]}",
            images=images,
            total=total,
            missing=missing,
            mismatched=mismatched,
        )


class ExportPoolError(AnnotationEngineError):
    """At least one image failed inside the bounded export pool.

    Files uploaded before the failure are left in place. `failures` holds
    one {"image_id", "reason", "message"} dict per failed image.
    """

    reason = "partial_export_failure"

    def __init__(self, *, completed: int, failed: int, not_started: int, failures: List[Dict[str, Any]]) -> None:
        self.failures = failures
        first = ""
        if failures:
            first = f" First failure: {failures[0]['image_id']}: {failures[0]['message']}"
        super().__init__(
            f"Export aborted: {failed} image(s) failed, {completed} completed, {not_started} not started.{first}",
            completed=completed,
            failed=failed,
            not_started=not_started,
        )


class ImageSourceError(AnnotationEngineError):
    """Source image is unreadable or its dimensions are unknown."""

    reason = "image_unreadable"


class ExportCancelledError(AnnotationEngineError):
    """The caller cancelled the export; in-flight images were allowed to finish."""

    reason = "export_cancelled"

    def __init__(self, *, completed: int, not_started: int) -> None:
        super().__init__(
            f"Export cancelled after {completed} image(s); {not_started} not started.",
            completed=completed,
            not_started=not_started,
        )

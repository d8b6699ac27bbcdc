from __future__ import annotations

"""Greedy per-image matching of predictions to ground truth by IoU."""

from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from annostudio.core.types import IOU_THRESHOLD, Outcome
from annostudio.labels.geometry import BoundingBox, iou
from annostudio.labels.parse import Annotation, parse_annotations
from annostudio.labels.resolver import CatalogLike, class_label


@dataclass(frozen=True)
class MatchResult:
    """Outcome for one prediction or one ground truth.

    `matched_index` points into the other side's list (the claimed ground
    truth for a prediction, the claiming prediction for a ground truth).
    """
    index: int
    class_name: str
    outcome: Outcome
    matched: bool = False
    matched_index: Optional[int] = None
    iou: float = 0.0
    confidence: Optional[float] = None


@dataclass(frozen=True)
class ImageEvaluation:
    image_id: str
    predictions: List[MatchResult] = field(default_factory=list)
    ground_truths: List[MatchResult] = field(default_factory=list)

    def count(self, outcome: Outcome) -> int:
        if outcome == Outcome.FALSE_NEGATIVE:
            return sum(1 for g in self.ground_truths if g.outcome == outcome)
        return sum(1 for p in self.predictions if p.outcome == outcome)

    @property
    def unmatched_ground_truths(self) -> List[MatchResult]:
        return [g for g in self.ground_truths if not g.matched]


def _usable(annotations: Iterable[Any], catalog: Optional[CatalogLike]) -> List[Tuple[str, BoundingBox, Optional[float]]]:
    out: List[Tuple[str, BoundingBox, Optional[float]]] = []
    for ann in parse_annotations(annotations):
        if ann.excluded:
            continue
        box = ann.box
        if box is None:
            continue
        out.append((class_label(ann, catalog), box, ann.confidence))
    return out


def evaluate_image(
    predictions: Sequence[Any],
    ground_truths: Sequence[Any],
    iou_threshold: float = IOU_THRESHOLD,
    *,
    image_id: str = "",
    catalog: Optional[CatalogLike] = None,
) -> ImageEvaluation:
    """Match predictions to ground truth for one image.

    Predictions are processed in input order, without sorting by confidence.
    Each one claims the unclaimed ground truth with the highest IoU if that
    IoU reaches `iou_threshold`. Claims are final.
    """
    preds = _usable(predictions, catalog)
    gts = _usable(ground_truths, catalog)

    claimed_by: List[Optional[int]] = [None] * len(gts)
    gt_iou: List[float] = [0.0] * len(gts)
    pred_results: List[MatchResult] = []

    for pi, (p_cls, p_box, p_conf) in enumerate(preds):
        best_j: Optional[int] = None
        best_iou = -1.0
        for gj, (_, g_box, _) in enumerate(gts):
            if claimed_by[gj] is not None:
                continue
            v = iou(p_box, g_box)
            if v > best_iou:
                best_iou = v
                best_j = gj

        if best_j is not None and best_iou >= iou_threshold:
            claimed_by[best_j] = pi
            gt_iou[best_j] = best_iou
            outcome = Outcome.TRUE_POSITIVE if p_cls == gts[best_j][0] else Outcome.FALSE_POSITIVE
            pred_results.append(
                MatchResult(pi, p_cls, outcome, matched=True, matched_index=best_j, iou=best_iou, confidence=p_conf)
            )
        else:
            pred_results.append(
                MatchResult(pi, p_cls, Outcome.FALSE_POSITIVE, iou=max(best_iou, 0.0), confidence=p_conf)
            )

    gt_results: List[MatchResult] = []
    for gj, (g_cls, _, g_conf) in enumerate(gts):
        pi = claimed_by[gj]
        if pi is None:
            gt_results.append(MatchResult(gj, g_cls, Outcome.FALSE_NEGATIVE, confidence=g_conf))
            continue
        # A spatial match with the wrong label still misses this object.
        hit = pred_results[pi].outcome == Outcome.TRUE_POSITIVE
        gt_results.append(
            MatchResult(
                gj,
                g_cls,
                Outcome.TRUE_POSITIVE if hit else Outcome.FALSE_NEGATIVE,
                matched=True,
                matched_index=pi,
                iou=gt_iou[gj],
                confidence=g_conf,
            )
        )

    return ImageEvaluation(image_id=image_id, predictions=pred_results, ground_truths=gt_results)

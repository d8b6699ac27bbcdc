from __future__ import annotations

"""Fold per-image match results into a dense class x class confusion matrix."""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

import numpy as np

from annostudio.core.errors import CatalogError
from annostudio.core.types import BACKGROUND, Outcome
from annostudio.review.matching import ImageEvaluation

MAX_EXAMPLES = 3

CellKey = Tuple[str, str]


@dataclass(frozen=True)
class ConfusionExample:
    image_id: str
    confidence: Optional[float] = None


@dataclass
class ConfusionCell:
    actual: str
    predicted: str
    count: int = 0
    examples: List[ConfusionExample] = field(default_factory=list)

    @property
    def correct(self) -> bool:
        return self.actual == self.predicted

    def to_dict(self) -> Dict[str, Any]:
        return {
            "actual": self.actual,
            "predicted": self.predicted,
            "count": self.count,
            "examples": [{"image_id": e.image_id, "confidence": e.confidence} for e in self.examples],
        }


def sort_classes(names: Iterable[str]) -> List[str]:
    """Alphabetical, with Background always last."""
    names = set(names)
    out = sorted(n for n in names if n != BACKGROUND)
    if BACKGROUND in names:
        out.append(BACKGROUND)
    return out


def _keep_examples(current: List[ConfusionExample], new: Iterable[ConfusionExample], limit: int) -> List[ConfusionExample]:
    # One example per image; smallest image ids win so the fold is order independent.
    by_image: Dict[str, ConfusionExample] = {e.image_id: e for e in current}
    for e in new:
        by_image.setdefault(e.image_id, e)
    return [by_image[k] for k in sorted(by_image)][:limit]


class ConfusionAccumulator:
    """Commutative, associative fold state; `merge` combines partial folds."""

    def __init__(self, max_examples: int = MAX_EXAMPLES) -> None:
        self.max_examples = max_examples
        self.counts: Dict[CellKey, int] = {}
        self.examples: Dict[CellKey, List[ConfusionExample]] = {}
        self.classes: Set[str] = set()
        self.predictions = 0
        self.unmatched_ground_truths = 0
        # Any false positive or false negative puts Background on the axis.
        self.background_seen = False

    def _record(self, actual: str, predicted: str, image_id: str, confidence: Optional[float]) -> None:
        key = (actual, predicted)
        self.classes.add(actual)
        self.classes.add(predicted)
        self.counts[key] = self.counts.get(key, 0) + 1
        if actual != predicted:
            cur = self.examples.get(key, [])
            self.examples[key] = _keep_examples(cur, [ConfusionExample(image_id, confidence)], self.max_examples)

    def add_image(self, ev: ImageEvaluation) -> "ConfusionAccumulator":
        for r in list(ev.predictions) + list(ev.ground_truths):
            if r.class_name == BACKGROUND:
                raise CatalogError(
                    f"Class name '{BACKGROUND}' is reserved for the confusion matrix (image '{ev.image_id}').",
                    name=BACKGROUND,
                    image_id=ev.image_id,
                )
        if any(p.outcome == Outcome.FALSE_POSITIVE for p in ev.predictions) or any(
            g.outcome == Outcome.FALSE_NEGATIVE for g in ev.ground_truths
        ):
            self.background_seen = True

        for p in ev.predictions:
            self.predictions += 1
            if p.matched and p.matched_index is not None:
                actual = ev.ground_truths[p.matched_index].class_name
            else:
                actual = BACKGROUND
            self._record(actual, p.class_name, ev.image_id, p.confidence)

        for g in ev.ground_truths:
            if g.matched:
                # Already attributed through the claiming prediction.
                continue
            self.unmatched_ground_truths += 1
            self._record(g.class_name, BACKGROUND, ev.image_id, None)
        return self

    def merge(self, other: "ConfusionAccumulator") -> "ConfusionAccumulator":
        out = ConfusionAccumulator(max_examples=min(self.max_examples, other.max_examples))
        out.classes = self.classes | other.classes
        out.background_seen = self.background_seen or other.background_seen
        out.predictions = self.predictions + other.predictions
        out.unmatched_ground_truths = self.unmatched_ground_truths + other.unmatched_ground_truths
        for key in set(self.counts) | set(other.counts):
            out.counts[key] = self.counts.get(key, 0) + other.counts.get(key, 0)
        for key in set(self.examples) | set(other.examples):
            out.examples[key] = _keep_examples(
                self.examples.get(key, []), other.examples.get(key, []), out.max_examples
            )
        return out

    def build(self) -> "ConfusionMatrix":
        observed = set(self.classes)
        if self.background_seen:
            observed.add(BACKGROUND)
        classes = sort_classes(observed)
        cells = [
            ConfusionCell(
                actual=a,
                predicted=p,
                count=self.counts.get((a, p), 0),
                examples=list(self.examples.get((a, p), [])),
            )
            for a in classes
            for p in classes
        ]
        return ConfusionMatrix(
            classes=classes,
            cells=cells,
            predictions=self.predictions,
            unmatched_ground_truths=self.unmatched_ground_truths,
        )


@dataclass
class ConfusionMatrix:
    """Dense matrix; `cells` is row-major over (actual, predicted)."""
    classes: List[str]
    cells: List[ConfusionCell]
    predictions: int = 0
    unmatched_ground_truths: int = 0

    def cell(self, actual: str, predicted: str) -> Optional[ConfusionCell]:
        if actual not in self.classes or predicted not in self.classes:
            return None
        n = len(self.classes)
        return self.cells[self.classes.index(actual) * n + self.classes.index(predicted)]

    def count(self, actual: str, predicted: str) -> int:
        c = self.cell(actual, predicted)
        return c.count if c is not None else 0

    @property
    def total(self) -> int:
        return sum(c.count for c in self.cells)

    def is_conserved(self) -> bool:
        """Every prediction and unmatched ground truth counted exactly once."""
        return self.total == self.predictions + self.unmatched_ground_truths

    def to_array(self) -> np.ndarray:
        n = len(self.classes)
        return np.array([c.count for c in self.cells], dtype=np.int64).reshape(n, n)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "classes": list(self.classes),
            "cells": [c.to_dict() for c in self.cells],
            "total_predictions": self.predictions,
            "total_unmatched_ground_truths": self.unmatched_ground_truths,
        }


def aggregate(evaluations: Iterable[ImageEvaluation], max_examples: int = MAX_EXAMPLES) -> ConfusionMatrix:
    """Fold all images of a validation set into one confusion matrix."""
    acc = ConfusionAccumulator(max_examples=max_examples)
    for ev in sorted(evaluations, key=lambda e: e.image_id):
        acc.add_image(ev)
    return acc.build()

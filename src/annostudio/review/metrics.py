from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List, Tuple

from annostudio.core.types import Outcome
from annostudio.review.confusion import sort_classes
from annostudio.review.matching import ImageEvaluation


def safe_div(num: float, den: float) -> float:
    return float(num / den) if den else 0.0


def f1_score(precision: float, recall: float) -> float:
    return safe_div(2.0 * precision * recall, precision + recall)


@dataclass(frozen=True)
class ClassMetrics:
    class_name: str
    tp: int
    fp: int
    fn: int
    precision: float
    recall: float
    f1: float
    support: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _row(name: str, tp: int, fp: int, fn: int, support: int) -> ClassMetrics:
    p = safe_div(tp, tp + fp)
    r = safe_div(tp, tp + fn)
    return ClassMetrics(name, tp, fp, fn, p, r, f1_score(p, r), support)


def class_metrics(evaluations: Iterable[ImageEvaluation]) -> Tuple[List[ClassMetrics], ClassMetrics]:
    """Per-class precision/recall/F1 plus the micro-averaged overall row.

    A box found with the wrong label is a false positive for the predicted
    class and a false negative for the actual class.
    """
    tp: Dict[str, int] = {}
    fp: Dict[str, int] = {}
    fn: Dict[str, int] = {}
    support: Dict[str, int] = {}

    for ev in evaluations:
        for p in ev.predictions:
            bucket = tp if p.outcome == Outcome.TRUE_POSITIVE else fp
            bucket[p.class_name] = bucket.get(p.class_name, 0) + 1
        for g in ev.ground_truths:
            support[g.class_name] = support.get(g.class_name, 0) + 1
            if g.outcome == Outcome.FALSE_NEGATIVE:
                fn[g.class_name] = fn.get(g.class_name, 0) + 1

    names = sort_classes(set(tp) | set(fp) | set(fn) | set(support))
    rows = [_row(n, tp.get(n, 0), fp.get(n, 0), fn.get(n, 0), support.get(n, 0)) for n in names]
    overall = _row(
        "all",
        sum(tp.values()),
        sum(fp.values()),
        sum(fn.values()),
        sum(support.values()),
    )
    return rows, overall

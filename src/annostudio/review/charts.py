from __future__ import annotations

import re
from pathlib import Path
from typing import Sequence, Union

import matplotlib.pyplot as plt

from annostudio.review.confusion import ConfusionMatrix
from annostudio.review.metrics import ClassMetrics


def _ensure_parent(path: Union[str, Path]) -> Path:
    """Ensure parent directory exists and return the Path."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    return p


def _sanitize(s: str) -> str:
    return re.sub(r"\s+", " ", str(s)).strip()


def confusion_heatmap(path: Union[str, Path], title: str, matrix: ConfusionMatrix) -> Path:
    """Render actual (rows) x predicted (columns) counts."""
    p = _ensure_parent(path)
    arr = matrix.to_array()
    labels = list(matrix.classes)

    side = max(4.5, 0.7 * len(labels) + 2.5)
    fig = plt.figure(figsize=(side + 1.5, side))
    ax = fig.add_subplot(111)
    im = ax.imshow(arr, cmap="Blues", aspect="auto")

    ax.set_title(_sanitize(title))
    ax.set_xticks(list(range(len(labels))))
    ax.set_xticklabels(labels, rotation=25, ha="right")
    ax.set_yticks(list(range(len(labels))))
    ax.set_yticklabels(labels)
    ax.set_xlabel("Predicted")
    ax.set_ylabel("Actual")

    peak = int(arr.max()) if arr.size else 0
    for i in range(len(labels)):
        for j in range(len(labels)):
            v = int(arr[i, j])
            color = "white" if peak and v > 0.7 * peak else "black"
            ax.text(j, i, str(v), ha="center", va="center", fontsize=8, color=color)

    fig.colorbar(im, ax=ax, fraction=0.046, pad=0.04)
    fig.tight_layout()
    fig.savefig(str(p), dpi=150)
    plt.close(fig)
    return p


def class_metrics_bars(path: Union[str, Path], title: str, rows: Sequence[ClassMetrics]) -> Path:
    """Grouped precision / recall / F1 bars per class."""
    p = _ensure_parent(path)

    labels = [r.class_name for r in rows]
    x = list(range(len(labels)))
    width = 0.27

    fig = plt.figure(figsize=(max(6.0, 1.1 * len(labels) + 2.0), 4.5))
    ax = fig.add_subplot(111)
    ax.bar([i - width for i in x], [r.precision for r in rows], width=width, label="Precision")
    ax.bar(x, [r.recall for r in rows], width=width, label="Recall")
    ax.bar([i + width for i in x], [r.f1 for r in rows], width=width, label="F1")

    ax.set_title(_sanitize(title))
    ax.set_xticks(x)
    ax.set_xticklabels(labels, rotation=20, ha="right")
    ax.set_ylim(0.0, 1.05)
    ax.legend()
    ax.grid(axis="y", alpha=0.3)
    fig.tight_layout()
    fig.savefig(str(p), dpi=150)
    plt.close(fig)
    return p

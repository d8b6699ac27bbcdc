from __future__ import annotations

"""Shared enums, constants, and small value containers."""

from enum import Enum
from typing import Tuple

# Confusion-matrix axis label for "no object" on either side.
BACKGROUND = "Background"

# Spatial match threshold for predictions vs ground truth.
IOU_THRESHOLD = 0.5

# Statuses that remove an annotation from export and evaluation.
EXCLUDED_STATUSES = frozenset({"deleted", "disabled", "archived"})

Point = Tuple[float, float]


class Outcome(str, Enum):
    """Per-annotation match outcome."""
    TRUE_POSITIVE = "true_positive"
    FALSE_POSITIVE = "false_positive"
    FALSE_NEGATIVE = "false_negative"


class ResolveReason(str, Enum):
    """Why the class resolver picked (or failed to pick) an index."""
    NAME = "name"
    INDEX = "index"
    MISMATCH = "mismatch"
    DEFAULT = "default"
    MISSING = "missing"


class EmptyReason(str, Enum):
    """Cause of an image producing zero label lines."""
    CLASS_MISMATCH = "class_mismatch"
    MISSING_CLASS = "missing_class"
    NO_ANNOTATIONS = "no_annotations"


class Split(str, Enum):
    TRAIN = "train"
    VAL = "val"
    TEST = "test"


class LabelKind(str, Enum):
    BOX = "box"
    SEGMENT = "segment"


EMPTY_REASON_MESSAGES = {
    EmptyReason.CLASS_MISMATCH: (
        "Annotations reference classes that are not in this step's class list. "
        "Update the class list or rename the annotation classes."
    ),
    EmptyReason.MISSING_CLASS: (
        "Annotations have no class assigned. Assign a class to each annotation."
    ),
    EmptyReason.NO_ANNOTATIONS: (
        "No usable annotations found. Annotate the image before exporting."
    ),
}

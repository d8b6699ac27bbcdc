from __future__ import annotations

"""Map an annotation to a canonical class index in a step's class catalog."""

import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from annostudio.core.errors import CatalogError
from annostudio.core.types import ResolveReason
from annostudio.labels.parse import Annotation, parse_annotation

# Legacy numeric encodings: "2", "class 2", "Class_2", "class-2".
_NUMERIC_CLASS = re.compile(r"^\s*(?:class[\s_-]*)?(\d+)\s*$", re.IGNORECASE)


class ClassCatalog:
    """Ordered, unique class names. Position is the exported class id."""

    def __init__(self, names: Iterable[str]) -> None:
        self._names: List[str] = [str(n) for n in names]
        self._index: Dict[str, int] = {}
        for i, n in enumerate(self._names):
            if n in self._index:
                raise CatalogError(f"Duplicate class name in catalog: {n!r}", name=n)
            self._index[n] = i

    @property
    def names(self) -> List[str]:
        return list(self._names)

    def __len__(self) -> int:
        return len(self._names)

    def __getitem__(self, i: int) -> str:
        return self._names[i]

    def __iter__(self):
        return iter(self._names)

    def __repr__(self) -> str:
        return f"ClassCatalog({self._names!r})"

    def index_of(self, name: str) -> Optional[int]:
        return self._index.get(name)

    def in_bounds(self, i: int) -> bool:
        return 0 <= i < len(self._names)

    def names_mapping(self) -> Dict[int, str]:
        """index -> name, as written into the dataset descriptor."""
        return {i: n for i, n in enumerate(self._names)}


CatalogLike = Union[ClassCatalog, Iterable[str]]


def as_catalog(catalog: CatalogLike) -> ClassCatalog:
    return catalog if isinstance(catalog, ClassCatalog) else ClassCatalog(catalog)


@dataclass(frozen=True)
class ClassResolution:
    index: Optional[int]
    reason: ResolveReason

    @property
    def ok(self) -> bool:
        return self.index is not None


def _numeric_ref(ref: str) -> Optional[int]:
    m = _NUMERIC_CLASS.match(ref)
    return int(m.group(1)) if m else None


def resolve_class(annotation: Union[Annotation, Mapping[str, Any]], catalog: CatalogLike) -> ClassResolution:
    """Resolve the class index; first matching rule wins.

    Name match is checked before any numeric interpretation so a class
    literally named "2" is never read as index 2.
    """
    ann = annotation if isinstance(annotation, Annotation) else parse_annotation(annotation)
    cat = as_catalog(catalog)

    if ann.class_ref is not None:
        idx = cat.index_of(ann.class_ref)
        if idx is not None:
            return ClassResolution(idx, ResolveReason.NAME)
        num = _numeric_ref(ann.class_ref)
        if num is not None and cat.in_bounds(num):
            return ClassResolution(num, ResolveReason.INDEX)
        return ClassResolution(None, ResolveReason.MISMATCH)

    if ann.class_id is not None and cat.in_bounds(ann.class_id):
        return ClassResolution(ann.class_id, ResolveReason.INDEX)

    if not ann.has_class_info and len(cat) == 1:
        return ClassResolution(0, ResolveReason.DEFAULT)

    return ClassResolution(None, ResolveReason.MISSING)


def class_label(annotation: Annotation, catalog: Optional[CatalogLike] = None) -> str:
    """Display label for review: catalog name if resolvable, else the raw reference."""
    if catalog is not None:
        cat = as_catalog(catalog)
        res = resolve_class(annotation, cat)
        if res.ok:
            return cat[res.index]  # type: ignore[index]
    if annotation.class_ref is not None:
        return annotation.class_ref
    if annotation.class_id is not None:
        return str(annotation.class_id)
    return "Unknown"

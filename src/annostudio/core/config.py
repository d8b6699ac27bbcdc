from __future__ import annotations

"""YAML and Pydantic config loaders."""

from pathlib import Path
from typing import Any, Type, TypeVar

import yaml

from annostudio.core.schema import EvalConfig, ExportConfig

T = TypeVar("T")


def load_yaml(path: str | Path) -> Any:
    """Load YAML from file; an empty file loads as {}."""
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Config not found: {p}")
    with p.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_pydantic(path: str | Path, cls: Type[T]) -> T:
    """Load YAML and validate it against a Pydantic v2 model."""
    data = load_yaml(path)
    return cls.model_validate(data)  # type: ignore[attr-defined]


def load_export_config(path: str | Path) -> ExportConfig:
    return load_pydantic(path, ExportConfig)


def load_eval_config(path: str | Path) -> EvalConfig:
    return load_pydantic(path, EvalConfig)

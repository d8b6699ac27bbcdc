from __future__ import annotations

import json
import os
import time
from pathlib import Path
from typing import Any


def read_json(path: str | Path) -> Any:
    """Read JSON; raises on missing or malformed files."""
    p = Path(path)
    with p.open("r", encoding="utf-8") as f:
        return json.load(f)


def dump_json(path: str | Path, obj: Any, *, indent: int = 2) -> Path:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    tmp = p.with_name(f".{p.name}.{os.getpid()}.tmp")
    last_err: OSError | None = None
    for _ in range(3):
        try:
            with tmp.open("w", encoding="utf-8") as f:
                json.dump(obj, f, ensure_ascii=False, indent=indent, default=str)
            os.replace(tmp, p)
            return p
        except OSError as exc:
            last_err = exc
            # ESTALE on network filesystems: retry.
            if getattr(exc, "errno", None) != 116:
                raise
            time.sleep(0.2)
    if last_err is not None:
        raise last_err
    return p

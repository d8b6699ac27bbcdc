from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List


def _cell(v: Any) -> str:
    s = "" if v is None else str(v)
    if any(ch in s for ch in (",", '"', "\n")):
        s = '"' + s.replace('"', '""') + '"'
    return s


def write_csv(path: str | Path, rows: List[Dict[str, Any]], cols: List[str]) -> Path:
    """Write rows to a CSV file using the provided column order."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)

    lines = [",".join(_cell(c) for c in cols)]
    for r in rows:
        lines.append(",".join(_cell(r.get(c, "")) for c in cols))

    p.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return p

from __future__ import annotations

import json
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Optional

LogFn = Callable[[str, Dict[str, Any]], None]


def _now_iso() -> str:
    """Return current UTC time as an ISO string."""
    return datetime.now(timezone.utc).isoformat()


@dataclass
class JsonlLogger:
    """Append structured events to a JSONL file and (optionally) stdout.

    Safe to call from export pool worker threads.
    """
    path: Optional[Path] = None
    echo: bool = True
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def __call__(self, event: str, payload: Dict[str, Any]) -> None:
        rec = {"t": _now_iso(), "event": event, **payload}
        line = json.dumps(rec, ensure_ascii=False, default=str)
        with self._lock:
            if self.echo:
                print(line, flush=True)
            if self.path is not None:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with self.path.open("a", encoding="utf-8") as f:
                    f.write(line + "\n")


class MemoryLogger:
    """Collects events in memory; used by tests and embedding callers."""

    def __init__(self) -> None:
        self.events: list[tuple[str, Dict[str, Any]]] = []
        self._lock = threading.Lock()

    def __call__(self, event: str, payload: Dict[str, Any]) -> None:
        with self._lock:
            self.events.append((event, dict(payload)))

    def names(self) -> list[str]:
        return [e for e, _ in self.events]

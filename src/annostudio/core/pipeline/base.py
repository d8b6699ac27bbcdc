from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Protocol


class Stage(Protocol):
    """Protocol for pipeline stages."""
    name: str
    def run(self, ctx: "StageContext") -> None: ...


@dataclass
class StageContext:
    """Shared data passed between pipeline stages."""
    cfg: Any
    state: Dict[str, Any] = field(default_factory=dict)
    assets: Dict[str, Any] = field(default_factory=dict)

    def log(self, event: str, payload: Dict[str, Any]) -> None:
        log = self.assets.get("log")
        if log:
            log(event, payload)


@dataclass
class PipelineRunner:
    """Sequential runner for pipeline stages."""
    stages: List[Stage]
    fail_fast: bool = True

    def run(self, ctx: StageContext) -> StageContext:
        for st in self.stages:
            ctx.log("stage_start", {"stage": st.name})
            t0 = time.perf_counter()
            try:
                st.run(ctx)
            except Exception as e:
                ctx.log(
                    "stage_error",
                    {"stage": st.name, "reason": getattr(e, "reason", type(e).__name__), "error": str(e)},
                )
                if self.fail_fast:
                    raise
                ctx.state.setdefault("errors", []).append((st.name, repr(e)))
                continue
            ctx.log("stage_done", {"stage": st.name, "duration_s": round(time.perf_counter() - t0, 4)})
        return ctx

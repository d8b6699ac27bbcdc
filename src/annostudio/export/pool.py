from __future__ import annotations

"""Bounded worker pool with a shared index cursor.

Each worker takes the next index, processes that item to completion, then
takes another. The first failure (or a caller cancel) stops scheduling;
items already in flight are allowed to finish.
"""

import threading
from dataclasses import dataclass, field
from typing import Callable, Generic, List, Optional, Sequence, Tuple, TypeVar

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class PoolResult(Generic[R]):
    results: List[Optional[R]]
    completed: int = 0
    failures: List[Tuple[int, BaseException]] = field(default_factory=list)
    not_started: int = 0
    cancelled: bool = False

    @property
    def ok(self) -> bool:
        return not self.failures and not self.cancelled and self.not_started == 0


class _Cursor:
    def __init__(self, size: int) -> None:
        self._next = 0
        self._size = size
        self._lock = threading.Lock()
        self.stopped = False

    def take(self) -> Optional[int]:
        with self._lock:
            if self.stopped or self._next >= self._size:
                return None
            i = self._next
            self._next += 1
            return i

    def stop(self) -> None:
        with self._lock:
            self.stopped = True

    @property
    def taken(self) -> int:
        with self._lock:
            return self._next


def run_bounded(
    items: Sequence[T],
    worker: Callable[[T], R],
    concurrency: int = 4,
    cancel: Optional[threading.Event] = None,
) -> PoolResult[R]:
    """Run `worker` over `items` with at most `concurrency` in flight."""
    if concurrency < 1:
        raise ValueError("concurrency must be >= 1")

    results: List[Optional[R]] = [None] * len(items)
    failures: List[Tuple[int, BaseException]] = []
    done_lock = threading.Lock()
    completed = [0]
    cursor = _Cursor(len(items))

    def loop() -> None:
        while True:
            if cancel is not None and cancel.is_set():
                cursor.stop()
                return
            i = cursor.take()
            if i is None:
                return
            try:
                r = worker(items[i])
            except BaseException as e:
                # Any exception ends the item as a recorded failure.
                cursor.stop()
                with done_lock:
                    failures.append((i, e))
                continue
            results[i] = r
            with done_lock:
                completed[0] += 1

    n_threads = min(concurrency, len(items))
    threads = [threading.Thread(target=loop, name=f"export-worker-{k}", daemon=True) for k in range(n_threads)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    failures.sort(key=lambda f: f[0])
    return PoolResult(
        results=results,
        completed=completed[0],
        failures=failures,
        not_started=len(items) - cursor.taken,
        cancelled=bool(cancel is not None and cancel.is_set()),
    )

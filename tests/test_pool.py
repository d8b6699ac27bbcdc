import threading
import time

from annostudio.export.pool import run_bounded


def test_runs_all_items_in_order_slots():
    res = run_bounded(list(range(20)), lambda x: x * x, concurrency=3)
    assert res.ok
    assert res.completed == 20
    assert res.results == [x * x for x in range(20)]


def test_concurrency_is_bounded():
    active = [0]
    peak = [0]
    lock = threading.Lock()

    def work(_):
        with lock:
            active[0] += 1
            peak[0] = max(peak[0], active[0])
        time.sleep(0.01)
        with lock:
            active[0] -= 1

    res = run_bounded(list(range(30)), work, concurrency=4)
    assert res.ok
    assert peak[0] <= 4


def test_failure_stops_scheduling():
    def work(x):
        if x == 0:
            raise ValueError("boom")
        time.sleep(0.01)
        return x

    res = run_bounded(list(range(50)), work, concurrency=1)
    assert not res.ok
    assert res.failures[0][0] == 0
    assert isinstance(res.failures[0][1], ValueError)
    assert res.not_started == 49


def test_cancel_stops_new_work_but_finishes_in_flight():
    cancel = threading.Event()
    started = []

    def work(x):
        started.append(x)
        if x == 2:
            cancel.set()
        return x

    res = run_bounded(list(range(10)), work, concurrency=1, cancel=cancel)
    assert res.cancelled
    assert started == [0, 1, 2]
    assert res.completed == 3
    assert res.not_started == 7


def test_empty_input():
    res = run_bounded([], lambda x: x, concurrency=4)
    assert res.ok and res.results == []


class _Abort(BaseException):
    pass


def test_base_exception_is_recorded_as_failure():
    def work(x):
        if x == 1:
            raise _Abort()
        return x

    res = run_bounded(list(range(4)), work, concurrency=1)
    assert not res.ok
    assert res.failures[0][0] == 1
    assert isinstance(res.failures[0][1], _Abort)
    assert res.completed == 1
    assert res.not_started == 2

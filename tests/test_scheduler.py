import threading
import time

import pytest

from bandwidth_guard.scheduler import ManualScheduler, Scheduler, ThreadScheduler


def test_manual_runs_due_tasks_in_time_order():
    s = ManualScheduler()
    order = []
    s.after(5, lambda: order.append("late"))
    s.after(1, lambda: order.append("early"))
    s.every(2, lambda: order.append(f"tick@{s.now():g}"))

    s.advance(5)
    assert order == ["tick@0", "early", "tick@2", "tick@4", "late"]
    assert s.now() == 5


def test_manual_cancel_and_shutdown():
    s = ManualScheduler()
    ran = []
    h = s.after(1, lambda: ran.append(1))
    h.cancel()
    s.every(1, lambda: ran.append(2))
    s.shutdown()
    s.after(1, lambda: ran.append(3))

    s.advance(10)
    assert ran == []
    assert s.pending() == []


def test_thread_every_runs_until_cancelled():
    s = ThreadScheduler()
    hits = []
    ticked = threading.Event()

    def tick():
        hits.append(1)
        if len(hits) >= 3:
            ticked.set()

    h = s.every(0.01, tick)
    assert ticked.wait(2)
    h.cancel()
    time.sleep(0.05)
    count = len(hits)
    time.sleep(0.05)
    assert len(hits) == count


def test_thread_task_error_does_not_stop_schedule():
    errors = []
    s = ThreadScheduler(on_error=lambda name, exc: errors.append((name, exc)))
    done = threading.Event()
    calls = []

    def flaky():
        calls.append(1)
        if len(calls) == 1:
            raise RuntimeError("boom")
        done.set()

    h = s.every(0.01, flaky, name="flaky")
    assert done.wait(2)
    h.cancel()
    assert errors[0][0] == "flaky"


def test_thread_after_fires_once_and_shutdown_cancels():
    s = ThreadScheduler()
    fired = threading.Event()
    s.after(0.01, fired.set)
    assert fired.wait(2)

    never = threading.Event()
    s.after(0.2, never.set)
    s.shutdown()
    assert not never.wait(0.4)
    assert s.after(0, never.set).cancelled


def test_scheduler_base_cannot_be_instantiated():
    with pytest.raises(TypeError):
        Scheduler()

"""
scheduler.py
Two kinds of scheduled work drive the guard:
  - recurring sample ticks, one per monitored port
  - one-shot reactivation timers, one per suppressed port

ThreadScheduler runs them on real threads against the wall clock.
ManualScheduler keeps a virtual clock that callers advance explicitly.
"""
from __future__ import annotations

import heapq
import itertools
import sys
import threading
import time
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Set, Tuple

from .reporter import utcnow_iso

Task = Callable[[], None]
ErrorHandler = Callable[[str, BaseException], None]


def _stderr_error(name: str, exc: BaseException) -> None:
    sys.stderr.write(f"{utcnow_iso()} [scheduler] task {name} raised: {exc!r}\n")


class Handle:
    def __init__(self, name: str):
        self.name = name
        self._cancelled = threading.Event()

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()


class Scheduler(ABC):
    @abstractmethod
    def now(self) -> float:
        """Current time in epoch seconds."""

    @abstractmethod
    def every(self, interval: float, fn: Task, name: str = "") -> Handle:
        """Run fn immediately, then again `interval` seconds after each run ends."""

    @abstractmethod
    def after(self, delay: float, fn: Task, name: str = "") -> Handle:
        """Run fn once, `delay` seconds from now."""

    @abstractmethod
    def shutdown(self) -> None:
        """Cancel every outstanding task and refuse new ones."""


# =========================
# Wall clock, one thread per task
# =========================

class _TimerHandle(Handle):
    def __init__(self, name: str):
        super().__init__(name)
        self.timer: Optional[threading.Timer] = None

    def cancel(self) -> None:
        super().cancel()
        if self.timer is not None:
            self.timer.cancel()


class ThreadScheduler(Scheduler):
    def __init__(self, on_error: Optional[ErrorHandler] = None):
        self.on_error = on_error or _stderr_error
        self._lock = threading.Lock()
        self._handles: Set[Handle] = set()
        self._closed = False

    def now(self) -> float:
        return time.time()

    def every(self, interval: float, fn: Task, name: str = "") -> Handle:
        handle = Handle(name or getattr(fn, "__name__", "task"))
        if not self._track(handle):
            return handle

        def loop():
            try:
                while not handle.cancelled:
                    self._run(handle.name, fn)
                    if handle._cancelled.wait(interval):
                        break
            finally:
                self._untrack(handle)

        threading.Thread(target=loop, name=f"every:{handle.name}", daemon=True).start()
        return handle

    def after(self, delay: float, fn: Task, name: str = "") -> Handle:
        handle = _TimerHandle(name or getattr(fn, "__name__", "task"))
        if not self._track(handle):
            return handle

        def fire():
            try:
                if not handle.cancelled:
                    self._run(handle.name, fn)
            finally:
                self._untrack(handle)

        handle.timer = threading.Timer(delay, fire)
        handle.timer.name = f"after:{handle.name}"
        handle.timer.daemon = True
        handle.timer.start()
        return handle

    def shutdown(self) -> None:
        with self._lock:
            self._closed = True
            handles = list(self._handles)
            self._handles.clear()
        for handle in handles:
            handle.cancel()

    def _run(self, name: str, fn: Task) -> None:
        try:
            fn()
        except Exception as e:
            self.on_error(name, e)

    def _track(self, handle: Handle) -> bool:
        with self._lock:
            if self._closed:
                handle.cancel()
                return False
            self._handles.add(handle)
            return True

    def _untrack(self, handle: Handle) -> None:
        with self._lock:
            self._handles.discard(handle)


# =========================
# Virtual clock
# =========================

class ManualScheduler(Scheduler):
    """
    Deterministic scheduler: nothing runs until advance() is called, and due
    tasks then run in time order on the caller's thread. Exceptions raised by
    a task propagate to the caller of advance().
    """
    def __init__(self, start: float = 0.0):
        self._now = float(start)
        self._lock = threading.RLock()
        self._seq = itertools.count()
        # (due, seq, handle, fn, interval or None)
        self._queue: List[Tuple[float, int, Handle, Task, Optional[float]]] = []
        self._closed = False

    def now(self) -> float:
        with self._lock:
            return self._now

    def every(self, interval: float, fn: Task, name: str = "") -> Handle:
        return self._push(0.0, fn, name, interval)

    def after(self, delay: float, fn: Task, name: str = "") -> Handle:
        return self._push(delay, fn, name, None)

    def shutdown(self) -> None:
        with self._lock:
            self._closed = True
            for _, _, handle, _, _ in self._queue:
                handle.cancel()
            self._queue.clear()

    def pending(self, name_prefix: str = "") -> List[Handle]:
        """Outstanding, uncancelled handles, optionally filtered by name prefix."""
        with self._lock:
            return [h for _, _, h, _, _ in sorted(self._queue)
                    if not h.cancelled and h.name.startswith(name_prefix)]

    def run_pending(self) -> None:
        self.advance(0.0)

    def advance(self, seconds: float) -> None:
        with self._lock:
            target = self._now + seconds
        while True:
            with self._lock:
                if not self._queue or self._queue[0][0] > target:
                    self._now = max(self._now, target)
                    return
                due, _, handle, fn, interval = heapq.heappop(self._queue)
                self._now = max(self._now, due)
                if handle.cancelled:
                    continue
                if interval is not None:
                    heapq.heappush(self._queue, (due + interval, next(self._seq), handle, fn, interval))
            fn()

    def _push(self, delay: float, fn: Task, name: str, interval: Optional[float]) -> Handle:
        handle = Handle(name or getattr(fn, "__name__", "task"))
        with self._lock:
            if self._closed:
                handle.cancel()
                return handle
            heapq.heappush(self._queue, (self._now + delay, next(self._seq), handle, fn, interval))
        return handle

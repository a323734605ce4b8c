from __future__ import annotations

import threading
from typing import Dict, List

from .interfaces import PortActuator
from .models import ACTIVE, PortIdentity, PortState, Suppressed
from .reporter import Reporter
from .scheduler import Handle, Scheduler


class MitigationController:
    """
    Sole owner of per-port state.

    Every read or write of a port's state happens under that port's lock, and
    the disable call is made while holding it, so concurrent breaches on one
    port collapse into a single disable and a single reactivation timer.
    """
    def __init__(self, actuator: PortActuator, scheduler: Scheduler, reporter: Reporter,
                 suppression_seconds: float):
        self.actuator = actuator
        self.scheduler = scheduler
        self.reporter = reporter
        self.suppression_seconds = suppression_seconds

        self._states: Dict[PortIdentity, PortState] = {}
        self._timers: Dict[PortIdentity, Handle] = {}
        self._locks: Dict[PortIdentity, threading.Lock] = {}
        self._locks_guard = threading.Lock()
        self._stopped = False

    def _lock_for(self, port: PortIdentity) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(port)
            if lock is None:
                lock = self._locks[port] = threading.Lock()
            return lock

    # ---- reads ----

    def state(self, port: PortIdentity) -> PortState:
        with self._lock_for(port):
            return self._states.setdefault(port, ACTIVE)

    def is_suppressed(self, port: PortIdentity) -> bool:
        return isinstance(self.state(port), Suppressed)

    # ---- transitions ----

    def suppress(self, port: PortIdentity) -> bool:
        """Disable the port and arm its reactivation. Returns True if this call did so."""
        with self._lock_for(port):
            if self._stopped:
                return False
            if isinstance(self._states.get(port, ACTIVE), Suppressed):
                return False

            try:
                self.actuator.set_port_enabled(port, False)
            except Exception as e:
                self._states[port] = ACTIVE
                self.reporter.event("action-failed", port, action="disable", reason=e)
                return False

            now = self.scheduler.now()
            self._states[port] = Suppressed(since=now, reactivate_at=now + self.suppression_seconds)
            self._timers[port] = self.scheduler.after(
                self.suppression_seconds,
                lambda: self.reactivate(port),
                name=f"reactivate:{port}",
            )
            self.reporter.event("port-suppressed", port, seconds=self.suppression_seconds)
            return True

    def reactivate(self, port: PortIdentity) -> None:
        """Timer callback: re-enable the port. Until shutdown, the port always ends up Active."""
        with self._lock_for(port):
            self._timers.pop(port, None)
            if self._stopped:
                return
            if not isinstance(self._states.get(port, ACTIVE), Suppressed):
                return
            try:
                self.actuator.set_port_enabled(port, True)
            except Exception as e:
                self.reporter.event("action-failed", port, action="enable", reason=e)
            else:
                self.reporter.event("port-reactivated", port)
            finally:
                self._states[port] = ACTIVE

    def shutdown(self) -> List[PortIdentity]:
        """
        Refuse further suppressions and cancel every pending reactivation.
        Waits for any in-flight action on a port to complete. Returns the
        ports that remain disabled.
        """
        with self._locks_guard:
            self._stopped = True
            ports = list(self._locks)

        left_down: List[PortIdentity] = []
        for port in ports:
            with self._lock_for(port):
                handle = self._timers.pop(port, None)
                if handle is not None:
                    handle.cancel()
                if isinstance(self._states.get(port), Suppressed):
                    left_down.append(port)
        return left_down

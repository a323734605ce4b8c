from __future__ import annotations

from typing import Dict, List, Optional

from .config import Config
from .interfaces import Inventory, PortActuator, StatisticsSource
from .mitigation import MitigationController
from .models import PortIdentity
from .monitor import PortMonitor
from .reporter import Reporter
from .scheduler import Scheduler

NOT_STARTED = "not-started"
RUNNING = "running"
STOPPED = "stopped"


class GuardService:
    def __init__(self, cfg: Config, inventory: Inventory, stats: StatisticsSource,
                 actuator: PortActuator, scheduler: Scheduler, reporter: Reporter):
        self.cfg = cfg
        self.inventory = inventory
        self.stats = stats
        self.actuator = actuator
        self.scheduler = scheduler
        self.reporter = reporter
        self.mitigation: Optional[MitigationController] = None  # built once config is validated
        self.monitors: Dict[PortIdentity, PortMonitor] = {}
        self.status = NOT_STARTED

    # ---- lifecycle ----

    def start(self) -> None:
        if self.status != NOT_STARTED:
            raise RuntimeError(f"guard cannot start from state {self.status}")
        self.cfg.validate()

        self.mitigation = MitigationController(
            self.actuator, self.scheduler, self.reporter, self.cfg.suppression_seconds,
        )
        for port in self._discover():
            monitor = PortMonitor(
                port, self.stats, self.mitigation, self.scheduler, self.reporter,
                threshold=self.cfg.bandwidth_threshold,
                interval=self.cfg.sample_seconds,
            )
            self.monitors[port] = monitor

        self.status = RUNNING
        self.reporter.event("guard-started", ports=len(self.monitors),
                            threshold=self.cfg.bandwidth_threshold,
                            interval_ms=self.cfg.sample_interval,
                            suppression_ms=self.cfg.suppression_duration)
        for monitor in self.monitors.values():
            monitor.start()

    def stop(self) -> List[PortIdentity]:
        """Cancel every tick and reactivation timer. Returns ports left disabled."""
        if self.status != RUNNING:
            self.status = STOPPED
            return []
        self.status = STOPPED

        for monitor in self.monitors.values():
            monitor.stop()
        left_down = self.mitigation.shutdown()

        self.reporter.event("guard-stopped", ports=len(self.monitors), left_disabled=len(left_down))
        for port in left_down:
            self.reporter.event("port-left-disabled", port)
        return left_down

    # ---- helpers ----

    def _discover(self) -> List[PortIdentity]:
        seen: Dict[PortIdentity, None] = {}
        for port in self.inventory.list_ports():
            if port.port_number.lower() == "local":
                continue
            seen.setdefault(port, None)
        return list(seen)

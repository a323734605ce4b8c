from __future__ import annotations

from typing import Optional

from .interfaces import StatisticsSource
from .mitigation import MitigationController
from .models import PortIdentity
from .rate import InvalidSample, compute_bit_rate
from .reporter import Reporter
from .scheduler import Handle, Scheduler


class PortMonitor:
    """Samples one port on a fixed interval and asks for suppression on a breach."""

    def __init__(self, port: PortIdentity, stats: StatisticsSource, mitigation: MitigationController,
                 scheduler: Scheduler, reporter: Reporter, threshold: float, interval: float):
        self.port = port
        self.stats = stats
        self.mitigation = mitigation
        self.scheduler = scheduler
        self.reporter = reporter
        self.threshold = threshold
        self.interval = interval
        self._handle: Optional[Handle] = None

    def start(self) -> None:
        self.reporter.event("monitoring-started", self.port)
        self._handle = self.scheduler.every(self.interval, self.tick, name=f"sample:{self.port}")

    def stop(self) -> None:
        if self._handle is not None:
            self._handle.cancel()

    @property
    def running(self) -> bool:
        return self._handle is not None and not self._handle.cancelled

    def tick(self) -> None:
        try:
            sample = self.stats.get_statistics(self.port)
        except Exception as e:
            self.reporter.event("stats-failed", self.port, reason=e)
            return
        if sample is None:
            self.reporter.event("no-data", self.port)
            return

        try:
            rate = compute_bit_rate(sample)
        except InvalidSample as e:
            self.reporter.event("no-data", self.port, reason=e)
            return

        # Already down: the reactivation timer owns this port until it fires.
        if self.mitigation.is_suppressed(self.port):
            return

        if rate > self.threshold:
            self.reporter.event("breach-detected", self.port, rate=rate, threshold=self.threshold)
            self.mitigation.suppress(self.port)

from __future__ import annotations

import threading
from typing import Dict, List, Optional, Tuple

import pytest

from bandwidth_guard.config import Config
from bandwidth_guard.interfaces import ActuatorError, Inventory, PortActuator, StatisticsSource
from bandwidth_guard.models import PortIdentity, RateSample
from bandwidth_guard.reporter import Reporter
from bandwidth_guard.scheduler import ManualScheduler

GBPS_37 = RateSample(bytes_received=2_000_000_000, bytes_sent=2_684_354_560, duration_seconds=1)
GBPS_20_8 = RateSample(bytes_received=1_000_000_000, bytes_sent=1_610_729_425, duration_seconds=1)
GBPS_1 = RateSample(bytes_received=62_500_000, bytes_sent=62_500_000, duration_seconds=1)


class RecordingReporter(Reporter):
    def __init__(self):
        super().__init__(log_file="")
        self.events: List[Tuple[str, Optional[PortIdentity], Dict]] = []

    def event(self, kind, port=None, **fields):
        with self._lock:
            self.events.append((kind, port, fields))

    def kinds(self, port: Optional[PortIdentity] = None) -> List[str]:
        return [k for k, p, _ in self.events if port is None or p == port]


class FakeInventory(Inventory):
    def __init__(self, ports: List[PortIdentity]):
        self.ports = list(ports)

    def list_ports(self):
        return list(self.ports)


class FakeStats(StatisticsSource):
    """Returns the sample set for a port; a set exception is raised instead."""
    def __init__(self, default: Optional[RateSample] = GBPS_1):
        self.default = default
        self.samples: Dict[PortIdentity, object] = {}
        self.calls: List[PortIdentity] = []

    def get_statistics(self, port):
        self.calls.append(port)
        value = self.samples.get(port, self.default)
        if isinstance(value, Exception):
            raise value
        return value


class FakeActuator(PortActuator):
    def __init__(self):
        self.calls: List[Tuple[PortIdentity, bool]] = []
        self.fail_disable = False
        self.fail_enable = False
        self.gate: Optional[threading.Event] = None
        self._lock = threading.Lock()

    def set_port_enabled(self, port, enabled):
        with self._lock:
            self.calls.append((port, enabled))
        if self.gate is not None:
            self.gate.wait(5)
        if not enabled and self.fail_disable:
            raise ActuatorError("device unreachable")
        if enabled and self.fail_enable:
            raise ActuatorError("stale port")

    def disables(self, port=None):
        return [p for p, e in self.calls if not e and (port is None or p == port)]

    def enables(self, port=None):
        return [p for p, e in self.calls if e and (port is None or p == port)]


@pytest.fixture
def port_a():
    return PortIdentity("of:0000000000000001", "1")


@pytest.fixture
def reporter():
    return RecordingReporter()


@pytest.fixture
def scheduler():
    return ManualScheduler(start=1_000.0)


@pytest.fixture
def actuator():
    return FakeActuator()


@pytest.fixture
def stats():
    return FakeStats()


@pytest.fixture
def cfg():
    return Config({"controller": "http://onos.test:8181", "activity_log": ""})

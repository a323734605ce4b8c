"""
Capabilities the guard needs from the controller platform.

The ONOS binding in onos.py implements all three; tests supply fakes.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from .models import PortIdentity, RateSample


class ActuatorError(Exception):
    """A port enable/disable request did not take effect."""


class Inventory(ABC):
    @abstractmethod
    def list_ports(self) -> List[PortIdentity]:
        """Every managed port, excluding each device's local port."""


class StatisticsSource(ABC):
    @abstractmethod
    def get_statistics(self, port: PortIdentity) -> Optional[RateSample]:
        """Current counters for the port, or None when none are available."""


class PortActuator(ABC):
    @abstractmethod
    def set_port_enabled(self, port: PortIdentity, enabled: bool) -> None:
        """Administratively enable or disable the port; raises ActuatorError on failure."""

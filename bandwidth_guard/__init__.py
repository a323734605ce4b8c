"""
bandwidth_guard
Per-port traffic-rate guard for an SDN controller:
  - samples cumulative counters on every managed port
  - disables a port whose bit rate crosses the configured threshold
  - re-enables it after a cooldown
"""

from .config import Config, ConfigurationError
from .guard import GuardService
from .models import PortIdentity, RateSample, Active, Suppressed

__version__ = "0.1.0"

__all__ = [
    "Config",
    "ConfigurationError",
    "GuardService",
    "PortIdentity",
    "RateSample",
    "Active",
    "Suppressed",
]

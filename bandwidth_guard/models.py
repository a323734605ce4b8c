from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class PortIdentity:
    device_id: str
    port_number: str

    def __str__(self) -> str:
        return f"{self.device_id}/{self.port_number}"


@dataclass(frozen=True)
class RateSample:
    bytes_received: int
    bytes_sent: int
    duration_seconds: float


@dataclass(frozen=True)
class Active:
    pass


@dataclass(frozen=True)
class Suppressed:
    since: float          # epoch seconds when the port was disabled
    reactivate_at: float  # epoch seconds when the reactivation timer fires


PortState = Union[Active, Suppressed]

ACTIVE = Active()

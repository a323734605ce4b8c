from __future__ import annotations

from .models import RateSample


class InvalidSample(ValueError):
    """Raised for a sample that cannot yield a bit rate."""


def compute_bit_rate(sample: RateSample) -> float:
    """Bits per second over the sample's duration, both directions summed."""
    if sample.duration_seconds <= 0:
        raise InvalidSample(f"non-positive duration {sample.duration_seconds}")
    if sample.bytes_received < 0 or sample.bytes_sent < 0:
        raise InvalidSample(
            f"negative byte counters rx={sample.bytes_received} tx={sample.bytes_sent}"
        )
    return (sample.bytes_received + sample.bytes_sent) * 8 / sample.duration_seconds

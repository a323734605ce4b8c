import pytest

from bandwidth_guard.config import DEFAULT_BANDWIDTH_THRESHOLD
from bandwidth_guard.models import RateSample
from bandwidth_guard.rate import InvalidSample, compute_bit_rate

from conftest import GBPS_20_8, GBPS_37


def test_below_threshold_fixture():
    rate = compute_bit_rate(GBPS_20_8)
    assert rate == 20_885_835_400
    assert not rate > DEFAULT_BANDWIDTH_THRESHOLD


def test_above_threshold_fixture():
    rate = compute_bit_rate(GBPS_37)
    assert rate == 37_474_836_480
    assert rate > DEFAULT_BANDWIDTH_THRESHOLD


def test_rate_averages_over_duration():
    sample = RateSample(bytes_received=500, bytes_sent=500, duration_seconds=4)
    assert compute_bit_rate(sample) == 2000


def test_idle_port_is_zero():
    assert compute_bit_rate(RateSample(0, 0, 30)) == 0


@pytest.mark.parametrize("duration", [0, 0.0, -1, -0.5])
def test_non_positive_duration_is_invalid(duration):
    with pytest.raises(InvalidSample):
        compute_bit_rate(RateSample(100, 100, duration))


def test_negative_counter_is_invalid():
    with pytest.raises(InvalidSample):
        compute_bit_rate(RateSample(-1, 100, 1))

"""Tests for the per-resource baseline cache."""

import pytest

from sysmetrics.core.errors import DegenerateIntervalError
from sysmetrics.core.schemas import Resource
from sysmetrics.monitoring.delta import compute_rate, counter_delta
from sysmetrics.monitoring.sample_cache import CacheState, SampleCache
from sysmetrics.monitoring.snapshots import NetworkSnapshot


def _net(rx_bytes: int) -> NetworkSnapshot:
    return NetworkSnapshot("eth0", rx_bytes=rx_bytes)


class TestSampleCache:
    """Tests for SampleCache state transitions."""

    def test_first_sample_seeds(self, clock) -> None:
        """Test the first advance stores a baseline and returns None."""
        cache = SampleCache(clock=clock)
        assert cache.state(Resource.NETWORK) is CacheState.UNINITIALIZED
        assert cache.advance(Resource.NETWORK, _net(100)) is None
        assert cache.state(Resource.NETWORK) is CacheState.HAS_BASELINE
        assert Resource.NETWORK in cache
        assert len(cache) == 1

    def test_interval_after_baseline(self, clock) -> None:
        """Test the second advance yields both snapshots and dt."""
        cache = SampleCache(clock=clock)
        cache.advance(Resource.NETWORK, _net(1000))
        clock.advance(2.0)
        interval = cache.advance(Resource.NETWORK, _net(3000))

        assert interval is not None
        assert interval.previous == _net(1000)
        assert interval.current == _net(3000)
        assert interval.dt_seconds == pytest.approx(2.0)
        delta = counter_delta("rx_bytes", interval.current.rx_bytes, interval.previous.rx_bytes)
        assert compute_rate(delta, interval.dt_seconds) == pytest.approx(1000.0)

    def test_baseline_advances(self, clock) -> None:
        """Test each interval is measured against the previous accepted sample."""
        cache = SampleCache(clock=clock)
        cache.advance(Resource.NETWORK, _net(0))
        clock.advance(1.0)
        cache.advance(Resource.NETWORK, _net(10))
        clock.advance(1.0)
        interval = cache.advance(Resource.NETWORK, _net(30))
        assert interval.previous == _net(10)
        assert cache.get(Resource.NETWORK).timestamp == clock()

    def test_zero_dt_keeps_baseline(self, clock) -> None:
        """Test dt == 0 raises and a later sample is measured against the original baseline."""
        cache = SampleCache(clock=clock)
        cache.advance(Resource.NETWORK, _net(1000))

        with pytest.raises(DegenerateIntervalError):
            cache.advance(Resource.NETWORK, _net(2000))
        assert cache.get(Resource.NETWORK).snapshot == _net(1000)

        clock.advance(4.0)
        interval = cache.advance(Resource.NETWORK, _net(5000))
        assert interval.previous == _net(1000)
        assert interval.dt_seconds == pytest.approx(4.0)

    def test_explicit_timestamp(self, clock) -> None:
        """Test a caller-supplied timestamp overrides the clock."""
        cache = SampleCache(clock=clock)
        cache.advance(Resource.CPU, _net(0), timestamp=10.0)
        interval = cache.advance(Resource.CPU, _net(0), timestamp=12.5)
        assert interval.dt_seconds == pytest.approx(2.5)

    def test_clock_going_backwards(self, clock) -> None:
        """Test a negative dt is rejected like a zero one."""
        cache = SampleCache(clock=clock)
        cache.advance(Resource.NETWORK, _net(0))
        clock.advance(-1.0)
        with pytest.raises(DegenerateIntervalError):
            cache.advance(Resource.NETWORK, _net(1))

    def test_resources_are_independent(self, clock) -> None:
        """Test seeding one resource does not seed another."""
        cache = SampleCache(clock=clock)
        cache.advance(Resource.NETWORK, _net(0))
        assert cache.state(Resource.DISK) is CacheState.UNINITIALIZED
        assert cache.get(Resource.DISK) is None

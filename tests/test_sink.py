"""Tests for metric sinks and the HTTP exposition server."""

import urllib.request

import pytest
from prometheus_client import CollectorRegistry

from sysmetrics.core.constants import GAUGE_DEFINITIONS
from sysmetrics.core.errors import UnknownGaugeError
from sysmetrics.monitoring.sink import MemorySink, MetricsServer, PrometheusSink


class TestPrometheusSink:
    """Tests for the prometheus_client-backed sink."""

    def test_registers_every_gauge(self) -> None:
        """Test one gauge per definition, all starting at zero."""
        sink = PrometheusSink()
        assert sink.names == list(GAUGE_DEFINITIONS)
        assert sink.registry.get_sample_value("cpu_usage_percentage") == 0.0
        assert sink.registry.get_sample_value("soft_interrupt_rate") == 0.0

    def test_set_gauge(self) -> None:
        """Test values are visible through the registry."""
        sink = PrometheusSink()
        sink.set_gauge("network_rx_rate_bps", 1000.0)
        sink.set_gauge("network_rx_rate_bps", 1500.0)
        assert sink.registry.get_sample_value("network_rx_rate_bps") == 1500.0

    def test_unknown_gauge(self) -> None:
        """Test setting an unregistered name fails."""
        sink = PrometheusSink()
        with pytest.raises(UnknownGaugeError):
            sink.set_gauge("gpu_usage_percentage", 1.0)

    def test_private_registries_are_independent(self) -> None:
        """Test two sinks do not collide on gauge names."""
        first = PrometheusSink()
        second = PrometheusSink()
        first.set_gauge("processes_total", 10)
        assert second.registry.get_sample_value("processes_total") == 0.0

    def test_custom_definitions(self) -> None:
        """Test a caller-supplied registry and gauge table."""
        registry = CollectorRegistry()
        sink = PrometheusSink(registry, definitions={"custom_gauge": "A custom gauge"})
        sink.set_gauge("custom_gauge", 3.5)
        assert registry.get_sample_value("custom_gauge") == 3.5


class TestMemorySink:
    """Tests for the dict-backed sink."""

    def test_values_copy(self) -> None:
        """Test values returns a snapshot copy."""
        sink = MemorySink()
        sink.set_gauge("memory_used_bytes", 42.0)
        values = sink.values
        values["memory_used_bytes"] = 0.0
        assert sink.get("memory_used_bytes") == 42.0

    def test_unknown_gauge(self) -> None:
        """Test the default definitions are enforced."""
        with pytest.raises(UnknownGaugeError):
            MemorySink().set_gauge("nope", 1.0)

    def test_unrestricted(self) -> None:
        """Test None definitions accept any name."""
        sink = MemorySink(definitions=None)
        sink.set_gauge("anything", 1.0)
        assert sink.get("anything") == 1.0


class TestMetricsServer:
    """Tests for HTTP exposition."""

    def test_serves_registry(self) -> None:
        """Test /metrics exposes the sink's gauges."""
        sink = PrometheusSink()
        sink.set_gauge("cpu_usage_percentage", 12.5)
        server = MetricsServer(sink.registry, port=0, address="127.0.0.1")
        server.start()
        try:
            assert server.is_running
            assert server.port != 0
            url = f"http://127.0.0.1:{server.port}/metrics"
            with urllib.request.urlopen(url, timeout=5) as response:
                body = response.read().decode()
        finally:
            server.stop()

        assert "# HELP cpu_usage_percentage CPU usage percentage" in body
        assert "cpu_usage_percentage 12.5" in body
        assert not server.is_running

    def test_stop_without_start(self) -> None:
        """Test stop() is a no-op before start()."""
        server = MetricsServer(CollectorRegistry(), port=0)
        server.stop()
        assert not server.is_running

"""Poll-cycle orchestration.

SystemSampler runs one cycle per tick. For every enabled resource, in the
fixed cycle order, it reads a snapshot, offers it to the sample cache, runs
the delta engine on the resulting interval and publishes the derived gauges.
A failure in one resource is logged and skipped; the others still update.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from sysmetrics.core.errors import CounterResetError, DegenerateIntervalError, SamplingError
from sysmetrics.core.schemas import CYCLE_ORDER, ExporterConfig, Resource
from sysmetrics.monitoring.delta import (
    delta_cpu,
    delta_disk,
    delta_network,
    delta_system_performance,
)
from sysmetrics.monitoring.detectors import detect_disk, detect_interface
from sysmetrics.monitoring.readers import ProcfsReader
from sysmetrics.monitoring.sample_cache import Clock, SampleCache
from sysmetrics.monitoring.sink import MetricsSink
from sysmetrics.monitoring.snapshots import ProcessCensus

logger = logging.getLogger(__name__)


@dataclass
class CycleReport:
    """Outcome of one poll cycle, per resource."""

    emitted: dict[Resource, list[str]] = field(default_factory=dict)
    seeded: list[Resource] = field(default_factory=list)
    skipped: dict[Resource, str] = field(default_factory=dict)


class SystemSampler:
    """Sample procfs periodically and publish derived gauges to a sink.

    Runs in a separate daemon thread when started; run_cycle() can also be
    driven directly (tests, one-shot sampling).
    """

    def __init__(
        self,
        reader: ProcfsReader,
        sink: MetricsSink,
        *,
        interval_seconds: float = 1.0,
        collectors: Iterable[Resource] = CYCLE_ORDER,
        disk_device: str | None = None,
        network_interface: str | None = None,
        clock: Clock = time.monotonic,
    ) -> None:
        """Initialize the sampler.

        Args:
            reader: Snapshot reader
            sink: Destination of gauge values
            interval_seconds: Delay between cycles when running in the background
            collectors: Resources to sample (always visited in cycle order)
            disk_device: Disk to monitor; detected on first use if None
            network_interface: Interface to monitor; detected on first use if None
            clock: Monotonic time source for interval computation
        """
        self._reader = reader
        self._sink = sink
        self._interval_seconds = max(0.1, interval_seconds)
        selected = set(collectors)
        self._collectors = [r for r in CYCLE_ORDER if r in selected]
        self._disk_device = disk_device
        self._network_interface = network_interface
        self._cache = SampleCache(clock)
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._cycles = 0

        self._handlers: dict[Resource, Callable[[ProcessCensus | None], list[str] | None]] = {
            Resource.CPU: lambda _: self._sample_cpu(),
            Resource.MEMORY: lambda _: self._sample_memory(),
            Resource.DISK: lambda _: self._sample_disk(),
            Resource.NETWORK: lambda _: self._sample_network(),
            Resource.CONTEXT: self._sample_context,
        }

    @classmethod
    def from_config(cls, config: ExporterConfig, sink: MetricsSink) -> SystemSampler:
        """Build a sampler from a validated configuration."""
        return cls(
            ProcfsReader(config.proc_root),
            sink,
            interval_seconds=config.interval_seconds,
            collectors=config.collectors,
            disk_device=config.disk_device,
            network_interface=config.network_interface,
        )

    @property
    def cache(self) -> SampleCache:
        return self._cache

    @property
    def collectors(self) -> list[Resource]:
        return list(self._collectors)

    @property
    def cycles(self) -> int:
        """Number of completed poll cycles."""
        return self._cycles

    @property
    def interval_seconds(self) -> float:
        return self._interval_seconds

    @property
    def primary_disk(self) -> str:
        """Monitored disk, detected once on first access."""
        if self._disk_device is None:
            self._disk_device = detect_disk(self._reader)
        return self._disk_device

    @property
    def primary_interface(self) -> str:
        """Monitored network interface, detected once on first access."""
        if self._network_interface is None:
            self._network_interface = detect_interface(self._reader)
        return self._network_interface

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the sampling thread."""
        if self.is_running:
            logger.warning("SystemSampler already running")
            return

        self._stop_event.clear()
        self._thread = threading.Thread(target=self._poll_loop, daemon=True, name="SystemSampler")
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        """Stop the sampling thread.

        Args:
            timeout: How long to wait for the thread to finish (seconds)
        """
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None

    def _poll_loop(self) -> None:
        """Background loop: one cycle, then wait for the interval or a stop."""
        while not self._stop_event.is_set():
            try:
                self.run_cycle()
            except Exception:
                logger.exception("Unexpected error during poll cycle")
            self._stop_event.wait(timeout=self._interval_seconds)

    def run_cycle(self) -> CycleReport:
        """Sample every enabled resource once, in cycle order."""
        report = CycleReport()
        census: ProcessCensus | None = None

        for resource in self._collectors:
            try:
                if resource is Resource.PROCESSES:
                    census = self._reader.read_process_census()
                    emitted = self._publish_census(census)
                else:
                    emitted = self._handlers[resource](census)
            except DegenerateIntervalError as e:
                logger.debug(f"Skipping {resource.value} this cycle: {e}")
                report.skipped[resource] = str(e)
            except CounterResetError as e:
                logger.warning(f"{resource.value} baseline reset: {e}")
                report.skipped[resource] = str(e)
            except SamplingError as e:
                logger.warning(f"Error sampling {resource.value}: {e}")
                report.skipped[resource] = str(e)
            else:
                if emitted is None:
                    report.seeded.append(resource)
                else:
                    report.emitted[resource] = emitted

        self._cycles += 1
        return report

    def _publish(self, values: dict[str, float]) -> list[str]:
        for name, value in values.items():
            self._sink.set_gauge(name, value)
        return list(values)

    def _sample_cpu(self) -> list[str] | None:
        interval = self._cache.advance(Resource.CPU, self._reader.read_cpu())
        if interval is None:
            return None

        usage = delta_cpu(interval.current, interval.previous)
        if usage is None:
            logger.debug("No CPU ticks elapsed since the last sample")
            return []
        logger.debug(f"CPU - usage: {usage:.1f}%")
        return self._publish({"cpu_usage_percentage": usage})

    def _sample_memory(self) -> list[str]:
        mem = self._reader.read_memory()
        logger.debug(
            f"Memory - total: {mem.total_bytes} bytes, used: {mem.used_bytes} bytes, "
            f"available: {mem.available_bytes} bytes"
        )
        return self._publish(
            {
                "memory_total_bytes": float(mem.total_bytes),
                "memory_used_bytes": float(mem.used_bytes),
                "memory_available_bytes": float(mem.available_bytes),
                "memory_usage_percentage": mem.usage_percent,
            }
        )

    def _sample_disk(self) -> list[str] | None:
        interval = self._cache.advance(Resource.DISK, self._reader.read_disk(self.primary_disk))
        if interval is None:
            return None

        health = delta_disk(interval.current, interval.previous, interval.dt_seconds)
        values = {
            "disk_read_rate": health.read_rate,
            "disk_write_rate": health.write_rate,
            "disk_utilization_percent": health.utilization_percent,
            "disk_queue_depth": health.queue_depth,
        }
        if health.avg_wait_time_ms is not None:
            values["disk_avg_wait_time_ms"] = health.avg_wait_time_ms

        logger.debug(
            f"Disk I/O - reads/s: {health.read_rate:.1f}, writes/s: {health.write_rate:.1f}, "
            f"util: {health.utilization_percent:.1f}%"
        )
        return self._publish(values)

    def _sample_network(self) -> list[str] | None:
        interval = self._cache.advance(
            Resource.NETWORK, self._reader.read_network(self.primary_interface)
        )
        if interval is None:
            return None

        rates = delta_network(interval.current, interval.previous, interval.dt_seconds)
        logger.debug(
            f"Network - RX: {rates.rx_rate_bps:.1f} B/s, TX: {rates.tx_rate_bps:.1f} B/s, "
            f"bandwidth: {rates.bandwidth_bps:.1f} B/s, RX errors: {rates.rx_error_rate_percent:.2f}%"
        )
        return self._publish(
            {
                "network_rx_rate_bps": rates.rx_rate_bps,
                "network_tx_rate_bps": rates.tx_rate_bps,
                "network_rx_packet_rate": rates.rx_packet_rate,
                "network_tx_packet_rate": rates.tx_packet_rate,
                "network_rx_error_rate_percent": rates.rx_error_rate_percent,
                "network_tx_error_rate_percent": rates.tx_error_rate_percent,
                "network_bandwidth_usage_bps": rates.bandwidth_bps,
            }
        )

    def _publish_census(self, census: ProcessCensus) -> list[str]:
        return self._publish(
            {
                "processes_total": float(census.total),
                "processes_running": float(census.running),
                "processes_sleeping": float(census.sleeping),
                "processes_stopped": float(census.stopped),
                "processes_zombie": float(census.zombie),
            }
        )

    def _sample_context(self, census: ProcessCensus | None) -> list[str] | None:
        context = self._reader.read_context()
        if census is None:
            # Process collector disabled or failed earlier in this cycle
            census = self._reader.read_process_census()

        interval = self._cache.advance(Resource.CONTEXT, context)
        if interval is None:
            return None

        perf = delta_system_performance(
            interval.current, interval.previous, census, interval.dt_seconds
        )
        logger.debug(
            f"System performance - context switches/s: {perf.context_switch_rate:.1f}, "
            f"process creation/s: {perf.process_creation_rate:.1f}, "
            f"interrupts/s: {perf.interrupt_rate:.1f}, load ratio: {perf.process_load_ratio:.3f}"
        )
        return self._publish(
            {
                "context_switches_rate": perf.context_switch_rate,
                "process_creation_rate": perf.process_creation_rate,
                "interrupt_rate": perf.interrupt_rate,
                "soft_interrupt_rate": perf.soft_interrupt_rate,
                "process_load_ratio": perf.process_load_ratio,
            }
        )

"""Snapshot and derived-metric value types.

Snapshots hold raw kernel counters for one resource at one instant. Derived
metrics are produced by the delta engine from two snapshots and handed
straight to a metrics sink.
"""

from __future__ import annotations

from dataclasses import dataclass

from sysmetrics.core.constants import PERCENTAGE_MULTIPLIER


@dataclass(frozen=True)
class MemorySnapshot:
    """System memory totals from /proc/meminfo (bytes)."""

    total_bytes: int
    available_bytes: int

    @property
    def used_bytes(self) -> int:
        return self.total_bytes - self.available_bytes

    @property
    def usage_percent(self) -> float:
        if self.total_bytes <= 0:
            return 0.0
        return self.used_bytes / self.total_bytes * PERCENTAGE_MULTIPLIER


@dataclass(frozen=True)
class CpuSnapshot:
    """Aggregate CPU time counters from the ``cpu`` line of /proc/stat (ticks)."""

    user: int
    nice: int
    system: int
    idle: int
    iowait: int
    irq: int
    softirq: int
    steal: int

    @property
    def idle_total(self) -> int:
        return self.idle + self.iowait

    @property
    def total(self) -> int:
        return (
            self.user
            + self.nice
            + self.system
            + self.idle
            + self.iowait
            + self.irq
            + self.softirq
            + self.steal
        )


@dataclass(frozen=True)
class DiskSnapshot:
    """Per-device counters from /proc/diskstats."""

    device: str
    reads_completed: int = 0
    reads_merged: int = 0
    sectors_read: int = 0
    time_reading_ms: int = 0
    writes_completed: int = 0
    writes_merged: int = 0
    sectors_written: int = 0
    time_writing_ms: int = 0
    ios_in_progress: int = 0  # Gauge, not a counter
    time_io_ms: int = 0
    weighted_time_io_ms: int = 0

    @property
    def total_ios(self) -> int:
        return self.reads_completed + self.writes_completed


@dataclass(frozen=True)
class NetworkSnapshot:
    """Per-interface counters from /proc/net/dev."""

    interface: str
    rx_bytes: int = 0
    rx_packets: int = 0
    rx_errors: int = 0
    rx_dropped: int = 0
    tx_bytes: int = 0
    tx_packets: int = 0
    tx_errors: int = 0
    tx_dropped: int = 0


@dataclass(frozen=True)
class ProcessCensus:
    """Instantaneous process counts by scheduler state."""

    total: int = 0
    running: int = 0
    sleeping: int = 0
    stopped: int = 0
    zombie: int = 0


@dataclass(frozen=True)
class ContextSnapshot:
    """Global scheduler/interrupt counters from /proc/stat."""

    context_switches: int
    processes_created: int
    interrupts: int = 0
    soft_interrupts: int = 0


Snapshot = (
    MemorySnapshot
    | CpuSnapshot
    | DiskSnapshot
    | NetworkSnapshot
    | ProcessCensus
    | ContextSnapshot
)


@dataclass(frozen=True)
class DiskHealth:
    """Disk rates derived from two snapshots.

    ``avg_wait_time_ms`` is None when no I/O completed in the interval; the
    previously published value should then be left as is.
    """

    read_rate: float
    write_rate: float
    utilization_percent: float
    avg_wait_time_ms: float | None
    queue_depth: float


@dataclass(frozen=True)
class NetworkRates:
    """Network throughput and error rates derived from two snapshots."""

    rx_rate_bps: float
    tx_rate_bps: float
    rx_packet_rate: float
    tx_packet_rate: float
    rx_error_rate_percent: float
    tx_error_rate_percent: float

    @property
    def bandwidth_bps(self) -> float:
        return self.rx_rate_bps + self.tx_rate_bps


@dataclass(frozen=True)
class SystemPerformance:
    """Scheduler rates plus the running/total process ratio."""

    context_switch_rate: float
    process_creation_rate: float
    interrupt_rate: float
    soft_interrupt_rate: float
    process_load_ratio: float

"""Delta engine: derive rates and ratios from two successive snapshots.

All functions here are pure. Callers are expected to pass a positive elapsed
time; a non-positive one raises DegenerateIntervalError. A counter that went
backwards (wraparound, reboot, device hot-plug) raises CounterResetError
instead of producing a negative or wrapped rate.

Functions:
    counter_delta: Difference between two readings of a monotonic counter
    compute_rate: Per-second rate from a delta and an interval
    compute_percent: Guarded ratio scaled to a percentage
    delta_cpu: CPU usage percentage
    delta_disk: Disk operation rates, utilization and average wait
    delta_network: Network byte/packet rates and error percentages
    delta_system_performance: Scheduler rates and process load ratio
"""

from __future__ import annotations

from sysmetrics.core.constants import MILLISECONDS_PER_SECOND, PERCENTAGE_MULTIPLIER
from sysmetrics.core.errors import CounterResetError, DegenerateIntervalError
from sysmetrics.monitoring.snapshots import (
    ContextSnapshot,
    CpuSnapshot,
    DiskHealth,
    DiskSnapshot,
    NetworkRates,
    NetworkSnapshot,
    ProcessCensus,
    SystemPerformance,
)


def counter_delta(field: str, current: int, previous: int) -> int:
    """Compute the increase of a monotonic counter.

    Args:
        field: Counter name, reported if the counter went backwards
        current: Current reading
        previous: Previous reading

    Returns:
        Non-negative difference

    Raises:
        CounterResetError: If current < previous
    """
    if current < previous:
        raise CounterResetError(field, previous, current)
    return current - previous


def compute_rate(delta: int | float, dt_seconds: float) -> float:
    """Compute a per-second rate.

    Raises:
        DegenerateIntervalError: If dt_seconds <= 0
    """
    if dt_seconds <= 0:
        raise DegenerateIntervalError(dt_seconds)
    return delta / dt_seconds


def compute_percent(part: int | float, whole: int | float) -> float:
    """Return part/whole as a percentage, 0.0 when whole is zero."""
    if whole <= 0:
        return 0.0
    return part / whole * PERCENTAGE_MULTIPLIER


def delta_cpu(current: CpuSnapshot, previous: CpuSnapshot) -> float | None:
    """Compute CPU usage between two snapshots.

    Returns:
        Busy percentage (0-100), or None if no ticks elapsed
    """
    total = counter_delta("cpu_total", current.total, previous.total)
    idle = counter_delta("cpu_idle", current.idle_total, previous.idle_total)
    if total == 0:
        return None
    return (total - idle) / total * PERCENTAGE_MULTIPLIER


def delta_disk(current: DiskSnapshot, previous: DiskSnapshot, dt_seconds: float) -> DiskHealth:
    """Compute disk health metrics.

    Utilization is the share of wall-clock time the device had I/O in flight.
    The average wait is None when no I/O completed in the interval, so the
    last published value is kept.
    """
    reads = counter_delta("reads_completed", current.reads_completed, previous.reads_completed)
    writes = counter_delta(
        "writes_completed", current.writes_completed, previous.writes_completed
    )
    io_time_ms = counter_delta("time_io_ms", current.time_io_ms, previous.time_io_ms)

    total_ios = reads + writes

    return DiskHealth(
        read_rate=compute_rate(reads, dt_seconds),
        write_rate=compute_rate(writes, dt_seconds),
        utilization_percent=compute_percent(io_time_ms, dt_seconds * MILLISECONDS_PER_SECOND),
        avg_wait_time_ms=io_time_ms / total_ios if total_ios > 0 else None,
        queue_depth=float(current.ios_in_progress),
    )


def delta_network(
    current: NetworkSnapshot, previous: NetworkSnapshot, dt_seconds: float
) -> NetworkRates:
    """Compute network throughput and error rates.

    Error rates are errors per packet as a percentage, 0.0 when no packets
    moved in that direction.
    """
    rx_bytes = counter_delta("rx_bytes", current.rx_bytes, previous.rx_bytes)
    tx_bytes = counter_delta("tx_bytes", current.tx_bytes, previous.tx_bytes)
    rx_packets = counter_delta("rx_packets", current.rx_packets, previous.rx_packets)
    tx_packets = counter_delta("tx_packets", current.tx_packets, previous.tx_packets)
    rx_errors = counter_delta("rx_errors", current.rx_errors, previous.rx_errors)
    tx_errors = counter_delta("tx_errors", current.tx_errors, previous.tx_errors)

    return NetworkRates(
        rx_rate_bps=compute_rate(rx_bytes, dt_seconds),
        tx_rate_bps=compute_rate(tx_bytes, dt_seconds),
        rx_packet_rate=compute_rate(rx_packets, dt_seconds),
        tx_packet_rate=compute_rate(tx_packets, dt_seconds),
        rx_error_rate_percent=compute_percent(rx_errors, rx_packets),
        tx_error_rate_percent=compute_percent(tx_errors, tx_packets),
    )


def delta_system_performance(
    current: ContextSnapshot,
    previous: ContextSnapshot,
    census: ProcessCensus,
    dt_seconds: float,
) -> SystemPerformance:
    """Compute scheduler rates and the running/total process ratio."""
    switches = counter_delta(
        "context_switches", current.context_switches, previous.context_switches
    )
    created = counter_delta(
        "processes_created", current.processes_created, previous.processes_created
    )
    interrupts = counter_delta("interrupts", current.interrupts, previous.interrupts)
    soft_interrupts = counter_delta(
        "soft_interrupts", current.soft_interrupts, previous.soft_interrupts
    )

    return SystemPerformance(
        context_switch_rate=compute_rate(switches, dt_seconds),
        process_creation_rate=compute_rate(created, dt_seconds),
        interrupt_rate=compute_rate(interrupts, dt_seconds),
        soft_interrupt_rate=compute_rate(soft_interrupts, dt_seconds),
        process_load_ratio=census.running / census.total if census.total > 0 else 0.0,
    )

"""Monitoring module - procfs sampling and rate derivation.

Components:
- ProcfsReader: parse procfs tables into typed snapshots
- detectors: choose the primary disk and network interface
- delta: pure rate/ratio derivation from two snapshots
- SampleCache: per-resource baseline state machine
- SystemSampler: poll-cycle orchestration
- PrometheusSink / MetricsServer: gauge registry and HTTP exposition
"""

from __future__ import annotations

from sysmetrics.monitoring.delta import (
    compute_percent,
    compute_rate,
    counter_delta,
    delta_cpu,
    delta_disk,
    delta_network,
    delta_system_performance,
)
from sysmetrics.monitoring.detectors import (
    DeviceMatcher,
    detect_disk,
    detect_interface,
    detect_primary_disk,
    detect_primary_interface,
)
from sysmetrics.monitoring.readers import ProcfsReader
from sysmetrics.monitoring.sample_cache import CacheEntry, CacheState, Interval, SampleCache
from sysmetrics.monitoring.sampler import CycleReport, SystemSampler
from sysmetrics.monitoring.sink import MemorySink, MetricsServer, MetricsSink, PrometheusSink
from sysmetrics.monitoring.snapshots import (
    ContextSnapshot,
    CpuSnapshot,
    DiskHealth,
    DiskSnapshot,
    MemorySnapshot,
    NetworkRates,
    NetworkSnapshot,
    ProcessCensus,
    SystemPerformance,
)

__all__ = [
    "CacheEntry",
    "CacheState",
    "compute_percent",
    "compute_rate",
    "ContextSnapshot",
    "counter_delta",
    "CpuSnapshot",
    "CycleReport",
    "delta_cpu",
    "delta_disk",
    "delta_network",
    "delta_system_performance",
    "detect_disk",
    "detect_interface",
    "detect_primary_disk",
    "detect_primary_interface",
    "DeviceMatcher",
    "DiskHealth",
    "DiskSnapshot",
    "Interval",
    "MemorySink",
    "MemorySnapshot",
    "MetricsServer",
    "MetricsSink",
    "NetworkRates",
    "NetworkSnapshot",
    "ProcessCensus",
    "ProcfsReader",
    "PrometheusSink",
    "SampleCache",
    "SystemPerformance",
    "SystemSampler",
]

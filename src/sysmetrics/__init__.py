"""sysmetrics - procfs metrics exporter for Prometheus."""

from __future__ import annotations

from sysmetrics.core.schemas import ExporterConfig, Resource
from sysmetrics.monitoring.readers import ProcfsReader
from sysmetrics.monitoring.sampler import SystemSampler
from sysmetrics.monitoring.sink import MetricsServer, PrometheusSink

__version__ = "0.1.0"

__all__ = [
    "ExporterConfig",
    "MetricsServer",
    "ProcfsReader",
    "PrometheusSink",
    "Resource",
    "SystemSampler",
    "__version__",
]

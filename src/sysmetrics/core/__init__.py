"""Core module - configuration, schemas and errors."""

from __future__ import annotations

from sysmetrics.core.config import load_config, save_config
from sysmetrics.core.constants import FALLBACK_DISK, FALLBACK_INTERFACE, GAUGE_DEFINITIONS
from sysmetrics.core.errors import (
    CounterResetError,
    DegenerateIntervalError,
    DeviceNotFoundError,
    ParseError,
    ReadError,
    SamplingError,
    UnknownGaugeError,
)
from sysmetrics.core.schemas import CYCLE_ORDER, ExporterConfig, Resource

__all__ = [
    "CYCLE_ORDER",
    "CounterResetError",
    "DegenerateIntervalError",
    "DeviceNotFoundError",
    "ExporterConfig",
    "FALLBACK_DISK",
    "FALLBACK_INTERFACE",
    "GAUGE_DEFINITIONS",
    "load_config",
    "ParseError",
    "ReadError",
    "Resource",
    "SamplingError",
    "save_config",
    "UnknownGaugeError",
]

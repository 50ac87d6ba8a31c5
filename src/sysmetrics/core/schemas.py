"""Pydantic schemas for sysmetrics.

This module defines the configuration contract of the exporter and the
resource identifiers shared by readers, cache and sampler.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from sysmetrics.core.constants import (
    DEFAULT_INTERVAL_SECONDS,
    DEFAULT_LISTEN_ADDRESS,
    DEFAULT_PORT,
    DEFAULT_PROC_ROOT,
)


class Resource(str, Enum):
    """Monitored resources, in the order a poll cycle visits them."""

    CPU = "cpu"
    MEMORY = "memory"
    DISK = "disk"
    NETWORK = "network"
    PROCESSES = "processes"
    CONTEXT = "context"


CYCLE_ORDER: tuple[Resource, ...] = tuple(Resource)


class ExporterConfig(BaseModel):
    """Top-level exporter configuration.

    This is the main configuration loaded from YAML/JSON files.

    Attributes:
        listen_address: Address the HTTP exposition server binds to
        port: TCP port of the HTTP exposition server
        interval_seconds: Delay between two poll cycles
        proc_root: Root of the procfs tree to sample
        disk_device: Pin the monitored disk instead of detecting it
        network_interface: Pin the monitored interface instead of detecting it
        collectors: Resources sampled each cycle
        log_level: Logging level name
    """

    listen_address: str = Field(default=DEFAULT_LISTEN_ADDRESS, min_length=1)
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535, description="HTTP listen port")
    interval_seconds: float = Field(
        default=DEFAULT_INTERVAL_SECONDS, ge=0.1, le=3600, description="Polling interval"
    )
    proc_root: Path = Field(default=Path(DEFAULT_PROC_ROOT), description="procfs mount point")
    disk_device: str | None = Field(default=None, description="Disk to monitor (auto if unset)")
    network_interface: str | None = Field(
        default=None, description="Interface to monitor (auto if unset)"
    )
    collectors: list[Resource] = Field(default_factory=lambda: list(CYCLE_ORDER))
    log_level: str = Field(default="INFO")

    @field_validator("collectors")
    @classmethod
    def normalize_collectors(cls, v: list[Resource]) -> list[Resource]:
        """Drop duplicates and restore the fixed cycle order."""
        selected = set(v)
        return [r for r in CYCLE_ORDER if r in selected]

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure the level is one the logging module knows."""
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("disk_device", "network_interface")
    @classmethod
    def blank_means_auto(cls, v: str | None) -> str | None:
        """Treat an empty device name as 'detect automatically'."""
        if v is not None and not v.strip():
            return None
        return v.strip() if v else v

    def is_enabled(self, resource: Resource) -> bool:
        """Return True if the resource is sampled each cycle."""
        return resource in self.collectors

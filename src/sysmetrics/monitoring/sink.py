"""Metrics sinks and the HTTP exposition host.

The sampler only ever calls ``set_gauge(name, value)``. PrometheusSink maps
those calls onto prometheus_client gauges in a dedicated registry, and
MetricsServer serves that registry over HTTP from a background thread.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from typing import Protocol

from prometheus_client import CollectorRegistry, Gauge, start_http_server

from sysmetrics.core.constants import DEFAULT_LISTEN_ADDRESS, DEFAULT_PORT, GAUGE_DEFINITIONS
from sysmetrics.core.errors import UnknownGaugeError

logger = logging.getLogger(__name__)


class MetricsSink(Protocol):
    """Anything that accepts named gauge values."""

    def set_gauge(self, name: str, value: float) -> None: ...


class PrometheusSink:
    """Gauge registry backed by prometheus_client.

    Updates are serialized with a lock that is held only around the value
    assignment, never while reading procfs.
    """

    def __init__(
        self,
        registry: CollectorRegistry | None = None,
        definitions: Mapping[str, str] = GAUGE_DEFINITIONS,
    ) -> None:
        """Create and register one gauge per definition.

        Args:
            registry: Registry to register gauges in (a private one by default)
            definitions: Gauge name -> help text
        """
        self._registry = registry if registry is not None else CollectorRegistry()
        self._lock = threading.Lock()
        self._gauges: dict[str, Gauge] = {
            name: Gauge(name, documentation, registry=self._registry)
            for name, documentation in definitions.items()
        }
        logger.debug(f"Registered {len(self._gauges)} gauges")

    @property
    def registry(self) -> CollectorRegistry:
        return self._registry

    @property
    def names(self) -> list[str]:
        return list(self._gauges)

    def set_gauge(self, name: str, value: float) -> None:
        gauge = self._gauges.get(name)
        if gauge is None:
            raise UnknownGaugeError(name)
        with self._lock:
            gauge.set(value)


class MemorySink:
    """Dict-backed sink for one-shot sampling and tests."""

    def __init__(self, definitions: Mapping[str, str] | None = GAUGE_DEFINITIONS) -> None:
        """Initialize the sink.

        Args:
            definitions: Accepted gauge names; None accepts any name
        """
        self._allowed = set(definitions) if definitions is not None else None
        self._lock = threading.Lock()
        self._values: dict[str, float] = {}

    def set_gauge(self, name: str, value: float) -> None:
        if self._allowed is not None and name not in self._allowed:
            raise UnknownGaugeError(name)
        with self._lock:
            self._values[name] = value

    def get(self, name: str) -> float | None:
        with self._lock:
            return self._values.get(name)

    @property
    def values(self) -> dict[str, float]:
        """Copy of every gauge set so far."""
        with self._lock:
            return dict(self._values)


class MetricsServer:
    """Serve a registry at ``http://<address>:<port>/metrics``."""

    def __init__(
        self,
        registry: CollectorRegistry,
        port: int = DEFAULT_PORT,
        address: str = DEFAULT_LISTEN_ADDRESS,
    ) -> None:
        self._registry = registry
        self._port = port
        self._address = address
        self._server = None
        self._thread: threading.Thread | None = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def port(self) -> int:
        """Bound port (resolved after start() when port 0 was requested)."""
        if self._server is not None:
            return self._server.server_address[1]
        return self._port

    def start(self) -> None:
        """Start the HTTP listener thread."""
        if self.is_running:
            logger.warning("MetricsServer already running")
            return
        self._server, self._thread = start_http_server(
            self._port, addr=self._address, registry=self._registry
        )
        logger.info(f"Serving metrics on http://{self._address}:{self.port}/metrics")

    def stop(self, timeout: float | None = 5.0) -> None:
        """Shut the listener down and wait for its thread."""
        if self._server is None:
            return
        self._server.shutdown()
        self._server.server_close()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
        self._server = None
        self._thread = None
        logger.info("Metrics server stopped")

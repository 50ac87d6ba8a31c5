"""Exception taxonomy for the sampling pipeline.

Every sampling failure derives from SamplingError so the sampler can skip a
single resource for one cycle without affecting the others.
"""

from __future__ import annotations

from pathlib import Path


class SamplingError(Exception):
    """Base class for per-resource sampling failures."""


class ReadError(SamplingError):
    """A procfs file or directory could not be opened or read."""

    def __init__(self, path: Path | str, cause: OSError | None = None) -> None:
        self.path = Path(path)
        self.cause = cause
        detail = f": {cause.strerror or cause}" if cause is not None else ""
        super().__init__(f"Cannot read {self.path}{detail}")


class ParseError(SamplingError):
    """A table was readable but required fields were missing or malformed."""


class DeviceNotFoundError(SamplingError):
    """The requested disk or network interface is absent from the table."""

    def __init__(self, name: str, table: str) -> None:
        self.name = name
        self.table = table
        super().__init__(f"Device {name!r} not found in {table}")


class DegenerateIntervalError(SamplingError):
    """Elapsed time between two samples is zero or negative."""

    def __init__(self, dt_seconds: float) -> None:
        self.dt_seconds = dt_seconds
        super().__init__(f"Elapsed time must be positive, got {dt_seconds:.6f}s")


class CounterResetError(SamplingError):
    """A monotonic counter went backwards (wraparound, reboot or hot-plug)."""

    def __init__(self, field: str, previous: int, current: int) -> None:
        self.field = field
        self.previous = previous
        self.current = current
        super().__init__(f"Counter {field} decreased from {previous} to {current}")


class UnknownGaugeError(KeyError):
    """A sink was asked to set a gauge that was never registered."""

"""procfs snapshot readers.

Each resource has a pure ``parse_*`` function that turns the text of one
kernel table into a typed snapshot, and a ``ProcfsReader`` method that reads
the file and delegates to it.

Tables sourced (relative to the proc root):
- meminfo: MemTotal / MemAvailable
- stat: aggregate ``cpu`` line, ctxt, processes, intr, softirq
- diskstats: per-device block I/O counters
- net/dev: per-interface RX/TX counters
- <pid>/stat: process state character
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

from sysmetrics.core.constants import (
    CPU_STAT_FIELDS,
    DEFAULT_PROC_ROOT,
    DISK_STAT_COUNTERS,
    DISKSTATS_FILE,
    KILOBYTES_TO_BYTES,
    MEMINFO_FILE,
    NET_DEV_FILE,
    NET_DEV_HEADER_LINES,
    NET_DEV_MIN_FIELDS,
    STAT_FILE,
)
from sysmetrics.core.errors import DeviceNotFoundError, ParseError, ReadError
from sysmetrics.core.schemas import Resource
from sysmetrics.monitoring.snapshots import (
    ContextSnapshot,
    CpuSnapshot,
    DiskSnapshot,
    MemorySnapshot,
    NetworkSnapshot,
    ProcessCensus,
    Snapshot,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# /proc/meminfo
# ---------------------------------------------------------------------------


def parse_meminfo(text: str) -> MemorySnapshot:
    """Parse /proc/meminfo.

    Format:
        MemTotal:       16318412 kB
        MemFree:         1021652 kB
        MemAvailable:    9427080 kB
    """
    values: dict[str, int] = {}
    for line in text.splitlines():
        key, sep, rest = line.partition(":")
        if not sep or key not in ("MemTotal", "MemAvailable"):
            continue
        parts = rest.split()
        if parts and parts[0].isdigit():
            values[key] = int(parts[0])

    total = values.get("MemTotal", 0)
    available = values.get("MemAvailable", 0)
    if total == 0 or available == 0:
        raise ParseError("MemTotal/MemAvailable missing from meminfo")

    return MemorySnapshot(
        total_bytes=total * KILOBYTES_TO_BYTES,
        available_bytes=available * KILOBYTES_TO_BYTES,
    )


# ---------------------------------------------------------------------------
# /proc/stat
# ---------------------------------------------------------------------------


def parse_cpu_stat(text: str) -> CpuSnapshot:
    """Parse the aggregate ``cpu`` line of /proc/stat.

    Format:
        cpu  4705 356 584 3699176 23060 0 277 0 0 0

    Only the first eight fields (user .. steal) are used.
    """
    for line in text.splitlines():
        parts = line.split()
        if not parts or parts[0] != "cpu":
            continue
        fields = parts[1 : CPU_STAT_FIELDS + 1]
        if len(fields) < CPU_STAT_FIELDS:
            raise ParseError(
                f"cpu line has {len(fields)} fields, expected {CPU_STAT_FIELDS}: {line!r}"
            )
        try:
            return CpuSnapshot(*(int(f) for f in fields))
        except ValueError as e:
            raise ParseError(f"Non-numeric cpu field in {line!r}") from e

    raise ParseError("No aggregate cpu line in stat")


# Declared contract of the context parser: stat line key -> snapshot field
CONTEXT_REQUIRED_FIELDS: dict[str, str] = {
    "ctxt": "context_switches",
    "processes": "processes_created",
}
CONTEXT_OPTIONAL_FIELDS: dict[str, str] = {
    "intr": "interrupts",
    "softirq": "soft_interrupts",
}


def parse_context_stat(text: str) -> ContextSnapshot:
    """Parse scheduler and interrupt counters from /proc/stat.

    Format:
        ctxt 1990473
        processes 2915
        intr 114930548 113199788 3 0 5 263 ...
        softirq 33215934 1 2838208 1 ...

    ``ctxt`` and ``processes`` are required; ``intr`` and ``softirq`` default
    to 0 when absent. For ``intr``/``softirq`` only the leading total is used.
    """
    wanted = {**CONTEXT_REQUIRED_FIELDS, **CONTEXT_OPTIONAL_FIELDS}
    found: dict[str, int] = {}

    for line in text.splitlines():
        parts = line.split(None, 2)
        if len(parts) < 2 or parts[0] not in wanted or parts[0] in found:
            continue
        try:
            found[parts[0]] = int(parts[1])
        except ValueError:
            logger.debug(f"Ignoring malformed stat line: {line!r}")
        if len(found) == len(wanted):
            break

    missing = [key for key in CONTEXT_REQUIRED_FIELDS if key not in found]
    if missing:
        raise ParseError(f"Required stat fields missing: {', '.join(missing)}")

    return ContextSnapshot(**{field: found.get(key, 0) for key, field in wanted.items()})


# ---------------------------------------------------------------------------
# /proc/diskstats
# ---------------------------------------------------------------------------


def iter_diskstats(text: str) -> Iterator[DiskSnapshot]:
    """Yield one snapshot per well-formed /proc/diskstats row.

    Format (first 14 columns; newer kernels append discard/flush counters):
        259  0 nvme0n1 52342 1234 3417226 13862 110312 47723 5289816 ...
    """
    for line in text.splitlines():
        parts = line.split()
        if len(parts) < 3 + DISK_STAT_COUNTERS:
            continue
        try:
            counters = [int(p) for p in parts[3 : 3 + DISK_STAT_COUNTERS]]
        except ValueError:
            logger.debug(f"Ignoring malformed diskstats row: {line!r}")
            continue
        yield DiskSnapshot(parts[2], *counters)


def parse_diskstats(text: str, device: str) -> DiskSnapshot:
    """Return the counters of ``device`` (exact name match)."""
    for snapshot in iter_diskstats(text):
        if snapshot.device == device:
            return snapshot
    raise DeviceNotFoundError(device, DISKSTATS_FILE)


# ---------------------------------------------------------------------------
# /proc/net/dev
# ---------------------------------------------------------------------------


def iter_net_dev(text: str) -> Iterator[tuple[str, list[str]]]:
    """Yield ``(interface, fields)`` for each /proc/net/dev data row.

    Format (two header lines, then one row per interface):
        Inter-|   Receive                            ...|  Transmit
         face |bytes    packets errs drop fifo frame ...|bytes    packets ...
            lo: 2776770   11307    0    0    0     0 ...
          eth0: 1215645    2751    0    0    0     0 ...
    """
    for line in text.splitlines()[NET_DEV_HEADER_LINES:]:
        name, sep, rest = line.partition(":")
        if not sep:
            continue
        yield name.strip(), rest.split()


def network_snapshot_from_fields(interface: str, fields: list[str]) -> NetworkSnapshot:
    """Build a snapshot from RX fields 1-4 and TX fields 9-12 of a net/dev row."""
    if len(fields) < NET_DEV_MIN_FIELDS:
        raise ParseError(
            f"net/dev row for {interface} has {len(fields)} fields, "
            f"expected at least {NET_DEV_MIN_FIELDS}"
        )
    try:
        rx = [int(f) for f in fields[0:4]]
        tx = [int(f) for f in fields[8:12]]
    except ValueError as e:
        raise ParseError(f"Non-numeric net/dev field for {interface}") from e
    return NetworkSnapshot(interface, *rx, *tx)


def parse_net_dev(text: str, interface: str) -> NetworkSnapshot:
    """Return the counters of ``interface`` (exact name match)."""
    for name, fields in iter_net_dev(text):
        if name != interface:
            continue
        try:
            return network_snapshot_from_fields(name, fields)
        except ParseError as e:
            logger.debug(f"Skipping unusable net/dev row: {e}")
    raise DeviceNotFoundError(interface, NET_DEV_FILE)


# ---------------------------------------------------------------------------
# /proc/<pid>/stat
# ---------------------------------------------------------------------------

# Scheduler state character -> ProcessCensus bucket. Unlisted states count
# as sleeping.
PROCESS_STATE_BUCKETS: dict[str, str] = {
    "R": "running",
    "S": "sleeping",
    "D": "sleeping",
    "I": "sleeping",
    "T": "stopped",
    "t": "stopped",
    "Z": "zombie",
}
DEFAULT_STATE_BUCKET = "sleeping"


def parse_process_stat(text: str) -> tuple[int, str, str]:
    """Parse ``pid (comm) state ...`` from a /proc/<pid>/stat line.

    ``comm`` runs to the last closing parenthesis, so command names that
    contain spaces or parentheses parse correctly.

    Returns:
        Tuple of (pid, comm, state character)
    """
    head, sep, tail = text.rpartition(")")
    pid_part, open_paren, comm = head.partition("(")
    rest = tail.split()
    if not sep or not open_paren or not rest:
        raise ParseError(f"Malformed process stat line: {text[:80]!r}")
    try:
        pid = int(pid_part)
    except ValueError as e:
        raise ParseError(f"Malformed pid in process stat line: {text[:80]!r}") from e
    return pid, comm, rest[0][0]


def census_from_states(states: list[str]) -> ProcessCensus:
    """Bucket a list of state characters into a ProcessCensus."""
    counts = {"running": 0, "sleeping": 0, "stopped": 0, "zombie": 0}
    for state in states:
        counts[PROCESS_STATE_BUCKETS.get(state, DEFAULT_STATE_BUCKET)] += 1
    return ProcessCensus(total=len(states), **counts)


# ---------------------------------------------------------------------------
# Reader
# ---------------------------------------------------------------------------


class ProcfsReader:
    """Read typed snapshots from a procfs tree.

    The proc root is configurable so tests (and containers with the host's
    procfs mounted elsewhere) can point the reader at another directory.
    """

    def __init__(self, proc_root: Path | str = DEFAULT_PROC_ROOT) -> None:
        self._proc_root = Path(proc_root)

    @property
    def proc_root(self) -> Path:
        return self._proc_root

    def read_text(self, relative: str) -> str:
        """Read a procfs file, translating OS failures into ReadError."""
        path = self._proc_root / relative
        try:
            return path.read_text()
        except OSError as e:
            raise ReadError(path, e) from e

    def read(self, resource: Resource, device: str | None = None) -> Snapshot:
        """Read the snapshot for ``resource``.

        Args:
            resource: Resource to sample
            device: Disk or interface name (required for DISK and NETWORK)
        """
        if resource in (Resource.DISK, Resource.NETWORK) and not device:
            raise ValueError(f"{resource.value} reads need a device name")

        if resource is Resource.CPU:
            return self.read_cpu()
        if resource is Resource.MEMORY:
            return self.read_memory()
        if resource is Resource.DISK:
            return self.read_disk(device)  # type: ignore[arg-type]
        if resource is Resource.NETWORK:
            return self.read_network(device)  # type: ignore[arg-type]
        if resource is Resource.PROCESSES:
            return self.read_process_census()
        return self.read_context()

    def read_memory(self) -> MemorySnapshot:
        return parse_meminfo(self.read_text(MEMINFO_FILE))

    def read_cpu(self) -> CpuSnapshot:
        return parse_cpu_stat(self.read_text(STAT_FILE))

    def read_context(self) -> ContextSnapshot:
        return parse_context_stat(self.read_text(STAT_FILE))

    def read_disk(self, device: str) -> DiskSnapshot:
        return parse_diskstats(self.read_text(DISKSTATS_FILE), device)

    def read_network(self, interface: str) -> NetworkSnapshot:
        return parse_net_dev(self.read_text(NET_DEV_FILE), interface)

    def read_process_census(self) -> ProcessCensus:
        """Count processes by state across all numeric entries of the proc root.

        Processes that exit between listing and reading are skipped.
        """
        try:
            entries = [e for e in self._proc_root.iterdir() if e.name.isdigit()]
        except OSError as e:
            raise ReadError(self._proc_root, e) from e

        states: list[str] = []
        for entry in entries:
            try:
                _, _, state = parse_process_stat((entry / "stat").read_text())
            except OSError:
                # Process exited after the directory listing
                continue
            except ParseError as e:
                logger.debug(f"Skipping {entry.name}: {e}")
                continue
            states.append(state)

        census = census_from_states(states)
        logger.debug(
            f"Process census - total: {census.total}, running: {census.running}, "
            f"sleeping: {census.sleeping}, stopped: {census.stopped}, zombie: {census.zombie}"
        )
        return census

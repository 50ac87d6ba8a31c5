"""Primary disk and network interface detection.

Detection inspects the live counter table once and picks the device to keep
sampling. The selection policy is an ordered matcher table: each matcher has
a predicate over the device name and a priority (lower wins). Among active
devices the best priority wins, ties going to the earlier row. Detection never
raises; it always resolves to a usable name.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass

from sysmetrics.core.constants import (
    DISKSTATS_FILE,
    FALLBACK_DISK,
    FALLBACK_INTERFACE,
    LOOPBACK_INTERFACE,
    NET_DEV_FILE,
)
from sysmetrics.core.errors import ReadError
from sysmetrics.monitoring.readers import ProcfsReader, iter_diskstats, iter_net_dev

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeviceMatcher:
    """A named name-predicate with a selection priority (lower is preferred)."""

    name: str
    predicate: Callable[[str], bool]
    priority: int = 0


def match_priority(device: str, matchers: Sequence[DeviceMatcher]) -> int | None:
    """Return the priority of the first matcher accepting ``device``, else None."""
    for matcher in matchers:
        if matcher.predicate(device):
            return matcher.priority
    return None


def select_device(
    candidates: Iterable[tuple[str, bool]], matchers: Sequence[DeviceMatcher]
) -> str | None:
    """Pick the best active candidate.

    Args:
        candidates: ``(name, is_active)`` pairs in table order
        matchers: Matcher table

    Returns:
        Name of the active candidate with the lowest priority, first in table
        order on ties; None if no active candidate matches.
    """
    best: tuple[int, str] | None = None
    for name, active in candidates:
        if not active:
            continue
        priority = match_priority(name, matchers)
        if priority is None:
            continue
        if best is None or priority < best[0]:
            best = (priority, name)
    return best[1] if best else None


def _whole_device(prefix: str) -> Callable[[str], bool]:
    """Match ``prefix*`` names without a ``p<N>`` partition suffix."""

    def predicate(name: str) -> bool:
        return name.startswith(prefix) and "p" not in name[len(prefix) :]

    return predicate


def _scsi_disk(name: str) -> bool:
    # sda, sdb, ... but not partitions like sda1
    return name.startswith("sd") and len(name) == 3


DISK_MATCHERS: tuple[DeviceMatcher, ...] = (
    DeviceMatcher("nvme", _whole_device("nvme")),
    DeviceMatcher("scsi", _scsi_disk),
    DeviceMatcher("mmc", _whole_device("mmcblk")),
)

PHYSICAL_INTERFACE_PREFIXES: tuple[str, ...] = ("eth", "enp", "ens", "wlan", "wlp", "wlo", "wls")

INTERFACE_MATCHERS: tuple[DeviceMatcher, ...] = (
    DeviceMatcher("physical", lambda name: name.startswith(PHYSICAL_INTERFACE_PREFIXES), 0),
    DeviceMatcher("any", lambda name: name != LOOPBACK_INTERFACE, 1),
)


def detect_primary_disk(diskstats_text: str) -> str:
    """Choose the disk to monitor from the text of /proc/diskstats.

    The first whole disk (not a partition) with completed I/O wins; falls back
    to ``sda``.
    """
    candidates = ((s.device, s.total_ios > 0) for s in iter_diskstats(diskstats_text))
    return select_device(candidates, DISK_MATCHERS) or FALLBACK_DISK


def _has_traffic(fields: list[str]) -> bool:
    try:
        return int(fields[0]) > 0 or int(fields[8]) > 0
    except (IndexError, ValueError):
        return False


def detect_primary_interface(net_dev_text: str) -> str:
    """Choose the interface to monitor from the text of /proc/net/dev.

    Preference order: a physical/wireless interface with traffic, any
    non-loopback interface with traffic, the first non-loopback interface,
    then ``eth0``.
    """
    rows = [
        (name, fields) for name, fields in iter_net_dev(net_dev_text) if name != LOOPBACK_INTERFACE
    ]

    chosen = select_device(((name, _has_traffic(f)) for name, f in rows), INTERFACE_MATCHERS)
    if chosen:
        return chosen
    if rows:
        return rows[0][0]
    return FALLBACK_INTERFACE


def detect_disk(reader: ProcfsReader) -> str:
    """Detect the primary disk using ``reader``; never raises."""
    try:
        disk = detect_primary_disk(reader.read_text(DISKSTATS_FILE))
    except ReadError as e:
        logger.warning(f"{e}; using fallback disk {FALLBACK_DISK}")
        return FALLBACK_DISK
    logger.info(f"Primary disk detected: {disk}")
    return disk


def detect_interface(reader: ProcfsReader) -> str:
    """Detect the primary network interface using ``reader``; never raises."""
    try:
        interface = detect_primary_interface(reader.read_text(NET_DEV_FILE))
    except ReadError as e:
        logger.warning(f"{e}; using fallback interface {FALLBACK_INTERFACE}")
        return FALLBACK_INTERFACE
    logger.info(f"Primary network interface detected: {interface}")
    return interface

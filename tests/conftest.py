"""Shared fixtures: a fake procfs tree under tmp_path."""

from __future__ import annotations

from pathlib import Path

import pytest

MEMINFO = """\
MemTotal:       16318412 kB
MemFree:         1021652 kB
MemAvailable:    9427080 kB
Buffers:          412312 kB
Cached:          7812340 kB
"""

NET_DEV_HEADER = """\
Inter-|   Receive                                                |  Transmit
 face |bytes    packets errs drop fifo frame compressed multicast|bytes    packets errs drop fifo colls carrier compressed
"""


def stat_text(
    cpu: tuple[int, ...] = (4705, 356, 584, 3699176, 23060, 0, 277, 0),
    ctxt: int = 1990473,
    processes: int = 2915,
    intr: int | None = 114930548,
    softirq: int | None = 33215934,
) -> str:
    """Render a /proc/stat document."""
    lines = [
        "cpu  " + " ".join(str(v) for v in cpu) + " 0 0",
        "cpu0 1393280 32966 572056 13343292 6130 0 17875 0 0 0",
    ]
    if intr is not None:
        lines.append(f"intr {intr} 113199788 3 0 5 263 0 4")
    lines.append(f"ctxt {ctxt}")
    lines.append("btime 1062191376")
    lines.append(f"processes {processes}")
    lines.append("procs_running 1")
    lines.append("procs_blocked 0")
    if softirq is not None:
        lines.append(f"softirq {softirq} 1 2838208 1 9875 0 0")
    return "\n".join(lines) + "\n"


def diskstats_row(
    name: str,
    reads: int = 0,
    writes: int = 0,
    time_io: int = 0,
    in_progress: int = 0,
    major: int = 8,
    minor: int = 0,
) -> str:
    """Render one /proc/diskstats row (kernel 5.x layout, 20 columns)."""
    counters = [reads, 10, reads * 8, 100, writes, 20, writes * 8, 200, in_progress, time_io, 300]
    extra = [0, 0, 0, 0, 0, 0]
    return f"{major:4d} {minor:7d} {name} " + " ".join(str(c) for c in counters + extra)


def net_dev_row(
    name: str,
    rx_bytes: int = 0,
    rx_packets: int = 0,
    rx_errors: int = 0,
    rx_dropped: int = 0,
    tx_bytes: int = 0,
    tx_packets: int = 0,
    tx_errors: int = 0,
    tx_dropped: int = 0,
) -> str:
    """Render one /proc/net/dev row."""
    rx = [rx_bytes, rx_packets, rx_errors, rx_dropped, 0, 0, 0, 0]
    tx = [tx_bytes, tx_packets, tx_errors, tx_dropped, 0, 0, 0, 0]
    return f"{name:>6}: " + " ".join(str(v) for v in rx + tx)


class FakeProc:
    """Writable stand-in for /proc."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)
        (self.root / "net").mkdir(exist_ok=True)

    def write(self, relative: str, text: str) -> None:
        path = self.root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text)

    def set_meminfo(self, text: str = MEMINFO) -> None:
        self.write("meminfo", text)

    def set_stat(self, **kwargs) -> None:
        self.write("stat", stat_text(**kwargs))

    def set_diskstats(self, *rows: str) -> None:
        self.write("diskstats", "\n".join(rows) + "\n")

    def set_net_dev(self, *rows: str) -> None:
        self.write("net/dev", NET_DEV_HEADER + "\n".join(rows) + "\n")

    def add_process(self, pid: int, state: str, comm: str = "proc") -> None:
        self.write(f"{pid}/stat", f"{pid} ({comm}) {state} 1 {pid} {pid} 0 -1 4194560 0 0\n")

    def populate(self) -> None:
        """Fill every table with plausible defaults."""
        self.set_meminfo()
        self.set_stat()
        self.set_diskstats(
            diskstats_row("sda", reads=500, writes=300, time_io=1000),
            diskstats_row("sda1", reads=400, writes=250, time_io=900, minor=1),
        )
        self.set_net_dev(
            net_dev_row("lo", rx_bytes=5000, rx_packets=50, tx_bytes=5000, tx_packets=50),
            net_dev_row("eth0", rx_bytes=1000, rx_packets=10, tx_bytes=2000, tx_packets=20),
        )
        self.add_process(1, "S", "systemd")
        self.add_process(42, "R", "python")


@pytest.fixture
def fake_proc(tmp_path: Path) -> FakeProc:
    """An empty fake procfs tree."""
    return FakeProc(tmp_path / "proc")


@pytest.fixture
def populated_proc(fake_proc: FakeProc) -> FakeProc:
    """A fake procfs tree with every table present."""
    fake_proc.populate()
    return fake_proc


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 100.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()

"""CLI for the sysmetrics exporter.

Provides a rich command-line interface using Typer for:
- Running the Prometheus exporter
- One-shot sampling to the console
- Showing the detected disk and network interface
- Generating a sample configuration
"""

from __future__ import annotations

import json
import signal
import threading
import time
from pathlib import Path
from typing import Any

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from sysmetrics.core.config import load_config
from sysmetrics.core.constants import DEFAULT_PROC_ROOT, GAUGE_DEFINITIONS
from sysmetrics.core.schemas import ExporterConfig
from sysmetrics.monitoring.detectors import detect_disk, detect_interface
from sysmetrics.monitoring.readers import ProcfsReader
from sysmetrics.monitoring.sampler import CycleReport, SystemSampler
from sysmetrics.monitoring.sink import MemorySink, MetricsServer, PrometheusSink
from sysmetrics.utils.logging import get_logger, setup_logging

app = typer.Typer(
    name="sysmetrics",
    help="procfs metrics exporter for Prometheus",
    add_completion=False,
)

console = Console()
logger = get_logger(__name__)


def _build_config(config_path: Path | None, **overrides: Any) -> ExporterConfig:
    """Load the config file (or defaults) and apply non-None CLI overrides."""
    try:
        base = load_config(config_path) if config_path is not None else ExporterConfig()
        data = base.model_dump()
        data.update({k: v for k, v in overrides.items() if v is not None})
        return ExporterConfig.model_validate(data)
    except (FileNotFoundError, ValueError, ValidationError) as e:
        console.print(f"[bold red]Error loading config: {e}[/]")
        raise typer.Exit(1) from e


@app.command()
def run(
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Path to exporter configuration file (YAML/JSON)"
    ),
    port: int | None = typer.Option(None, "--port", "-p", help="HTTP listen port"),
    address: str | None = typer.Option(None, "--address", help="HTTP listen address"),
    interval: float | None = typer.Option(
        None, "--interval", "-i", help="Polling interval in seconds"
    ),
    proc_root: Path | None = typer.Option(None, "--proc-root", help="procfs mount point"),
    disk: str | None = typer.Option(None, "--disk", help="Disk to monitor (auto if unset)"),
    interface: str | None = typer.Option(
        None, "--interface", help="Network interface to monitor (auto if unset)"
    ),
    log_level: str | None = typer.Option(None, "--log-level", "-l", help="Logging level"),
    log_file: Path | None = typer.Option(
        None, "--log-file", help="Write logs to file in addition to console"
    ),
    json_logs: bool = typer.Option(
        False, "--json-logs", help="Output logs in JSON format (for programmatic parsing)"
    ),
) -> None:
    """Sample procfs periodically and serve the gauges over HTTP."""
    exporter_config = _build_config(
        config,
        port=port,
        listen_address=address,
        interval_seconds=interval,
        proc_root=proc_root,
        disk_device=disk,
        network_interface=interface,
        log_level=log_level,
    )
    setup_logging(
        level=exporter_config.log_level,
        log_file=log_file,
        json_format=json_logs,
        rich_console=not json_logs,
    )
    _show_config_summary(exporter_config)

    sink = PrometheusSink()
    server = MetricsServer(
        sink.registry, port=exporter_config.port, address=exporter_config.listen_address
    )
    sampler = SystemSampler.from_config(exporter_config, sink)

    try:
        server.start()
    except OSError as e:
        console.print(f"[bold red]Error starting HTTP server: {e}[/]")
        raise typer.Exit(1) from e

    stop_requested = threading.Event()
    signal.signal(signal.SIGTERM, lambda *_: stop_requested.set())

    sampler.start()
    console.print("[bold green]Exporter running - press Ctrl-C to stop[/]")
    try:
        while not stop_requested.wait(timeout=1.0):
            pass
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    finally:
        sampler.stop()
        server.stop()
        console.print(f"[bold blue]Stopped after {sampler.cycles} cycles[/]")


@app.command()
def sample(
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Path to exporter configuration file (YAML/JSON)"
    ),
    interval: float | None = typer.Option(
        None, "--interval", "-i", help="Seconds between the two cycles (default: config value)"
    ),
    proc_root: Path | None = typer.Option(None, "--proc-root", help="procfs mount point"),
    disk: str | None = typer.Option(None, "--disk", help="Disk to monitor (auto if unset)"),
    interface: str | None = typer.Option(
        None, "--interface", help="Network interface to monitor (auto if unset)"
    ),
    output_format: str = typer.Option("table", "--format", "-f", help="Output format: table, json"),
    log_level: str = typer.Option("WARNING", "--log-level", "-l", help="Logging level"),
) -> None:
    """Run two poll cycles and print the resulting gauges."""
    exporter_config = _build_config(
        config,
        interval_seconds=interval,
        proc_root=proc_root,
        disk_device=disk,
        network_interface=interface,
        log_level=log_level,
    )
    setup_logging(level=exporter_config.log_level)

    sink = MemorySink()
    sampler = SystemSampler.from_config(exporter_config, sink)
    sampler.run_cycle()
    time.sleep(exporter_config.interval_seconds)
    report = sampler.run_cycle()

    values = sink.values
    if output_format == "json":
        console.print(json.dumps(values, indent=2))
    else:
        _show_gauges_table(values)
    _show_skipped(report)


@app.command()
def detect(
    proc_root: Path = typer.Option(
        Path(DEFAULT_PROC_ROOT), "--proc-root", help="procfs mount point"
    ),
) -> None:
    """Show the disk and network interface that would be monitored."""
    setup_logging(level="WARNING")
    reader = ProcfsReader(proc_root)
    console.print(f"Primary disk: [bold]{detect_disk(reader)}[/]")
    console.print(f"Primary network interface: [bold]{detect_interface(reader)}[/]")


@app.command()
def init_config(
    output: Path = typer.Option(
        Path("sysmetrics.yaml"), "--output", "-o", help="Output configuration file"
    ),
) -> None:
    """Generate a sample configuration file."""
    sample_config = """\
# sysmetrics exporter configuration

# HTTP exposition (http://<listen_address>:<port>/metrics)
listen_address: "0.0.0.0"
port: 8000

# Seconds between poll cycles
interval_seconds: 1.0

# procfs mount point (e.g. /host/proc inside a container)
proc_root: "/proc"

# Leave unset to detect the busiest whole disk / physical interface
disk_device: null
network_interface: null

# Resources sampled each cycle
collectors:
  - cpu
  - memory
  - disk
  - network
  - processes
  - context

log_level: INFO
"""
    output.write_text(sample_config)
    console.print(f"[bold green]Sample configuration written to {output}[/]")


def _show_config_summary(config: ExporterConfig) -> None:
    """Display exporter configuration summary."""
    table = Table(title="Exporter Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Endpoint", f"http://{config.listen_address}:{config.port}/metrics")
    table.add_row("Interval", f"{config.interval_seconds}s")
    table.add_row("proc root", str(config.proc_root))
    table.add_row("Disk", config.disk_device or "auto")
    table.add_row("Interface", config.network_interface or "auto")
    table.add_row("Collectors", ", ".join(r.value for r in config.collectors))

    console.print(table)


def _show_gauges_table(values: dict[str, float]) -> None:
    """Display gauge values in registration order."""
    table = Table(title="System Metrics")
    table.add_column("Gauge", style="cyan")
    table.add_column("Value", justify="right", style="green")
    table.add_column("Description", style="dim")

    for name, description in GAUGE_DEFINITIONS.items():
        if name in values:
            table.add_row(name, f"{values[name]:.3f}", description)

    console.print(table)


def _show_skipped(report: CycleReport) -> None:
    for resource, reason in report.skipped.items():
        console.print(f"[yellow]Skipped {resource.value}: {reason}[/]")


if __name__ == "__main__":
    app()

"""Shared constants for sysmetrics.

Centralized constants to avoid duplication and ensure consistency across modules.
"""

from __future__ import annotations

# procfs root and the files read relative to it
DEFAULT_PROC_ROOT = "/proc"
MEMINFO_FILE = "meminfo"
STAT_FILE = "stat"
DISKSTATS_FILE = "diskstats"
NET_DEV_FILE = "net/dev"

# /proc/meminfo reports kB (really KiB)
KILOBYTES_TO_BYTES = 1024
PERCENTAGE_MULTIPLIER = 100.0
MILLISECONDS_PER_SECOND = 1000.0

# Field counts expected in the kernel tables
CPU_STAT_FIELDS = 8
DISK_STAT_COUNTERS = 11
NET_DEV_HEADER_LINES = 2
NET_DEV_MIN_FIELDS = 12

# Device detection fallbacks
FALLBACK_DISK = "sda"
FALLBACK_INTERFACE = "eth0"
LOOPBACK_INTERFACE = "lo"

# Exposition defaults
DEFAULT_LISTEN_ADDRESS = "0.0.0.0"
DEFAULT_PORT = 8000
DEFAULT_INTERVAL_SECONDS = 1.0

# Gauge names and help strings, in registration order
GAUGE_DEFINITIONS: dict[str, str] = {
    "cpu_usage_percentage": "CPU usage percentage",
    "memory_usage_percentage": "Memory usage percentage",
    "memory_total_bytes": "Total system memory in bytes",
    "memory_used_bytes": "Used system memory in bytes",
    "memory_available_bytes": "Available system memory in bytes",
    "disk_read_rate": "Disk read operations per second",
    "disk_write_rate": "Disk write operations per second",
    "disk_utilization_percent": "Disk utilization percentage",
    "disk_avg_wait_time_ms": "Average disk I/O wait time in milliseconds",
    "disk_queue_depth": "Current disk I/O queue depth",
    "network_rx_rate_bps": "Network receive rate in bytes per second",
    "network_tx_rate_bps": "Network transmit rate in bytes per second",
    "network_rx_packet_rate": "Network receive packet rate per second",
    "network_tx_packet_rate": "Network transmit packet rate per second",
    "network_rx_error_rate_percent": "Network receive error rate percentage",
    "network_tx_error_rate_percent": "Network transmit error rate percentage",
    "network_bandwidth_usage_bps": "Total network bandwidth usage in bytes per second",
    "processes_total": "Total number of processes in the system",
    "processes_running": "Number of processes in running state",
    "processes_sleeping": "Number of processes in sleeping state",
    "processes_stopped": "Number of processes in stopped state",
    "processes_zombie": "Number of zombie processes",
    "context_switches_rate": "Context switches per second",
    "process_creation_rate": "Processes created per second",
    "interrupt_rate": "Interrupts per second",
    "soft_interrupt_rate": "Soft interrupts per second",
    "process_load_ratio": "Ratio of running processes to total processes (0.0-1.0)",
}

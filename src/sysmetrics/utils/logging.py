"""Log handlers for the exporter.

Console output goes through rich by default. ``--json-logs`` switches to one
JSON object per line for log shippers, and ``--log-file`` adds a plain-text
copy on disk. Sampler diagnostics come from the ``sysmetrics.monitoring``
loggers; the per-resource cycle summaries are logged at DEBUG.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from pathlib import Path

from rich.logging import RichHandler

PLAIN_FORMAT = "%(asctime)s [%(threadName)s] %(levelname)s %(name)s: %(message)s"


class JsonFormatter(logging.Formatter):
    """Render a record as a single JSON line.

    The thread name is kept so sampler-thread records can be told apart from
    those of the CLI and the HTTP listener.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def _console_handler(level: str, rich_console: bool, json_format: bool) -> logging.Handler:
    if json_format:
        handler: logging.Handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JsonFormatter())
        return handler
    if rich_console:
        # Device names and procfs paths may contain brackets; never parse markup
        return RichHandler(
            level=level,
            rich_tracebacks=True,
            markup=False,
            show_time=True,
            show_path=False,
        )
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(PLAIN_FORMAT))
    return handler


def setup_logging(
    level: str = "INFO",
    log_file: Path | None = None,
    rich_console: bool = True,
    json_format: bool = False,
) -> None:
    """Install the exporter's root log handlers, replacing any existing ones.

    Args:
        level: Level name, already validated by ExporterConfig
        log_file: Also append plain-text records to this file
        rich_console: Pretty console output (ignored when json_format is set)
        json_format: Emit one JSON object per record on stdout
    """
    level = level.upper()
    handlers = [_console_handler(level, rich_console, json_format)]

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(PLAIN_FORMAT))
        handlers.append(file_handler)

    logging.basicConfig(level=getattr(logging, level), handlers=handlers, force=True)


def get_logger(name: str) -> logging.Logger:
    """Return the logger for a sysmetrics module (pass ``__name__``)."""
    return logging.getLogger(name)

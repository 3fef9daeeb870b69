from __future__ import annotations

import datetime as dt
import json
import logging
import sys
from typing import Any

from loguru import logger as loguru_logger

UTC = dt.UTC

# Attributes every LogRecord carries; anything else came in through ``extra``.
_STANDARD_FIELDS = frozenset(
    {
        "args",
        "msg",
        "name",
        "levelno",
        "levelname",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "getMessage",
        "message",
    }
)

_STATS_FIELDS = frozenset(
    {
        "nodes_seen",
        "nodes_processed",
        "invisible_chars_removed",
        "blank_runs_collapsed",
        "previews_created",
    }
)


def _record_extra(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if not key.startswith("_") and key not in _STANDARD_FIELDS
    }


class EnhancedJsonFormatter(logging.Formatter):
    """One JSON object per record; run counters are grouped under ``stats``."""

    def __init__(self, include_location: bool = True) -> None:
        super().__init__()
        self.include_location = include_location

    def format(self, record: logging.LogRecord) -> str:
        base: dict[str, Any] = {
            "timestamp": dt.datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if self.include_location:
            base.update(
                {
                    "module": record.module,
                    "function": record.funcName,
                    "line": record.lineno,
                }
            )

        if record.exc_info:
            base["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info),
            }

        stats_fields: dict[str, Any] = {}
        extra_fields: dict[str, Any] = {}
        for key, value in _record_extra(record).items():
            if key in base:
                continue
            if key in _STATS_FIELDS:
                stats_fields[key] = value
            else:
                extra_fields[key] = value

        if stats_fields:
            base["stats"] = stats_fields
        if extra_fields:
            base["extra"] = extra_fields

        # Be resilient to non-JSON-serializable values (bs4 tags, exceptions)
        return json.dumps(
            base, ensure_ascii=False, default=self._json_serializer, separators=(",", ":")
        )

    def _json_serializer(self, obj: Any) -> str:
        if hasattr(obj, "name") and hasattr(obj, "attrs"):
            return f"<{obj.name}>"
        return str(obj)


class InterceptHandler(logging.Handler):
    """Forward stdlib records, with their ``extra`` fields, to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        level_to_use: int | str
        try:
            level_to_use = loguru_logger.level(record.levelname).name
        except ValueError:
            level_to_use = record.levelno

        loguru_logger.bind(**_record_extra(record)).opt(depth=6, exception=record.exc_info).log(
            level_to_use, record.getMessage()
        )


def setup_json_logging(
    level: str = "INFO",
    *,
    json_output: bool = False,
    use_loguru: bool = True,
    log_file: str | None = None,
    max_file_size: str = "10 MB",
    retention: str = "7 days",
) -> None:
    """Configure logging for the cleaner.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: Emit serialized JSON records instead of readable lines
        use_loguru: Route stdlib logging through loguru sinks
        log_file: Optional log file path
        max_file_size: Rotation size for the log file (loguru format)
        retention: Log retention period (loguru format)
    """
    lvl = getattr(logging, level.upper(), logging.INFO)
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(lvl)

    if use_loguru:
        loguru_logger.remove()
        loguru_logger.add(
            sys.stderr,
            level=level.upper(),
            serialize=json_output,
            backtrace=True,
            diagnose=False,
        )
        if log_file:
            loguru_logger.add(
                log_file,
                level=level.upper(),
                serialize=True,
                rotation=max_file_size,
                retention=retention,
                enqueue=True,
            )
        root.addHandler(InterceptHandler())
        return

    console_handler = logging.StreamHandler(sys.stderr)
    if json_output:
        console_handler.setFormatter(EnhancedJsonFormatter())
    else:
        console_handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")
        )
    root.addHandler(console_handler)

    if log_file:
        from logging.handlers import RotatingFileHandler

        file_handler = RotatingFileHandler(log_file, maxBytes=10 * 1024 * 1024, backupCount=5)
        file_handler.setFormatter(EnhancedJsonFormatter())
        root.addHandler(file_handler)

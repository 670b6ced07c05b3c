# src/georegistry/core/logging/formatters.py
"""
Formatters used by the dictConfig in builder.py.

- JsonFormatter: one JSON object per line, for production and log shippers.
- ColorFormatter: aligned, colored text for a developer terminal (LOG_FORMAT=text).
"""

import json
import logging
from typing import Any
from logging import LogRecord
from georegistry.utils.logging import get_project_version

PROJECT_VERSION = get_project_version()

DEFAULT_SERVICE = "geo-registry"

# LogRecord attributes that are never copied as extras
_RESERVED = frozenset(("args", "msg", "levelname", "levelno", "name", "exc_text", "message"))


class JsonFormatter(logging.Formatter):
    """
    Structured JSON formatter.

    Every line carries timestamp, level, logger, message, source location, request_id,
    service, env and version, followed by whatever was passed as `extra={...}`.
    Values that `json` cannot encode are stringified, so formatting never raises.

        formatter = JsonFormatter(env="production", service="geo-registry")
    """

    def __init__(self, *, env: str | None = None, service: str | None = DEFAULT_SERVICE, datefmt: str | None = None):
        super().__init__(datefmt=datefmt)
        self.env = env
        self.service = service or DEFAULT_SERVICE

    def format(self, record: LogRecord) -> str:
        log_record: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "pathname": record.pathname,
            "lineno": record.lineno,
            "request_id": getattr(record, "request_id", "-"),
            "service": self.service,
            "env": self.env,
            "version": PROJECT_VERSION,
        }

        if record.exc_info:
            log_record["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            log_record["stack_info"] = self.formatStack(record.stack_info)

        for key, value in record.__dict__.items():
            if key in log_record or key in _RESERVED or key.startswith("_"):
                continue
            try:
                json.dumps(value)
                log_record[key] = value
            except (TypeError, ValueError):
                log_record[key] = str(value)

        return json.dumps(log_record, ensure_ascii=False, default=str)


class ColorFormatter(logging.Formatter):
    """
    TIMESTAMP | LEVEL | LOGGER | REQUEST_ID | MESSAGE, with the level colored by ANSI codes.
    Tracebacks follow on the next lines.
    """

    COLOR_CODES = {
        "DEBUG": "\033[1;36;47m",    # bold cyan on white
        "INFO": "\033[32m",          # green
        "WARNING": "\033[33m",       # yellow
        "ERROR": "\033[31m",         # red
        "CRITICAL": "\033[1;41m",    # bold on red
        "RESET": "\033[0m",
    }

    def __init__(self, fmt: str | None = None, datefmt: str | None = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)

    def format(self, record: LogRecord) -> str:
        color = self.COLOR_CODES.get(record.levelname, "")
        reset = self.COLOR_CODES["RESET"]
        timestamp = self.formatTime(record, self.datefmt)

        base = (
            f"{timestamp} | {color}{record.levelname:<10}{reset} | "
            f"{record.name:<30} | "
            f"{getattr(record, 'request_id', '-'):<10} | "
            f"{record.getMessage()}"
        )

        if record.exc_info:
            base = base + "\n" + self.formatException(record.exc_info)

        return base

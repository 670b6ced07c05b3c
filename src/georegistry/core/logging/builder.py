# src/georegistry/core/logging/builder.py
"""
Builds the dictConfig mapping from Settings, applies it, and optionally moves log IO onto
a background QueueListener.

Queue mode (LOG_USE_QUEUE=True):
 - LOG_QUEUE_MAX_SIZE > 0 gives a bounded queue, 0 an unbounded one.
 - With a bounded queue and LOG_QUEUE_BLOCKING=False, records are dropped when the queue
   is full (NonBlockingQueueHandler) and counted; see get_queue_stats().
 - RequestIdFilter and RedactFilter run on the QueueHandler, in the producing context,
   because the request-id contextvar does not exist on the listener thread.
 - stop_queue_logging() flushes and stops the listener; the app lifespan calls it on shutdown.
"""

from __future__ import annotations

from pathlib import Path
import logging
import logging.config
import queue as _queue
import threading
from typing import Optional
from logging.handlers import QueueHandler, QueueListener

from georegistry.config.settings import Settings
from georegistry.utils.logging import get_project_name

from .formatters import JsonFormatter, ColorFormatter
from .filters import RequestIdFilter, RedactFilter
from .handlers import (
    get_console_handler,
    get_file_handler,
    get_error_file_handler,
    get_error_console_handler,
)

_QUEUE_LISTENER: Optional[QueueListener] = None
_QUEUE: Optional[_queue.Queue] = None

_DROPPED_LOGS_COUNT = 0
_DROPPED_LOGS_LOCK = threading.Lock()

# top-level logger of the package
APP_LOGGER = "georegistry"


class NonBlockingQueueHandler(QueueHandler):
    """
    QueueHandler that never blocks the producer: when the bounded queue is full the
    record is dropped, counted, and reported through `handleError`.
    """

    def emit(self, record: logging.LogRecord) -> None:
        global _DROPPED_LOGS_COUNT
        try:
            self.queue.put_nowait(self.prepare(record))
        except _queue.Full:
            with _DROPPED_LOGS_LOCK:
                _DROPPED_LOGS_COUNT += 1
            self.handleError(record)


def get_queue_stats() -> dict:
    with _DROPPED_LOGS_LOCK:
        return {"dropped_logs": _DROPPED_LOGS_COUNT, "queue_present": _QUEUE is not None}


# -----------------------
# dictConfig builder
# -----------------------
def make_dict_config(settings: Settings) -> dict:
    """
    dictConfig mapping for the registry.

    - formatters: "standard" (ColorFormatter in text mode) and "json"
    - filters: "request_id", "redact"
    - handlers: console plus either rotating files (LOG_TO_STDOUT=False) or error_console
    - loggers: root, georegistry, uvicorn.error, uvicorn.access, sqlalchemy.engine
    """
    formatters = {
        "standard": {
            "()": ColorFormatter if settings.LOG_FORMAT == "text" else logging.Formatter,
            "format": "%(asctime)s | %(levelname)s | %(name)s | %(request_id)s | %(message)s",
        },
        "json": {
            "()": JsonFormatter,
            "env": settings.ENV,
            "service": get_project_name(),
        },
    }

    filters = {
        "request_id": {"()": RequestIdFilter},
        "redact": {"()": RedactFilter},
    }

    handlers: dict[str, dict] = {"console": get_console_handler(settings)}

    if (not settings.LOG_TO_STDOUT) and settings.LOG_DIR:
        handlers["file"] = get_file_handler(settings)
        handlers["error_file"] = get_error_file_handler(settings)
    else:
        handlers["error_console"] = get_error_console_handler(settings)

    all_handlers = list(handlers.keys())

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": formatters,
        "filters": filters,
        "handlers": handlers,
        "loggers": {
            "": {
                "handlers": all_handlers,
                "level": settings.LOG_LEVEL,
            },
            APP_LOGGER: {
                "level": settings.LOG_LEVEL,
                "propagate": True,
            },
            "uvicorn.error": {
                "level": settings.LOG_LEVEL,
                "handlers": all_handlers,
                "propagate": False,
            },
            "uvicorn.access": {
                "level": "INFO",
                "handlers": ["console"],
                "propagate": False,
            },
            # SQL echo can contain bound parameters such as password hashes
            "sqlalchemy.engine": {
                "level": "INFO" if settings.ENABLE_SQL_LOGGING else "WARNING",
                "handlers": ["console"],
                "propagate": False,
            },
        },
    }


# --------------------------
# Entrypoint: setup & optional queue wiring
# --------------------------
def _detach_handlers(handlers: list[logging.Handler]) -> None:
    """Remove the given handler instances from root and from every named logger."""
    targets = set(handlers)
    root = logging.getLogger()
    for logger_obj in [root, *logging.Logger.manager.loggerDict.values()]:
        if isinstance(logger_obj, logging.Logger):
            for h in list(logger_obj.handlers):
                if h in targets:
                    logger_obj.removeHandler(h)


def setup_logging(settings: Settings) -> None:
    """
    Apply the dictConfig and, when LOG_USE_QUEUE is set, reroute root's handlers through
    a QueueListener. Safe to call more than once; a running listener is stopped first.
    """
    global _QUEUE_LISTENER, _QUEUE

    stop_queue_logging()

    if (not settings.LOG_TO_STDOUT) and settings.LOG_DIR:
        Path(settings.LOG_DIR).mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(make_dict_config(settings))

    # keeps %(request_id)s resolvable for records that bypass the handler filters
    logging.getLogger().addFilter(RequestIdFilter())

    if not getattr(settings, "LOG_USE_QUEUE", False):
        return

    root_logger = logging.getLogger()
    real_handlers = list(root_logger.handlers)
    if not real_handlers:
        return

    _detach_handlers(real_handlers)

    max_size = getattr(settings, "LOG_QUEUE_MAX_SIZE", 0) or 0
    blocking = bool(getattr(settings, "LOG_QUEUE_BLOCKING", False))
    log_queue: _queue.Queue = _queue.Queue(max_size) if max_size > 0 else _queue.Queue()

    if max_size > 0 and not blocking:
        queue_handler: QueueHandler = NonBlockingQueueHandler(log_queue)
    else:
        queue_handler = QueueHandler(log_queue)

    queue_handler.addFilter(RequestIdFilter())
    queue_handler.addFilter(RedactFilter())

    listener = QueueListener(log_queue, *real_handlers, respect_handler_level=True)
    listener.start()
    root_logger.addHandler(queue_handler)

    _QUEUE_LISTENER = listener
    _QUEUE = log_queue

    logging.getLogger(__name__).debug(
        "logging.queue.started",
        extra={"max_size": max_size, "blocking": blocking},
    )


def stop_queue_logging() -> None:
    """
    Stop the QueueListener (draining what is already queued) and clear module refs.
    A no-op when queue mode is off.
    """
    global _QUEUE_LISTENER, _QUEUE
    listener = _QUEUE_LISTENER
    if listener is None:
        return

    try:
        listener.stop()
    except Exception:
        logging.getLogger(__name__).exception("Failed to stop QueueListener cleanly")
    finally:
        _QUEUE_LISTENER = None
        _QUEUE = None

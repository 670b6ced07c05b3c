# src/georegistry/core/logging/filters.py
"""
Logging filters.

- RequestIdFilter stamps `record.request_id` from a ContextVar that RequestIDMiddleware
  sets per HTTP request, so every line logged while serving a request can be correlated.
  A ContextVar (not a thread-local) is used because many requests share one event-loop thread.
- RedactFilter masks record attributes that carry credentials (passwords, hashes, tokens,
  cookies, authorization headers) before any handler formats them.
"""

import logging
from logging import LogRecord
import contextvars

# None means "no request in this context"
_request_id_ctx: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)

REDACTED = "***REDACTED***"


def set_request_id(request_id: str | None):
    """
    Set the request id for the current context.

    Returns:
        token: pass it to reset_request_id(token) to restore the previous value
    """
    return _request_id_ctx.set(request_id)


def reset_request_id(token):
    _request_id_ctx.reset(token)


def get_request_id() -> str | None:
    return _request_id_ctx.get()


class RequestIdFilter(logging.Filter):
    """
    Guarantees every LogRecord has `request_id`:
      * an explicit `extra={"request_id": ...}` wins,
      * otherwise the contextvar value,
      * otherwise "-", so `%(request_id)s` never fails in a format string.
    """

    def filter(self, record: LogRecord) -> bool:
        record.request_id = (
            getattr(record, "request_id", None) or get_request_id() or "-"
        )
        return True


class RedactFilter(logging.Filter):
    """
    Replace the value of any record attribute named like a credential.

    Matching is on the attribute name (case-insensitive), so
    `logger.info("x", extra={"password_hash": h})` logs `***REDACTED***`.
    """

    SENSITIVE = {
        "password",
        "password_hash",
        "secret",
        "jwt_secret",
        "token",
        "access_token",
        "refresh_token",
        "authorization",
        "cookie",
        "set_cookie",
        "jwt",
    }

    def filter(self, record: LogRecord) -> bool:
        for key in list(record.__dict__.keys()):
            if key.lower() in self.SENSITIVE:
                record.__dict__[key] = REDACTED
        return True

"""
Application-level exceptions.

Every error the registry raises on purpose derives from `AppError`. Each subclass carries a
canonical `error_code`; `http_status()` and `to_payload()` turn it into a stable HTTP response
(see api/v1/error_handlers.py), so route handlers never build error responses by hand.
"""

from typing import Any, Iterable


class AppError(Exception):
    """
    Base exception for repository/service errors.

    - message: human-friendly message (safe to show to clients)
    - fields: optional list of field names related to the error (e.g., ['email'])
    - constraint: optional DB constraint name or identifier (for logs only)
    - error_code: canonical short code (e.g., 'duplicate', 'not_found') used by clients
    - context: extra JSON-safe values added to the payload (e.g., {'existingId': 3})
    """

    # Map canonical error_code -> default HTTP status.
    ERROR_CODE_TO_STATUS = {
        "bad_request": 400,
        "invalid_field": 400,
        "unauthorized": 401,
        "forbidden": 403,
        "not_found": 404,
        "duplicate": 409,
        "has_dependents": 409,
        "conflict": 409,
        "repository_error": 500,
        "internal": 500,
    }

    default_code = "bad_request"

    def __init__(self, message: str, *, fields: Iterable[str] | None = None,
                 constraint: str | None = None, error_code: str | None = None,
                 context: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message  # user-friendly message
        self.fields = list(fields) if fields else None
        self.constraint = constraint
        self.error_code = error_code or self.default_code
        self.context = dict(context) if context else {}

    def __str__(self) -> str:
        base = self.message
        parts = []
        if self.fields:
            parts.append(f"fields: {', '.join(self.fields)}")
        if self.constraint:
            parts.append(f"constraint: {self.constraint}")
        if self.error_code:
            parts.append(f"code: {self.error_code}")
        if parts:
            return f"{base} ({'; '.join(parts)})"
        return base

    def to_payload(self) -> dict:
        """
        Return a JSON-serializable dict suitable for HTTP responses.
        Standard shape:
            {
                "detail": "A human-friendly message",
                "code": "duplicate",
                "fields": ["email"],        # optional
                ...context                  # optional, e.g. "existingId"
            }
        `constraint` never leaves the process.
        """
        payload: dict[str, Any] = {"detail": self.message, "code": self.error_code}
        if self.fields:
            payload["fields"] = list(self.fields)
        payload.update(self.context)
        return payload

    def http_status(self) -> int:
        """HTTP status for this error; unknown codes fall back to 400 (Bad Request)."""
        return self.ERROR_CODE_TO_STATUS.get(self.error_code, 400)


class RepositoryError(AppError):
    """Unexpected persistence failure. Mapped to 500 with a generic message."""

    default_code = "repository_error"


class NotFoundError(AppError):
    default_code = "not_found"

    def __init__(self, message: str = "Not found", *, fields: Iterable[str] | None = None):
        super().__init__(message, fields=fields)


class DuplicateError(AppError):
    """A uniqueness key is already claimed by another row."""

    default_code = "duplicate"

    def __init__(self, message: str, *, fields: Iterable[str] | None = None,
                 constraint: str | None = None, existing_id: int | None = None):
        context = {"existingId": existing_id} if existing_id is not None else None
        super().__init__(message, fields=fields, constraint=constraint, context=context)
        self.existing_id = existing_id


class DependentRecordsError(AppError):
    """Deletion blocked because the row still has children."""

    default_code = "has_dependents"

    def __init__(self, message: str, *, children: str | None = None, count: int | None = None):
        context = {"dependents": children, "dependentCount": count} if children else None
        super().__init__(message, context=context)
        self.children = children
        self.count = count


class ConflictError(AppError):
    """Integrity failure that is not a uniqueness clash (foreign key, check, not-null)."""

    default_code = "conflict"


class BadRequestError(AppError):
    default_code = "bad_request"


class InvalidFieldError(AppError):
    """Raised when the caller passes unexpected/unknown fields to repository methods."""

    default_code = "invalid_field"

    def __init__(self, message: str, *, fields: Iterable[str] | None = None):
        super().__init__(message, fields=fields)


class UnauthorizedError(AppError):
    default_code = "unauthorized"

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class ForbiddenError(AppError):
    default_code = "forbidden"

    def __init__(self, message: str = "Insufficient role for this operation"):
        super().__init__(message)


class InternalError(AppError):
    default_code = "internal"

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)


__all__ = [
    "AppError",
    "RepositoryError",
    "NotFoundError",
    "DuplicateError",
    "DependentRecordsError",
    "ConflictError",
    "BadRequestError",
    "InvalidFieldError",
    "UnauthorizedError",
    "ForbiddenError",
    "InternalError",
]

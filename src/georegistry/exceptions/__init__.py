# georegistry/exceptions/
# ├── base.py                    # App-level errors (AppError, DuplicateError, NotFoundError, ...)
# ├── integrity_classifier.py    # SQL-level / DB-specific errors
# └── mapper.py                  # Map SQL-level / DB-specific errors to app-level errors

from .base import (
    AppError,
    RepositoryError,
    NotFoundError,
    DuplicateError,
    DependentRecordsError,
    ConflictError,
    BadRequestError,
    InvalidFieldError,
    UnauthorizedError,
    ForbiddenError,
    InternalError,
)

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

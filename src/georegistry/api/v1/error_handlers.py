# georegistry/api/v1/error_handlers.py
"""
FastAPI exception handlers that map app-level exceptions to HTTP responses.

- Services and repositories raise georegistry.exceptions.base.* exceptions.
- These handlers produce stable JSON payloads (via .to_payload()) and correct HTTP codes (via .http_status()).
- Request bodies and query strings that fail pydantic validation become a 400 with one entry per field.
"""

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import logging
from georegistry.exceptions.base import (
    AppError,
    RepositoryError,
    InternalError,
    UnauthorizedError,
)

logger = logging.getLogger(__name__)


async def unauthorized_handler(request: Request, exc: UnauthorizedError) -> JSONResponse:
    """
    401 with the Bearer challenge header.
    """
    logger.info("UnauthorizedError for %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.http_status(),
        content=exc.to_payload(),
        headers={"WWW-Authenticate": "Bearer"},
    )


async def server_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """
    RepositoryError / InternalError -> 500. The client gets a generic message, the cause goes to the log.
    """
    logger.error(
        "%s for %s %s: %s", type(exc).__name__, request.method, request.url.path, str(exc),
        exc_info=exc.__cause__ is not None,
    )
    return JSONResponse(status_code=500, content={"detail": "Internal server error", "code": exc.error_code})


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """
    Every other AppError (404, 409, 400, 403). Mapping is centralized in the exception classes.
    """
    logger.info(
        "%s for %s %s: fields=%s", type(exc).__name__, request.method, request.url.path, exc.fields,
        extra={"code": exc.error_code},
    )
    return JSONResponse(status_code=exc.http_status(), content=exc.to_payload())


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    400 Bad Request with field-level detail:
        {"detail": "Validation failed", "code": "bad_request", "errors": [{"field": "countryId", "message": "..."}]}
    """
    errors = []
    for error in exc.errors():
        # drop the location prefix ("body", "query", "path")
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        errors.append({"field": ".".join(loc) or None, "message": error.get("msg", "Invalid value")})

    logger.info("Validation failed for %s %s", request.method, request.url.path, extra={"errors": len(errors)})
    return JSONResponse(
        status_code=400,
        content={"detail": "Validation failed", "code": "bad_request", "errors": errors},
    )


# Most specific first; Starlette resolves handlers along the exception's MRO anyway
def register_exception_handlers(app):
    app.add_exception_handler(UnauthorizedError, unauthorized_handler)
    app.add_exception_handler(RepositoryError, server_error_handler)
    app.add_exception_handler(InternalError, server_error_handler)
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

"""Error Handlers — global exception handlers for the ProofPass API.

Invariants:
    - ProofPassError → structured JSON with error code, message, severity, http_status
    - RequestValidationError → 400 with field-level error details
    - Exception (catch-all) → 500, never leaks internal details

Design Decisions:
    - Three-layer handler: domain (ProofPassError), validation (Pydantic), catch-all (Exception)
    - 4xx domain outcomes log at info/warning; 5xx log at error
    - RateLimitedError also sets a Retry-After header
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from proofpass.core.errors import ErrorSeverity, ProofPassError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_proofpass_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_proofpass_error_handler(app: FastAPI) -> None:
    """Register ProofPass domain/infrastructure error handler."""

    @app.exception_handler(ProofPassError)
    async def proofpass_error_handler(request: Request, exc: ProofPassError):
        """Handle all ProofPass domain/infrastructure errors."""
        level = logging.ERROR if exc.http_status >= 500 else logging.INFO
        logger.log(
            level,
            f"ProofPassError: {exc.message}",
            extra={**exc.log_extra(), "path": request.url.path},
        )
        headers = None
        if exc.context.retry_after_seconds is not None:
            headers = {"Retry-After": str(exc.context.retry_after_seconds)}
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(), headers=headers,
        )


def _register_validation_error_handler(app: FastAPI) -> None:
    """Register Pydantic validation error handler."""

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        """Handle Pydantic validation errors."""
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
            extra={"path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_build_validation_error_response(exc),
        )


def _register_generic_error_handler(app: FastAPI) -> None:
    """Register catch-all error handler."""

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all — never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
            extra={"path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                    "category": "internal",
                    "severity": ErrorSeverity.CRITICAL.value,
                },
            },
        )


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    """Build structured validation error response."""
    return {
        "error": {
            "code": "VALIDATION_ERROR",
            "message": "Invalid request data",
            "category": "validation",
            "severity": ErrorSeverity.WARNING.value,
            "details": [
                {
                    "field": ".".join(str(loc) for loc in e["loc"]),
                    "message": e["msg"],
                    "type": e["type"],
                }
                for e in exc.errors()
            ],
        },
    }

"""Error Handlers — global exception handlers for the enrollment API.

Invariants:
    - EnrollmentError → its own status and {message[, errors]} body
    - RequestValidationError → 400 with every field error, field paths dotted
      without the "body" prefix (e.g. "childData.age")
    - Exception (catch-all) → 500, never leaks internal details

Design Decisions:
    - Three-layer handler: domain (EnrollmentError), validation (Pydantic), catch-all
    - build_field_errors (core/errors.py) is shared with the registration service,
      which validates the parent and child sections itself
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from enrollment.core.errors import (
    EnrollmentError,
    ErrorSeverity,
    build_field_errors,
    MSG_SERVER_ERROR,
    MSG_VALIDATION,
)

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_enrollment_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_enrollment_error_handler(app: FastAPI) -> None:

    @app.exception_handler(EnrollmentError)
    async def enrollment_error_handler(request: Request, exc: EnrollmentError):
        """Handle all enrollment domain/infrastructure errors."""
        critical = exc.severity == ErrorSeverity.CRITICAL
        log = logger.error if critical else logger.info
        log(
            f"EnrollmentError: {exc.code}",
            extra={"error_code": exc.code, "path": request.url.path},
            exc_info=critical,
        )
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(),
        )


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        """Handle Pydantic validation errors."""
        errors = build_field_errors(exc.errors())
        logger.info(
            f"Validation error on {request.url.path}: "
            f"{[e.field for e in errors]}",
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "message": MSG_VALIDATION,
                "errors": [e.to_dict() for e in errors],
            },
        )


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all — never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": MSG_SERVER_ERROR},
        )


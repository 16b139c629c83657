"""Global exception handlers.

Application errors become ``{"error": message}`` with the status mapped
from their code. Every error is counted in the app's ``ErrorMetrics``;
internal errors are also logged with their diagnostic context, which never
reaches the response body.
"""

import logging
from collections.abc import Sequence
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from wtf_dial.core.errors import (
    EINTERNAL,
    DialError,
    InvalidError,
    error_code,
    error_message,
    error_status_code,
)

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""

    @app.exception_handler(DialError)
    async def dial_error_handler(request: Request, exc: DialError) -> JSONResponse:
        return error_response(request, exc)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ) -> JSONResponse:
        logger.debug("Validation error on %s: %s", request.url.path, exc.errors())
        return error_response(request, InvalidError(_describe_validation_errors(exc.errors())))

    @app.exception_handler(ValidationError)
    async def model_validation_error_handler(
        request: Request, exc: ValidationError,
    ) -> JSONResponse:
        # Schemas built inside handlers or services fail with pydantic's own error.
        logger.debug("Model validation error on %s: %s", request.url.path, exc.errors())
        return error_response(request, InvalidError(_describe_validation_errors(exc.errors())))

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
        return error_response(request, exc)


def error_response(request: Request, exc: Exception) -> JSONResponse:
    """Count, log if internal, and render an error."""
    code = error_code(exc)

    metrics = getattr(request.app.state, "error_metrics", None)
    if metrics is not None:
        metrics.record(code)

    if code == EINTERNAL:
        logger.error(
            "[http] error: %s %s: %s",
            request.method,
            request.url.path,
            exc,
            exc_info=exc,
        )

    return JSONResponse(
        status_code=error_status_code(code),
        content={"error": error_message(exc)},
    )


def _describe_validation_errors(errors: Sequence[Any]) -> str:
    if not errors:
        return "Invalid request."
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    if location:
        return f"Invalid {location}: {first.get('msg', 'invalid value')}"
    return "Invalid JSON body."

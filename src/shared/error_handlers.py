"""Outermost error boundary: every failure becomes a JSON error body."""

import logging
import traceback
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.config.settings import settings

logger = logging.getLogger(__name__)

_BODY_LOCATIONS = {"body", "query", "path", "header", "cookie"}


def format_validation_error(error: dict[str, Any]) -> str:
    """Turn one pydantic error entry into a human-readable message."""
    if error.get("type") == "json_invalid":
        return "Request body is not valid JSON"

    if error.get("type") == "value_error":
        ctx_error = error.get("ctx", {}).get("error")
        if ctx_error is not None:
            return str(ctx_error)

    field = ".".join(str(part) for part in error.get("loc", ()) if part not in _BODY_LOCATIONS)
    message = error.get("msg", "Invalid value")
    return f"{field}: {message}" if field else message


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTP exceptions as ``{"error": detail}``."""
    content: dict[str, Any] = {"error": exc.detail}
    errors = getattr(exc, "errors", None)
    if errors:
        content["errors"] = errors
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render request validation failures as 400 with an ``errors`` list."""
    errors = [format_validation_error(error) for error in exc.errors()]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Validation failed", "errors": errors},
    )


def internal_error_response(exc: Exception) -> JSONResponse:
    """Build the 500 body. Details are only exposed in debug mode."""
    content: dict[str, Any] = {
        "error": "Internal server error",
        "timestamp": datetime.now(UTC).isoformat(),
    }
    if settings.debug:
        content["message"] = str(exc) or exc.__class__.__name__
        content["stack"] = "".join(traceback.format_exception(exc))
        content["development"] = True
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)


async def catch_unhandled_exceptions(request: Request, call_next):
    """Middleware converting unexpected exceptions into 500 JSON responses.

    Runs inside the CORS middleware so error responses still carry CORS
    headers.
    """
    try:
        return await call_next(request)
    except Exception as exc:
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
        return internal_error_response(exc)


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the error boundary to the application."""
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]

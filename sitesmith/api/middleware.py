"""FastAPI middleware: correlation IDs and error handling."""

from __future__ import annotations

import time
import uuid
from typing import TYPE_CHECKING, Any

import structlog
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from sitesmith.errors import NotConfiguredError, SessionNotFoundError, UpstreamError, ValidationError
from sitesmith.retry import RetryExhaustedError

if TYPE_CHECKING:
    from fastapi import FastAPI, Request, Response

logger = structlog.get_logger()


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Reads or generates X-Correlation-ID and binds it to structlog context."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        correlation_id = request.headers.get("X-Correlation-ID", uuid.uuid4().hex[:12])

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            correlation_id=correlation_id,
            path=request.url.path,
            method=request.method,
        )

        start = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - start) * 1000, 2)

        logger.info(
            "Request completed",
            status=response.status_code,
            duration_ms=duration_ms,
        )

        response.headers["X-Correlation-ID"] = correlation_id
        return response


def _error(status_code: int, error: str, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": error, **extra})


def add_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers returning structured JSON errors."""

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        _request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        fields = [".".join(str(p) for p in e["loc"] if p != "body") for e in exc.errors()]
        return _error(400, f"Invalid or missing fields: {', '.join(fields)}")

    @app.exception_handler(ValidationError)
    async def validation_error_handler(_request: Request, exc: ValidationError) -> JSONResponse:
        return _error(400, str(exc))

    @app.exception_handler(ValueError)
    async def value_error_handler(_request: Request, exc: ValueError) -> JSONResponse:
        return _error(400, str(exc))

    @app.exception_handler(SessionNotFoundError)
    async def not_found_handler(_request: Request, exc: SessionNotFoundError) -> JSONResponse:
        return _error(404, str(exc))

    @app.exception_handler(NotConfiguredError)
    async def not_configured_handler(_request: Request, exc: NotConfiguredError) -> JSONResponse:
        logger.warning("Provider not configured", provider=exc.provider)
        return _error(503, str(exc), provider=exc.provider)

    @app.exception_handler(UpstreamError)
    async def upstream_error_handler(_request: Request, exc: UpstreamError) -> JSONResponse:
        logger.warning(
            "Upstream provider error",
            provider=exc.provider,
            upstream_status=exc.status_code,
            error=exc.message,
        )
        return _error(502, exc.message, provider=exc.provider, upstream_status=exc.status_code)

    @app.exception_handler(RetryExhaustedError)
    async def retry_exhausted_handler(_request: Request, exc: RetryExhaustedError) -> JSONResponse:
        cause = exc.__cause__
        logger.warning("Retries exhausted", error=str(exc), cause=str(cause) if cause else "")
        return _error(504, f"{exc}: {cause}" if cause else str(exc))

    @app.exception_handler(Exception)
    async def generic_error_handler(_request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled exception", error=str(exc), exc_info=exc)
        return _error(500, "internal_server_error", detail="An unexpected error occurred")

"""
Error envelope for the BatchScribe API.

Every failure leaves the service as ``{"detail", "code", "timestamp"}``.
Malformed requests additionally carry a compact ``errors`` list naming the
offending fields, so the UI can point at the bad parameter.
"""

import logging
from datetime import UTC, datetime

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from batchscribe.core.exceptions import BatchScribeError

logger = logging.getLogger(__name__)


def error_envelope(
    status_code: int,
    detail: str,
    code: str,
    timestamp: str | None = None,
    **extra,
) -> JSONResponse:
    content = {
        "detail": detail,
        "code": code,
        "timestamp": timestamp or datetime.now(UTC).isoformat(),
    }
    content.update(extra)
    return JSONResponse(status_code=status_code, content=content)


def _field_errors(exc: RequestValidationError) -> list[dict]:
    """Reduce pydantic's error list to ``{"field", "message"}`` pairs."""
    return [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "message": err.get("msg", ""),
        }
        for err in exc.errors()
    ]


def register_error_handlers(app: FastAPI) -> None:
    """Attach the BatchScribe exception handlers to ``app``.

    Domain errors keep their own status and code. Upstream failures (5xx)
    are logged as warnings, client mistakes only at debug level. Anything
    else becomes an opaque 500.
    """

    @app.exception_handler(BatchScribeError)
    async def batchscribe_error_handler(request: Request, exc: BatchScribeError) -> JSONResponse:
        level = logging.WARNING if exc.status_code >= 500 else logging.DEBUG
        logger.log(level, "%s on %s %s: %s", exc.code, request.method, request.url.path, exc.detail)
        return error_envelope(exc.status_code, exc.detail, exc.code, exc.timestamp)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        _request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = _field_errors(exc)
        detail = "; ".join(f"{e['field'] or 'body'}: {e['message']}" for e in errors)
        return error_envelope(
            422, detail or "Invalid request", "REQUEST_VALIDATION_ERROR", errors=errors
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled error on %s %s: %s", request.method, request.url.path, exc)
        return error_envelope(500, "Internal server error", "INTERNAL_ERROR")

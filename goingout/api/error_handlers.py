"""Error Handlers — map exceptions escaping a route to the JSON error envelope.

Invariants:
    - GoingOutError → its own http_status and to_response() body
    - Retryable errors (context.retry_after_ms set) carry a Retry-After header
    - RequestValidationError → 400 VALIDATION_ERROR, one detail per offending field
    - Anything else → 500 INTERNAL_ERROR with no exception text in the body
    - Log lines carry the caller's X-User-Id so a 4xx can be traced to a viewer
"""

import logging
import math

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from goingout.core.errors import GoingOutError, ErrorSeverity

logger = logging.getLogger(__name__)

# Request parts pydantic prefixes onto error locations
_LOCATION_PARTS = {"body", "query", "path", "header"}


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(GoingOutError, handle_domain_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)


def _log_extra(request: Request, **fields) -> dict:
    return {
        "path": request.url.path,
        "user_id": request.headers.get("x-user-id"),
        **fields,
    }


def _retry_after_header(exc: GoingOutError) -> dict[str, str]:
    retry_ms = exc.context.retry_after_ms
    if not retry_ms:
        return {}
    return {"Retry-After": str(max(1, math.ceil(retry_ms / 1000)))}


async def handle_domain_error(request: Request, exc: GoingOutError) -> JSONResponse:
    # 4xx are the caller's problem; 5xx mean the store or the service is unwell
    level = logging.ERROR if exc.http_status >= 500 else logging.WARNING
    logger.log(
        level, f"{exc.code}: {exc.message}",
        extra=_log_extra(request, error_code=exc.code),
    )
    return JSONResponse(
        status_code=exc.http_status,
        content=exc.to_response(),
        headers=_retry_after_header(exc),
    )


def _field_name(loc: tuple) -> str:
    parts = [str(p) for p in loc]
    if parts and parts[0] in _LOCATION_PARTS:
        parts = parts[1:]
    return ".".join(parts) or "request"


async def handle_validation_error(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    details = [
        {"field": _field_name(e["loc"]), "message": e["msg"], "type": e["type"]}
        for e in exc.errors()
    ]
    logger.warning(
        f"Rejected request: {[d['field'] for d in details]}",
        extra=_log_extra(request, error_code="VALIDATION_ERROR"),
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": {
                "code": "VALIDATION_ERROR",
                "message": "Invalid request data",
                "category": "validation",
                "severity": ErrorSeverity.ERROR.value,
                "details": details,
            },
        },
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled {type(exc).__name__}",
        exc_info=exc,
        extra=_log_extra(request, error_code="INTERNAL_ERROR"),
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

"""Global exception handlers for consistent error responses.

Design:
- QuotaExceededAppError -> 429 with retry metadata (flat body read by the UI)
- RateLimitError -> 500 "Rate limit service unavailable" (flat body)
- Other AppError subclasses -> 400/500 with the {"error": {...}} envelope
- Request body/query validation -> 400 with the same envelope
- Unexpected Exception -> generic 500 (safety net)
"""

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from nippondaily.core.config import settings
from nippondaily.core.errors import (
    AppError,
    LLMAppError,
    QuotaExceededAppError,
    RateLimitError,
    SearchAppError,
    ValidationAppError,
)
from nippondaily.core.logging import get_request_id

logger = logging.getLogger(__name__)


def _status_for(exc: AppError) -> int:
    if isinstance(exc, (LLMAppError, SearchAppError)):
        return 500
    return 400


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render domain errors as ``{"error": {code, message, request_id, details?}}``.

    - ValidationAppError -> 400 Bad Request (client fault)
    - LLMAppError / SearchAppError -> 500 (upstream provider fault)
    """
    status_code = _status_for(exc)

    logger.warning(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": status_code,
            "has_details": bool(exc.details),
            "request_path": request.url.path,
        },
    )

    error_content = {
        "code": exc.code,
        "message": exc.message,
        "request_id": get_request_id(),
    }
    if exc.details:
        error_content["details"] = exc.details

    return JSONResponse(status_code=status_code, content={"error": error_content})


async def rate_limit_error_handler(request: Request, exc: RateLimitError) -> JSONResponse:
    """Limiter could not decide: operational failure, never a quota decision."""
    logger.error(
        "rate_limit.unavailable",
        extra={
            "error_message": exc.message,
            "request_path": request.url.path,
        },
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": "Rate limit service unavailable",
            "detail": exc.message,
            "request_id": get_request_id(),
        },
    )


async def quota_exceeded_handler(request: Request, exc: QuotaExceededAppError) -> JSONResponse:
    """Render a 429 with the reset time so the UI can tell the user when to come back."""
    headers: dict[str, str] | None = None
    if settings.rate_limit.rate_limit_include_headers:
        headers = {
            "Retry-After": str(exc.retry_after),
            "X-RateLimit-Limit": str(exc.limit),
            "X-RateLimit-Remaining": str(exc.remaining),
            "X-RateLimit-Reset": str(int(exc.reset_time.timestamp())),
        }

    return JSONResponse(
        status_code=429,
        content={
            "error": exc.message,
            "retryAfter": exc.retry_after,
            "resetTime": exc.reset_time.isoformat().replace("+00:00", "Z"),
            "limit": exc.limit,
        },
        headers=headers,
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed JSON bodies as 400 instead of FastAPI's default 422."""
    errors = [
        {
            "path": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "message": error.get("msg", "Invalid value"),
        }
        for error in exc.errors()
    ]
    return await app_error_handler(
        request,
        ValidationAppError(
            code="invalid_request",
            message="Invalid request payload",
            details={"errors": errors},
        ),
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors.

    Logs the failure with type and message but returns a generic body, so no
    stack traces or internal messages reach the client.
    """
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
        },
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "internal_server_error",
                "message": "An unexpected error occurred. Please try again later.",
                "request_id": get_request_id(),
            }
        },
    )


def setup_exception_handlers(app) -> None:
    """Register all exception handlers with the FastAPI app.

    Starlette resolves handlers along the exception MRO, so the specific
    RateLimitError/QuotaExceededAppError handlers win over AppError.
    """
    app.exception_handler(RateLimitError)(rate_limit_error_handler)
    app.exception_handler(QuotaExceededAppError)(quota_exceeded_handler)
    app.exception_handler(RequestValidationError)(request_validation_handler)
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(Exception)(general_exception_handler)

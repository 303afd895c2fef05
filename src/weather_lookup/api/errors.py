"""HTTP error translation."""

from collections.abc import Callable
from typing import Any

import structlog
from fastapi import Request, status
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from weather_lookup.api.schemas import ErrorResponse

logger = structlog.get_logger()

RATE_LIMIT_MESSAGE = "Too many requests, please try again later."


class ApiError(Exception):
    """Raised by route handlers to produce an ``{"error": ...}`` response."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def error_response(status_code: int, message: str) -> JSONResponse:
    """Build the JSON error envelope shared by every failure path."""
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
    )


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    """Render an ApiError."""
    return error_response(exc.status_code, exc.message)


def rate_limit_exceeded_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render a rate limit rejection.

    slowapi's middleware calls this synchronously, so it must not be a coroutine.
    """
    client_ip = request.client.host if request.client else "unknown"
    logger.warning("Rate limit exceeded", client_ip=client_ip, limit=str(exc))
    return error_response(status.HTTP_429_TOO_MANY_REQUESTS, RATE_LIMIT_MESSAGE)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler for exceptions nothing else caught."""
    logger.error(
        "Unhandled error",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        method=request.method,
    )
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Something went wrong!")


EXCEPTION_HANDLERS: dict[type[Exception], Callable[..., Any]] = {
    ApiError: api_error_handler,
    RateLimitExceeded: rate_limit_exceeded_handler,
    Exception: unhandled_error_handler,
}

"""Unhandled exception middleware."""

from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from weather_lookup.api.errors import unhandled_error_handler


class UnhandledErrorMiddleware(BaseHTTPMiddleware):
    """Turn exceptions escaping the routes into the generic 500 envelope.

    Must be the innermost middleware so the outer ones still add their
    headers to the error response.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            return await unhandled_error_handler(request, e)

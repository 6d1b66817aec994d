"""Middleware classes for the trinoduck server."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import PlainTextResponse

from .errors import ServerError

if TYPE_CHECKING:
    from starlette.requests import Request
    from starlette.responses import Response

logger = logging.getLogger(__name__)


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Middleware to handle ServerError exceptions globally.

    Catches ServerError exceptions and converts them to plain text responses
    with the appropriate HTTP status code, the way the coordinator reports
    request errors.
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        try:
            return await call_next(request)
        except ServerError as e:
            logger.debug("%s %s: %s %s", request.method, request.url.path, e.status_code, e.message)
            return PlainTextResponse(e.message, status_code=e.status_code)

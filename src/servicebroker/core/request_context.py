"""Request scoped context helpers and middleware."""

from __future__ import annotations

import time
import uuid
from typing import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp
from structlog.contextvars import bind_contextvars, clear_contextvars

from .logging import request_logger

RequestResponseEndpoint = Callable[[Request], Awaitable[Response]]

REQUEST_IDENTITY_HEADER = "X-Broker-API-Request-Identity"


class RequestIdentityMiddleware(BaseHTTPMiddleware):
    """Bind the platform request identity to the log context for every request.

    The header value travels untouched into the broker request objects; a
    generated identifier is only used for log correlation when the platform
    omits it.
    """

    def __init__(self, app: ASGIApp, header_name: str = REQUEST_IDENTITY_HEADER) -> None:
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        provided = request.headers.get(self.header_name)
        request_id = provided or str(uuid.uuid4())

        bind_contextvars(request_id=request_id, path=request.url.path, method=request.method)

        start_time = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            duration_ms = (time.perf_counter() - start_time) * 1000
            bind_contextvars(duration_ms=round(duration_ms, 2), status_code=None)
            request_logger.exception("request_failed")
            raise
        else:
            duration_ms = (time.perf_counter() - start_time) * 1000
            bind_contextvars(status_code=response.status_code, duration_ms=round(duration_ms, 2))
            request_logger.info("request_completed")
            if provided:
                response.headers.setdefault(self.header_name, provided)
            return response
        finally:
            clear_contextvars()


__all__ = [
    "REQUEST_IDENTITY_HEADER",
    "RequestIdentityMiddleware",
]

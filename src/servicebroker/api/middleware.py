"""ASGI middleware components used by the broker application."""

from __future__ import annotations

from typing import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from ..core.errors import ServiceBrokerApiVersionError
from ..core.logging import get_logger
from ..core.settings import Settings
from ..translator import ErrorTranslator

API_VERSION_HEADER = "X-Broker-API-Version"
API_PATH_SEGMENT = "/v2/"

logger = get_logger("servicebroker.api.middleware")


class ApiVersionMiddleware(BaseHTTPMiddleware):
    """Reject broker API calls made with an unexpected ``X-Broker-API-Version``."""

    def __init__(self, app, settings: Settings, translator: ErrorTranslator | None = None) -> None:  # type: ignore[override]
        super().__init__(app)
        self._settings = settings
        self._translator = translator or ErrorTranslator()

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        if (
            not self._settings.api_version_check_enabled
            or self._settings.any_api_version
            or API_PATH_SEGMENT not in f"{request.url.path}/"
        ):
            return await call_next(request)

        provided = request.headers.get(API_VERSION_HEADER)
        expected = self._settings.api_version
        if provided != expected:
            error = ServiceBrokerApiVersionError(expected, provided)
            logger.warning("broker.api_version.rejected", expected=expected, provided=provided)
            translated = self._translator.translate(error)
            return JSONResponse(status_code=translated.status_code, content=translated.body)

        return await call_next(request)


__all__ = ["API_VERSION_HEADER", "ApiVersionMiddleware"]

"""HTTP binding of the broker on FastAPI."""

from .app import create_app, run
from .middleware import API_VERSION_HEADER, ApiVersionMiddleware
from .routes import router

__all__ = ["API_VERSION_HEADER", "ApiVersionMiddleware", "create_app", "router", "run"]

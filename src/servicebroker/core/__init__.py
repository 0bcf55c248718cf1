"""Core utilities for the service broker."""

from .settings import ANY_API_VERSION, Settings, get_settings
from .logging import bind_operation_context, configure_logging, get_logger, request_logger
from .errors import (
    ApplicationError,
    CatalogDefinitionDoesNotExistError,
    FlowRegistryFrozenError,
    ServiceBrokerError,
    error_response,
)
from .request_context import REQUEST_IDENTITY_HEADER, RequestIdentityMiddleware

__all__ = [
    "ANY_API_VERSION",
    "Settings",
    "get_settings",
    "bind_operation_context",
    "configure_logging",
    "get_logger",
    "request_logger",
    "ApplicationError",
    "CatalogDefinitionDoesNotExistError",
    "FlowRegistryFrozenError",
    "ServiceBrokerError",
    "error_response",
    "REQUEST_IDENTITY_HEADER",
    "RequestIdentityMiddleware",
]

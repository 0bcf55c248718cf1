"""Application factory wiring a broker implementation into FastAPI."""

from __future__ import annotations

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..catalog import CatalogService, build_catalog_service
from ..core.errors import ServiceBrokerError, ServiceBrokerInvalidParametersError
from ..core.logging import configure_logging, get_logger
from ..core.request_context import RequestIdentityMiddleware
from ..core.settings import Settings, get_settings
from ..dispatcher import EventWrappedDispatcher
from ..enricher import RequestEnricher
from ..flows import EventFlowRegistries
from ..model.catalog import Catalog
from ..services import (
    NonBindableServiceInstanceBindingService,
    ServiceInstanceBindingService,
    ServiceInstanceService,
)
from ..translator import ErrorTranslator
from .middleware import ApiVersionMiddleware
from .routes import PLATFORM_INSTANCE_PREFIX, router

logger = get_logger("servicebroker.api")


def create_app(
    instance_service: ServiceInstanceService,
    binding_service: ServiceInstanceBindingService | None = None,
    *,
    catalog_service: CatalogService | None = None,
    catalog: Catalog | None = None,
    flows: EventFlowRegistries | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """Build the broker application.

    Parameters
    ----------
    instance_service:
        Broker implementation of the service instance operations.
    binding_service:
        Broker implementation of the binding operations; defaults to a service
        that rejects every binding operation.
    catalog_service, catalog:
        Source of the advertised catalog. When both are omitted the catalog is
        loaded from ``OSB_CATALOG_FILE``.
    flows:
        Event flows to run around the operations. The registries are frozen
        once the application is built.
    settings:
        Broker settings; defaults to :func:`get_settings`.

    Raises
    ------
    CatalogDefinitionDoesNotExistError
        If no catalog source was configured.
    """

    settings = settings or get_settings()
    configure_logging(settings.log_level)

    catalog_service = build_catalog_service(settings, catalog_service=catalog_service, catalog=catalog)
    binding_service = binding_service or NonBindableServiceInstanceBindingService()
    flows = flows or EventFlowRegistries()
    flows.freeze()

    translator = ErrorTranslator()
    enricher = RequestEnricher(catalog_service, validate_parameters=settings.validate_parameters)
    dispatcher = EventWrappedDispatcher(instance_service, binding_service, flows)

    app = FastAPI(title="Service Broker", description="Open Service Broker API v2")

    app.add_middleware(ApiVersionMiddleware, settings=settings, translator=translator)
    app.add_middleware(RequestIdentityMiddleware)

    app.state.settings = settings
    app.state.catalog_service = catalog_service
    app.state.flows = flows
    app.state.translator = translator
    app.state.enricher = enricher
    app.state.dispatcher = dispatcher

    @app.exception_handler(ServiceBrokerError)
    async def handle_broker_error(request: Request, exc: ServiceBrokerError) -> JSONResponse:
        translated = translator.translate(exc, getattr(request.state, "operation_kind", None))
        logger.warning(
            "broker.request.rejected",
            status_code=translated.status_code,
            error=translated.body.get("error"),
            description=translated.body.get("description"),
        )
        return JSONResponse(status_code=translated.status_code, content=translated.body)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        error = ServiceBrokerInvalidParametersError(_describe_request_errors(exc))
        translated = translator.translate(error, getattr(request.state, "operation_kind", None))
        logger.warning("broker.request.invalid", description=translated.body["description"])
        return JSONResponse(status_code=translated.status_code, content=translated.body)

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        translated = translator.translate(exc, getattr(request.state, "operation_kind", None))
        logger.error("broker.request.failed", error=str(exc), error_type=type(exc).__name__)
        return JSONResponse(status_code=translated.status_code, content=translated.body)

    app.include_router(router)
    app.include_router(router, prefix=PLATFORM_INSTANCE_PREFIX)

    logger.info(
        "broker.app.created",
        api_version=settings.api_version,
        api_version_check_enabled=settings.api_version_check_enabled,
        validate_parameters=settings.validate_parameters,
    )
    return app


def _describe_request_errors(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        messages.append(f"{location}: {error.get('msg')}")
    return "; ".join(messages) or "request is malformed"


def run(app: FastAPI, settings: Settings | None = None) -> None:
    """Serve ``app`` with uvicorn on the configured host and port."""

    settings = settings or get_settings()
    uvicorn.run(
        app,
        host=settings.server_host,
        port=settings.server_port,
        log_level=settings.log_level.lower(),
    )


__all__ = ["create_app", "run"]

"""Open Service Broker API framework for FastAPI applications."""

from .api import create_app, run
from .catalog import BeanCatalogService, CatalogService, build_catalog_service, load_catalog
from .dispatcher import (
    EventWrappedDispatcher,
    ServiceInstanceBindingEventService,
    ServiceInstanceEventService,
)
from .enricher import RequestEnricher, RequestInputs, decode_originating_identity, encode_originating_identity
from .flows import FLOW_OPERATIONS, EventFlowRegistries, FlowPhase, OperationKind
from .services import (
    NonBindableServiceInstanceBindingService,
    ServiceInstanceBindingService,
    ServiceInstanceService,
)
from .translator import ErrorTranslator, TranslatedError

__version__ = "0.1.0"

__all__ = [
    "FLOW_OPERATIONS",
    "BeanCatalogService",
    "CatalogService",
    "ErrorTranslator",
    "EventFlowRegistries",
    "EventWrappedDispatcher",
    "FlowPhase",
    "NonBindableServiceInstanceBindingService",
    "OperationKind",
    "RequestEnricher",
    "RequestInputs",
    "ServiceInstanceBindingEventService",
    "ServiceInstanceBindingService",
    "ServiceInstanceEventService",
    "ServiceInstanceService",
    "TranslatedError",
    "build_catalog_service",
    "create_app",
    "decode_originating_identity",
    "encode_originating_identity",
    "load_catalog",
    "run",
]

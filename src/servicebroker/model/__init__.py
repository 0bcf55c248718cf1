"""Catalog, request and response models of the Open Service Broker API."""

from .catalog import Catalog, DashboardClient, MaintenanceInfo, Plan, ServiceDefinition
from .context import (
    CLOUD_FOUNDRY_PLATFORM,
    KUBERNETES_PLATFORM,
    CloudFoundryContext,
    Context,
    KubernetesContext,
    parse_context,
)
from .requests import (
    AsyncParameterizedServiceInstanceRequest,
    AsyncServiceBrokerRequest,
    BindResource,
    CreateServiceInstanceBindingRequest,
    CreateServiceInstanceRequest,
    DeleteServiceInstanceBindingRequest,
    DeleteServiceInstanceRequest,
    GetLastServiceBindingOperationRequest,
    GetLastServiceOperationRequest,
    GetServiceInstanceBindingRequest,
    GetServiceInstanceRequest,
    PreviousValues,
    ServiceBrokerRequest,
    UpdateServiceInstanceRequest,
)
from .responses import (
    OPERATION_MAX_LENGTH,
    AsyncServiceBrokerResponse,
    BindingMetadata,
    CreateServiceInstanceAppBindingResponse,
    CreateServiceInstanceBindingResponse,
    CreateServiceInstanceResponse,
    CreateServiceInstanceRouteBindingResponse,
    DeleteServiceInstanceBindingResponse,
    DeleteServiceInstanceResponse,
    Endpoint,
    GetLastServiceBindingOperationResponse,
    GetLastServiceOperationResponse,
    GetServiceInstanceAppBindingResponse,
    GetServiceInstanceBindingResponse,
    GetServiceInstanceResponse,
    GetServiceInstanceRouteBindingResponse,
    OperationState,
    ServiceBrokerResponse,
    SharedVolumeDevice,
    UpdateServiceInstanceResponse,
    VolumeMount,
)

__all__ = [
    "CLOUD_FOUNDRY_PLATFORM",
    "KUBERNETES_PLATFORM",
    "OPERATION_MAX_LENGTH",
    "AsyncParameterizedServiceInstanceRequest",
    "AsyncServiceBrokerRequest",
    "AsyncServiceBrokerResponse",
    "BindResource",
    "BindingMetadata",
    "Catalog",
    "CloudFoundryContext",
    "Context",
    "CreateServiceInstanceAppBindingResponse",
    "CreateServiceInstanceBindingRequest",
    "CreateServiceInstanceBindingResponse",
    "CreateServiceInstanceRequest",
    "CreateServiceInstanceResponse",
    "CreateServiceInstanceRouteBindingResponse",
    "DashboardClient",
    "DeleteServiceInstanceBindingRequest",
    "DeleteServiceInstanceBindingResponse",
    "DeleteServiceInstanceRequest",
    "DeleteServiceInstanceResponse",
    "Endpoint",
    "GetLastServiceBindingOperationRequest",
    "GetLastServiceBindingOperationResponse",
    "GetLastServiceOperationRequest",
    "GetLastServiceOperationResponse",
    "GetServiceInstanceAppBindingResponse",
    "GetServiceInstanceBindingRequest",
    "GetServiceInstanceBindingResponse",
    "GetServiceInstanceRequest",
    "GetServiceInstanceResponse",
    "GetServiceInstanceRouteBindingResponse",
    "KubernetesContext",
    "MaintenanceInfo",
    "OperationState",
    "Plan",
    "PreviousValues",
    "ServiceBrokerRequest",
    "ServiceBrokerResponse",
    "ServiceDefinition",
    "SharedVolumeDevice",
    "UpdateServiceInstanceResponse",
    "UpdateServiceInstanceRequest",
    "VolumeMount",
    "parse_context",
]

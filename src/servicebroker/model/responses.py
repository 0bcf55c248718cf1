"""Response objects returned by broker implementations.

Each response knows the HTTP status it renders to; ``async_`` and the
``*_existed`` / ``delete_operation`` flags only steer that status and are not
part of the body.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .catalog import MaintenanceInfo

OPERATION_MAX_LENGTH = 10_000


class OperationState(str, Enum):
    IN_PROGRESS = "in progress"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class ServiceBrokerResponse(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    def status_code(self) -> int:
        return 200

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class AsyncServiceBrokerResponse(ServiceBrokerResponse):
    """Response that may signal an operation still running on the broker."""

    async_: bool = Field(default=False, alias="async", exclude=True)
    operation: str | None = Field(
        default=None,
        max_length=OPERATION_MAX_LENGTH,
        description="Opaque token the platform echoes back when polling last_operation",
    )

    def to_json(self) -> dict[str, Any]:
        payload = super().to_json()
        if not self.async_:
            payload.pop("operation", None)
        return payload


class CreateServiceInstanceResponse(AsyncServiceBrokerResponse):
    dashboard_url: str | None = None
    instance_existed: bool = Field(default=False, exclude=True)
    metadata: dict[str, Any] | None = None

    def status_code(self) -> int:
        if self.async_:
            return 202
        return 200 if self.instance_existed else 201


class UpdateServiceInstanceResponse(AsyncServiceBrokerResponse):
    dashboard_url: str | None = None
    metadata: dict[str, Any] | None = None

    def status_code(self) -> int:
        return 202 if self.async_ else 200


class DeleteServiceInstanceResponse(AsyncServiceBrokerResponse):
    def status_code(self) -> int:
        return 202 if self.async_ else 200


class GetServiceInstanceResponse(ServiceBrokerResponse):
    service_definition_id: str | None = Field(default=None, alias="service_id")
    plan_id: str | None = None
    dashboard_url: str | None = None
    parameters: dict[str, Any] = Field(default_factory=dict)
    maintenance_info: MaintenanceInfo | None = None
    metadata: dict[str, Any] | None = None


class GetLastServiceOperationResponse(ServiceBrokerResponse):
    state: OperationState
    description: str | None = None
    delete_operation: bool = Field(default=False, exclude=True)
    instance_usable: bool | None = None
    update_repeatable: bool | None = None

    def status_code(self) -> int:
        # A finished delete tells the platform the instance is gone.
        if self.delete_operation and self.state is OperationState.SUCCEEDED:
            return 410
        return 200


class SharedVolumeDevice(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    volume_id: str
    mount_config: dict[str, Any] | None = None


class VolumeMount(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    driver: str
    container_dir: str
    mode: str = Field(..., pattern="^(r|rw)$")
    device_type: str = "shared"
    device: SharedVolumeDevice


class Endpoint(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    host: str
    ports: list[str] = Field(default_factory=list)
    protocol: str = Field(default="tcp", pattern="^(tcp|udp|all)$")


class BindingMetadata(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    expires_at: str | None = None
    renew_before: str | None = None


class CreateServiceInstanceBindingResponse(AsyncServiceBrokerResponse):
    binding_existed: bool = Field(default=False, exclude=True)
    metadata: BindingMetadata | None = None

    def status_code(self) -> int:
        if self.async_:
            return 202
        return 200 if self.binding_existed else 201


class CreateServiceInstanceAppBindingResponse(CreateServiceInstanceBindingResponse):
    credentials: dict[str, Any] = Field(default_factory=dict)
    syslog_drain_url: str | None = None
    volume_mounts: list[VolumeMount] | None = None
    endpoints: list[Endpoint] | None = None


class CreateServiceInstanceRouteBindingResponse(CreateServiceInstanceBindingResponse):
    route_service_url: str | None = None


class GetServiceInstanceBindingResponse(ServiceBrokerResponse):
    parameters: dict[str, Any] = Field(default_factory=dict)
    metadata: BindingMetadata | None = None


class GetServiceInstanceAppBindingResponse(GetServiceInstanceBindingResponse):
    credentials: dict[str, Any] = Field(default_factory=dict)
    syslog_drain_url: str | None = None
    volume_mounts: list[VolumeMount] | None = None
    endpoints: list[Endpoint] | None = None


class GetServiceInstanceRouteBindingResponse(GetServiceInstanceBindingResponse):
    route_service_url: str | None = None


class DeleteServiceInstanceBindingResponse(AsyncServiceBrokerResponse):
    def status_code(self) -> int:
        return 202 if self.async_ else 200


class GetLastServiceBindingOperationResponse(ServiceBrokerResponse):
    state: OperationState
    description: str | None = None
    delete_operation: bool = Field(default=False, exclude=True)

    def status_code(self) -> int:
        if self.delete_operation and self.state is OperationState.SUCCEEDED:
            return 410
        return 200


__all__ = [
    "OPERATION_MAX_LENGTH",
    "AsyncServiceBrokerResponse",
    "BindingMetadata",
    "CreateServiceInstanceAppBindingResponse",
    "CreateServiceInstanceBindingResponse",
    "CreateServiceInstanceResponse",
    "CreateServiceInstanceRouteBindingResponse",
    "DeleteServiceInstanceBindingResponse",
    "DeleteServiceInstanceResponse",
    "Endpoint",
    "GetLastServiceBindingOperationResponse",
    "GetLastServiceOperationResponse",
    "GetServiceInstanceAppBindingResponse",
    "GetServiceInstanceBindingResponse",
    "GetServiceInstanceResponse",
    "GetServiceInstanceRouteBindingResponse",
    "OperationState",
    "ServiceBrokerResponse",
    "SharedVolumeDevice",
    "UpdateServiceInstanceResponse",
    "VolumeMount",
]

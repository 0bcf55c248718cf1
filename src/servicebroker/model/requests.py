"""Immutable request objects handed to broker implementations.

Body and query values are parsed from the wire (``service_id`` maps onto
``service_definition_id``); transport metadata and the resolved catalog objects
are attached by :class:`servicebroker.enricher.RequestEnricher` and never
serialized back.
"""

from __future__ import annotations

from typing import Any, ClassVar, Mapping, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .catalog import MaintenanceInfo, Plan, ServiceDefinition
from .context import Context, parse_context

RequestT = TypeVar("RequestT", bound="ServiceBrokerRequest")


class ServiceBrokerRequest(BaseModel):
    """Fields shared by every broker request."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    # Enrichment fails when the definition is unknown, even if no id was sent.
    requires_service_definition: ClassVar[bool] = False
    # Enrichment resolves the definition only when an id was sent.
    resolves_service_definition: ClassVar[bool] = False
    # Location of the parameters schema in ``Plan.schemas``.
    parameters_schema_path: ClassVar[tuple[str, str] | None] = None

    service_definition_id: str | None = Field(default=None, alias="service_id")
    plan_id: str | None = None

    service_instance_id: str | None = Field(default=None, exclude=True)
    platform_instance_id: str | None = Field(default=None, exclude=True)
    api_info_location: str | None = Field(default=None, exclude=True)
    originating_identity: Context | None = Field(default=None, exclude=True)
    request_identity: str | None = Field(default=None, exclude=True)

    service_definition: ServiceDefinition | None = Field(default=None, exclude=True)
    plan: Plan | None = Field(default=None, exclude=True)

    @classmethod
    def from_wire(cls: type[RequestT], data: Mapping[str, Any] | None = None, **values: Any) -> RequestT:
        """Build a request from body or query ``data``.

        Keys naming transport or resolved fields are dropped from ``data``; those
        are only ever set through ``values`` or by the enricher.
        """

        wire = {
            key: value
            for key, value in (data or {}).items()
            if not (key in cls.model_fields and cls.model_fields[key].exclude)
        }
        return cls.model_validate({**wire, **values})

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class AsyncServiceBrokerRequest(ServiceBrokerRequest):
    """Request whose operation may complete asynchronously."""

    async_accepted: bool = Field(default=False, exclude=True)


class AsyncParameterizedServiceInstanceRequest(AsyncServiceBrokerRequest):
    parameters: dict[str, Any] = Field(default_factory=dict)
    context: Context | None = None
    maintenance_info: MaintenanceInfo | None = None

    @field_validator("context", mode="before")
    @classmethod
    def _parse_context(cls, value: Any) -> Context | None:
        return parse_context(value)

    @field_validator("parameters", mode="before")
    @classmethod
    def _default_parameters(cls, value: Any) -> Any:
        return {} if value is None else value


class CreateServiceInstanceRequest(AsyncParameterizedServiceInstanceRequest):
    requires_service_definition: ClassVar[bool] = True
    parameters_schema_path: ClassVar[tuple[str, str] | None] = ("service_instance", "create")

    organization_guid: str | None = None
    space_guid: str | None = None


class PreviousValues(BaseModel):
    """Values of the instance before the update was requested."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    service_definition_id: str | None = Field(default=None, alias="service_id")
    plan_id: str | None = None
    organization_id: str | None = None
    space_id: str | None = None
    maintenance_info: MaintenanceInfo | None = None


class UpdateServiceInstanceRequest(AsyncParameterizedServiceInstanceRequest):
    requires_service_definition: ClassVar[bool] = True
    parameters_schema_path: ClassVar[tuple[str, str] | None] = ("service_instance", "update")

    previous_values: PreviousValues | None = None


class DeleteServiceInstanceRequest(AsyncServiceBrokerRequest):
    requires_service_definition: ClassVar[bool] = True


class GetServiceInstanceRequest(ServiceBrokerRequest):
    """Retrieval carries ``service_id``/``plan_id`` through without catalog lookup."""


class GetLastServiceOperationRequest(ServiceBrokerRequest):
    resolves_service_definition: ClassVar[bool] = True

    operation: str | None = Field(default=None, exclude=True)


class BindResource(BaseModel):
    """Resource the binding is created for."""

    model_config = ConfigDict(frozen=True, extra="allow")

    app_guid: str | None = None
    route: str | None = None


class CreateServiceInstanceBindingRequest(AsyncServiceBrokerRequest):
    requires_service_definition: ClassVar[bool] = True
    parameters_schema_path: ClassVar[tuple[str, str] | None] = ("service_binding", "create")

    binding_id: str | None = Field(default=None, exclude=True)
    app_guid: str | None = None
    bind_resource: BindResource | None = None
    parameters: dict[str, Any] = Field(default_factory=dict)
    context: Context | None = None

    @field_validator("context", mode="before")
    @classmethod
    def _parse_context(cls, value: Any) -> Context | None:
        return parse_context(value)

    @field_validator("parameters", mode="before")
    @classmethod
    def _default_parameters(cls, value: Any) -> Any:
        return {} if value is None else value


class GetServiceInstanceBindingRequest(ServiceBrokerRequest):
    binding_id: str | None = Field(default=None, exclude=True)


class DeleteServiceInstanceBindingRequest(AsyncServiceBrokerRequest):
    requires_service_definition: ClassVar[bool] = True

    binding_id: str | None = Field(default=None, exclude=True)


class GetLastServiceBindingOperationRequest(ServiceBrokerRequest):
    resolves_service_definition: ClassVar[bool] = True

    binding_id: str | None = Field(default=None, exclude=True)
    operation: str | None = Field(default=None, exclude=True)


__all__ = [
    "AsyncParameterizedServiceInstanceRequest",
    "AsyncServiceBrokerRequest",
    "BindResource",
    "CreateServiceInstanceBindingRequest",
    "CreateServiceInstanceRequest",
    "DeleteServiceInstanceBindingRequest",
    "DeleteServiceInstanceRequest",
    "GetLastServiceBindingOperationRequest",
    "GetLastServiceOperationRequest",
    "GetServiceInstanceBindingRequest",
    "GetServiceInstanceRequest",
    "PreviousValues",
    "ServiceBrokerRequest",
    "UpdateServiceInstanceRequest",
]

"""Pydantic models describing the service catalog advertised to platforms."""

from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, model_validator


class MaintenanceInfo(BaseModel):
    """Maintenance information attached to a plan or instance."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    version: str = Field(..., description="Semantic version of the plan's maintenance level")
    description: str | None = None


class DashboardClient(BaseModel):
    """OAuth client used by the platform to access a service dashboard."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str
    secret: str
    redirect_uri: str | None = None


class Plan(BaseModel):
    """A plan offered for a service definition."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(..., min_length=1, description="Unique identifier of the plan")
    name: str = Field(..., min_length=1, description="CLI friendly plan name")
    description: str = Field(default="", description="Short description of the plan")
    free: bool = Field(default=True)
    bindable: bool | None = Field(default=None, description="Overrides the service level bindable flag")
    plan_updateable: bool | None = None
    metadata: dict[str, Any] | None = None
    schemas: dict[str, Any] | None = Field(
        default=None,
        description="JSON schemas for the parameters accepted by instance and binding operations",
    )
    maximum_polling_duration: int | None = Field(default=None, ge=0)
    maintenance_info: MaintenanceInfo | None = None

    def parameters_schema(self, resource: str, action: str) -> Mapping[str, Any] | None:
        """Return the JSON schema for ``schemas.<resource>.<action>.parameters``."""

        node: Any = self.schemas or {}
        for key in (resource, action, "parameters"):
            if not isinstance(node, Mapping):
                return None
            node = node.get(key)
        return node if isinstance(node, Mapping) else None


class ServiceDefinition(BaseModel):
    """A service offering listed in the catalog."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(..., min_length=1, description="Unique identifier of the service offering")
    name: str = Field(..., min_length=1, description="CLI friendly service name")
    description: str = Field(default="", description="Short description of the service")
    bindable: bool = Field(default=False)
    plans: list[Plan] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    requires: list[str] = Field(default_factory=list)
    metadata: dict[str, Any] | None = None
    plan_updateable: bool | None = None
    instances_retrievable: bool | None = None
    bindings_retrievable: bool | None = None
    allow_context_updates: bool | None = None
    dashboard_client: DashboardClient | None = None

    @model_validator(mode="after")
    def _ensure_unique_plans(self) -> "ServiceDefinition":
        seen: set[str] = set()
        for plan in self.plans:
            if plan.id in seen:
                raise ValueError(f"Duplicate plan id '{plan.id}' in service definition '{self.id}'")
            seen.add(plan.id)
        return self

    def get_plan(self, plan_id: str | None) -> Plan | None:
        """Return the plan with ``plan_id`` or ``None`` when it is not offered."""

        if plan_id is None:
            return None
        for plan in self.plans:
            if plan.id == plan_id:
                return plan
        return None


class Catalog(BaseModel):
    """Envelope returned by ``GET /v2/catalog``."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    services: list[ServiceDefinition] = Field(default_factory=list)

    @model_validator(mode="after")
    def _ensure_unique_services(self) -> "Catalog":
        seen: set[str] = set()
        for definition in self.services:
            if definition.id in seen:
                raise ValueError(f"Duplicate service definition id '{definition.id}'")
            seen.add(definition.id)
        return self


__all__ = ["Catalog", "DashboardClient", "MaintenanceInfo", "Plan", "ServiceDefinition"]

"""Platform context property bags."""

from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict

CLOUD_FOUNDRY_PLATFORM = "cloudfoundry"
KUBERNETES_PLATFORM = "kubernetes"


class Context(BaseModel):
    """Opaque platform context: a platform name plus arbitrary properties."""

    model_config = ConfigDict(frozen=True, extra="allow")

    platform: str | None = None

    @property
    def properties(self) -> dict[str, Any]:
        return self.model_dump(exclude={"platform"}, exclude_unset=True)

    def get_property(self, key: str) -> Any:
        return self.properties.get(key)


class CloudFoundryContext(Context):
    organization_guid: Any = None
    organization_name: Any = None
    space_guid: Any = None
    space_name: Any = None
    instance_name: Any = None


class KubernetesContext(Context):
    namespace: Any = None
    clusterid: Any = None
    instance_name: Any = None


_CONTEXT_TYPES: dict[str, type[Context]] = {
    CLOUD_FOUNDRY_PLATFORM: CloudFoundryContext,
    KUBERNETES_PLATFORM: KubernetesContext,
}


def parse_context(value: Any) -> Context | None:
    """Build the most specific context type for ``value``'s platform."""

    if value is None or isinstance(value, Context):
        return value
    if not isinstance(value, Mapping):
        raise ValueError("context must be an object")
    platform = value.get("platform")
    context_type = _CONTEXT_TYPES.get(platform, Context) if isinstance(platform, str) else Context
    return context_type.model_validate(dict(value))


__all__ = [
    "CLOUD_FOUNDRY_PLATFORM",
    "KUBERNETES_PLATFORM",
    "CloudFoundryContext",
    "Context",
    "KubernetesContext",
    "parse_context",
]

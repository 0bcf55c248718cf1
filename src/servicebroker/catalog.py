"""Catalog lookup used to validate and enrich broker requests."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Awaitable, Protocol, runtime_checkable

import yaml
from pydantic import ValidationError

from .core.errors import CatalogDefinitionDoesNotExistError
from .core.logging import get_logger
from .core.settings import Settings
from .model.catalog import Catalog, ServiceDefinition

logger = get_logger("servicebroker.catalog")


@runtime_checkable
class CatalogService(Protocol):
    """Read-only lookup of the catalog advertised to the platform.

    Implementations may be sync or async. A lookup miss returns ``None``; it is
    the request enricher that turns a miss into an error.
    """

    def get_catalog(self) -> Catalog | Awaitable[Catalog]:
        ...

    def get_service_definition(
        self, service_id: str | None
    ) -> ServiceDefinition | None | Awaitable[ServiceDefinition | None]:
        ...


class BeanCatalogService:
    """Catalog service backed by a static :class:`Catalog`."""

    def __init__(self, catalog: Catalog) -> None:
        self._catalog = catalog
        self._definitions: dict[str, ServiceDefinition] = {
            definition.id: definition for definition in catalog.services
        }

    async def get_catalog(self) -> Catalog:
        return self._catalog

    async def get_service_definition(self, service_id: str | None) -> ServiceDefinition | None:
        if service_id is None:
            return None
        return self._definitions.get(service_id)


def load_catalog(path: Path) -> Catalog:
    """Load and validate a catalog from a YAML file.

    The document holds a ``services`` list, optionally nested under a
    top-level ``catalog`` key.

    Raises
    ------
    FileNotFoundError
        If the catalog file does not exist.
    yaml.YAMLError
        If the file cannot be parsed.
    pydantic.ValidationError
        If the parsed data is not a valid catalog.
    """

    if not path.exists():
        raise FileNotFoundError(f"Catalog not found at: {path}")

    data: Any = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if isinstance(data, dict) and isinstance(data.get("catalog"), dict):
        data = data["catalog"]

    if not isinstance(data, dict):
        raise ValidationError.from_exception_data(
            Catalog.__name__,
            [
                {
                    "type": "dict_type",
                    "loc": (),
                    "input": data,
                }
            ],
        )

    catalog = Catalog.model_validate(data)
    logger.info(
        "catalog.loaded",
        path=str(path),
        services=[definition.id for definition in catalog.services],
    )
    return catalog


def build_catalog_service(
    settings: Settings,
    *,
    catalog_service: CatalogService | None = None,
    catalog: Catalog | None = None,
) -> CatalogService:
    """Pick the catalog service: explicit service, explicit catalog, then the catalog file."""

    if catalog_service is not None:
        return catalog_service
    if catalog is not None:
        return BeanCatalogService(catalog)
    if settings.catalog_file is not None:
        return BeanCatalogService(load_catalog(settings.catalog_file))
    raise CatalogDefinitionDoesNotExistError()


__all__ = ["BeanCatalogService", "CatalogService", "build_catalog_service", "load_catalog"]

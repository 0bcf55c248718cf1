"""Validation and enrichment of inbound broker requests.

The enricher turns a request parsed from the wire into the object handed to
the broker: it attaches transport metadata, decodes the originating identity
and resolves the service definition and plan from the catalog. Every failure
surfaces before the request reaches the dispatcher.
"""

from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass
from typing import Any, Mapping

import structlog
from jsonschema import validate as jsonschema_validate
from jsonschema.exceptions import SchemaError as JSONSchemaSchemaError
from jsonschema.exceptions import ValidationError as JSONSchemaValidationError
from pydantic import ValidationError as PydanticValidationError

from .catalog import CatalogService
from .core.awaitables import maybe_await
from .core.errors import (
    ServiceBrokerInvalidOriginatingIdentityError,
    ServiceBrokerInvalidParametersError,
    ServiceDefinitionDoesNotExistError,
    ServiceDefinitionPlanDoesNotExistError,
)
from .core.logging import get_logger
from .model.catalog import Plan, ServiceDefinition
from .model.context import Context, parse_context
from .model.requests import AsyncServiceBrokerRequest, RequestT, ServiceBrokerRequest

API_INFO_LOCATION_HEADER = "X-Api-Info-Location"
ORIGINATING_IDENTITY_HEADER = "X-Broker-API-Originating-Identity"


@dataclass(frozen=True)
class RequestInputs:
    """Transport values taken from the path, headers and query of a request."""

    service_instance_id: str | None = None
    binding_id: str | None = None
    platform_instance_id: str | None = None
    api_info_location: str | None = None
    originating_identity: str | None = None
    request_identity: str | None = None
    async_accepted: bool = False


def decode_originating_identity(header: str | None) -> Context | None:
    """Decode ``<platform> <base64 encoded JSON object>`` into a :class:`Context`."""

    if header is None:
        return None

    platform, separator, encoded = header.strip().partition(" ")
    if not separator or not platform or not encoded.strip():
        raise ServiceBrokerInvalidOriginatingIdentityError(
            "expected format is '<platform> <base64 encoded JSON properties>'"
        )

    try:
        decoded = base64.b64decode(encoded.strip(), validate=True)
        properties = json.loads(decoded.decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError) as exc:
        raise ServiceBrokerInvalidOriginatingIdentityError(
            "properties must be base64 encoded JSON"
        ) from exc

    if not isinstance(properties, dict):
        raise ServiceBrokerInvalidOriginatingIdentityError("properties must be a JSON object")

    try:
        return parse_context({**properties, "platform": platform})
    except PydanticValidationError as exc:
        raise ServiceBrokerInvalidOriginatingIdentityError(str(exc)) from exc


def encode_originating_identity(context: Context) -> str:
    """Render ``context`` as an originating identity header value."""

    encoded = base64.b64encode(json.dumps(context.properties).encode("utf-8")).decode("ascii")
    return f"{context.platform} {encoded}"


class RequestEnricher:
    """Resolve catalog objects and transport metadata onto broker requests."""

    def __init__(
        self,
        catalog_service: CatalogService,
        *,
        validate_parameters: bool = False,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._catalog_service = catalog_service
        self._validate_parameters = validate_parameters
        self._logger = (logger or get_logger(__name__)).bind(component="enricher")

    async def enrich(self, request: RequestT, inputs: RequestInputs) -> RequestT:
        """Return a copy of ``request`` with transport values and catalog objects set.

        Raises
        ------
        ServiceBrokerInvalidOriginatingIdentityError
            If the originating identity header is malformed.
        ServiceDefinitionDoesNotExistError
            If the service definition is required but unknown.
        ServiceDefinitionPlanDoesNotExistError
            If the plan is not offered by the resolved service definition.
        ServiceBrokerInvalidParametersError
            If parameter validation is enabled and the plan schema rejects the parameters.
        """

        try:
            updates = self._transport_updates(request, inputs)
            definition, plan = await self._resolve(request)
            if plan is not None:
                self._check_parameters(request, plan)
        except Exception as exc:
            self._logger.warning(
                "broker.enrich.rejected",
                request_type=type(request).__name__,
                service_instance_id=inputs.service_instance_id,
                error=str(exc),
            )
            raise

        if definition is not None:
            updates["service_definition"] = definition
        if plan is not None:
            updates["plan"] = plan

        return request.model_copy(update=updates)

    def _transport_updates(self, request: ServiceBrokerRequest, inputs: RequestInputs) -> dict[str, Any]:
        updates: dict[str, Any] = {
            "originating_identity": decode_originating_identity(inputs.originating_identity),
            "service_instance_id": inputs.service_instance_id,
            "platform_instance_id": inputs.platform_instance_id,
            "api_info_location": inputs.api_info_location,
            "request_identity": inputs.request_identity,
        }
        if "binding_id" in type(request).model_fields:
            updates["binding_id"] = inputs.binding_id
        if isinstance(request, AsyncServiceBrokerRequest):
            updates["async_accepted"] = inputs.async_accepted
        return updates

    async def _resolve(self, request: ServiceBrokerRequest) -> tuple[ServiceDefinition | None, Plan | None]:
        service_id = request.service_definition_id
        required = request.requires_service_definition
        if not required and not (request.resolves_service_definition and service_id is not None):
            return None, None

        definition = await maybe_await(self._catalog_service.get_service_definition(service_id))
        if definition is None:
            raise ServiceDefinitionDoesNotExistError(service_id)

        if request.plan_id is None:
            return definition, None

        plan = definition.get_plan(request.plan_id)
        if plan is None:
            raise ServiceDefinitionPlanDoesNotExistError(request.plan_id)
        return definition, plan

    def _check_parameters(self, request: ServiceBrokerRequest, plan: Plan) -> None:
        path = request.parameters_schema_path
        if not self._validate_parameters or path is None:
            return

        schema = plan.parameters_schema(*path)
        if schema is None:
            return

        parameters: Mapping[str, Any] = getattr(request, "parameters", None) or {}
        try:
            jsonschema_validate(dict(parameters), dict(schema))
        except JSONSchemaValidationError as exc:
            raise ServiceBrokerInvalidParametersError(exc.message) from exc
        except JSONSchemaSchemaError as exc:
            raise ServiceBrokerInvalidParametersError(
                f"plan '{plan.id}' declares an invalid parameters schema: {exc.message}"
            ) from exc


__all__ = [
    "API_INFO_LOCATION_HEADER",
    "ORIGINATING_IDENTITY_HEADER",
    "RequestEnricher",
    "RequestInputs",
    "decode_originating_identity",
    "encode_originating_identity",
]

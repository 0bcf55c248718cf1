"""Open Service Broker API v2 endpoints."""

from __future__ import annotations

import json
from typing import Any, Mapping

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from ..catalog import CatalogService
from ..core.awaitables import maybe_await
from ..core.errors import ServiceBrokerInvalidParametersError
from ..core.logging import bind_operation_context
from ..core.request_context import REQUEST_IDENTITY_HEADER
from ..dispatcher import EventWrappedDispatcher
from ..enricher import (
    API_INFO_LOCATION_HEADER,
    ORIGINATING_IDENTITY_HEADER,
    RequestEnricher,
    RequestInputs,
)
from ..flows import OperationKind
from ..model.requests import (
    CreateServiceInstanceBindingRequest,
    CreateServiceInstanceRequest,
    DeleteServiceInstanceBindingRequest,
    DeleteServiceInstanceRequest,
    GetLastServiceBindingOperationRequest,
    GetLastServiceOperationRequest,
    GetServiceInstanceBindingRequest,
    GetServiceInstanceRequest,
    RequestT,
    UpdateServiceInstanceRequest,
)
from ..model.responses import ServiceBrokerResponse

PLATFORM_INSTANCE_PREFIX = "/{platform_instance_id}"

INSTANCE_PATH = "/v2/service_instances/{instance_id}"
BINDING_PATH = INSTANCE_PATH + "/service_bindings/{binding_id}"

router = APIRouter(tags=["service-broker"])


def get_catalog_service(request: Request) -> CatalogService:
    """Dependency returning the catalog service wired into the application."""

    return request.app.state.catalog_service


def get_enricher(request: Request) -> RequestEnricher:
    return request.app.state.enricher


def get_dispatcher(request: Request) -> EventWrappedDispatcher:
    return request.app.state.dispatcher


def _inputs(
    request: Request,
    instance_id: str,
    binding_id: str | None = None,
    accepts_incomplete: bool = False,
) -> RequestInputs:
    headers = request.headers
    return RequestInputs(
        service_instance_id=instance_id,
        binding_id=binding_id,
        platform_instance_id=request.path_params.get("platform_instance_id"),
        api_info_location=headers.get(API_INFO_LOCATION_HEADER),
        originating_identity=headers.get(ORIGINATING_IDENTITY_HEADER),
        request_identity=headers.get(REQUEST_IDENTITY_HEADER),
        async_accepted=accepts_incomplete,
    )


async def _read_body(request: Request) -> dict[str, Any]:
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        payload = json.loads(raw)
    except ValueError as exc:
        raise ServiceBrokerInvalidParametersError("request body is not valid JSON") from exc
    if not isinstance(payload, dict):
        raise ServiceBrokerInvalidParametersError("request body must be a JSON object")
    return payload


def _parse(model: type[RequestT], data: Mapping[str, Any] | None = None, **values: Any) -> RequestT:
    try:
        return model.from_wire(data, **values)
    except ValidationError as exc:
        raise ServiceBrokerInvalidParametersError(_describe_validation_error(exc)) from exc


def _describe_validation_error(exc: ValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        messages.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(messages) or str(exc)


def _query(**values: str | None) -> dict[str, str]:
    return {key: value for key, value in values.items() if value is not None}


def _render(response: Any) -> JSONResponse:
    if not isinstance(response, ServiceBrokerResponse):
        raise TypeError(f"Broker returned {type(response).__name__}, expected a ServiceBrokerResponse")
    return JSONResponse(status_code=response.status_code(), content=response.to_json())


def _begin(request: Request, kind: OperationKind, instance_id: str) -> None:
    request.state.operation_kind = kind
    bind_operation_context(kind.value, instance_id)


async def _process(
    kind: OperationKind,
    broker_request: RequestT,
    inputs: RequestInputs,
    enricher: RequestEnricher,
    dispatcher: EventWrappedDispatcher,
) -> JSONResponse:
    enriched = await enricher.enrich(broker_request, inputs)
    return _render(await dispatcher.dispatch(kind, enriched))


@router.get("/v2/catalog")
async def get_catalog(catalog_service: CatalogService = Depends(get_catalog_service)) -> JSONResponse:
    catalog = await maybe_await(catalog_service.get_catalog())
    return JSONResponse(status_code=200, content=catalog.model_dump(mode="json", exclude_none=True))


@router.put(INSTANCE_PATH)
async def create_service_instance(
    instance_id: str,
    request: Request,
    accepts_incomplete: bool = Query(False),
    enricher: RequestEnricher = Depends(get_enricher),
    dispatcher: EventWrappedDispatcher = Depends(get_dispatcher),
) -> JSONResponse:
    _begin(request, OperationKind.CREATE_INSTANCE, instance_id)
    broker_request = _parse(CreateServiceInstanceRequest, await _read_body(request))
    inputs = _inputs(request, instance_id, accepts_incomplete=accepts_incomplete)
    return await _process(OperationKind.CREATE_INSTANCE, broker_request, inputs, enricher, dispatcher)


@router.get(INSTANCE_PATH)
async def get_service_instance(
    instance_id: str,
    request: Request,
    service_id: str | None = Query(None),
    plan_id: str | None = Query(None),
    enricher: RequestEnricher = Depends(get_enricher),
    dispatcher: EventWrappedDispatcher = Depends(get_dispatcher),
) -> JSONResponse:
    _begin(request, OperationKind.GET_INSTANCE, instance_id)
    broker_request = _parse(GetServiceInstanceRequest, _query(service_id=service_id, plan_id=plan_id))
    inputs = _inputs(request, instance_id)
    return await _process(OperationKind.GET_INSTANCE, broker_request, inputs, enricher, dispatcher)


@router.get(INSTANCE_PATH + "/last_operation")
async def get_service_instance_last_operation(
    instance_id: str,
    request: Request,
    service_id: str | None = Query(None),
    plan_id: str | None = Query(None),
    operation: str | None = Query(None),
    enricher: RequestEnricher = Depends(get_enricher),
    dispatcher: EventWrappedDispatcher = Depends(get_dispatcher),
) -> JSONResponse:
    _begin(request, OperationKind.GET_LAST_INSTANCE_OPERATION, instance_id)
    broker_request = _parse(
        GetLastServiceOperationRequest,
        _query(service_id=service_id, plan_id=plan_id),
        operation=operation,
    )
    inputs = _inputs(request, instance_id)
    return await _process(
        OperationKind.GET_LAST_INSTANCE_OPERATION, broker_request, inputs, enricher, dispatcher
    )


@router.patch(INSTANCE_PATH)
async def update_service_instance(
    instance_id: str,
    request: Request,
    accepts_incomplete: bool = Query(False),
    enricher: RequestEnricher = Depends(get_enricher),
    dispatcher: EventWrappedDispatcher = Depends(get_dispatcher),
) -> JSONResponse:
    _begin(request, OperationKind.UPDATE_INSTANCE, instance_id)
    broker_request = _parse(UpdateServiceInstanceRequest, await _read_body(request))
    inputs = _inputs(request, instance_id, accepts_incomplete=accepts_incomplete)
    return await _process(OperationKind.UPDATE_INSTANCE, broker_request, inputs, enricher, dispatcher)


@router.delete(INSTANCE_PATH)
async def delete_service_instance(
    instance_id: str,
    request: Request,
    service_id: str | None = Query(None),
    plan_id: str | None = Query(None),
    accepts_incomplete: bool = Query(False),
    enricher: RequestEnricher = Depends(get_enricher),
    dispatcher: EventWrappedDispatcher = Depends(get_dispatcher),
) -> JSONResponse:
    _begin(request, OperationKind.DELETE_INSTANCE, instance_id)
    broker_request = _parse(DeleteServiceInstanceRequest, _query(service_id=service_id, plan_id=plan_id))
    inputs = _inputs(request, instance_id, accepts_incomplete=accepts_incomplete)
    return await _process(OperationKind.DELETE_INSTANCE, broker_request, inputs, enricher, dispatcher)


@router.put(BINDING_PATH)
async def create_service_instance_binding(
    instance_id: str,
    binding_id: str,
    request: Request,
    accepts_incomplete: bool = Query(False),
    enricher: RequestEnricher = Depends(get_enricher),
    dispatcher: EventWrappedDispatcher = Depends(get_dispatcher),
) -> JSONResponse:
    _begin(request, OperationKind.CREATE_BINDING, instance_id)
    broker_request = _parse(CreateServiceInstanceBindingRequest, await _read_body(request))
    inputs = _inputs(request, instance_id, binding_id, accepts_incomplete=accepts_incomplete)
    return await _process(OperationKind.CREATE_BINDING, broker_request, inputs, enricher, dispatcher)


@router.get(BINDING_PATH)
async def get_service_instance_binding(
    instance_id: str,
    binding_id: str,
    request: Request,
    service_id: str | None = Query(None),
    plan_id: str | None = Query(None),
    enricher: RequestEnricher = Depends(get_enricher),
    dispatcher: EventWrappedDispatcher = Depends(get_dispatcher),
) -> JSONResponse:
    _begin(request, OperationKind.GET_BINDING, instance_id)
    broker_request = _parse(GetServiceInstanceBindingRequest, _query(service_id=service_id, plan_id=plan_id))
    inputs = _inputs(request, instance_id, binding_id)
    return await _process(OperationKind.GET_BINDING, broker_request, inputs, enricher, dispatcher)


@router.get(BINDING_PATH + "/last_operation")
async def get_service_instance_binding_last_operation(
    instance_id: str,
    binding_id: str,
    request: Request,
    service_id: str | None = Query(None),
    plan_id: str | None = Query(None),
    operation: str | None = Query(None),
    enricher: RequestEnricher = Depends(get_enricher),
    dispatcher: EventWrappedDispatcher = Depends(get_dispatcher),
) -> JSONResponse:
    _begin(request, OperationKind.GET_LAST_BINDING_OPERATION, instance_id)
    broker_request = _parse(
        GetLastServiceBindingOperationRequest,
        _query(service_id=service_id, plan_id=plan_id),
        operation=operation,
    )
    inputs = _inputs(request, instance_id, binding_id)
    return await _process(
        OperationKind.GET_LAST_BINDING_OPERATION, broker_request, inputs, enricher, dispatcher
    )


@router.delete(BINDING_PATH)
async def delete_service_instance_binding(
    instance_id: str,
    binding_id: str,
    request: Request,
    service_id: str | None = Query(None),
    plan_id: str | None = Query(None),
    accepts_incomplete: bool = Query(False),
    enricher: RequestEnricher = Depends(get_enricher),
    dispatcher: EventWrappedDispatcher = Depends(get_dispatcher),
) -> JSONResponse:
    _begin(request, OperationKind.DELETE_BINDING, instance_id)
    broker_request = _parse(
        DeleteServiceInstanceBindingRequest, _query(service_id=service_id, plan_id=plan_id)
    )
    inputs = _inputs(request, instance_id, binding_id, accepts_incomplete=accepts_incomplete)
    return await _process(OperationKind.DELETE_BINDING, broker_request, inputs, enricher, dispatcher)


__all__ = ["PLATFORM_INSTANCE_PREFIX", "router"]

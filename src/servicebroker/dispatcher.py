"""Dispatch of broker operations wrapped in their event flows."""

from __future__ import annotations

import time
from typing import Any, Callable

import structlog

from .core.awaitables import maybe_await
from .core.logging import get_logger
from .flows import FLOW_OPERATIONS, EventFlowRegistries, Flow, OperationKind
from .model.requests import (
    CreateServiceInstanceBindingRequest,
    CreateServiceInstanceRequest,
    DeleteServiceInstanceBindingRequest,
    DeleteServiceInstanceRequest,
    GetLastServiceBindingOperationRequest,
    GetLastServiceOperationRequest,
    GetServiceInstanceBindingRequest,
    GetServiceInstanceRequest,
    ServiceBrokerRequest,
    UpdateServiceInstanceRequest,
)
from .model.responses import ServiceBrokerResponse
from .services import ServiceInstanceBindingService, ServiceInstanceService

# Operation kind -> (target service, method name)
_OPERATIONS: dict[OperationKind, tuple[str, str]] = {
    OperationKind.CREATE_INSTANCE: ("instance", "create_service_instance"),
    OperationKind.UPDATE_INSTANCE: ("instance", "update_service_instance"),
    OperationKind.DELETE_INSTANCE: ("instance", "delete_service_instance"),
    OperationKind.GET_INSTANCE: ("instance", "get_service_instance"),
    OperationKind.GET_LAST_INSTANCE_OPERATION: ("instance", "get_last_operation"),
    OperationKind.CREATE_BINDING: ("binding", "create_service_instance_binding"),
    OperationKind.DELETE_BINDING: ("binding", "delete_service_instance_binding"),
    OperationKind.GET_BINDING: ("binding", "get_service_instance_binding"),
    OperationKind.GET_LAST_BINDING_OPERATION: ("binding", "get_last_operation"),
}


class EventWrappedDispatcher:
    """Run a broker operation between its initialization and completion flows.

    For the operations that carry flows the sequence is:

    1. every initialization flow, in registration order, with ``(request)``;
    2. the broker operation;
    3. on any failure in 1 or 2, every error flow with ``(request, error)``.
       Error flow failures are logged and dropped; the original error is
       re-raised and no completion flow runs;
    4. on success, every completion flow with ``(request, response)``. A
       completion flow failure propagates instead of the response.

    Steps run strictly one after another. Only :class:`Exception` is handled,
    so a cancelled task stops without running further flows.
    """

    def __init__(
        self,
        instance_service: ServiceInstanceService,
        binding_service: ServiceInstanceBindingService,
        flows: EventFlowRegistries | None = None,
        *,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._services: dict[str, Any] = {"instance": instance_service, "binding": binding_service}
        self._flows = flows or EventFlowRegistries()
        self._logger = (logger or get_logger(__name__)).bind(component="dispatcher")

    @property
    def flows(self) -> EventFlowRegistries:
        return self._flows

    async def dispatch(self, kind: OperationKind | str, request: ServiceBrokerRequest) -> Any:
        """Invoke the broker operation for ``kind`` and return its response unchanged."""

        kind = OperationKind(kind)
        operation = self._operation(kind)
        log = self._logger.bind(
            operation=kind.value,
            service_instance_id=request.service_instance_id,
        )
        log.debug("broker.dispatch.start")
        start_time = time.perf_counter()

        if kind not in FLOW_OPERATIONS:
            try:
                response = await maybe_await(operation(request))
            except Exception as exc:
                log.warning("broker.dispatch.error", error=str(exc), error_type=type(exc).__name__)
                raise
        else:
            try:
                for flow in self._flows.initialization_flows(kind):
                    await maybe_await(flow(request))
                response = await maybe_await(operation(request))
            except Exception as exc:
                log.warning("broker.dispatch.error", error=str(exc), error_type=type(exc).__name__)
                await self._run_error_flows(log, self._flows.error_flows(kind), request, exc)
                raise

            for flow in self._flows.completion_flows(kind):
                await maybe_await(flow(request, response))

        duration_ms = (time.perf_counter() - start_time) * 1000
        log.info("broker.dispatch.complete", duration_ms=round(duration_ms, 2))
        return response

    async def _run_error_flows(
        self,
        log: structlog.stdlib.BoundLogger,
        flows: tuple[Flow, ...],
        request: ServiceBrokerRequest,
        error: Exception,
    ) -> None:
        for flow in flows:
            try:
                await maybe_await(flow(request, error))
            except Exception as exc:
                log.error(
                    "broker.flow.error_failed",
                    flow=getattr(flow, "__qualname__", repr(flow)),
                    error=str(exc),
                    original_error=str(error),
                )

    def _operation(self, kind: OperationKind) -> Callable[[ServiceBrokerRequest], Any]:
        target, method_name = _OPERATIONS[kind]
        return getattr(self._services[target], method_name)


class ServiceInstanceEventService:
    """Instance operations routed through an :class:`EventWrappedDispatcher`."""

    def __init__(self, dispatcher: EventWrappedDispatcher) -> None:
        self._dispatcher = dispatcher

    async def create_service_instance(self, request: CreateServiceInstanceRequest) -> ServiceBrokerResponse:
        return await self._dispatcher.dispatch(OperationKind.CREATE_INSTANCE, request)

    async def get_service_instance(self, request: GetServiceInstanceRequest) -> ServiceBrokerResponse:
        return await self._dispatcher.dispatch(OperationKind.GET_INSTANCE, request)

    async def get_last_operation(self, request: GetLastServiceOperationRequest) -> ServiceBrokerResponse:
        return await self._dispatcher.dispatch(OperationKind.GET_LAST_INSTANCE_OPERATION, request)

    async def delete_service_instance(self, request: DeleteServiceInstanceRequest) -> ServiceBrokerResponse:
        return await self._dispatcher.dispatch(OperationKind.DELETE_INSTANCE, request)

    async def update_service_instance(self, request: UpdateServiceInstanceRequest) -> ServiceBrokerResponse:
        return await self._dispatcher.dispatch(OperationKind.UPDATE_INSTANCE, request)


class ServiceInstanceBindingEventService:
    """Binding operations routed through an :class:`EventWrappedDispatcher`."""

    def __init__(self, dispatcher: EventWrappedDispatcher) -> None:
        self._dispatcher = dispatcher

    async def create_service_instance_binding(
        self, request: CreateServiceInstanceBindingRequest
    ) -> ServiceBrokerResponse:
        return await self._dispatcher.dispatch(OperationKind.CREATE_BINDING, request)

    async def get_service_instance_binding(
        self, request: GetServiceInstanceBindingRequest
    ) -> ServiceBrokerResponse:
        return await self._dispatcher.dispatch(OperationKind.GET_BINDING, request)

    async def get_last_operation(
        self, request: GetLastServiceBindingOperationRequest
    ) -> ServiceBrokerResponse:
        return await self._dispatcher.dispatch(OperationKind.GET_LAST_BINDING_OPERATION, request)

    async def delete_service_instance_binding(
        self, request: DeleteServiceInstanceBindingRequest
    ) -> ServiceBrokerResponse:
        return await self._dispatcher.dispatch(OperationKind.DELETE_BINDING, request)


__all__ = [
    "EventWrappedDispatcher",
    "ServiceInstanceBindingEventService",
    "ServiceInstanceEventService",
]

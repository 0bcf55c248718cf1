"""Tests for the event-wrapped dispatcher."""

from __future__ import annotations

import asyncio

import pytest
import structlog

from servicebroker.dispatcher import (
    EventWrappedDispatcher,
    ServiceInstanceBindingEventService,
    ServiceInstanceEventService,
)
from servicebroker.flows import EventFlowRegistries, OperationKind
from servicebroker.model.requests import (
    CreateServiceInstanceBindingRequest,
    CreateServiceInstanceRequest,
    DeleteServiceInstanceBindingRequest,
    DeleteServiceInstanceRequest,
    GetServiceInstanceBindingRequest,
    GetServiceInstanceRequest,
    UpdateServiceInstanceRequest,
)
from servicebroker.model.responses import CreateServiceInstanceResponse
from servicebroker.services import ServiceInstanceService


def _dispatcher(instance_service, binding_service, flows: EventFlowRegistries) -> EventWrappedDispatcher:
    return EventWrappedDispatcher(
        instance_service,
        binding_service,
        flows,
        logger=structlog.get_logger("test.dispatcher"),
    )


def _recording_flow(events: list, name: str, *, fail: bool = False):
    async def flow(*args):
        events.append((name, args))
        if fail:
            raise RuntimeError(f"{name} failed")

    return flow


@pytest.mark.parametrize("failing_index", [0, 1, 2])
def test_initialization_failure_stops_chain_and_skips_operation(
    failing_index: int, instance_service, binding_service, flows
) -> None:
    events: list = []
    for index in range(3):
        flows.add_initialization_flow(
            OperationKind.CREATE_INSTANCE,
            _recording_flow(events, f"init-{index}", fail=index == failing_index),
        )
    flows.add_error_flow(OperationKind.CREATE_INSTANCE, _recording_flow(events, "error"))
    flows.add_completion_flow(OperationKind.CREATE_INSTANCE, _recording_flow(events, "complete"))
    dispatcher = _dispatcher(instance_service, binding_service, flows)
    request = CreateServiceInstanceRequest(service_id="service-one-id")

    with pytest.raises(RuntimeError, match=f"init-{failing_index} failed"):
        asyncio.run(dispatcher.dispatch(OperationKind.CREATE_INSTANCE, request))

    names = [name for name, _ in events]
    assert names == [f"init-{index}" for index in range(failing_index + 1)] + ["error"]
    assert instance_service.calls == []
    error_args = events[-1][1]
    assert error_args[0] is request
    assert isinstance(error_args[1], RuntimeError)


def test_completion_flows_run_in_order_and_response_is_unchanged(
    instance_service, binding_service, flows
) -> None:
    events: list = []
    response = CreateServiceInstanceResponse(async_=True, operation="task-1")
    instance_service.responses["create"] = response
    flows.add_initialization_flow(OperationKind.CREATE_INSTANCE, _recording_flow(events, "init"))
    flows.add_completion_flow(OperationKind.CREATE_INSTANCE, _recording_flow(events, "complete-1"))
    flows.add_completion_flow(OperationKind.CREATE_INSTANCE, _recording_flow(events, "complete-2"))
    flows.add_error_flow(OperationKind.CREATE_INSTANCE, _recording_flow(events, "error"))
    dispatcher = _dispatcher(instance_service, binding_service, flows)
    request = CreateServiceInstanceRequest(service_id="service-one-id")

    result = asyncio.run(dispatcher.dispatch(OperationKind.CREATE_INSTANCE, request))

    assert result is response
    assert result.operation == "task-1"
    assert [name for name, _ in events] == ["init", "complete-1", "complete-2"]
    assert events[1][1] == (request, response)
    assert instance_service.calls == [("create", request)]


def test_operation_failure_runs_error_flows_and_reraises(instance_service, binding_service, flows) -> None:
    events: list = []
    failure = ValueError("provisioning failed")
    instance_service.errors["update"] = failure
    flows.add_error_flow(OperationKind.UPDATE_INSTANCE, _recording_flow(events, "error-1"))
    flows.add_error_flow(OperationKind.UPDATE_INSTANCE, _recording_flow(events, "error-2"))
    flows.add_completion_flow(OperationKind.UPDATE_INSTANCE, _recording_flow(events, "complete"))
    dispatcher = _dispatcher(instance_service, binding_service, flows)
    request = UpdateServiceInstanceRequest(service_id="service-one-id")

    with pytest.raises(ValueError) as excinfo:
        asyncio.run(dispatcher.dispatch(OperationKind.UPDATE_INSTANCE, request))

    assert excinfo.value is failure
    assert events == [("error-1", (request, failure)), ("error-2", (request, failure))]


def test_error_flow_failures_are_suppressed(instance_service, binding_service, flows) -> None:
    events: list = []
    failure = ValueError("delete failed")
    instance_service.errors["delete"] = failure
    flows.add_error_flow(OperationKind.DELETE_INSTANCE, _recording_flow(events, "error-1", fail=True))
    flows.add_error_flow(OperationKind.DELETE_INSTANCE, _recording_flow(events, "error-2"))
    dispatcher = _dispatcher(instance_service, binding_service, flows)

    with pytest.raises(ValueError) as excinfo:
        asyncio.run(dispatcher.dispatch(OperationKind.DELETE_INSTANCE, DeleteServiceInstanceRequest()))

    assert excinfo.value is failure
    assert [name for name, _ in events] == ["error-1", "error-2"]


def test_completion_flow_failure_propagates(instance_service, binding_service, flows) -> None:
    events: list = []
    flows.add_completion_flow(OperationKind.CREATE_BINDING, _recording_flow(events, "complete-1", fail=True))
    flows.add_completion_flow(OperationKind.CREATE_BINDING, _recording_flow(events, "complete-2"))
    flows.add_error_flow(OperationKind.CREATE_BINDING, _recording_flow(events, "error"))
    dispatcher = _dispatcher(instance_service, binding_service, flows)

    with pytest.raises(RuntimeError, match="complete-1 failed"):
        asyncio.run(
            dispatcher.dispatch(OperationKind.CREATE_BINDING, CreateServiceInstanceBindingRequest())
        )

    assert [name for name, _ in events] == ["complete-1"]
    assert [name for name, _ in binding_service.calls] == ["create"]


def test_sync_flows_and_operations_are_supported(binding_service, flows) -> None:
    events: list = []

    class SyncInstanceService(ServiceInstanceService):
        def create_service_instance(self, request):  # type: ignore[override]
            events.append("operation")
            return CreateServiceInstanceResponse(instance_existed=True)

    flows.add_initialization_flow(OperationKind.CREATE_INSTANCE, lambda request: events.append("init"))
    flows.add_completion_flow(
        OperationKind.CREATE_INSTANCE, lambda request, response: events.append("complete")
    )
    dispatcher = _dispatcher(SyncInstanceService(), binding_service, flows)

    response = asyncio.run(
        dispatcher.dispatch(OperationKind.CREATE_INSTANCE, CreateServiceInstanceRequest())
    )

    assert response.status_code() == 200
    assert events == ["init", "operation", "complete"]


def test_get_operations_bypass_flows(instance_service, binding_service) -> None:
    dispatcher = _dispatcher(instance_service, binding_service, EventFlowRegistries())

    instance = asyncio.run(dispatcher.dispatch(OperationKind.GET_INSTANCE, GetServiceInstanceRequest()))
    binding = asyncio.run(dispatcher.dispatch("get_binding", GetServiceInstanceBindingRequest()))

    assert instance.plan_id == "plan-one-id"
    assert binding.credentials == {"user": "admin"}


def test_cancellation_stops_remaining_flows(binding_service, flows) -> None:
    events: list = []

    async def scenario() -> None:
        started = asyncio.Event()

        class BlockingInstanceService(ServiceInstanceService):
            async def create_service_instance(self, request):
                started.set()
                await asyncio.Event().wait()

        flows.add_initialization_flow(OperationKind.CREATE_INSTANCE, _recording_flow(events, "init"))
        flows.add_error_flow(OperationKind.CREATE_INSTANCE, _recording_flow(events, "error"))
        flows.add_completion_flow(OperationKind.CREATE_INSTANCE, _recording_flow(events, "complete"))
        dispatcher = _dispatcher(BlockingInstanceService(), binding_service, flows)

        task = asyncio.create_task(
            dispatcher.dispatch(OperationKind.CREATE_INSTANCE, CreateServiceInstanceRequest())
        )
        await started.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())

    assert [name for name, _ in events] == ["init"]


def test_event_services_route_through_dispatcher(instance_service, binding_service, flows) -> None:
    events: list = []
    flows.add_initialization_flow(OperationKind.DELETE_INSTANCE, _recording_flow(events, "instance-init"))
    flows.add_initialization_flow(OperationKind.DELETE_BINDING, _recording_flow(events, "binding-init"))
    dispatcher = _dispatcher(instance_service, binding_service, flows)
    instances = ServiceInstanceEventService(dispatcher)
    bindings = ServiceInstanceBindingEventService(dispatcher)

    async def scenario() -> None:
        await instances.delete_service_instance(DeleteServiceInstanceRequest())
        await instances.get_service_instance(GetServiceInstanceRequest())
        await bindings.delete_service_instance_binding(
            DeleteServiceInstanceBindingRequest()
        )

    asyncio.run(scenario())

    assert [name for name, _ in events] == ["instance-init", "binding-init"]
    assert [name for name, _ in instance_service.calls] == ["delete", "get"]
    assert [name for name, _ in binding_service.calls] == ["delete"]

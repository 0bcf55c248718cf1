"""Pytest fixtures for the service broker test suite."""

from __future__ import annotations

import base64
import json
from pathlib import Path
from typing import Any

import pytest
import yaml
from fastapi.testclient import TestClient

from servicebroker.api import create_app
from servicebroker.core.settings import Settings
from servicebroker.flows import EventFlowRegistries
from servicebroker.model.catalog import Catalog
from servicebroker.model.responses import (
    CreateServiceInstanceAppBindingResponse,
    CreateServiceInstanceResponse,
    DeleteServiceInstanceBindingResponse,
    DeleteServiceInstanceResponse,
    GetLastServiceBindingOperationResponse,
    GetLastServiceOperationResponse,
    GetServiceInstanceAppBindingResponse,
    GetServiceInstanceResponse,
    OperationState,
    UpdateServiceInstanceResponse,
)
from servicebroker.services import ServiceInstanceBindingService, ServiceInstanceService

SAMPLE_CATALOG = Path(__file__).with_name("fixtures").joinpath("catalog.yaml")


def encode_identity(platform: str, properties: dict[str, Any]) -> str:
    encoded = base64.b64encode(json.dumps(properties).encode("utf-8")).decode("ascii")
    return f"{platform} {encoded}"


class _Recorder:
    """Record every call and answer with a canned response or error."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, Any]] = []
        self.responses: dict[str, Any] = {}
        self.errors: dict[str, Exception] = {}

    def _respond(self, name: str, request: Any, default: Any) -> Any:
        self.calls.append((name, request))
        if name in self.errors:
            raise self.errors[name]
        return self.responses.get(name, default)

    def last_request(self, name: str) -> Any:
        for call_name, request in reversed(self.calls):
            if call_name == name:
                return request
        raise AssertionError(f"'{name}' was never called")


class RecordingInstanceService(_Recorder, ServiceInstanceService):
    async def create_service_instance(self, request):
        return self._respond("create", request, CreateServiceInstanceResponse())

    async def get_service_instance(self, request):
        return self._respond(
            "get",
            request,
            GetServiceInstanceResponse(service_id="service-one-id", plan_id="plan-one-id"),
        )

    async def get_last_operation(self, request):
        return self._respond(
            "last_operation", request, GetLastServiceOperationResponse(state=OperationState.SUCCEEDED)
        )

    async def delete_service_instance(self, request):
        return self._respond("delete", request, DeleteServiceInstanceResponse())

    async def update_service_instance(self, request):
        return self._respond("update", request, UpdateServiceInstanceResponse())


class RecordingBindingService(_Recorder, ServiceInstanceBindingService):
    async def create_service_instance_binding(self, request):
        return self._respond(
            "create", request, CreateServiceInstanceAppBindingResponse(credentials={"user": "admin"})
        )

    async def get_service_instance_binding(self, request):
        return self._respond(
            "get", request, GetServiceInstanceAppBindingResponse(credentials={"user": "admin"})
        )

    async def get_last_operation(self, request):
        return self._respond(
            "last_operation",
            request,
            GetLastServiceBindingOperationResponse(state=OperationState.SUCCEEDED),
        )

    async def delete_service_instance_binding(self, request):
        return self._respond("delete", request, DeleteServiceInstanceBindingResponse())


@pytest.fixture
def identity_header():
    return encode_identity


@pytest.fixture
def catalog_data() -> dict[str, Any]:
    return yaml.safe_load(SAMPLE_CATALOG.read_text(encoding="utf-8"))["catalog"]


@pytest.fixture
def catalog(catalog_data: dict[str, Any]) -> Catalog:
    return Catalog.model_validate(catalog_data)


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, OSB_API_VERSION=None, LOG_LEVEL="INFO")


@pytest.fixture
def instance_service() -> RecordingInstanceService:
    return RecordingInstanceService()


@pytest.fixture
def binding_service() -> RecordingBindingService:
    return RecordingBindingService()


@pytest.fixture
def flows() -> EventFlowRegistries:
    return EventFlowRegistries()


@pytest.fixture
def app(instance_service, binding_service, catalog, flows, settings):
    return create_app(
        instance_service,
        binding_service,
        catalog=catalog,
        flows=flows,
        settings=settings,
    )


@pytest.fixture
def test_client(app):
    with TestClient(app, raise_server_exceptions=False) as client:
        yield client

"""Tests for the exception to HTTP status translation."""

from __future__ import annotations

import pytest

from servicebroker.core import errors
from servicebroker.flows import OperationKind
from servicebroker.translator import ErrorTranslator


@pytest.fixture
def translator() -> ErrorTranslator:
    return ErrorTranslator()


@pytest.mark.parametrize(
    ("error", "status_code", "code"),
    [
        (errors.ServiceDefinitionDoesNotExistError("svc"), 422, "ServiceDefinitionDoesNotExist"),
        (errors.ServiceDefinitionPlanDoesNotExistError("plan"), 422, "PlanDoesNotExist"),
        (errors.ServiceInstanceDoesNotExistError("i"), 422, "ServiceInstanceDoesNotExist"),
        (errors.ServiceInstanceExistsError("i", "svc"), 409, "ServiceInstanceExists"),
        (errors.ServiceInstanceUpdateNotSupportedError("no"), 422, "ServiceInstanceUpdateNotSupported"),
        (errors.ServiceInstanceBindingExistsError("i", "b"), 409, "ServiceInstanceBindingExists"),
        (errors.ServiceInstanceBindingDoesNotExistError("b"), 422, "ServiceInstanceBindingDoesNotExist"),
        (errors.ServiceBrokerBindingRequiresAppError(), 422, "RequiresApp"),
        (errors.ServiceBrokerAsyncRequiredError(), 422, "AsyncRequired"),
        (errors.ServiceBrokerConcurrencyError(), 422, "ConcurrencyError"),
        (errors.ServiceBrokerMaintenanceInfoConflictError(), 422, "MaintenanceInfoConflict"),
        (errors.ServiceBrokerOperationNotSupportedError("no"), 422, "OperationNotSupported"),
        (errors.ServiceBrokerCreateOperationInProgressError("t"), 202, "OperationInProgress"),
        (errors.ServiceBrokerUpdateOperationInProgressError("t"), 202, "OperationInProgress"),
        (errors.ServiceBrokerDeleteOperationInProgressError("t"), 202, "OperationInProgress"),
        (errors.ServiceBrokerInvalidParametersError("bad"), 400, "InvalidParameters"),
        (errors.ServiceBrokerInvalidOriginatingIdentityError("bad"), 400, "InvalidOriginatingIdentity"),
        (errors.ServiceBrokerApiVersionError("2.16", "2.12"), 412, "ApiVersionNotSupported"),
        (errors.ServiceBrokerUnavailableError("maintenance"), 503, "ServiceBrokerUnavailable"),
        (errors.ServiceBrokerError("boom"), 500, "InternalServerError"),
    ],
)
def test_error_taxonomy(translator: ErrorTranslator, error, status_code: int, code: str) -> None:
    translated = translator.translate(error)

    assert translated.status_code == status_code
    assert translated.body["error"] == code
    assert translated.body["description"] == error.message


def test_unknown_service_definition_body(translator: ErrorTranslator) -> None:
    translated = translator.translate(errors.ServiceDefinitionDoesNotExistError("missing"))

    assert translated.status_code == 422
    assert translated.body == {
        "error": "ServiceDefinitionDoesNotExist",
        "description": "Service definition does not exist: id=missing",
    }


def test_missing_instance_depends_on_operation(translator: ErrorTranslator) -> None:
    error = errors.ServiceInstanceDoesNotExistError("i")

    assert translator.translate(error, OperationKind.GET_INSTANCE).status_code == 404
    assert translator.translate(error, OperationKind.DELETE_INSTANCE).status_code == 410
    assert translator.translate(error, OperationKind.UPDATE_INSTANCE).status_code == 422


def test_missing_binding_depends_on_operation(translator: ErrorTranslator) -> None:
    error = errors.ServiceInstanceBindingDoesNotExistError("b")

    assert translator.translate(error, OperationKind.GET_BINDING).status_code == 404
    assert translator.translate(error, OperationKind.DELETE_BINDING).status_code == 410
    assert translator.translate(error, OperationKind.CREATE_BINDING).status_code == 422


@pytest.mark.parametrize(
    "kind",
    [OperationKind.GET_BINDING, OperationKind.DELETE_BINDING, OperationKind.GET_LAST_BINDING_OPERATION],
)
def test_missing_parent_instance_on_binding_route_is_422(translator: ErrorTranslator, kind) -> None:
    translated = translator.translate(errors.ServiceInstanceDoesNotExistError("i"), kind)

    assert translated.status_code == 422
    assert translated.body["error"] == "ServiceInstanceDoesNotExist"


def test_operation_in_progress_carries_operation(translator: ErrorTranslator) -> None:
    translated = translator.translate(
        errors.ServiceBrokerCreateOperationInProgressError("task-7"), OperationKind.CREATE_INSTANCE
    )

    assert translated.status_code == 202
    assert translated.body["operation"] == "task-7"
    assert translated.body["description"].endswith("operation=task-7")


def test_operation_in_progress_on_get_is_not_found(translator: ErrorTranslator) -> None:
    translated = translator.translate(errors.ServiceBrokerOperationInProgressError(), "get_instance")

    assert translated.status_code == 404
    assert "operation" not in translated.body


def test_unknown_exceptions_map_to_500(translator: ErrorTranslator) -> None:
    translated = translator.translate(RuntimeError("database unreachable"))

    assert translated.status_code == 500
    assert translated.body == {"error": "InternalServerError", "description": "database unreachable"}


def test_empty_messages_get_fallback_description(translator: ErrorTranslator) -> None:
    assert translator.translate(RuntimeError()).body["description"] == "Internal server error"
    assert translator.translate(errors.ServiceBrokerError("")).body["description"] == "Internal server error"


def test_custom_error_code_and_instructions(translator: ErrorTranslator) -> None:
    error = errors.ServiceBrokerConcurrencyError(
        error_code="CustomConcurrency", instructions="retry after the running update"
    )

    translated = translator.translate(error)

    assert translated.status_code == 422
    assert translated.body["error"] == "CustomConcurrency"
    assert translated.body["instructions"] == "retry after the running update"


def test_unavailable_message_is_prefixed() -> None:
    error = errors.ServiceBrokerUnavailableError("maintenance window")

    assert error.message == "Service broker is temporarily unavailable: maintenance window"


def test_unknown_operation_kind_is_ignored(translator: ErrorTranslator) -> None:
    translated = translator.translate(errors.ServiceInstanceDoesNotExistError("i"), "not-a-kind")

    assert translated.status_code == 422


def test_subclasses_inherit_status(translator: ErrorTranslator) -> None:
    class QuotaExceededError(errors.ServiceBrokerUnavailableError):
        pass

    assert translator.translate(QuotaExceededError()).status_code == 503

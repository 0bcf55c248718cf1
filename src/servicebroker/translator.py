"""Mapping of exceptions onto the OSBAPI error contract."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .core.errors import (
    INTERNAL_SERVER_ERROR,
    ServiceBrokerApiVersionError,
    ServiceBrokerAsyncRequiredError,
    ServiceBrokerBindingRequiresAppError,
    ServiceBrokerConcurrencyError,
    ServiceBrokerError,
    ServiceBrokerInvalidOriginatingIdentityError,
    ServiceBrokerInvalidParametersError,
    ServiceBrokerMaintenanceInfoConflictError,
    ServiceBrokerOperationInProgressError,
    ServiceBrokerOperationNotSupportedError,
    ServiceBrokerUnavailableError,
    ServiceDefinitionDoesNotExistError,
    ServiceDefinitionPlanDoesNotExistError,
    ServiceInstanceBindingDoesNotExistError,
    ServiceInstanceBindingExistsError,
    ServiceInstanceDoesNotExistError,
    ServiceInstanceExistsError,
    ServiceInstanceUpdateNotSupportedError,
    error_response,
)
from .flows import OperationKind

_STATUS_CODES: dict[type[ServiceBrokerError], int] = {
    ServiceDefinitionDoesNotExistError: 422,
    ServiceDefinitionPlanDoesNotExistError: 422,
    ServiceInstanceDoesNotExistError: 422,
    ServiceInstanceExistsError: 409,
    ServiceInstanceUpdateNotSupportedError: 422,
    ServiceInstanceBindingExistsError: 409,
    ServiceInstanceBindingDoesNotExistError: 422,
    ServiceBrokerBindingRequiresAppError: 422,
    ServiceBrokerAsyncRequiredError: 422,
    ServiceBrokerConcurrencyError: 422,
    ServiceBrokerMaintenanceInfoConflictError: 422,
    ServiceBrokerOperationNotSupportedError: 422,
    ServiceBrokerOperationInProgressError: 202,
    ServiceBrokerInvalidParametersError: 400,
    ServiceBrokerInvalidOriginatingIdentityError: 400,
    ServiceBrokerApiVersionError: 412,
    ServiceBrokerUnavailableError: 503,
}


@dataclass(frozen=True)
class TranslatedError:
    status_code: int
    body: dict[str, Any] = field(default_factory=dict)


class ErrorTranslator:
    """Translate exceptions into a status code and OSBAPI error body.

    The operation kind refines a few statuses: a missing instance on an instance
    operation, or a missing binding on a binding operation, is 404 on get and 410
    on delete. An operation still in progress is 404 on get. :meth:`translate`
    never raises.
    """

    def translate(self, error: BaseException, kind: OperationKind | str | None = None) -> TranslatedError:
        operation_kind = self._kind(kind)
        status_code = self.status_code(error, operation_kind)
        body = error_response(error) if isinstance(error, Exception) else self._fallback_body()
        if isinstance(error, ServiceBrokerOperationInProgressError) and error.operation:
            body["operation"] = error.operation
        if not body.get("description"):
            body["description"] = INTERNAL_SERVER_ERROR
        return TranslatedError(status_code=status_code, body=body)

    def status_code(self, error: BaseException, kind: OperationKind | None = None) -> int:
        if kind is not None:
            if self._is_missing_resource(error, kind):
                if kind.is_get:
                    return 404
                if kind.is_delete:
                    return 410
            if isinstance(error, ServiceBrokerOperationInProgressError) and kind.is_get:
                return 404

        for cls in type(error).__mro__:
            status = _STATUS_CODES.get(cls)
            if status is not None:
                return status
        return 500

    @staticmethod
    def _is_missing_resource(error: BaseException, kind: OperationKind) -> bool:
        # A missing parent instance on a binding route stays 422.
        if kind.is_binding:
            return isinstance(error, ServiceInstanceBindingDoesNotExistError)
        return isinstance(error, ServiceInstanceDoesNotExistError)

    @staticmethod
    def _kind(kind: OperationKind | str | None) -> OperationKind | None:
        if kind is None or isinstance(kind, OperationKind):
            return kind
        try:
            return OperationKind(kind)
        except ValueError:
            return None

    @staticmethod
    def _fallback_body() -> dict[str, Any]:
        return {"error": ServiceBrokerError.default_error_code, "description": INTERNAL_SERVER_ERROR}


__all__ = ["ErrorTranslator", "TranslatedError"]

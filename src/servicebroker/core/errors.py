"""Custom exception hierarchy for the service broker."""

from __future__ import annotations

from typing import Any, Mapping

ErrorDetails = Mapping[str, Any] | None

INTERNAL_SERVER_ERROR = "Internal server error"


class ApplicationError(Exception):
    """Base exception carrying optional structured details."""

    def __init__(self, message: str, *, details: ErrorDetails = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = dict(details or {})

    def __str__(self) -> str:  # pragma: no cover - mirrors Exception.__str__
        return self.message


class CatalogDefinitionDoesNotExistError(ApplicationError):
    """Raised at startup when no catalog or catalog service was configured."""

    def __init__(self) -> None:
        super().__init__(
            "A 'service broker catalog' is required for service broker applications. "
            "Provide a Catalog, a CatalogService or set OSB_CATALOG_FILE."
        )


class FlowRegistryFrozenError(ApplicationError):
    """Raised when a flow is registered after request processing has started."""


class ServiceBrokerError(ApplicationError):
    """Root of every failure that is rendered to the platform.

    ``error_code`` is the machine readable code placed in the ``error`` field of
    the response body; subclasses provide a default.
    """

    default_error_code: str = "InternalServerError"

    def __init__(
        self,
        message: str,
        *,
        error_code: str | None = None,
        instructions: str | None = None,
        operation: str | None = None,
        details: ErrorDetails = None,
    ) -> None:
        super().__init__(message, details=details)
        self.error_code = error_code or self.default_error_code
        self.instructions = instructions
        self.operation = operation


class ServiceDefinitionDoesNotExistError(ServiceBrokerError):
    default_error_code = "ServiceDefinitionDoesNotExist"

    def __init__(self, service_definition_id: str | None, **kwargs: Any) -> None:
        super().__init__(f"Service definition does not exist: id={service_definition_id}", **kwargs)
        self.service_definition_id = service_definition_id


class ServiceDefinitionPlanDoesNotExistError(ServiceBrokerError):
    default_error_code = "PlanDoesNotExist"

    def __init__(self, plan_id: str | None, **kwargs: Any) -> None:
        super().__init__(f"Service definition plan does not exist: id={plan_id}", **kwargs)
        self.plan_id = plan_id


class ServiceInstanceDoesNotExistError(ServiceBrokerError):
    """Unknown service instance; rendered as 404 on get and 410 on delete."""

    default_error_code = "ServiceInstanceDoesNotExist"

    def __init__(self, service_instance_id: str | None, **kwargs: Any) -> None:
        super().__init__(f"Service instance does not exist: id={service_instance_id}", **kwargs)
        self.service_instance_id = service_instance_id


class ServiceInstanceExistsError(ServiceBrokerError):
    default_error_code = "ServiceInstanceExists"

    def __init__(self, service_instance_id: str | None, service_definition_id: str | None, **kwargs: Any) -> None:
        super().__init__(
            "Service instance with the given ID already exists: "
            f"serviceInstanceId={service_instance_id}, serviceDefinitionId={service_definition_id}",
            **kwargs,
        )


class ServiceInstanceUpdateNotSupportedError(ServiceBrokerError):
    default_error_code = "ServiceInstanceUpdateNotSupported"

    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(f"Service instance update not supported: {message}", **kwargs)


class ServiceInstanceBindingExistsError(ServiceBrokerError):
    default_error_code = "ServiceInstanceBindingExists"

    def __init__(self, service_instance_id: str | None, binding_id: str | None, **kwargs: Any) -> None:
        super().__init__(
            "Service instance binding with the given ID already exists: "
            f"serviceInstanceId={service_instance_id}, bindingId={binding_id}",
            **kwargs,
        )


class ServiceInstanceBindingDoesNotExistError(ServiceBrokerError):
    """Unknown binding; rendered as 404 on get and 410 on delete."""

    default_error_code = "ServiceInstanceBindingDoesNotExist"

    def __init__(self, binding_id: str | None, **kwargs: Any) -> None:
        super().__init__(f"Service binding does not exist: id={binding_id}", **kwargs)
        self.binding_id = binding_id


class ServiceBrokerBindingRequiresAppError(ServiceBrokerError):
    default_error_code = "RequiresApp"

    def __init__(
        self,
        message: str = "This service supports generation of credentials through binding an application only.",
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)


class ServiceBrokerAsyncRequiredError(ServiceBrokerError):
    default_error_code = "AsyncRequired"

    def __init__(
        self,
        message: str = "This service plan requires client support for asynchronous service operations.",
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)


class ServiceBrokerConcurrencyError(ServiceBrokerError):
    default_error_code = "ConcurrencyError"

    def __init__(
        self, message: str = "Another operation for this service instance is in progress.", **kwargs: Any
    ) -> None:
        super().__init__(message, **kwargs)


class ServiceBrokerMaintenanceInfoConflictError(ServiceBrokerError):
    default_error_code = "MaintenanceInfoConflict"

    def __init__(
        self,
        message: str = "The maintenance information for the requested Service Plan has changed.",
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)


class ServiceBrokerOperationNotSupportedError(ServiceBrokerError):
    """The broker does not implement the requested operation."""

    default_error_code = "OperationNotSupported"


class ServiceBrokerOperationInProgressError(ServiceBrokerError):
    """A duplicate request arrived while the identical async operation is running."""

    default_error_code = "OperationInProgress"

    def __init__(self, operation: str | None = None, **kwargs: Any) -> None:
        message = "Service broker operation is in progress for the requested service instance or binding"
        if operation:
            message = f"{message}: operation={operation}"
        super().__init__(message, operation=operation, **kwargs)


class ServiceBrokerCreateOperationInProgressError(ServiceBrokerOperationInProgressError):
    """Create of the same instance or binding is already running."""


class ServiceBrokerUpdateOperationInProgressError(ServiceBrokerOperationInProgressError):
    """Update of the same instance is already running."""


class ServiceBrokerDeleteOperationInProgressError(ServiceBrokerOperationInProgressError):
    """Delete of the same instance or binding is already running."""


class ServiceBrokerInvalidParametersError(ServiceBrokerError):
    default_error_code = "InvalidParameters"

    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(f"Service broker parameters are invalid: {message}", **kwargs)


class ServiceBrokerInvalidOriginatingIdentityError(ServiceBrokerError):
    default_error_code = "InvalidOriginatingIdentity"

    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(f"Service broker originating identity is invalid: {message}", **kwargs)


class ServiceBrokerApiVersionError(ServiceBrokerError):
    default_error_code = "ApiVersionNotSupported"

    def __init__(self, expected_version: str | None, provided_version: str | None, **kwargs: Any) -> None:
        super().__init__(
            "The provided service broker API version is not supported: "
            f"expectedVersion={expected_version}, providedVersion={provided_version}",
            **kwargs,
        )


class ServiceBrokerUnavailableError(ServiceBrokerError):
    default_error_code = "ServiceBrokerUnavailable"
    message_prefix = "Service broker is temporarily unavailable"

    def __init__(self, message: str | None = None, **kwargs: Any) -> None:
        text = f"{self.message_prefix}: {message}" if message else self.message_prefix
        super().__init__(text, **kwargs)


def error_response(error: Exception) -> dict[str, Any]:
    """Normalize errors into the OSBAPI error body."""

    if isinstance(error, ServiceBrokerError):
        payload: dict[str, Any] = {
            "error": error.error_code,
            "description": error.message or INTERNAL_SERVER_ERROR,
        }
        if error.instructions:
            payload["instructions"] = error.instructions
        return payload

    return {
        "error": ServiceBrokerError.default_error_code,
        "description": str(error) or INTERNAL_SERVER_ERROR,
    }


__all__ = [
    "ApplicationError",
    "CatalogDefinitionDoesNotExistError",
    "FlowRegistryFrozenError",
    "INTERNAL_SERVER_ERROR",
    "ServiceBrokerApiVersionError",
    "ServiceBrokerAsyncRequiredError",
    "ServiceBrokerBindingRequiresAppError",
    "ServiceBrokerConcurrencyError",
    "ServiceBrokerCreateOperationInProgressError",
    "ServiceBrokerDeleteOperationInProgressError",
    "ServiceBrokerError",
    "ServiceBrokerInvalidOriginatingIdentityError",
    "ServiceBrokerInvalidParametersError",
    "ServiceBrokerMaintenanceInfoConflictError",
    "ServiceBrokerOperationInProgressError",
    "ServiceBrokerOperationNotSupportedError",
    "ServiceBrokerUnavailableError",
    "ServiceBrokerUpdateOperationInProgressError",
    "ServiceDefinitionDoesNotExistError",
    "ServiceDefinitionPlanDoesNotExistError",
    "ServiceInstanceBindingDoesNotExistError",
    "ServiceInstanceBindingExistsError",
    "ServiceInstanceDoesNotExistError",
    "ServiceInstanceExistsError",
    "ServiceInstanceUpdateNotSupportedError",
    "error_response",
]

"""Capability interfaces implemented by service brokers.

A broker subclasses :class:`ServiceInstanceService` (and, when its services
are bindable, :class:`ServiceInstanceBindingService`) and overrides the
operations it supports. Methods may be plain functions or coroutines.
"""

from __future__ import annotations

from typing import Any

from .core.errors import (
    ServiceBrokerOperationNotSupportedError,
    ServiceInstanceUpdateNotSupportedError,
)
from .model.requests import (
    CreateServiceInstanceBindingRequest,
    CreateServiceInstanceRequest,
    DeleteServiceInstanceBindingRequest,
    DeleteServiceInstanceRequest,
    GetLastServiceBindingOperationRequest,
    GetLastServiceOperationRequest,
    GetServiceInstanceBindingRequest,
    GetServiceInstanceRequest,
    UpdateServiceInstanceRequest,
)
from .model.responses import (
    CreateServiceInstanceBindingResponse,
    CreateServiceInstanceResponse,
    DeleteServiceInstanceBindingResponse,
    DeleteServiceInstanceResponse,
    GetLastServiceBindingOperationResponse,
    GetLastServiceOperationResponse,
    GetServiceInstanceBindingResponse,
    GetServiceInstanceResponse,
    UpdateServiceInstanceResponse,
)


def _not_implemented(operation: str) -> ServiceBrokerOperationNotSupportedError:
    return ServiceBrokerOperationNotSupportedError(
        f"This service broker does not implement '{operation}'. "
        "The service broker must override it to support this operation."
    )


class ServiceInstanceService:
    """Provisioning operations for service instances."""

    async def create_service_instance(
        self, request: CreateServiceInstanceRequest
    ) -> CreateServiceInstanceResponse:
        raise _not_implemented("create_service_instance")

    async def get_service_instance(self, request: GetServiceInstanceRequest) -> GetServiceInstanceResponse:
        raise ServiceBrokerOperationNotSupportedError(
            "This service broker does not support retrieving service instances. "
            "The service broker should set 'instances_retrievable:false' in the service catalog, "
            "or provide an implementation of the fetch instance API."
        )

    async def get_last_operation(
        self, request: GetLastServiceOperationRequest
    ) -> GetLastServiceOperationResponse:
        raise ServiceBrokerOperationNotSupportedError(
            "This service broker does not support getting the status of an asynchronous operation. "
            "If the service broker returns '202 Accepted' in response to a provision, update, or "
            "deprovision request, it must also provide an implementation of the get last operation API."
        )

    async def delete_service_instance(
        self, request: DeleteServiceInstanceRequest
    ) -> DeleteServiceInstanceResponse:
        raise _not_implemented("delete_service_instance")

    async def update_service_instance(
        self, request: UpdateServiceInstanceRequest
    ) -> UpdateServiceInstanceResponse:
        raise ServiceInstanceUpdateNotSupportedError(
            "This service broker does not support updating service instances. "
            "The service broker should set 'plan_updateable:false' in the service catalog, "
            "or provide an implementation of the update instance API."
        )


class ServiceInstanceBindingService:
    """Binding operations for service instances."""

    async def create_service_instance_binding(
        self, request: CreateServiceInstanceBindingRequest
    ) -> CreateServiceInstanceBindingResponse:
        raise _not_implemented("create_service_instance_binding")

    async def get_service_instance_binding(
        self, request: GetServiceInstanceBindingRequest
    ) -> GetServiceInstanceBindingResponse:
        raise ServiceBrokerOperationNotSupportedError(
            "This service broker does not support retrieving service bindings. "
            "The service broker should set 'bindings_retrievable:false' in the service catalog, "
            "or provide an implementation of the fetch binding API."
        )

    async def get_last_operation(
        self, request: GetLastServiceBindingOperationRequest
    ) -> GetLastServiceBindingOperationResponse:
        raise ServiceBrokerOperationNotSupportedError(
            "This service broker does not support getting the status of an asynchronous operation. "
            "If the service broker returns '202 Accepted' in response to a bind or unbind request, "
            "it must also provide an implementation of the get last binding operation API."
        )

    async def delete_service_instance_binding(
        self, request: DeleteServiceInstanceBindingRequest
    ) -> DeleteServiceInstanceBindingResponse:
        raise _not_implemented("delete_service_instance_binding")


NON_BINDABLE_MESSAGE = (
    "This service broker does not support bindable services. "
    "The service broker should set 'bindable: false' in the service catalog for all service offerings, "
    "or provide an implementation of the binding API."
)


class NonBindableServiceInstanceBindingService(ServiceInstanceBindingService):
    """Default binding service of brokers whose offerings are not bindable."""

    def _unsupported(self) -> Any:
        raise ServiceBrokerOperationNotSupportedError(NON_BINDABLE_MESSAGE)

    async def create_service_instance_binding(
        self, request: CreateServiceInstanceBindingRequest
    ) -> CreateServiceInstanceBindingResponse:
        return self._unsupported()

    async def get_service_instance_binding(
        self, request: GetServiceInstanceBindingRequest
    ) -> GetServiceInstanceBindingResponse:
        return self._unsupported()

    async def get_last_operation(
        self, request: GetLastServiceBindingOperationRequest
    ) -> GetLastServiceBindingOperationResponse:
        return self._unsupported()

    async def delete_service_instance_binding(
        self, request: DeleteServiceInstanceBindingRequest
    ) -> DeleteServiceInstanceBindingResponse:
        return self._unsupported()


__all__ = [
    "NON_BINDABLE_MESSAGE",
    "NonBindableServiceInstanceBindingService",
    "ServiceInstanceBindingService",
    "ServiceInstanceService",
]

"""Registries of the event flows run around broker operations."""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable

from .core.errors import FlowRegistryFrozenError

Flow = Callable[..., Any]


class OperationKind(str, Enum):
    """Broker operations the dispatcher knows how to route."""

    CREATE_INSTANCE = "create_instance"
    UPDATE_INSTANCE = "update_instance"
    DELETE_INSTANCE = "delete_instance"
    GET_INSTANCE = "get_instance"
    GET_LAST_INSTANCE_OPERATION = "get_last_instance_operation"
    CREATE_BINDING = "create_binding"
    DELETE_BINDING = "delete_binding"
    GET_BINDING = "get_binding"
    GET_LAST_BINDING_OPERATION = "get_last_binding_operation"

    @property
    def is_get(self) -> bool:
        return self in (OperationKind.GET_INSTANCE, OperationKind.GET_BINDING)

    @property
    def is_delete(self) -> bool:
        return self in (OperationKind.DELETE_INSTANCE, OperationKind.DELETE_BINDING)

    @property
    def is_binding(self) -> bool:
        return "binding" in self.value


FLOW_OPERATIONS: frozenset[OperationKind] = frozenset(
    {
        OperationKind.CREATE_INSTANCE,
        OperationKind.UPDATE_INSTANCE,
        OperationKind.DELETE_INSTANCE,
        OperationKind.GET_LAST_INSTANCE_OPERATION,
        OperationKind.CREATE_BINDING,
        OperationKind.DELETE_BINDING,
        OperationKind.GET_LAST_BINDING_OPERATION,
    }
)


class FlowPhase(str, Enum):
    """Where in the operation lifecycle a flow runs.

    Initialization flows receive ``(request)``, error flows
    ``(request, error)`` and completion flows ``(request, response)``.
    """

    INITIALIZATION = "initialize"
    ERROR = "error"
    COMPLETION = "complete"


class EventFlowRegistries:
    """Ordered flow lists per operation kind and phase.

    Registration happens while the application is wired together; :meth:`freeze`
    is called before the first request so the lists are read-only while requests
    are processed.
    """

    def __init__(self) -> None:
        self._flows: dict[tuple[OperationKind, FlowPhase], list[Flow]] = {
            (kind, phase): [] for kind in FLOW_OPERATIONS for phase in FlowPhase
        }
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        self._frozen = True

    def register(self, kind: OperationKind | str, flow: Any, phase: FlowPhase | str | None = None) -> None:
        """Register ``flow`` for ``kind``.

        Without ``phase`` the flow is treated as an object and each of its
        ``initialize``, ``error`` and ``complete`` methods is registered for the
        matching phase.
        """

        kind = self._flow_kind(kind)
        if phase is not None:
            self._append(kind, FlowPhase(phase), flow)
            return

        registered = False
        for candidate in FlowPhase:
            method = getattr(flow, candidate.value, None)
            if callable(method):
                self._append(kind, candidate, method)
                registered = True
        if not registered:
            raise ValueError(
                f"Flow {flow!r} defines none of initialize(), error() or complete(); pass a phase explicitly"
            )

    def add_initialization_flow(self, kind: OperationKind | str, flow: Flow) -> None:
        self.register(kind, flow, FlowPhase.INITIALIZATION)

    def add_error_flow(self, kind: OperationKind | str, flow: Flow) -> None:
        self.register(kind, flow, FlowPhase.ERROR)

    def add_completion_flow(self, kind: OperationKind | str, flow: Flow) -> None:
        self.register(kind, flow, FlowPhase.COMPLETION)

    def initialization_flows(self, kind: OperationKind | str) -> tuple[Flow, ...]:
        return self._get(kind, FlowPhase.INITIALIZATION)

    def error_flows(self, kind: OperationKind | str) -> tuple[Flow, ...]:
        return self._get(kind, FlowPhase.ERROR)

    def completion_flows(self, kind: OperationKind | str) -> tuple[Flow, ...]:
        return self._get(kind, FlowPhase.COMPLETION)

    def _get(self, kind: OperationKind | str, phase: FlowPhase) -> tuple[Flow, ...]:
        return tuple(self._flows.get((OperationKind(kind), phase), ()))

    def _append(self, kind: OperationKind, phase: FlowPhase, flow: Flow) -> None:
        if self._frozen:
            raise FlowRegistryFrozenError(
                f"Cannot register {phase.value} flow for '{kind.value}': registries are frozen"
            )
        if not callable(flow):
            raise TypeError(f"Flow for '{kind.value}' must be callable, got {type(flow).__name__}")
        self._flows[(kind, phase)].append(flow)

    @staticmethod
    def _flow_kind(kind: OperationKind | str) -> OperationKind:
        kind = OperationKind(kind)
        if kind not in FLOW_OPERATIONS:
            raise ValueError(f"Operation '{kind.value}' does not support event flows")
        return kind


__all__ = ["FLOW_OPERATIONS", "EventFlowRegistries", "Flow", "FlowPhase", "OperationKind"]

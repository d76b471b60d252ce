"""Ports for the cloud services the reconciliation engine talks to."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterable

    from apigw_timeout.domain.types import (
        GatewaySummary,
        MethodDetail,
        ResourceNode,
        StackOutput,
    )


class RemoteCallError(RuntimeError):
    """Raised by adapters when a remote call fails."""

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code


class StackNotFoundError(RemoteCallError):
    """Raised when the named deployment stack does not exist."""


class RemoteTimeoutError(RemoteCallError):
    """Raised when a remote call does not complete before its deadline."""

    def __init__(self, message: str = "timeout", *, code: str | None = None) -> None:
        super().__init__(message, code=code)


@runtime_checkable
class StackDescriber(Protocol):
    def describe_stack(self, name: str) -> Iterable[StackOutput]: ...


@runtime_checkable
class GatewayLister(Protocol):
    def list_gateways(self) -> Iterable[GatewaySummary]: ...


@runtime_checkable
class ResourceTreeReader(Protocol):
    def get_resource_tree(self, gateway_id: str) -> Iterable[ResourceNode]: ...

    def get_method_detail(
        self, gateway_id: str, resource_id: str, http_method: str
    ) -> MethodDetail: ...


@runtime_checkable
class IntegrationWriter(Protocol):
    def patch_integration_timeout(
        self, gateway_id: str, resource_id: str, http_method: str, millis: int
    ) -> None: ...


@runtime_checkable
class DeploymentCreator(Protocol):
    def create_deployment(self, gateway_id: str, stage: str, description: str) -> None: ...


class GatewayService(
    GatewayLister,
    ResourceTreeReader,
    IntegrationWriter,
    DeploymentCreator,
    Protocol,
):
    """Everything the engine needs from the API gateway service."""

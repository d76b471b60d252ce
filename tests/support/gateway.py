"""In-memory fakes for the gateway and stack ports."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field

from apigw_timeout.domain.ports import RemoteCallError, StackNotFoundError
from apigw_timeout.domain.types import (
    GatewaySummary,
    MethodDetail,
    ResourceNode,
    StackOutput,
)


@dataclass
class FakeMethod:
    integration_type: str | None = "AWS_PROXY"

    @property
    def has_integration(self) -> bool:
        return self.integration_type is not None


@dataclass
class FakeResource:
    id: str
    path: str
    methods: dict[str, FakeMethod] = field(default_factory=dict)


def make_resource(
    resource_id: str,
    path: str,
    *methods: str,
    integration_type: str | None = "AWS_PROXY",
) -> FakeResource:
    return FakeResource(
        id=resource_id,
        path=path,
        methods={method: FakeMethod(integration_type) for method in methods},
    )


class FakeGatewayService:
    """Records calls and serves a fixed resource tree per REST API."""

    def __init__(
        self,
        *,
        gateways: list[GatewaySummary] | None = None,
        resources: dict[str, list[FakeResource]] | None = None,
        patch_errors: dict[tuple[str, str], RemoteCallError] | None = None,
        deployment_error: RemoteCallError | None = None,
        list_error: RemoteCallError | None = None,
    ) -> None:
        self.gateways = gateways or []
        self.resources = resources or {}
        self.patch_errors = patch_errors or {}
        self.deployment_error = deployment_error
        self.list_error = list_error
        self.calls: list[tuple[object, ...]] = []
        self.patches: list[tuple[str, str, str, int]] = []
        self.deployments: list[tuple[str, str, str]] = []
        self._lock = threading.Lock()

    def _record(self, *call: object) -> None:
        with self._lock:
            self.calls.append(call)

    def list_gateways(self) -> list[GatewaySummary]:
        self._record("list_gateways")
        if self.list_error is not None:
            raise self.list_error
        return list(self.gateways)

    def get_resource_tree(self, gateway_id: str) -> list[ResourceNode]:
        self._record("get_resource_tree", gateway_id)
        return [
            ResourceNode(id=resource.id, path=resource.path, methods=frozenset(resource.methods))
            for resource in self.resources.get(gateway_id, [])
        ]

    def get_method_detail(
        self, gateway_id: str, resource_id: str, http_method: str
    ) -> MethodDetail:
        self._record("get_method_detail", gateway_id, resource_id, http_method)
        for resource in self.resources.get(gateway_id, []):
            if resource.id == resource_id:
                method = resource.methods[http_method]
                return MethodDetail(
                    has_integration=method.has_integration,
                    integration_type=method.integration_type,
                )
        raise RemoteCallError(f"Invalid Resource identifier specified: {resource_id}")

    def patch_integration_timeout(
        self, gateway_id: str, resource_id: str, http_method: str, millis: int
    ) -> None:
        self._record("patch_integration_timeout", gateway_id, resource_id, http_method, millis)
        error = self.patch_errors.get((resource_id, http_method))
        if error is not None:
            raise error
        with self._lock:
            self.patches.append((gateway_id, resource_id, http_method, millis))

    def create_deployment(self, gateway_id: str, stage: str, description: str) -> None:
        self._record("create_deployment", gateway_id, stage, description)
        if self.deployment_error is not None:
            raise self.deployment_error
        self.deployments.append((gateway_id, stage, description))


class FakeStackDescriber:
    def __init__(
        self,
        outputs: dict[str, list[StackOutput]] | None = None,
        *,
        error: RemoteCallError | None = None,
    ) -> None:
        self.outputs = outputs or {}
        self.error = error
        self.calls: list[str] = []

    def describe_stack(self, name: str) -> list[StackOutput]:
        self.calls.append(name)
        if self.error is not None:
            raise self.error
        if name not in self.outputs:
            raise StackNotFoundError(f"Stack with id {name} does not exist")
        return self.outputs[name]

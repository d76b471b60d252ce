"""API Gateway (REST API, v1) adapter backed by boto3."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any

from .client import create_client, translate_errors
from .schema import MethodPayload, ResourcesPage, RestApisPage
from .translator import translate_method, translate_resource, translate_rest_api

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from apigw_timeout.config.aws import AwsConfig
    from apigw_timeout.domain.types import GatewaySummary, MethodDetail, ResourceNode

log = getLogger(__name__)

TIMEOUT_PATCH_PATH = "/timeoutInMillis"
_PAGE_SIZE = 500


@dataclass(slots=True)
class ApiGatewayAdapter:
    """Implements :class:`~apigw_timeout.domain.ports.GatewayService`."""

    config: AwsConfig
    client_factory: Callable[[str, AwsConfig], Any] = field(default=create_client)
    _client: Any = field(default=None, init=False, repr=False)

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = self.client_factory("apigateway", self.config)
        return self._client

    def list_gateways(self) -> Iterator[GatewaySummary]:
        with translate_errors("apigateway:GetRestApis"):
            paginator = self.client.get_paginator("get_rest_apis")
            pages = [
                RestApisPage.model_validate(page)
                for page in paginator.paginate(PaginationConfig={"PageSize": _PAGE_SIZE})
            ]
        for page in pages:
            for item in page.items:
                yield translate_rest_api(item)

    def get_resource_tree(self, gateway_id: str) -> Iterator[ResourceNode]:
        with translate_errors("apigateway:GetResources"):
            paginator = self.client.get_paginator("get_resources")
            pages = [
                ResourcesPage.model_validate(page)
                for page in paginator.paginate(
                    restApiId=gateway_id,
                    PaginationConfig={"PageSize": _PAGE_SIZE},
                )
            ]
        for page in pages:
            for item in page.items:
                yield translate_resource(item)

    def get_method_detail(
        self, gateway_id: str, resource_id: str, http_method: str
    ) -> MethodDetail:
        with translate_errors("apigateway:GetMethod"):
            response = self.client.get_method(
                restApiId=gateway_id,
                resourceId=resource_id,
                httpMethod=http_method,
            )
        return translate_method(MethodPayload.model_validate(response))

    def patch_integration_timeout(
        self, gateway_id: str, resource_id: str, http_method: str, millis: int
    ) -> None:
        log.debug("Patching %s %s on %s to %s ms", http_method, resource_id, gateway_id, millis)
        with translate_errors("apigateway:UpdateIntegration"):
            self.client.update_integration(
                restApiId=gateway_id,
                resourceId=resource_id,
                httpMethod=http_method,
                patchOperations=[
                    {"op": "replace", "path": TIMEOUT_PATCH_PATH, "value": str(millis)},
                ],
            )

    def create_deployment(self, gateway_id: str, stage: str, description: str) -> None:
        with translate_errors("apigateway:CreateDeployment"):
            response = self.client.create_deployment(
                restApiId=gateway_id,
                stageName=stage,
                description=description,
            )
        log.debug("Created deployment %s", response.get("id"))

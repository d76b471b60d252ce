from __future__ import annotations

from collections.abc import Callable  # noqa: TC003
from typing import Any

import pytest
from botocore.exceptions import ReadTimeoutError
from botocore.stub import Stubber  # noqa: TC002

from apigw_timeout.adapters.aws import ApiGatewayAdapter, build_client_config
from apigw_timeout.config.aws import AwsConfig
from apigw_timeout.domain.ports import RemoteCallError, RemoteTimeoutError
from apigw_timeout.domain.types import GatewaySummary, MethodDetail, ResourceNode

StubbedClient = Callable[[str], tuple[Any, Stubber]]


def _adapter(aws_config: AwsConfig, client: Any) -> ApiGatewayAdapter:
    return ApiGatewayAdapter(aws_config, client_factory=lambda _name, _config: client)


def test_list_gateways_translates_items(
    aws_config: AwsConfig, stubbed_client: StubbedClient
) -> None:
    client, stubber = stubbed_client("apigateway")
    stubber.add_response(
        "get_rest_apis",
        {"items": [{"id": "a1", "name": "prod-orders"}, {"id": "b2", "name": "dev-orders"}]},
    )

    gateways = list(_adapter(aws_config, client).list_gateways())

    assert gateways == [
        GatewaySummary(id="a1", name="prod-orders"),
        GatewaySummary(id="b2", name="dev-orders"),
    ]


def test_get_resource_tree_reads_declared_methods(
    aws_config: AwsConfig, stubbed_client: StubbedClient
) -> None:
    client, stubber = stubbed_client("apigateway")
    stubber.add_response(
        "get_resources",
        {
            "items": [
                {"id": "root", "path": "/"},
                {"id": "users", "path": "/users", "resourceMethods": {"GET": {}, "post": {}}},
            ]
        },
    )

    nodes = list(_adapter(aws_config, client).get_resource_tree("a1"))

    assert nodes == [
        ResourceNode(id="root", path="/", methods=frozenset()),
        ResourceNode(id="users", path="/users", methods=frozenset({"GET", "POST"})),
    ]


def test_get_method_detail_reports_integration(
    aws_config: AwsConfig, stubbed_client: StubbedClient
) -> None:
    client, stubber = stubbed_client("apigateway")
    stubber.add_response(
        "get_method",
        {"httpMethod": "GET", "methodIntegration": {"type": "AWS_PROXY", "timeoutInMillis": 29000}},
        {"restApiId": "a1", "resourceId": "users", "httpMethod": "GET"},
    )
    stubber.add_response(
        "get_method",
        {"httpMethod": "OPTIONS"},
        {"restApiId": "a1", "resourceId": "users", "httpMethod": "OPTIONS"},
    )
    adapter = _adapter(aws_config, client)

    assert adapter.get_method_detail("a1", "users", "GET") == MethodDetail(
        has_integration=True, integration_type="AWS_PROXY"
    )
    assert adapter.get_method_detail("a1", "users", "OPTIONS") == MethodDetail(
        has_integration=False
    )


def test_patch_sends_replace_operation_with_string_value(
    aws_config: AwsConfig, stubbed_client: StubbedClient
) -> None:
    client, stubber = stubbed_client("apigateway")
    stubber.add_response(
        "update_integration",
        {"type": "AWS_PROXY", "timeoutInMillis": 60000},
        {
            "restApiId": "a1",
            "resourceId": "users",
            "httpMethod": "GET",
            "patchOperations": [{"op": "replace", "path": "/timeoutInMillis", "value": "60000"}],
        },
    )

    _adapter(aws_config, client).patch_integration_timeout("a1", "users", "GET", 60000)


def test_patch_rejection_keeps_service_message(
    aws_config: AwsConfig, stubbed_client: StubbedClient
) -> None:
    client, stubber = stubbed_client("apigateway")
    stubber.add_client_error(
        "update_integration",
        service_error_code="BadRequestException",
        service_message="Timeout should be between 50 ms and 29000 ms",
        http_status_code=400,
    )

    with pytest.raises(RemoteCallError) as excinfo:
        _adapter(aws_config, client).patch_integration_timeout("a1", "users", "GET", 60000)

    assert excinfo.value.message == "Timeout should be between 50 ms and 29000 ms"
    assert excinfo.value.code == "BadRequestException"


def test_read_timeout_maps_to_remote_timeout(aws_config: AwsConfig) -> None:
    class _SlowClient:
        def update_integration(self, **_kwargs: object) -> None:
            raise ReadTimeoutError(
                endpoint_url="https://apigateway.eu-west-1.amazonaws.com", error="timed out"
            )

    with pytest.raises(RemoteTimeoutError) as excinfo:
        _adapter(aws_config, _SlowClient()).patch_integration_timeout("a1", "users", "GET", 100)

    assert excinfo.value.message == "timeout"


def test_create_deployment_passes_stage_and_description(
    aws_config: AwsConfig, stubbed_client: StubbedClient
) -> None:
    client, stubber = stubbed_client("apigateway")
    stubber.add_response(
        "create_deployment",
        {"id": "dep1"},
        {"restApiId": "a1", "stageName": "prod", "description": "Update"},
    )

    _adapter(aws_config, client).create_deployment("a1", "prod", "Update")


def test_client_config_disables_retries_and_sets_deadline() -> None:
    config = build_client_config(AwsConfig(region="us-east-1", call_timeout_seconds=3.5))

    assert config.connect_timeout == 3.5
    assert config.read_timeout == 3.5
    assert config.retries == {"total_max_attempts": 1, "mode": "standard"}
    assert config.region_name == "us-east-1"

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import boto3
import pytest
from botocore.stub import Stubber

from apigw_timeout.config.aws import AwsConfig

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


@pytest.fixture
def aws_config() -> AwsConfig:
    return AwsConfig(region="eu-west-1")


def _client(service_name: str) -> Any:
    return boto3.client(
        service_name,
        region_name="eu-west-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )


@pytest.fixture
def stubbed_client() -> Iterator[Callable[[str], tuple[Any, Stubber]]]:
    stubbers: list[Stubber] = []

    def factory(service_name: str) -> tuple[Any, Stubber]:
        client = _client(service_name)
        stubber = Stubber(client)
        stubber.activate()
        stubbers.append(stubber)
        return client, stubber

    yield factory

    for stubber in stubbers:
        stubber.assert_no_pending_responses()
        stubber.deactivate()

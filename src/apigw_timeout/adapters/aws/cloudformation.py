"""CloudFormation adapter used to read the deployed stack's outputs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from apigw_timeout.domain.ports import StackNotFoundError

from .client import create_client, error_code, error_message, translate_errors
from .schema import DescribeStacksResponse
from .translator import translate_stack_outputs

if TYPE_CHECKING:
    from collections.abc import Callable

    from botocore.exceptions import ClientError

    from apigw_timeout.config.aws import AwsConfig
    from apigw_timeout.domain.ports import RemoteCallError
    from apigw_timeout.domain.types import StackOutput


def _classify_missing_stack(exc: ClientError) -> RemoteCallError | None:
    message = error_message(exc)
    if error_code(exc) == "ValidationError" and "does not exist" in message:
        return StackNotFoundError(message, code="ValidationError")
    return None


@dataclass(slots=True)
class CloudFormationAdapter:
    """Implements :class:`~apigw_timeout.domain.ports.StackDescriber`."""

    config: AwsConfig
    client_factory: Callable[[str, AwsConfig], Any] = field(default=create_client)
    _client: Any = field(default=None, init=False, repr=False)

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = self.client_factory("cloudformation", self.config)
        return self._client

    def describe_stack(self, name: str) -> list[StackOutput]:
        with translate_errors("cloudformation:DescribeStacks", classify=_classify_missing_stack):
            response = self.client.describe_stacks(StackName=name)
        stacks = DescribeStacksResponse.model_validate(response).stacks
        if not stacks:
            raise StackNotFoundError(f"Stack with id {name} does not exist")
        return translate_stack_outputs(stacks[0])

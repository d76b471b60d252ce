"""Pydantic models describing the boto3 response payloads we consume."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class AwsBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class RestApiPayload(AwsBaseModel):
    id: str
    name: str = ""


class RestApisPage(AwsBaseModel):
    items: list[RestApiPayload] = Field(default_factory=list)


class ResourcePayload(AwsBaseModel):
    id: str
    path: str = "/"
    resource_methods: dict[str, object] = Field(default_factory=dict, alias="resourceMethods")


class ResourcesPage(AwsBaseModel):
    items: list[ResourcePayload] = Field(default_factory=list)


class IntegrationPayload(AwsBaseModel):
    type: str | None = None
    timeout_in_millis: int | None = Field(default=None, alias="timeoutInMillis")


class MethodPayload(AwsBaseModel):
    http_method: str = Field(alias="httpMethod")
    method_integration: IntegrationPayload | None = Field(default=None, alias="methodIntegration")


class StackOutputPayload(AwsBaseModel):
    output_key: str = Field(alias="OutputKey")
    output_value: str = Field(default="", alias="OutputValue")


class StackPayload(AwsBaseModel):
    stack_name: str = Field(alias="StackName")
    outputs: list[StackOutputPayload] = Field(default_factory=list, alias="Outputs")


class DescribeStacksResponse(AwsBaseModel):
    stacks: list[StackPayload] = Field(default_factory=list, alias="Stacks")

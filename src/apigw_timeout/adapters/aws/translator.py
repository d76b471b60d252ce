"""Translate validated AWS payloads into domain value types."""

from __future__ import annotations

from typing import TYPE_CHECKING

from apigw_timeout.domain.types import (
    GatewaySummary,
    MethodDetail,
    ResourceNode,
    StackOutput,
)

if TYPE_CHECKING:
    from .schema import MethodPayload, ResourcePayload, RestApiPayload, StackPayload


def translate_rest_api(payload: RestApiPayload) -> GatewaySummary:
    return GatewaySummary(id=payload.id, name=payload.name)


def translate_resource(payload: ResourcePayload) -> ResourceNode:
    return ResourceNode(
        id=payload.id,
        path=payload.path,
        methods=frozenset(method.upper() for method in payload.resource_methods),
    )


def translate_method(payload: MethodPayload) -> MethodDetail:
    integration = payload.method_integration
    if integration is None:
        return MethodDetail(has_integration=False)
    return MethodDetail(has_integration=True, integration_type=integration.type)


def translate_stack_outputs(payload: StackPayload) -> list[StackOutput]:
    return [
        StackOutput(key=output.output_key, value=output.output_value)
        for output in payload.outputs
    ]

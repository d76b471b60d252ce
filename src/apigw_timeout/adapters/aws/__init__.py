"""boto3-backed adapters for the reconciliation ports."""

from __future__ import annotations

from .apigateway import ApiGatewayAdapter
from .client import build_client_config, create_client
from .cloudformation import CloudFormationAdapter

__all__ = [
    "ApiGatewayAdapter",
    "CloudFormationAdapter",
    "build_client_config",
    "create_client",
]

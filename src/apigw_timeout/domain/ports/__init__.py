"""Domain port definitions for adapters."""

from __future__ import annotations

from .gateway import (
    DeploymentCreator,
    GatewayLister,
    GatewayService,
    IntegrationWriter,
    RemoteCallError,
    RemoteTimeoutError,
    ResourceTreeReader,
    StackDescriber,
    StackNotFoundError,
)

__all__ = [
    "DeploymentCreator",
    "GatewayLister",
    "GatewayService",
    "IntegrationWriter",
    "RemoteCallError",
    "RemoteTimeoutError",
    "ResourceTreeReader",
    "StackDescriber",
    "StackNotFoundError",
]

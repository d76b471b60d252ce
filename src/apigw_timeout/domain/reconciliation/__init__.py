"""Timeout reconciliation engine."""

from __future__ import annotations

from .deploy import DeploymentTrigger
from .engine import ReconciliationOrchestrator, ReconciliationState, ReconciliationTarget
from .enumerate import IntegrationEnumerator
from .locate import ResourceLocator
from .patch import IntegrationPatcher, parse_account_max
from .resolve import TimeoutPlan, resolve_route_timeouts, resolve_timeout

__all__ = [
    "DeploymentTrigger",
    "IntegrationEnumerator",
    "IntegrationPatcher",
    "ReconciliationOrchestrator",
    "ReconciliationState",
    "ReconciliationTarget",
    "ResourceLocator",
    "TimeoutPlan",
    "parse_account_max",
    "resolve_route_timeouts",
    "resolve_timeout",
]

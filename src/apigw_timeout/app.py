"""Application orchestration entry points."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from apigw_timeout.adapters.aws import ApiGatewayAdapter, CloudFormationAdapter
from apigw_timeout.config import get_aws_config
from apigw_timeout.domain.reconciliation import (
    ReconciliationOrchestrator,
    ReconciliationTarget,
    TimeoutPlan,
)
from apigw_timeout.domain.types import GatewayNameHint

if TYPE_CHECKING:
    from logging import Logger

    from apigw_timeout.config import AwsConfig
    from apigw_timeout.domain.ports import GatewayService, StackDescriber
    from apigw_timeout.domain.types import ReconciliationResult, TimeoutConfig


log = getLogger(__name__)


def default_stack_name(service: str, stage: str) -> str:
    """Return the Serverless Framework's CloudFormation stack name."""

    return f"{service}-{stage}"


def run(
    config: TimeoutConfig,
    stage: str,
    region: str,
    *,
    service: str,
    stack_name: str | None = None,
    max_workers: int = 1,
    aws_config: AwsConfig | None = None,
    stacks: StackDescriber | None = None,
    gateway: GatewayService | None = None,
    logger: Logger | None = None,
) -> ReconciliationResult:
    """Reconcile the integration timeouts of the ``service`` API in ``stage``.

    Raises a :class:`~apigw_timeout.domain.errors.ReconciliationError` subclass
    when the run aborts.
    """

    effective_aws = aws_config or get_aws_config(region=region)
    effective_stacks = stacks or CloudFormationAdapter(effective_aws)
    effective_gateway = gateway or ApiGatewayAdapter(effective_aws)
    target = ReconciliationTarget(
        stage=stage,
        stack_name=stack_name or default_stack_name(service, stage),
        gateway_name_hint=GatewayNameHint(service=service, stage=stage),
    )
    log.info(
        "Starting timeout reconciliation: service=%s, stage=%s, region=%s, stack=%s",
        service,
        stage,
        effective_aws.region,
        target.stack_name,
    )

    orchestrator = ReconciliationOrchestrator(
        stacks=effective_stacks,
        gateway=effective_gateway,
        max_workers=max_workers,
        logger=logger or getLogger("apigw_timeout.reconciliation"),
    )
    result = orchestrator.run(config, target)

    log.info(
        f"Finished timeout reconciliation: applied={result.applied_count}, "
        f"gateway={result.gateway_id} ({result.gateway_source}), "
        f"timeout={result.final_timeout_millis} ms, deployed={result.deployment_triggered}"
    )
    return result


def preview(config: TimeoutConfig) -> TimeoutPlan:
    """Resolve ``config`` without contacting AWS."""

    return TimeoutPlan.from_config(config)

"""Orchestrator for a timeout reconciliation run.

The run moves through ``RESOLVING -> LOCATING -> ENUMERATING -> PATCHING ->
DEPLOYING -> DONE``. Any fatal error after resolution moves it to ``FAILED``.
Patches applied before a failure are not rolled back.
"""

from __future__ import annotations

from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from enum import StrEnum
from logging import Logger, getLogger
from typing import TYPE_CHECKING

from apigw_timeout.domain.errors import (
    QuotaExceededError,
    ReconciliationError,
    RemoteCallFailedError,
)
from apigw_timeout.domain.ports import RemoteCallError
from apigw_timeout.domain.types import (
    Applied,
    FailedOther,
    FailedQuotaExceeded,
    ReconciliationResult,
    is_fatal,
)

from .deploy import DeploymentTrigger, deployment_description
from .enumerate import IntegrationEnumerator
from .locate import ResourceLocator
from .patch import IntegrationPatcher
from .resolve import TimeoutPlan

if TYPE_CHECKING:
    from collections.abc import Sequence

    from apigw_timeout.domain.ports import GatewayService, StackDescriber
    from apigw_timeout.domain.types import (
        GatewayNameHint,
        GatewayRef,
        IntegrationRef,
        PatchOutcome,
        TimeoutConfig,
    )


class ReconciliationState(StrEnum):
    RESOLVING = "resolving"
    LOCATING = "locating"
    ENUMERATING = "enumerating"
    PATCHING = "patching"
    DEPLOYING = "deploying"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class ReconciliationTarget:
    """Where a run should look for the gateway and which stage to redeploy."""

    stage: str
    stack_name: str
    gateway_name_hint: GatewayNameHint


@dataclass(slots=True)
class ReconciliationOrchestrator:
    """Sequence the reconciliation stages and aggregate their outcomes."""

    stacks: StackDescriber
    gateway: GatewayService
    max_workers: int = 1
    logger: Logger = field(default_factory=lambda: getLogger(__name__))
    state: ReconciliationState = ReconciliationState.RESOLVING
    history: list[ReconciliationState] = field(default_factory=list[ReconciliationState])

    def run(self, config: TimeoutConfig, target: ReconciliationTarget) -> ReconciliationResult:
        self.history.clear()
        self._transition(ReconciliationState.RESOLVING)
        plan = TimeoutPlan.from_config(config)
        self._report_resolution(plan)

        gateway_id: str | None = None
        applied_count = 0
        try:
            self._transition(ReconciliationState.LOCATING)
            gateway_ref = self._locate(config, target)
            gateway_id = gateway_ref.id

            self._transition(ReconciliationState.ENUMERATING)
            refs = self._enumerate(gateway_id)

            self._transition(ReconciliationState.PATCHING)
            patcher = IntegrationPatcher(
                self.gateway, gateway_id, integration_types=config.integration_types
            )
            outcomes = self._patch_all(patcher, plan, refs)
            applied_count = sum(isinstance(outcome, Applied) for outcome in outcomes)
            self._raise_for_fatal(
                outcomes, plan, applied_count=applied_count, gateway_id=gateway_id
            )

            deployed = False
            if applied_count > 0:
                self._transition(ReconciliationState.DEPLOYING)
                DeploymentTrigger(self.gateway).trigger(
                    gateway_id, target.stage, deployment_description(plan.default.millis)
                )
                deployed = True
            else:
                self.logger.info("No integrations updated; skipping deployment")
        except ReconciliationError as exc:
            exc.applied_count = max(exc.applied_count, applied_count)
            exc.gateway_id = exc.gateway_id or gateway_id
            self._transition(ReconciliationState.FAILED)
            raise

        self._transition(ReconciliationState.DONE)
        return ReconciliationResult(
            applied_count=applied_count,
            gateway_id=gateway_id,
            final_timeout_millis=plan.default.millis,
            deployment_triggered=deployed,
            gateway_source=gateway_ref.source,
            skipped_count=len(outcomes) - applied_count,
        )

    def _transition(self, state: ReconciliationState) -> None:
        self.logger.debug("Reconciliation state: %s -> %s", self.state, state)
        self.state = state
        self.history.append(state)

    def _report_resolution(self, plan: TimeoutPlan) -> None:
        self.logger.info(
            "Resolved integration timeout: %s ms (max %s ms)",
            plan.default.millis,
            plan.default.max_millis,
        )
        if plan.default.above_standard_limit:
            self.logger.warning(
                "Timeout %s ms exceeds the standard 29000 ms quota; "
                "the account needs a raised service quota",
                plan.default.millis,
            )
        for route, timeout in sorted(plan.overrides.items(), key=lambda item: str(item[0])):
            self.logger.info("Route override %s: %s ms", route, timeout.millis)

    def _locate(self, config: TimeoutConfig, target: ReconciliationTarget) -> GatewayRef:
        locator = ResourceLocator(stacks=self.stacks, gateways=self.gateway)
        try:
            return locator.locate(
                config.explicit_gateway_id, target.stack_name, target.gateway_name_hint
            )
        except RemoteCallError as exc:
            raise RemoteCallFailedError(f"Listing REST APIs failed: {exc.message}") from exc

    def _enumerate(self, gateway_id: str) -> list[IntegrationRef]:
        try:
            refs = list(IntegrationEnumerator(self.gateway).enumerate(gateway_id))
        except RemoteCallError as exc:
            raise RemoteCallFailedError(
                f"Reading resources of REST API {gateway_id} failed: {exc.message}",
                gateway_id=gateway_id,
            ) from exc
        candidates = sum(ref.has_integration for ref in refs)
        self.logger.info(
            "Found %d methods (%d with integrations) on REST API %s",
            len(refs),
            candidates,
            gateway_id,
        )
        return refs

    def _patch_all(
        self,
        patcher: IntegrationPatcher,
        plan: TimeoutPlan,
        refs: Sequence[IntegrationRef],
    ) -> list[PatchOutcome]:
        if self.max_workers <= 1:
            return self._patch_sequential(patcher, plan, refs)
        return self._patch_parallel(patcher, plan, refs)

    def _patch_sequential(
        self,
        patcher: IntegrationPatcher,
        plan: TimeoutPlan,
        refs: Sequence[IntegrationRef],
    ) -> list[PatchOutcome]:
        outcomes: list[PatchOutcome] = []
        for ref in refs:
            outcome = patcher.apply(ref, plan.for_ref(ref))
            self._log_outcome(outcome)
            outcomes.append(outcome)
            if is_fatal(outcome):
                break
        return outcomes

    def _patch_parallel(
        self,
        patcher: IntegrationPatcher,
        plan: TimeoutPlan,
        refs: Sequence[IntegrationRef],
    ) -> list[PatchOutcome]:
        results: dict[int, PatchOutcome] = {}
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            pending: dict[Future[PatchOutcome], int] = {
                pool.submit(patcher.apply, ref, plan.for_ref(ref)): index
                for index, ref in enumerate(refs)
            }
            while pending:
                done, _ = wait(pending, return_when=FIRST_COMPLETED)
                fatal_seen = False
                for future in done:
                    index = pending.pop(future)
                    outcome = future.result()
                    results[index] = outcome
                    fatal_seen = fatal_seen or is_fatal(outcome)
                if fatal_seen:
                    for future in list(pending):
                        if future.cancel():
                            pending.pop(future)
        outcomes = [results[index] for index in sorted(results)]
        for outcome in outcomes:
            self._log_outcome(outcome)
        return outcomes

    def _log_outcome(self, outcome: PatchOutcome) -> None:
        match outcome:
            case Applied(ref=ref, millis=millis):
                self.logger.info("Set timeout of %s to %s ms", ref, millis)
            case FailedQuotaExceeded(ref=ref, account_max=account_max):
                self.logger.error("Quota rejected timeout for %s (max %s ms)", ref, account_max)
            case FailedOther(ref=ref, message=message):
                self.logger.error("Updating %s failed: %s", ref, message)
            case _:
                self.logger.debug("Skipped %s: %s", outcome.ref, type(outcome).__name__)

    def _raise_for_fatal(
        self,
        outcomes: Sequence[PatchOutcome],
        plan: TimeoutPlan,
        *,
        applied_count: int,
        gateway_id: str,
    ) -> None:
        for outcome in outcomes:
            if isinstance(outcome, FailedQuotaExceeded):
                error = QuotaExceededError(
                    account_max=outcome.account_max,
                    requested_millis=plan.for_ref(outcome.ref).millis,
                    applied_count=applied_count,
                    gateway_id=gateway_id,
                )
                self.logger.error("%s", error)
                raise error
            if isinstance(outcome, FailedOther):
                raise RemoteCallFailedError(
                    f"Updating {outcome.ref} failed: {outcome.message}",
                    applied_count=applied_count,
                    gateway_id=gateway_id,
                )

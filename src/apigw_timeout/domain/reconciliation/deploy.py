"""Redeploy a stage so patched integrations take effect."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from apigw_timeout.domain.errors import DeploymentFailedError
from apigw_timeout.domain.ports import RemoteCallError

if TYPE_CHECKING:
    from apigw_timeout.domain.ports import DeploymentCreator

log = getLogger(__name__)


def deployment_description(millis: int) -> str:
    return f"Update integration timeouts to {millis} ms"


@dataclass(slots=True)
class DeploymentTrigger:
    deployments: DeploymentCreator

    def trigger(self, gateway_id: str, stage: str, description: str) -> None:
        try:
            self.deployments.create_deployment(gateway_id, stage, description)
        except RemoteCallError as exc:
            raise DeploymentFailedError(
                f"Deployment of REST API {gateway_id} to stage {stage!r} failed: {exc.message}",
                gateway_id=gateway_id,
            ) from exc
        log.info("Deployed REST API %s to stage %s", gateway_id, stage)

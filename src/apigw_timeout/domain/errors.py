"""Fatal errors surfaced by a reconciliation run.

Every error records how many integrations were already patched before the
run aborted. Patching is idempotent, so a caller can fix the cause and
re-run without undoing partial work.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .types import GatewayNameHint


class ReconciliationError(RuntimeError):
    """Base class for errors that abort a reconciliation run."""

    def __init__(
        self,
        message: str,
        *,
        applied_count: int = 0,
        gateway_id: str | None = None,
    ) -> None:
        super().__init__(message)
        self.applied_count = applied_count
        self.gateway_id = gateway_id


class GatewayNotFoundError(ReconciliationError):
    """Raised when every discovery strategy declined to produce a gateway id."""

    def __init__(self, *, stack_name: str, gateway_name_hint: GatewayNameHint) -> None:
        super().__init__(
            f"Could not find the REST API for stack {stack_name!r} "
            f"(expected a gateway named {gateway_name_hint.name!r}); "
            "set APIGW_REST_API_ID or --rest-api-id explicitly"
        )
        self.stack_name = stack_name
        self.gateway_name_hint = gateway_name_hint


class QuotaExceededError(ReconciliationError):
    """Raised when the service rejects a timeout above the account's quota."""

    def __init__(
        self,
        *,
        account_max: int,
        requested_millis: int,
        applied_count: int = 0,
        gateway_id: str | None = None,
    ) -> None:
        super().__init__(
            f"Timeout {requested_millis} ms exceeds the account quota of {account_max} ms; "
            f"set APIGW_MAX_TIMEOUT_MILLIS (or custom.apiGatewayTimeout.maxTimeoutInMillis) "
            f"to {account_max} or request a higher service quota",
            applied_count=applied_count,
            gateway_id=gateway_id,
        )
        self.account_max = account_max
        self.requested_millis = requested_millis


class RemoteCallFailedError(ReconciliationError):
    """Raised when an API call fails for any reason other than the quota."""


class DeploymentFailedError(ReconciliationError):
    """Raised when the redeploy after patching is rejected."""

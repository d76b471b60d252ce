"""Value types shared by the timeout reconciliation stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Mapping

# AWS rejects integration timeouts below 50 ms regardless of account quotas.
MIN_TIMEOUT_MILLIS: Final[int] = 50
# Default API Gateway service quota; accounts may raise it on request.
STANDARD_MAX_TIMEOUT_MILLIS: Final[int] = 29_000
DEFAULT_TIMEOUT_MILLIS: Final[int] = STANDARD_MAX_TIMEOUT_MILLIS

ANY_METHOD: Final[str] = "ANY"


def normalize_path(path: str) -> str:
    """Return ``path`` with a single leading slash and no trailing slash."""

    stripped = path.strip().strip("/")
    return f"/{stripped}"


@dataclass(frozen=True, slots=True)
class RouteKey:
    """Normalized ``(path, HTTP method)`` pair identifying one route."""

    path: str
    http_method: str

    @classmethod
    def of(cls, path: str, http_method: str) -> RouteKey:
        return cls(path=normalize_path(path), http_method=http_method.strip().upper())

    def __str__(self) -> str:
        return f"{self.http_method} {self.path}"


@dataclass(frozen=True, slots=True)
class TimeoutConfig:
    """Timeout settings gathered from the configuration layers."""

    requested_millis: int | None = None
    provider_seconds_timeout: int | None = None
    max_millis: int | None = None
    explicit_gateway_id: str | None = None
    integration_types: frozenset[str] | None = None
    route_overrides: Mapping[RouteKey, int] = field(default_factory=dict["RouteKey", int])


@dataclass(frozen=True, slots=True)
class ResolvedTimeout:
    millis: int
    max_millis: int = STANDARD_MAX_TIMEOUT_MILLIS

    @property
    def above_standard_limit(self) -> bool:
        return self.millis > STANDARD_MAX_TIMEOUT_MILLIS


class GatewaySource(StrEnum):
    """Discovery strategy that produced a gateway id."""

    EXPLICIT = "explicit"
    STACK_OUTPUT = "stack-output"
    EXACT_NAME_MATCH = "exact-name-match"
    PARTIAL_NAME_MATCH = "partial-name-match"
    SOLE_GATEWAY = "sole-gateway"


@dataclass(frozen=True, slots=True)
class GatewayRef:
    id: str
    source: GatewaySource


@dataclass(frozen=True, slots=True)
class GatewayNameHint:
    """Tokens used to recognise the deployed gateway by name.

    The Serverless Framework names REST APIs ``<stage>-<service>``.
    """

    service: str
    stage: str

    @property
    def name(self) -> str:
        return f"{self.stage}-{self.service}"

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class GatewaySummary:
    id: str
    name: str


@dataclass(frozen=True, slots=True)
class StackOutput:
    key: str
    value: str


@dataclass(frozen=True, slots=True)
class ResourceNode:
    id: str
    path: str
    methods: frozenset[str] = frozenset()


@dataclass(frozen=True, slots=True)
class MethodDetail:
    has_integration: bool
    integration_type: str | None = None


@dataclass(frozen=True, slots=True)
class IntegrationRef:
    resource_id: str
    http_method: str
    has_integration: bool
    path: str = "/"
    integration_type: str | None = None

    @property
    def route(self) -> RouteKey:
        return RouteKey.of(self.path, self.http_method)

    def __str__(self) -> str:
        return f"{self.http_method} {self.path} ({self.resource_id})"


@dataclass(frozen=True, slots=True)
class Applied:
    ref: IntegrationRef
    millis: int


@dataclass(frozen=True, slots=True)
class SkippedNoIntegration:
    ref: IntegrationRef


@dataclass(frozen=True, slots=True)
class SkippedUnsupportedType:
    ref: IntegrationRef
    integration_type: str | None


@dataclass(frozen=True, slots=True)
class FailedQuotaExceeded:
    ref: IntegrationRef
    account_max: int


@dataclass(frozen=True, slots=True)
class FailedOther:
    ref: IntegrationRef
    message: str


type PatchOutcome = (
    Applied | SkippedNoIntegration | SkippedUnsupportedType | FailedQuotaExceeded | FailedOther
)


def is_fatal(outcome: PatchOutcome) -> bool:
    return isinstance(outcome, FailedQuotaExceeded | FailedOther)


@dataclass(frozen=True, slots=True)
class ReconciliationResult:
    """Outcome of a successful reconciliation run."""

    applied_count: int
    gateway_id: str
    final_timeout_millis: int
    deployment_triggered: bool
    gateway_source: GatewaySource | None = None
    skipped_count: int = 0

"""Discover the REST API id through an ordered cascade of strategies.

Each strategy either returns a :class:`GatewayRef` or declines with
``None``. The locator stops at the first strategy that produces a ref.
Only the stack lookup swallows remote failures; errors from listing the
account's gateways propagate.

The partial-name strategy picks the first match in whatever order the
listing returns. That order is not guaranteed to be stable across calls.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Final, Protocol

from apigw_timeout.domain.errors import GatewayNotFoundError
from apigw_timeout.domain.ports import RemoteCallError, StackNotFoundError
from apigw_timeout.domain.types import GatewayRef, GatewaySource

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from apigw_timeout.domain.ports import GatewayLister, StackDescriber
    from apigw_timeout.domain.types import GatewayNameHint, GatewaySummary

log = getLogger(__name__)

STACK_OUTPUT_KEY_MARKERS: Final[tuple[str, ...]] = ("RestApiId", "ApiGatewayRestApi")


@dataclass(frozen=True, slots=True)
class LocateRequest:
    explicit_id: str | None
    stack_name: str
    gateway_name_hint: GatewayNameHint


class GatewayStrategy(Protocol):
    def __call__(self, request: LocateRequest) -> GatewayRef | None: ...


class ExplicitIdStrategy:
    def __call__(self, request: LocateRequest) -> GatewayRef | None:
        if request.explicit_id:
            return GatewayRef(id=request.explicit_id, source=GatewaySource.EXPLICIT)
        return None


@dataclass(slots=True)
class StackOutputStrategy:
    stacks: StackDescriber

    def __call__(self, request: LocateRequest) -> GatewayRef | None:
        try:
            outputs = list(self.stacks.describe_stack(request.stack_name))
        except StackNotFoundError:
            log.warning("Stack %s not found; falling back to gateway listing", request.stack_name)
            return None
        except RemoteCallError as exc:
            log.warning("Could not describe stack %s: %s", request.stack_name, exc)
            return None

        for output in outputs:
            if any(marker in output.key for marker in STACK_OUTPUT_KEY_MARKERS) and output.value:
                log.debug("Found REST API id in stack output %s", output.key)
                return GatewayRef(id=output.value, source=GatewaySource.STACK_OUTPUT)
        log.info("Stack %s has no REST API id output", request.stack_name)
        return None


class GatewayListing:
    """Fetch the account's gateways at most once per locate call."""

    def __init__(self, lister: GatewayLister) -> None:
        self._lister = lister
        self._gateways: list[GatewaySummary] | None = None

    def __call__(self) -> list[GatewaySummary]:
        if self._gateways is None:
            self._gateways = list(self._lister.list_gateways())
        return self._gateways


def _exact_name_match(
    gateways: Sequence[GatewaySummary], request: LocateRequest
) -> GatewayRef | None:
    for gateway in gateways:
        if gateway.name == request.gateway_name_hint.name:
            return GatewayRef(id=gateway.id, source=GatewaySource.EXACT_NAME_MATCH)
    return None


def _partial_name_match(
    gateways: Sequence[GatewaySummary], request: LocateRequest
) -> GatewayRef | None:
    hint = request.gateway_name_hint
    for gateway in gateways:
        if hint.service in gateway.name and hint.stage in gateway.name:
            return GatewayRef(id=gateway.id, source=GatewaySource.PARTIAL_NAME_MATCH)
    return None


def _sole_gateway(gateways: Sequence[GatewaySummary], _request: LocateRequest) -> GatewayRef | None:
    if len(gateways) == 1:
        return GatewayRef(id=gateways[0].id, source=GatewaySource.SOLE_GATEWAY)
    return None


@dataclass(slots=True)
class ListingStrategy:
    listing: Callable[[], list[GatewaySummary]]
    match: Callable[[Sequence[GatewaySummary], LocateRequest], GatewayRef | None]

    def __call__(self, request: LocateRequest) -> GatewayRef | None:
        return self.match(self.listing(), request)


@dataclass(slots=True)
class ResourceLocator:
    """Resolve the target REST API id, trying each strategy in turn."""

    stacks: StackDescriber
    gateways: GatewayLister
    strategies: Sequence[GatewayStrategy] = field(default=())

    def locate(
        self,
        explicit_id: str | None,
        stack_name: str,
        gateway_name_hint: GatewayNameHint,
    ) -> GatewayRef:
        request = LocateRequest(
            explicit_id=explicit_id,
            stack_name=stack_name,
            gateway_name_hint=gateway_name_hint,
        )
        for strategy in self.strategies or self._default_strategies():
            ref = strategy(request)
            if ref is not None:
                log.info("Resolved REST API %s via %s", ref.id, ref.source)
                return ref
        raise GatewayNotFoundError(stack_name=stack_name, gateway_name_hint=gateway_name_hint)

    def _default_strategies(self) -> tuple[GatewayStrategy, ...]:
        listing = GatewayListing(self.gateways)
        return (
            ExplicitIdStrategy(),
            StackOutputStrategy(self.stacks),
            ListingStrategy(listing, _exact_name_match),
            ListingStrategy(listing, _partial_name_match),
            ListingStrategy(listing, _sole_gateway),
        )

"""Resolve the effective integration timeout from configuration.

Precedence for the requested value, first defined wins:

1. ``requested_millis``
2. ``provider_seconds_timeout * 1000``
3. :data:`DEFAULT_TIMEOUT_MILLIS`

The result is clamped into ``[MIN_TIMEOUT_MILLIS, max_millis]``: the floor
is applied first, then the ceiling. Out-of-range input is never an error.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from apigw_timeout.domain.types import (
    ANY_METHOD,
    DEFAULT_TIMEOUT_MILLIS,
    MIN_TIMEOUT_MILLIS,
    STANDARD_MAX_TIMEOUT_MILLIS,
    ResolvedTimeout,
    RouteKey,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from apigw_timeout.domain.types import IntegrationRef, TimeoutConfig


def effective_max_millis(config: TimeoutConfig) -> int:
    if config.max_millis is None:
        return STANDARD_MAX_TIMEOUT_MILLIS
    return config.max_millis


def requested_millis(config: TimeoutConfig) -> int:
    if config.requested_millis is not None:
        return config.requested_millis
    if config.provider_seconds_timeout is not None:
        return config.provider_seconds_timeout * 1000
    return DEFAULT_TIMEOUT_MILLIS


def clamp_millis(value: int, *, max_millis: int) -> ResolvedTimeout:
    # A ceiling below the floor is raised to the floor.
    ceiling = max(max_millis, MIN_TIMEOUT_MILLIS)
    millis = min(max(value, MIN_TIMEOUT_MILLIS), ceiling)
    return ResolvedTimeout(millis=millis, max_millis=ceiling)


def resolve_timeout(config: TimeoutConfig) -> ResolvedTimeout:
    """Return the clamped default timeout for ``config``."""

    return clamp_millis(requested_millis(config), max_millis=effective_max_millis(config))


def resolve_route_timeouts(config: TimeoutConfig) -> dict[RouteKey, ResolvedTimeout]:
    """Clamp every per-route override with the same policy as the default."""

    max_millis = effective_max_millis(config)
    return {
        route: clamp_millis(millis, max_millis=max_millis)
        for route, millis in config.route_overrides.items()
    }


class TimeoutPlan:
    """Default timeout plus per-route overrides, looked up per integration."""

    def __init__(
        self,
        default: ResolvedTimeout,
        overrides: Mapping[RouteKey, ResolvedTimeout] | None = None,
    ) -> None:
        self.default = default
        self.overrides = dict(overrides or {})

    @classmethod
    def from_config(cls, config: TimeoutConfig) -> TimeoutPlan:
        return cls(resolve_timeout(config), resolve_route_timeouts(config))

    def for_ref(self, ref: IntegrationRef) -> ResolvedTimeout:
        route = ref.route
        exact = self.overrides.get(route)
        if exact is not None:
            return exact
        wildcard = self.overrides.get(RouteKey(path=route.path, http_method=ANY_METHOD))
        if wildcard is not None:
            return wildcard
        return self.default

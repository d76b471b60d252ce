from __future__ import annotations

import pytest

from apigw_timeout.domain.reconciliation.resolve import (
    TimeoutPlan,
    resolve_route_timeouts,
    resolve_timeout,
)
from apigw_timeout.domain.types import IntegrationRef, RouteKey, TimeoutConfig


def _ref(http_method: str, path: str) -> IntegrationRef:
    return IntegrationRef(
        resource_id="r1", http_method=http_method, has_integration=True, path=path
    )


def test_resolve_defaults_to_standard_quota() -> None:
    resolved = resolve_timeout(TimeoutConfig())

    assert resolved.millis == 29_000
    assert resolved.max_millis == 29_000
    assert not resolved.above_standard_limit


def test_explicit_millis_wins_over_provider_seconds() -> None:
    config = TimeoutConfig(requested_millis=15_000, provider_seconds_timeout=60)

    assert resolve_timeout(config).millis == 15_000


def test_provider_seconds_are_converted_then_clamped_to_default_max() -> None:
    config = TimeoutConfig(provider_seconds_timeout=45)

    assert resolve_timeout(config).millis == 29_000


def test_provider_seconds_used_when_within_bounds() -> None:
    config = TimeoutConfig(provider_seconds_timeout=12)

    assert resolve_timeout(config).millis == 12_000


def test_requested_value_below_floor_is_raised_to_fifty() -> None:
    resolved = resolve_timeout(TimeoutConfig(requested_millis=10))

    assert resolved.millis == 50


def test_requested_value_above_max_is_lowered() -> None:
    resolved = resolve_timeout(TimeoutConfig(requested_millis=90_000, max_millis=60_000))

    assert resolved.millis == 60_000
    assert resolved.max_millis == 60_000
    assert resolved.above_standard_limit


@pytest.mark.parametrize(
    ("requested", "maximum"),
    [(0, 50), (49, 100), (50, 50), (1_000, 500), (30_000, 120_000), (-5, 29_000)],
)
def test_resolved_value_is_always_within_bounds(requested: int, maximum: int) -> None:
    resolved = resolve_timeout(TimeoutConfig(requested_millis=requested, max_millis=maximum))

    assert resolved.millis == max(50, min(requested, maximum))
    assert 50 <= resolved.millis <= maximum


def test_resolve_is_deterministic() -> None:
    config = TimeoutConfig(requested_millis=40_000, max_millis=35_000)

    assert resolve_timeout(config) == resolve_timeout(config)


def test_route_overrides_follow_the_same_clamping_policy() -> None:
    config = TimeoutConfig(
        max_millis=30_000,
        route_overrides={
            RouteKey.of("users", "get"): 60_000,
            RouteKey.of("/health", "GET"): 1,
        },
    )

    resolved = resolve_route_timeouts(config)

    assert resolved[RouteKey.of("/users", "GET")].millis == 30_000
    assert resolved[RouteKey.of("/health", "GET")].millis == 50


def test_plan_prefers_exact_route_then_any_then_default() -> None:
    config = TimeoutConfig(
        requested_millis=10_000,
        route_overrides={
            RouteKey.of("/users", "POST"): 20_000,
            RouteKey.of("/users", "ANY"): 15_000,
        },
    )
    plan = TimeoutPlan.from_config(config)

    post = _ref("POST", "/users")
    get = _ref("GET", "/users/")
    other = _ref("GET", "/items")

    assert plan.for_ref(post).millis == 20_000
    assert plan.for_ref(get).millis == 15_000
    assert plan.for_ref(other).millis == 10_000


def test_maximum_below_floor_keeps_timeout_within_maximum() -> None:
    resolved = resolve_timeout(TimeoutConfig(requested_millis=5_000, max_millis=10))

    assert resolved.millis == 50
    assert resolved.max_millis == 50

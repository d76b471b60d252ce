"""Layered loading of :class:`TimeoutConfig`.

Layers are merged field by field; the first layer that defines a value wins.
The command line passes its layers in the order flags, environment,
``serverless.yml``.
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING, Final

from apigw_timeout.domain.types import MIN_TIMEOUT_MILLIS, TimeoutConfig

from .env import optional_env_int, optional_env_var
from .errors import ConfigurationError
from .serverless import normalize_integration_type

if TYPE_CHECKING:
    from collections.abc import Iterable

    from apigw_timeout.domain.types import RouteKey

ENV_TIMEOUT_MILLIS: Final[str] = "APIGW_TIMEOUT_MILLIS"
ENV_MAX_TIMEOUT_MILLIS: Final[str] = "APIGW_MAX_TIMEOUT_MILLIS"
ENV_REST_API_ID: Final[str] = "APIGW_REST_API_ID"
ENV_PROVIDER_TIMEOUT_SECONDS: Final[str] = "APIGW_PROVIDER_TIMEOUT_SECONDS"
ENV_INTEGRATION_TYPES: Final[str] = "APIGW_INTEGRATION_TYPES"


def timeout_config_from_environment() -> TimeoutConfig:
    raw_types = optional_env_var(ENV_INTEGRATION_TYPES)
    return TimeoutConfig(
        requested_millis=optional_env_int(ENV_TIMEOUT_MILLIS),
        provider_seconds_timeout=optional_env_int(ENV_PROVIDER_TIMEOUT_SECONDS),
        max_millis=optional_env_int(ENV_MAX_TIMEOUT_MILLIS),
        explicit_gateway_id=optional_env_var(ENV_REST_API_ID),
        integration_types=parse_integration_types(raw_types.split(",")) if raw_types else None,
    )


def parse_integration_types(values: Iterable[str]) -> frozenset[str] | None:
    types = frozenset(normalize_integration_type(value) for value in values if value.strip())
    return types or None


def merge_timeout_configs(*layers: TimeoutConfig) -> TimeoutConfig:
    """Merge ``layers`` so that earlier layers take precedence."""

    merged = TimeoutConfig()
    overrides: dict[RouteKey, int] = {}
    for layer in reversed(layers):
        merged = replace(
            merged,
            requested_millis=_pick(layer.requested_millis, merged.requested_millis),
            provider_seconds_timeout=_pick(
                layer.provider_seconds_timeout, merged.provider_seconds_timeout
            ),
            max_millis=_pick(layer.max_millis, merged.max_millis),
            explicit_gateway_id=_pick(layer.explicit_gateway_id, merged.explicit_gateway_id),
            integration_types=_pick(layer.integration_types, merged.integration_types),
        )
        overrides.update(layer.route_overrides)
    validate_timeout_config(merged)
    return replace(merged, route_overrides=overrides)


def validate_timeout_config(config: TimeoutConfig) -> None:
    if config.max_millis is not None and config.max_millis < MIN_TIMEOUT_MILLIS:
        raise ConfigurationError(
            f"Maximum timeout must be at least {MIN_TIMEOUT_MILLIS} ms, got {config.max_millis}"
        )
    if config.provider_seconds_timeout is not None and config.provider_seconds_timeout < 0:
        raise ConfigurationError(
            f"Provider timeout must be non-negative, got {config.provider_seconds_timeout}"
        )


def _pick[T](value: T | None, fallback: T | None) -> T | None:
    return value if value is not None else fallback

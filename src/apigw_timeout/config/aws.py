"""AWS client configuration values."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from .env import optional_env_var, parse_int
from .errors import ConfigurationError, MissingConfigurationError

DEFAULT_CALL_TIMEOUT_SECONDS: Final[float] = 10.0


@dataclass(frozen=True, slots=True)
class AwsConfig:
    region: str
    profile: str | None = None
    endpoint_url: str | None = None
    call_timeout_seconds: float = DEFAULT_CALL_TIMEOUT_SECONDS
    max_attempts: int = 1


def get_aws_config(
    *,
    region: str | None = None,
    profile: str | None = None,
    call_timeout_seconds: float | None = None,
    fallback_region: str | None = None,
) -> AwsConfig:
    """Build AWS settings from explicit values, then the environment."""

    effective_region = (
        region
        or optional_env_var("AWS_REGION")
        or optional_env_var("AWS_DEFAULT_REGION")
        or fallback_region
    )
    if not effective_region:
        raise MissingConfigurationError(
            "Missing configuration for: AWS_REGION (or --region / provider.region)"
        )

    timeout = call_timeout_seconds
    if timeout is None:
        raw_timeout = optional_env_var("APIGW_CALL_TIMEOUT_SECONDS")
        timeout = _parse_seconds(raw_timeout) if raw_timeout else DEFAULT_CALL_TIMEOUT_SECONDS

    raw_attempts = optional_env_var("APIGW_MAX_ATTEMPTS")
    max_attempts = parse_int(raw_attempts, name="APIGW_MAX_ATTEMPTS") if raw_attempts else 1

    return AwsConfig(
        region=effective_region,
        profile=profile or optional_env_var("AWS_PROFILE"),
        endpoint_url=optional_env_var("APIGW_ENDPOINT_URL"),
        call_timeout_seconds=timeout,
        max_attempts=max_attempts,
    )


def _parse_seconds(value: str) -> float:
    try:
        seconds = float(value)
    except ValueError as exc:
        raise ConfigurationError(
            f"APIGW_CALL_TIMEOUT_SECONDS must be a number, got {value!r}"
        ) from exc
    if seconds <= 0:
        raise ConfigurationError("APIGW_CALL_TIMEOUT_SECONDS must be positive")
    return seconds

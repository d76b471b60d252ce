"""Read timeout settings from a Serverless Framework ``serverless.yml``."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any, Final, cast

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from apigw_timeout.domain.types import RouteKey, TimeoutConfig

from .errors import ConfigurationError

if TYPE_CHECKING:
    from pathlib import Path

log = getLogger(__name__)

DEFAULT_STAGE: Final[str] = "dev"

# Serverless event integration names mapped to API Gateway integration types.
_INTEGRATION_ALIASES: Final[dict[str, str]] = {
    "lambda": "AWS",
    "aws": "AWS",
    "lambda-proxy": "AWS_PROXY",
    "lambda_proxy": "AWS_PROXY",
    "aws-proxy": "AWS_PROXY",
    "aws_proxy": "AWS_PROXY",
    "http": "HTTP",
    "http-proxy": "HTTP_PROXY",
    "http_proxy": "HTTP_PROXY",
    "mock": "MOCK",
}
LAMBDA_INTEGRATION_TYPES: Final[frozenset[str]] = frozenset({"AWS", "AWS_PROXY"})


def normalize_integration_type(value: str) -> str:
    key = value.strip().lower()
    return _INTEGRATION_ALIASES.get(key, value.strip().upper())


def _unresolved_to_none(value: object) -> object:
    # Unresolved ``${...}`` variables are left for other layers to fill.
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped or "${" in stripped:
            return None
        return stripped
    return value


def _int_or_none(value: object) -> object:
    value = _unresolved_to_none(value)
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return value
    return value


def _number_or_none(value: object) -> object:
    value = _unresolved_to_none(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return value
    return value


class ServerlessBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ApiGatewaySection(ServerlessBaseModel):
    rest_api_id: str | None = Field(default=None, alias="restApiId")

    _normalize_id = field_validator("rest_api_id", mode="before")(_unresolved_to_none)


class ProviderSection(ServerlessBaseModel):
    stage: str | None = None
    region: str | None = None
    timeout: int | None = None
    api_gateway: ApiGatewaySection | None = Field(default=None, alias="apiGateway")

    _normalize_strings = field_validator("stage", "region", mode="before")(_unresolved_to_none)
    _normalize_timeout = field_validator("timeout", mode="before")(_int_or_none)


class TimeoutSection(ServerlessBaseModel):
    timeout_in_millis: int | None = Field(default=None, alias="timeoutInMillis")
    max_timeout_in_millis: int | None = Field(default=None, alias="maxTimeoutInMillis")
    rest_api_id: str | None = Field(default=None, alias="restApiId")
    integration_types: list[str] | None = Field(default=None, alias="integrationTypes")

    _normalize_ints = field_validator(
        "timeout_in_millis", "max_timeout_in_millis", mode="before"
    )(_int_or_none)
    _normalize_id = field_validator("rest_api_id", mode="before")(_unresolved_to_none)


class CustomSection(ServerlessBaseModel):
    api_gateway_timeout: TimeoutSection | None = Field(default=None, alias="apiGatewayTimeout")


class HttpEvent(ServerlessBaseModel):
    path: str
    method: str
    timeout: float | None = None
    integration: str | None = None

    _normalize_timeout = field_validator("timeout", mode="before")(_number_or_none)

    @classmethod
    def from_shorthand(cls, value: str) -> HttpEvent:
        method, _, path = value.strip().partition(" ")
        if not path:
            raise ValueError(f"Invalid http event shorthand: {value!r}")
        return cls(method=method, path=path.strip())

    @property
    def integration_type(self) -> str:
        if self.integration is None:
            return "AWS_PROXY"
        return normalize_integration_type(self.integration)


class FunctionSection(ServerlessBaseModel):
    events: list[dict[str, Any]] = Field(default_factory=list)

    @field_validator("events", mode="before")
    @classmethod
    def _drop_non_mappings(cls, value: object) -> object:
        if value is None:
            return []
        if isinstance(value, list):
            return [event for event in cast(list[object], value) if isinstance(event, Mapping)]
        return value

    def http_events(self) -> list[HttpEvent]:
        events: list[HttpEvent] = []
        for event in self.events:
            raw = event.get("http")
            if isinstance(raw, str):
                events.append(HttpEvent.from_shorthand(raw))
            elif isinstance(raw, Mapping):
                events.append(HttpEvent.model_validate(raw))
        return events


class ServerlessFile(ServerlessBaseModel):
    service: str | None = None
    provider: ProviderSection = Field(default_factory=ProviderSection)
    custom: CustomSection = Field(default_factory=CustomSection)
    functions: dict[str, FunctionSection | None] = Field(default_factory=dict)

    @field_validator("service", mode="before")
    @classmethod
    def _service_name(cls, value: object) -> object:
        # Older configs declare ``service: {name: ...}``.
        if isinstance(value, Mapping):
            value = cast(Mapping[str, object], value).get("name")
        return _unresolved_to_none(value)


@dataclass(frozen=True, slots=True)
class ServerlessProject:
    """Settings extracted from a ``serverless.yml``."""

    service: str | None = None
    stage: str | None = None
    region: str | None = None
    timeout: TimeoutConfig = field(default_factory=TimeoutConfig)


def parse_serverless_document(document: object) -> ServerlessProject:
    if document is None:
        document = {}
    if not isinstance(document, Mapping):
        raise ConfigurationError("serverless.yml must contain a mapping at the top level")
    try:
        parsed = ServerlessFile.model_validate(document)
        overrides = _route_overrides(parsed)
    except (ValidationError, ValueError) as exc:
        raise ConfigurationError(f"Invalid serverless.yml: {exc}") from exc

    section = parsed.custom.api_gateway_timeout or TimeoutSection()
    provider_api = parsed.provider.api_gateway or ApiGatewaySection()
    integration_types = (
        frozenset(normalize_integration_type(value) for value in section.integration_types)
        if section.integration_types is not None
        else None
    )
    timeout = TimeoutConfig(
        requested_millis=section.timeout_in_millis,
        provider_seconds_timeout=parsed.provider.timeout,
        max_millis=section.max_timeout_in_millis,
        explicit_gateway_id=section.rest_api_id or provider_api.rest_api_id,
        integration_types=integration_types,
        route_overrides=overrides,
    )
    return ServerlessProject(
        service=parsed.service,
        stage=parsed.provider.stage,
        region=parsed.provider.region,
        timeout=timeout,
    )


def load_serverless_config(path: Path) -> ServerlessProject:
    """Load ``path``; a missing file is a configuration error."""

    try:
        with path.open(encoding="utf-8") as handle:
            document = yaml.load(handle, Loader=_ServerlessLoader)  # noqa: S506
    except FileNotFoundError as exc:
        raise ConfigurationError(f"Serverless config not found: {path}") from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Could not parse {path}: {exc}") from exc
    project = parse_serverless_document(document)
    log.debug("Loaded %s: service=%s, stage=%s", path, project.service, project.stage)
    return project


def _route_overrides(parsed: ServerlessFile) -> dict[RouteKey, int]:
    overrides: dict[RouteKey, int] = {}
    for name, function in parsed.functions.items():
        if function is None:
            continue
        for event in function.http_events():
            if event.timeout is None:
                continue
            if event.integration_type not in LAMBDA_INTEGRATION_TYPES:
                log.info(
                    "Ignoring timeout on %s %s of %s: %s integrations are not supported",
                    event.method,
                    event.path,
                    name,
                    event.integration_type,
                )
                continue
            overrides[RouteKey.of(event.path, event.method)] = round(event.timeout * 1000)
    return overrides


class _ServerlessLoader(yaml.SafeLoader):
    """Safe loader that tolerates CloudFormation short-form tags like ``!Ref``."""


def _construct_tagged(loader: yaml.SafeLoader, suffix: str, node: yaml.Node) -> object:
    if isinstance(node, yaml.ScalarNode):
        value: object = loader.construct_scalar(node)
    elif isinstance(node, yaml.SequenceNode):
        value = loader.construct_sequence(node)
    else:
        value = loader.construct_mapping(node)  # type: ignore[arg-type]
    return {suffix: value}


_ServerlessLoader.add_multi_constructor("!", _construct_tagged)

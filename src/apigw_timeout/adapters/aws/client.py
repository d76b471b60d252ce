"""boto3 client construction and error translation."""

from __future__ import annotations

from contextlib import contextmanager
from logging import getLogger
from typing import TYPE_CHECKING, Any

import boto3
from botocore.config import Config
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectTimeoutError,
    ReadTimeoutError,
)

from apigw_timeout.domain.ports import RemoteCallError, RemoteTimeoutError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from apigw_timeout.config.aws import AwsConfig

log = getLogger(__name__)


def build_client_config(config: AwsConfig) -> Config:
    return Config(
        region_name=config.region,
        connect_timeout=config.call_timeout_seconds,
        read_timeout=config.call_timeout_seconds,
        retries={"total_max_attempts": config.max_attempts, "mode": "standard"},
    )


def create_client(service_name: str, config: AwsConfig) -> Any:
    """Create a boto3 client for ``service_name`` with the configured deadline."""

    session = boto3.session.Session(profile_name=config.profile, region_name=config.region)
    client_kwargs: dict[str, Any] = {
        "service_name": service_name,
        "config": build_client_config(config),
    }
    if config.endpoint_url:
        client_kwargs["endpoint_url"] = config.endpoint_url
    log.debug("Creating %s client for region %s", service_name, config.region)
    return session.client(**client_kwargs)


def error_code(exc: ClientError) -> str | None:
    return exc.response.get("Error", {}).get("Code")


def error_message(exc: ClientError) -> str:
    return exc.response.get("Error", {}).get("Message") or str(exc)


@contextmanager
def translate_errors(
    operation: str,
    *,
    classify: Callable[[ClientError], RemoteCallError | None] | None = None,
) -> Iterator[None]:
    """Re-raise botocore failures from ``operation`` as port errors."""

    try:
        yield
    except ClientError as exc:
        if classify is not None:
            classified = classify(exc)
            if classified is not None:
                raise classified from exc
        raise RemoteCallError(error_message(exc), code=error_code(exc)) from exc
    except (ReadTimeoutError, ConnectTimeoutError) as exc:
        log.warning("%s timed out: %s", operation, exc)
        raise RemoteTimeoutError() from exc
    except BotoCoreError as exc:
        raise RemoteCallError(f"{operation} failed: {exc}") from exc

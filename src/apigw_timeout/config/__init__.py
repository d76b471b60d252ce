"""Application configuration helpers."""

from __future__ import annotations

from .aws import AwsConfig, get_aws_config
from .env import optional_env_int, optional_env_var, parse_int
from .errors import ConfigurationError, MissingConfigurationError
from .logging import configure_logging
from .serverless import ServerlessProject, load_serverless_config, parse_serverless_document
from .timeout import (
    merge_timeout_configs,
    parse_integration_types,
    timeout_config_from_environment,
)

__all__ = [
    "AwsConfig",
    "ConfigurationError",
    "MissingConfigurationError",
    "ServerlessProject",
    "configure_logging",
    "get_aws_config",
    "load_serverless_config",
    "merge_timeout_configs",
    "optional_env_int",
    "optional_env_var",
    "parse_int",
    "parse_integration_types",
    "parse_serverless_document",
    "timeout_config_from_environment",
]

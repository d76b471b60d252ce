from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from apigw_timeout.app import preview, run
from apigw_timeout.config import (
    ConfigurationError,
    ServerlessProject,
    configure_logging,
    get_aws_config,
    load_serverless_config,
    merge_timeout_configs,
    optional_env_int,
    optional_env_var,
    parse_integration_types,
    timeout_config_from_environment,
)
from apigw_timeout.config.serverless import DEFAULT_STAGE
from apigw_timeout.domain.errors import ReconciliationError
from apigw_timeout.domain.types import TimeoutConfig

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)

DEFAULT_SERVERLESS_FILE = "serverless.yml"


def _add_timeout_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--serverless-file",
        type=Path,
        help=f"Serverless config to read defaults from (default: ./{DEFAULT_SERVERLESS_FILE})",
    )
    parser.add_argument(
        "--timeout-millis",
        type=int,
        help="Desired integration timeout in milliseconds",
    )
    parser.add_argument(
        "--max-timeout-millis",
        type=int,
        help="Upper bound for the timeout; match your account's service quota",
    )
    parser.add_argument(
        "--provider-timeout-seconds",
        type=int,
        help="Fallback timeout in seconds when no millisecond value is configured",
    )
    parser.add_argument(
        "--rest-api-id",
        type=str,
        help="REST API id; skips gateway discovery",
    )
    parser.add_argument(
        "--integration-type",
        action="append",
        dest="integration_types",
        help="Only patch integrations of this type (repeatable, e.g. AWS_PROXY)",
    )
    parser.add_argument(
        "--stage",
        type=str,
        help=f"Deployment stage (defaults to provider.stage or {DEFAULT_STAGE!r})",
    )


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Reconcile API Gateway integration timeouts after a Serverless deploy"
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    reconcile = subparsers.add_parser(
        "reconcile",
        help="Patch every integration timeout and redeploy the stage",
    )
    _add_timeout_arguments(reconcile)
    reconcile.add_argument(
        "--service",
        type=str,
        help="Serverless service name (defaults to the service in serverless.yml)",
    )
    reconcile.add_argument(
        "--region",
        type=str,
        help="AWS region (defaults to AWS_REGION or provider.region)",
    )
    reconcile.add_argument(
        "--profile",
        type=str,
        help="AWS credentials profile",
    )
    reconcile.add_argument(
        "--stack-name",
        type=str,
        help="CloudFormation stack name (default: <service>-<stage>)",
    )
    reconcile.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Number of integrations to patch concurrently (default: 1)",
    )
    reconcile.add_argument(
        "--call-timeout-seconds",
        type=float,
        help="Deadline for each AWS API call (default: 10)",
    )

    resolve = subparsers.add_parser(
        "resolve",
        help="Print the timeout that would be applied, without calling AWS",
    )
    _add_timeout_arguments(resolve)

    return parser.parse_args(list(argv))


@dataclass(frozen=True, slots=True)
class _Settings:
    timeout: TimeoutConfig
    project: ServerlessProject
    stage: str


def _load_project(args: argparse.Namespace) -> ServerlessProject:
    if args.serverless_file is not None:
        return load_serverless_config(args.serverless_file)
    default_path = Path(DEFAULT_SERVERLESS_FILE)
    if default_path.is_file():
        return load_serverless_config(default_path)
    return ServerlessProject()


def _flag_layer(args: argparse.Namespace) -> TimeoutConfig:
    return TimeoutConfig(
        requested_millis=args.timeout_millis,
        provider_seconds_timeout=args.provider_timeout_seconds,
        max_millis=args.max_timeout_millis,
        explicit_gateway_id=args.rest_api_id,
        integration_types=(
            parse_integration_types(args.integration_types) if args.integration_types else None
        ),
    )


def _build_settings(args: argparse.Namespace) -> _Settings:
    project = _load_project(args)
    timeout = merge_timeout_configs(
        _flag_layer(args),
        timeout_config_from_environment(),
        project.timeout,
    )
    stage = args.stage or optional_env_var("APIGW_STAGE") or project.stage or DEFAULT_STAGE
    return _Settings(timeout=timeout, project=project, stage=stage)


def _resolve_workers(args: argparse.Namespace) -> int:
    workers = args.workers
    if workers is None:
        workers = optional_env_int("APIGW_PATCH_WORKERS")
    if workers is None:
        workers = 1
    if workers < 1:
        raise ValueError("Workers must be at least 1")
    return workers


def _print_plan(settings: _Settings) -> None:
    plan = preview(settings.timeout)
    log.info(
        "Stage %s: integration timeout %s ms (max %s ms)",
        settings.stage,
        plan.default.millis,
        plan.default.max_millis,
    )
    if plan.default.above_standard_limit:
        log.warning(
            "%s ms exceeds the standard 29000 ms quota; the account needs a raised quota",
            plan.default.millis,
        )
    for route, timeout in sorted(plan.overrides.items(), key=lambda item: str(item[0])):
        log.info("  %s: %s ms", route, timeout.millis)


def _reconcile(args: argparse.Namespace, settings: _Settings) -> None:
    service = args.service or optional_env_var("APIGW_SERVICE") or settings.project.service
    if not service:
        raise ConfigurationError("Missing service name (use --service or serverless.yml)")
    aws_config = get_aws_config(
        region=args.region,
        profile=args.profile,
        call_timeout_seconds=args.call_timeout_seconds,
        fallback_region=settings.project.region,
    )
    run(
        settings.timeout,
        settings.stage,
        aws_config.region,
        service=service,
        stack_name=args.stack_name,
        max_workers=_resolve_workers(args),
        aws_config=aws_config,
    )


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        settings = _build_settings(parsed_args)
        if parsed_args.command == "resolve":
            _print_plan(settings)
            return
        _reconcile(parsed_args, settings)
    except (ValueError, ConfigurationError):
        log.exception("Configuration error")
        sys.exit(2)
    except ReconciliationError as exc:
        if exc.applied_count:
            log.error(  # noqa: TRY400
                "%s integration(s) were already updated; re-running after the fix is safe",
                exc.applied_count,
            )
        log.exception("Timeout reconciliation failed")
        sys.exit(1)
    except Exception:
        log.exception("Fatal error during reconciliation")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def entrypoint() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    entrypoint()

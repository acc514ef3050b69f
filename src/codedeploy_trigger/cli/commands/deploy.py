"""CLI commands for triggering CodeDeploy deployments.

Implements the 'codedeploy-trigger run' command, which creates a deployment
and waits for it to finish, and 'codedeploy-trigger status', which reports
the state of an existing deployment.
"""

from __future__ import annotations

import signal
import sys
import threading
from collections.abc import Generator
from contextlib import contextmanager
from datetime import timedelta
from pathlib import Path
from types import FrameType
from typing import Any

import click
from pydantic import ValidationError as PydanticValidationError

from codedeploy_trigger.config.defaults import (
    DEFAULT_MAX_WAIT_DURATION,
    DEFAULT_POLL_INTERVAL,
    ENV_VAR_PREFIX,
)
from codedeploy_trigger.config.loader import load_config_file
from codedeploy_trigger.config.validator import to_validation_error
from codedeploy_trigger.deploy.appspec import serialize_appspec
from codedeploy_trigger.deploy.deployers import create_codedeploy_backend
from codedeploy_trigger.deploy.orchestrator import (
    DeploymentOrchestrator,
    load_appspec_content,
)
from codedeploy_trigger.deploy.revision import AppSpecRevision
from codedeploy_trigger.lib.errors import (
    ConfigError,
    DeploymentCancelledError,
    DeploymentError,
    ValidationError,
)
from codedeploy_trigger.lib.logging_config import get_logger, setup_logging
from codedeploy_trigger.lib.validation import format_duration, parse_duration
from codedeploy_trigger.models.deployment import (
    TERMINAL_FAILURE_STATUSES,
    DeploymentInfo,
    TargetType,
    TriggerConfig,
)

logger = get_logger(__name__)

EXIT_CONFIG_ERROR = 2
EXIT_DEPLOYMENT_ERROR = 3
EXIT_CANCELLED = 130

CANCEL_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class DurationParamType(click.ParamType):
    """Click parameter type for duration strings such as "30m" or "1h30m"."""

    name = "duration"

    def convert(
        self, value: Any, param: click.Parameter | None, ctx: click.Context | None
    ) -> timedelta:
        if isinstance(value, timedelta):
            return value
        try:
            return parse_duration(str(value))
        except ValueError as exc:
            self.fail(str(exc), param, ctx)


DURATION = DurationParamType()


def _envvar(name: str) -> str:
    return f"{ENV_VAR_PREFIX}_{name}"


def _load_config_defaults(
    ctx: click.Context, _param: click.Parameter, value: str | None
) -> str | None:
    """Load option defaults from a YAML file into the context's default map."""
    if not value:
        return value

    allowed_keys = {
        param.name
        for param in ctx.command.params
        if param.name and param.name != "config"
    }
    try:
        defaults = load_config_file(value, allowed_keys)
    except ConfigError as e:
        raise click.BadParameter(e.message, ctx=ctx, param=_param) from e

    ctx.default_map = {**defaults, **(ctx.default_map or {})}
    return value


@contextmanager
def handle_deployment_errors() -> Generator[None, None, None]:
    """Context manager for consistent error handling in deployment commands.

    Every failure is reported as a single line on stderr.

    Exit codes:
        2: Configuration or validation error
        3: Deployment error (stage, submit, wait, status)
        130: Wait cancelled by a signal
    """
    try:
        yield
    except (ConfigError, ValidationError) as e:
        logger.debug(f"Configuration error: {e}", exc_info=True)
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(EXIT_CONFIG_ERROR)
    except DeploymentCancelledError as e:
        logger.debug(f"Deployment wait cancelled: {e}")
        click.secho(f"Error: {e.message}", fg="yellow", err=True)
        sys.exit(EXIT_CANCELLED)
    except DeploymentError as e:
        logger.debug(f"Deployment error: {e}", exc_info=True)
        click.secho(f"Error: {e.operation} failed: {e.message}", fg="red", err=True)
        sys.exit(EXIT_DEPLOYMENT_ERROR)
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(EXIT_DEPLOYMENT_ERROR)


@contextmanager
def cancel_on_signals() -> Generator[threading.Event, None, None]:
    """Yield an event that is set when SIGINT or SIGTERM is received.

    Previous signal handlers are restored on exit. Outside the main thread
    signal handlers cannot be installed, so the event is only set by callers.
    """
    cancel_event = threading.Event()
    if threading.current_thread() is not threading.main_thread():
        yield cancel_event
        return

    def _handler(signum: int, _frame: FrameType | None) -> None:
        logger.warning(f"Received {signal.Signals(signum).name}, cancelling wait")
        cancel_event.set()

    previous = {sig: signal.signal(sig, _handler) for sig in CANCEL_SIGNALS}
    try:
        yield cancel_event
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)


def _build_trigger_config(**options: Any) -> TriggerConfig:
    """Validate command-line options into a TriggerConfig.

    Raises:
        ValidationError: If any option is missing or invalid
    """
    values = {key: value for key, value in options.items() if value is not None}
    try:
        return TriggerConfig(**values)
    except PydanticValidationError as exc:
        raise to_validation_error(exc) from exc


@click.command()
@click.option(
    "--config",
    type=click.Path(exists=True, dir_okay=False),
    is_eager=True,
    expose_value=False,
    callback=_load_config_defaults,
    help="YAML file with option defaults",
)
@click.option(
    "--application-name",
    type=str,
    envvar=_envvar("APPLICATION_NAME"),
    help="CodeDeploy application name",
)
@click.option(
    "--deployment-group-name",
    type=str,
    envvar=_envvar("DEPLOYMENT_GROUP_NAME"),
    help="CodeDeploy deployment group name",
)
@click.option(
    "--max-wait-duration",
    type=DURATION,
    default=format_duration(DEFAULT_MAX_WAIT_DURATION),
    show_default=True,
    envvar=_envvar("MAX_WAIT_DURATION"),
    help="Max wait duration for a deployment to finish",
)
@click.option(
    "--target",
    type=click.Choice([t.value for t in TargetType]),
    envvar=_envvar("TARGET"),
    help="Deployment target (if --appspec-file is unset)",
)
@click.option(
    "--appspec-file",
    type=str,
    envvar=_envvar("APPSPEC_FILE"),
    help="Custom AppSpec file name",
)
@click.option(
    "--task-definition-arn",
    type=str,
    envvar=_envvar("TASK_DEFINITION_ARN"),
    help="ECS task definition ARN (if --appspec-file is unset)",
)
@click.option(
    "--container-name",
    type=str,
    envvar=_envvar("CONTAINER_NAME"),
    help="ECS container name (if --appspec-file is unset)",
)
@click.option(
    "--container-port",
    type=int,
    default=0,
    envvar=_envvar("CONTAINER_PORT"),
    help="ECS container port (if --appspec-file is unset)",
)
@click.option(
    "--function-name",
    type=str,
    envvar=_envvar("FUNCTION_NAME"),
    help="Lambda function name (if --appspec-file is unset)",
)
@click.option(
    "--function-alias",
    type=str,
    envvar=_envvar("FUNCTION_ALIAS"),
    help="Lambda function alias (if --appspec-file is unset)",
)
@click.option(
    "--current-version",
    type=str,
    envvar=_envvar("CURRENT_VERSION"),
    help="Current Lambda function version (if --appspec-file is unset)",
)
@click.option(
    "--target-version",
    type=str,
    envvar=_envvar("TARGET_VERSION"),
    help="Target Lambda function version (if --appspec-file is unset)",
)
@click.option(
    "--region",
    type=str,
    envvar=_envvar("REGION"),
    help="AWS region (defaults to the AWS configuration)",
)
@click.option(
    "--profile",
    type=str,
    envvar=_envvar("PROFILE"),
    help="AWS shared credentials profile",
)
@click.option(
    "--poll-interval",
    type=DURATION,
    default=format_duration(DEFAULT_POLL_INTERVAL),
    show_default=True,
    envvar=_envvar("POLL_INTERVAL"),
    help="Delay between deployment status checks",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Print the AppSpec and its SHA-256 without creating a deployment",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose debug logging",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    help="Suppress progress output",
)
def run(
    application_name: str | None,
    deployment_group_name: str | None,
    max_wait_duration: timedelta,
    target: str | None,
    appspec_file: str | None,
    task_definition_arn: str | None,
    container_name: str | None,
    container_port: int,
    function_name: str | None,
    function_alias: str | None,
    current_version: str | None,
    target_version: str | None,
    region: str | None,
    profile: str | None,
    poll_interval: timedelta,
    dry_run: bool,
    verbose: bool,
    quiet: bool,
) -> None:
    """Create a CodeDeploy deployment and wait for it to finish.

    The AppSpec is built from the target options, or read unmodified from
    --appspec-file when given.

    Example:

        codedeploy-trigger run --application-name app \\
            --deployment-group-name group --appspec-file appspec.json

        codedeploy-trigger run --config trigger.yaml --dry-run
    """
    setup_logging(verbose=verbose, quiet=quiet)

    with handle_deployment_errors():
        config = _build_trigger_config(
            application_name=application_name,
            deployment_group_name=deployment_group_name,
            max_wait=max_wait_duration,
            poll_interval=poll_interval,
            target=target,
            appspec_file=appspec_file,
            task_definition_arn=task_definition_arn,
            container_name=container_name,
            container_port=container_port,
            function_name=function_name,
            function_alias=function_alias,
            current_version=current_version,
            target_version=target_version,
            region=region,
            profile=profile,
        )
        appspec = config.build_appspec()

        if dry_run:
            if appspec is not None:
                content = serialize_appspec(appspec)
            else:
                content = load_appspec_content(Path(str(config.appspec_file)))
            revision = AppSpecRevision.from_content(content)
            _display_dry_run(config, revision)
            return

        client, waiter = create_codedeploy_backend(
            region=config.region,
            profile=config.profile,
            poll_interval=config.poll_interval,
        )
        orchestrator = DeploymentOrchestrator(client, waiter)
        if appspec is not None:
            orchestrator.stage_appspec(appspec)
        else:
            orchestrator.stage_file(Path(str(config.appspec_file)))

        logger.info(
            f"creating deployment for application {config.application_name!r} "
            f"(group {config.deployment_group_name!r})"
        )
        deployment_id = orchestrator.submit(
            config.application_name, config.deployment_group_name
        )
        logger.info(f"deployment ID {deployment_id!r} created")
        logger.info(f"waiting for deployment ID {deployment_id!r} to finish")

        with cancel_on_signals() as cancel_event:
            orchestrator.await_completion(deployment_id, config.max_wait, cancel_event)

        logger.info("deployment finished successfully")

        if quiet:
            click.echo(deployment_id)
            return

        click.echo()
        click.secho("Deployment Successful!", fg="green", bold=True)
        click.echo(f"  Deployment:  {deployment_id}")
        click.echo(f"  Application: {config.application_name}")
        click.echo(f"  Group:       {config.deployment_group_name}")
        click.echo()


@click.command()
@click.argument("deployment_id")
@click.option(
    "--region",
    type=str,
    envvar=_envvar("REGION"),
    help="AWS region (defaults to the AWS configuration)",
)
@click.option(
    "--profile",
    type=str,
    envvar=_envvar("PROFILE"),
    help="AWS shared credentials profile",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose debug logging",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    help="Only print the deployment status",
)
def status(
    deployment_id: str,
    region: str | None,
    profile: str | None,
    verbose: bool,
    quiet: bool,
) -> None:
    """Show the status of an existing deployment.

    Exits with code 3 when the deployment failed or was stopped.
    """
    setup_logging(verbose=verbose, quiet=quiet)

    with handle_deployment_errors():
        client, _waiter = create_codedeploy_backend(region=region, profile=profile)
        lookup = client.get_deployment(deployment_id)
        if lookup.error is not None:
            raise DeploymentError(
                operation="status",
                message=f"cannot get deployment {deployment_id!r}: {lookup.error}",
            )

        info = lookup.info or DeploymentInfo(deployment_id=deployment_id)
        _display_status(deployment_id, info, quiet)

        if info.status in TERMINAL_FAILURE_STATUSES:
            sys.exit(EXIT_DEPLOYMENT_ERROR)


def _display_dry_run(config: TriggerConfig, revision: AppSpecRevision) -> None:
    """Display the AppSpec that would be submitted.

    Raises:
        SerializationError: If the content could not be submitted as a revision
    """
    location = revision.to_revision_location()
    click.secho("[DRY RUN] Would create deployment:", fg="yellow")
    click.echo(f"  Application: {config.application_name}")
    click.echo(f"  Group:       {config.deployment_group_name}")
    click.echo(f"  Max wait:    {format_duration(config.max_wait)}")
    click.echo(f"  SHA-256:     {revision.sha256}")
    click.echo()
    click.secho("AppSpec:", bold=True)
    click.echo(location["appSpecContent"]["content"])
    click.echo()
    click.secho("[DRY RUN] No deployment was created", fg="yellow")


def _display_status(deployment_id: str, info: DeploymentInfo, quiet: bool) -> None:
    """Display deployment status details."""
    status_text = info.status or "UNKNOWN"
    if quiet:
        click.echo(status_text)
        return

    click.echo()
    click.secho("Deployment Status", bold=True)
    click.echo(f"  Deployment:  {deployment_id}")
    click.echo(f"  Status:      {status_text}")
    if info.error_code:
        click.echo(f"  Error code:  {info.error_code}")
    if info.error_message:
        click.echo(f"  Error:       {info.error_message}")
    click.echo()

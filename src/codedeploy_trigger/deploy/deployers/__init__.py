"""Deployment service adapters for codedeploy-trigger."""

from __future__ import annotations

from datetime import timedelta

import boto3
from botocore.exceptions import BotoCoreError

from codedeploy_trigger.config.defaults import (
    CODEDEPLOY_SERVICE_NAME,
    DEFAULT_POLL_INTERVAL,
)
from codedeploy_trigger.deploy.deployers.aws_codedeploy import (
    CodeDeployClient,
    CodeDeploySuccessWaiter,
)
from codedeploy_trigger.deploy.deployers.base import (
    BaseDeploymentClient,
    BaseDeploymentWaiter,
    FileReader,
    read_file,
)
from codedeploy_trigger.lib.errors import ConfigError


def create_codedeploy_backend(
    region: str | None = None,
    profile: str | None = None,
    poll_interval: timedelta = DEFAULT_POLL_INTERVAL,
) -> tuple[CodeDeployClient, CodeDeploySuccessWaiter]:
    """Create the CodeDeploy client and waiter sharing one boto3 client.

    Args:
        region: AWS region; falls back to the default AWS configuration
        profile: Shared credentials profile; falls back to the default chain
        poll_interval: Delay between deployment status polls

    Returns:
        Tuple of (client, waiter)

    Raises:
        ConfigError: If the AWS session or client cannot be created
    """
    try:
        session = boto3.Session(region_name=region, profile_name=profile)
        client = session.client(CODEDEPLOY_SERVICE_NAME)
    except BotoCoreError as exc:
        raise ConfigError(
            field="aws", message=f"cannot load AWS configuration: {exc}"
        ) from exc

    return CodeDeployClient(client), CodeDeploySuccessWaiter(client, poll_interval)


__all__ = [
    "BaseDeploymentClient",
    "BaseDeploymentWaiter",
    "CodeDeployClient",
    "CodeDeploySuccessWaiter",
    "FileReader",
    "create_codedeploy_backend",
    "read_file",
]

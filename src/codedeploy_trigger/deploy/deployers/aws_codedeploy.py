"""AWS CodeDeploy adapters backed by boto3."""

from __future__ import annotations

import threading
import time
from datetime import timedelta

from botocore.client import BaseClient
from botocore.exceptions import BotoCoreError, ClientError

from codedeploy_trigger.config.defaults import DEFAULT_POLL_INTERVAL
from codedeploy_trigger.deploy.deployers.base import (
    BaseDeploymentClient,
    BaseDeploymentWaiter,
)
from codedeploy_trigger.deploy.revision import (
    AppSpecRevision,
    build_create_deployment_request,
)
from codedeploy_trigger.lib.errors import DeploymentCancelledError, WaitError
from codedeploy_trigger.lib.logging_config import get_logger
from codedeploy_trigger.lib.validation import format_duration
from codedeploy_trigger.models.deployment import (
    TERMINAL_FAILURE_STATUSES,
    DeploymentInfo,
    DeploymentLookup,
    DeploymentStatus,
)

logger = get_logger(__name__)

DEPLOYMENT_DOES_NOT_EXIST = "DeploymentDoesNotExistException"
WAITER_NAME = "DeploymentSuccessful"


class CodeDeployClient(BaseDeploymentClient):
    """Submit and look up deployments through the CodeDeploy API."""

    def __init__(self, client: BaseClient) -> None:
        """Initialize with a boto3 ``codedeploy`` client."""
        self._client = client

    def create_deployment(
        self,
        *,
        application_name: str,
        deployment_group_name: str,
        revision: AppSpecRevision,
    ) -> str:
        """Call CreateDeployment with the revision inline."""
        request = build_create_deployment_request(
            application_name, deployment_group_name, revision
        )
        logger.debug(
            f"CreateDeployment for {application_name}/{deployment_group_name} "
            f"(sha256 {revision.sha256})"
        )
        response = self._client.create_deployment(**request)
        return str(response["deploymentId"])

    def get_deployment(self, deployment_id: str) -> DeploymentLookup:
        """Call GetDeployment, keeping both the parsed body and any error."""
        try:
            response = self._client.get_deployment(deploymentId=deployment_id)
        except ClientError as exc:
            return DeploymentLookup(
                info=DeploymentInfo.from_response(dict(exc.response)), error=exc
            )
        except BotoCoreError as exc:
            return DeploymentLookup(error=exc)

        return DeploymentLookup(info=DeploymentInfo.from_response(dict(response)))


class CodeDeploySuccessWaiter(BaseDeploymentWaiter):
    """Poll GetDeployment until the deployment succeeds.

    Uses the acceptors of the botocore DeploymentSuccessful waiter: status
    "Succeeded" ends the wait, "Failed" and "Stopped" fail it, and so does a
    DeploymentDoesNotExistException. Polling sleeps on the cancel event, so
    setting it ends the wait without waiting for the next poll.
    """

    def __init__(
        self,
        client: BaseClient,
        poll_interval: timedelta = DEFAULT_POLL_INTERVAL,
    ) -> None:
        """Initialize with a boto3 ``codedeploy`` client and polling delay."""
        self._client = client
        self._poll_interval = poll_interval.total_seconds()

    def wait(
        self,
        deployment_id: str,
        max_wait: timedelta,
        cancel_event: threading.Event | None = None,
    ) -> None:
        """Poll until the deployment succeeds, fails, or max_wait elapses."""
        cancel_event = cancel_event or threading.Event()
        deadline = time.monotonic() + max_wait.total_seconds()
        attempt = 0

        while True:
            if cancel_event.is_set():
                raise DeploymentCancelledError(deployment_id)

            attempt += 1
            status = self._poll_status(deployment_id)
            logger.debug(
                f"Deployment {deployment_id} status {status} (attempt {attempt})"
            )

            if status == DeploymentStatus.SUCCEEDED.value:
                return
            if status in TERMINAL_FAILURE_STATUSES:
                raise WaitError(
                    deployment_id,
                    f"waiter state transitioned to Failure "
                    f"(deployment status {status})",
                )

            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise WaitError(
                    deployment_id,
                    f"exceeded max wait time for {WAITER_NAME} waiter "
                    f"({format_duration(max_wait)})",
                )

            if cancel_event.wait(min(self._poll_interval, remaining)):
                raise DeploymentCancelledError(deployment_id)

    def _poll_status(self, deployment_id: str) -> str | None:
        try:
            response = self._client.get_deployment(deploymentId=deployment_id)
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code")
            if code == DEPLOYMENT_DOES_NOT_EXIST:
                raise WaitError(
                    deployment_id,
                    "waiter state transitioned to Failure "
                    f"({DEPLOYMENT_DOES_NOT_EXIST})",
                ) from exc
            raise WaitError(
                deployment_id, f"failed to poll deployment status: {exc}"
            ) from exc
        except BotoCoreError as exc:
            raise WaitError(
                deployment_id, f"failed to poll deployment status: {exc}"
            ) from exc

        return response.get("deploymentInfo", {}).get("status")

"""Deployment orchestration for a single CodeDeploy deployment.

A DeploymentOrchestrator owns one deployment lifecycle: it stages AppSpec
content, submits it as an inline revision, and waits for the deployment to
reach a terminal state.
"""

from __future__ import annotations

import threading
from datetime import timedelta
from pathlib import Path

from codedeploy_trigger.deploy.appspec import serialize_appspec
from codedeploy_trigger.deploy.deployers.base import (
    BaseDeploymentClient,
    BaseDeploymentWaiter,
    FileReader,
    read_file,
)
from codedeploy_trigger.deploy.revision import AppSpecRevision
from codedeploy_trigger.lib.errors import (
    DeploymentCancelledError,
    EmptyInputError,
    FileReadError,
    NotStagedError,
    SubmissionError,
    WaitError,
)
from codedeploy_trigger.lib.logging_config import get_logger
from codedeploy_trigger.lib.validation import format_duration
from codedeploy_trigger.models.appspec import AppSpec
from codedeploy_trigger.models.deployment import DeploymentPhase

logger = get_logger(__name__)


def load_appspec_content(
    path: str | Path, file_reader: FileReader = read_file
) -> bytes:
    """Read AppSpec content from a file without modifying it.

    Raises:
        FileReadError: If the file cannot be read
        EmptyInputError: If the file is empty
    """
    file_path = Path(path)
    try:
        content = file_reader(file_path)
    except Exception as exc:
        raise FileReadError(file_path, exc) from exc

    if not content:
        raise EmptyInputError(f"file {str(file_path)!r}")

    logger.debug(f"Read {len(content)} bytes of app spec from {file_path}")
    return content


class DeploymentOrchestrator:
    """Stage, submit and await a single CodeDeploy deployment.

    Only one AppSpec is staged at a time; staging again replaces it. The
    staged content is kept after submission.

    Attributes:
        client: Service client used to create and look up deployments
        waiter: Waiter that blocks until the deployment succeeds
        file_reader: Function reading AppSpec files for stage_file
    """

    def __init__(
        self,
        client: BaseDeploymentClient,
        waiter: BaseDeploymentWaiter,
        file_reader: FileReader = read_file,
    ) -> None:
        """Initialize the orchestrator with its service collaborators."""
        self.client = client
        self.waiter = waiter
        self.file_reader = file_reader
        self._content: bytes | None = None
        self._phase = DeploymentPhase.EMPTY

    @property
    def phase(self) -> DeploymentPhase:
        """Current lifecycle phase."""
        return self._phase

    @property
    def staged_content(self) -> bytes | None:
        """AppSpec bytes that the next submit will send."""
        return self._content

    def stage(self, content: bytes | None) -> DeploymentOrchestrator:
        """Stage raw AppSpec bytes verbatim.

        Raises:
            EmptyInputError: If content is None or empty
        """
        if not content:
            raise EmptyInputError("app spec content")

        self._content = content
        self._phase = DeploymentPhase.STAGED
        return self

    def stage_appspec(self, appspec: AppSpec) -> DeploymentOrchestrator:
        """Serialize an AppSpec and stage the resulting bytes."""
        return self.stage(serialize_appspec(appspec))

    def stage_file(self, path: str | Path) -> DeploymentOrchestrator:
        """Read an AppSpec file and stage its content unmodified.

        Raises:
            FileReadError: If the file cannot be read
            EmptyInputError: If the file is empty
        """
        return self.stage(load_appspec_content(path, self.file_reader))

    def submit(self, application_name: str, deployment_group_name: str) -> str:
        """Create a deployment for the staged AppSpec.

        Args:
            application_name: CodeDeploy application name
            deployment_group_name: CodeDeploy deployment group name

        Returns:
            Deployment identifier

        Raises:
            NotStagedError: If nothing has been staged
            SerializationError: If the staged content is not valid UTF-8
            SubmissionError: If the CreateDeployment call fails
        """
        if self._content is None:
            raise NotStagedError()

        revision = AppSpecRevision.from_content(self._content)
        # Validates the content encoding before any service call
        revision.to_revision_location()

        try:
            deployment_id = self.client.create_deployment(
                application_name=application_name,
                deployment_group_name=deployment_group_name,
                revision=revision,
            )
        except Exception as exc:
            raise SubmissionError(f"cannot create deployment: {exc}") from exc

        self._phase = DeploymentPhase.SUBMITTED
        return deployment_id

    def await_completion(
        self,
        deployment_id: str,
        max_wait: timedelta,
        cancel_event: threading.Event | None = None,
    ) -> None:
        """Wait for a deployment to succeed.

        When the wait fails, the deployment is looked up once. The error
        detail from that lookup is prepended to the wait error only if the
        lookup returned deployment info with an error message and the lookup
        call itself also reported an error. Otherwise the wait error is
        raised unchanged.

        Args:
            deployment_id: Identifier returned by submit
            max_wait: Maximum time to wait
            cancel_event: Event that, once set, cancels the wait

        Raises:
            DeploymentCancelledError: If the wait was cancelled
            WaitError: If the deployment failed or the wait timed out
        """
        logger.debug(
            f"Waiting up to {format_duration(max_wait)} for deployment "
            f"{deployment_id}"
        )
        try:
            self.waiter.wait(deployment_id, max_wait, cancel_event)
        except DeploymentCancelledError:
            self._phase = DeploymentPhase.FAILED
            raise
        except Exception as exc:
            self._phase = DeploymentPhase.FAILED
            lookup = self.client.get_deployment(deployment_id)
            if (
                lookup.info is not None
                and lookup.info.error_message
                and lookup.error is not None
            ):
                detail = lookup.info.error_message
                raise WaitError(
                    deployment_id, f"{detail} ({exc})", detail=detail
                ) from exc
            raise

        self._phase = DeploymentPhase.SUCCEEDED

"""Base interfaces for deployment service adapters."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import timedelta
from pathlib import Path

from codedeploy_trigger.deploy.revision import AppSpecRevision
from codedeploy_trigger.models.deployment import DeploymentLookup

FileReader = Callable[[Path], bytes]


def read_file(path: Path) -> bytes:
    """Read a file's raw bytes."""
    return Path(path).read_bytes()


class BaseDeploymentClient(ABC):
    """Abstract base class for deployment service clients."""

    @abstractmethod
    def create_deployment(
        self,
        *,
        application_name: str,
        deployment_group_name: str,
        revision: AppSpecRevision,
    ) -> str:
        """Submit a deployment and return its identifier.

        Args:
            application_name: Application to deploy
            deployment_group_name: Deployment group within the application
            revision: Inline AppSpec content and its SHA-256 digest

        Returns:
            Deployment identifier assigned by the service

        Raises:
            Exception: Any failure reported by the service or transport
        """

    @abstractmethod
    def get_deployment(self, deployment_id: str) -> DeploymentLookup:
        """Look up a deployment by identifier.

        Implementations report failures through ``DeploymentLookup.error``
        instead of raising, keeping any partial response in ``info``.

        Args:
            deployment_id: Identifier returned by create_deployment

        Returns:
            DeploymentLookup with the parsed info and/or the call's error
        """


class BaseDeploymentWaiter(ABC):
    """Abstract base class for deployment completion waiters."""

    @abstractmethod
    def wait(
        self,
        deployment_id: str,
        max_wait: timedelta,
        cancel_event: threading.Event | None = None,
    ) -> None:
        """Block until the deployment succeeds.

        Args:
            deployment_id: Deployment to wait for
            max_wait: Maximum time to wait before giving up
            cancel_event: Event that, once set, ends the wait early

        Raises:
            WaitError: If the deployment fails or the wait times out
            DeploymentCancelledError: If cancel_event is set while waiting
        """

"""Pytest configuration and shared fixtures for codedeploy-trigger tests."""

from collections.abc import Generator
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from codedeploy_trigger.deploy.deployers.base import (
    BaseDeploymentClient,
    BaseDeploymentWaiter,
)
from codedeploy_trigger.models.deployment import DeploymentLookup


@pytest.fixture
def mock_client() -> MagicMock:
    """Deployment client double returning a fixed deployment ID.

    get_deployment returns an empty lookup unless a test overrides it.
    """
    client = MagicMock(spec=BaseDeploymentClient)
    client.create_deployment.return_value = "d-EXAMPLE123"
    client.get_deployment.return_value = DeploymentLookup()
    return client


@pytest.fixture
def mock_waiter() -> MagicMock:
    """Waiter double that succeeds immediately."""
    waiter = MagicMock(spec=BaseDeploymentWaiter)
    waiter.wait.return_value = None
    return waiter


@pytest.fixture
def appspec_file(tmp_path: Path) -> Generator[Path, None, None]:
    """Write a custom AppSpec file with deliberately non-canonical formatting."""
    path = tmp_path / "appspec.json"
    path.write_bytes(
        b'{ "version": "0.0",\n  "Resources": [ { "TargetService": '
        b'{ "Type": "AWS::ECS::Service", "Properties": '
        b'{ "TaskDefinition": "arn:aws:ecs:task-definition/web:7", '
        b'"LoadBalancerInfo": { "ContainerName": "web", "ContainerPort": 80 } '
        b'} } } ] }\n'
    )
    yield path

"""Deployment engine for codedeploy-trigger.

This package builds AppSpec documents, packages them as inline revisions,
and orchestrates their submission to AWS CodeDeploy.
"""

from codedeploy_trigger.deploy.appspec import (
    new_ecs_appspec,
    new_lambda_appspec,
    serialize_appspec,
)
from codedeploy_trigger.deploy.orchestrator import (
    DeploymentOrchestrator,
    load_appspec_content,
)
from codedeploy_trigger.deploy.revision import (
    AppSpecRevision,
    build_create_deployment_request,
    compute_sha256,
)

__all__ = [
    "AppSpecRevision",
    "DeploymentOrchestrator",
    "build_create_deployment_request",
    "compute_sha256",
    "load_appspec_content",
    "new_ecs_appspec",
    "new_lambda_appspec",
    "serialize_appspec",
]

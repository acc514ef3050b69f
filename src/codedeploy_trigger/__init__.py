"""codedeploy-trigger - Create AWS CodeDeploy deployments and wait for them.

Builds an AppSpec for an ECS service or Lambda function deployment (or reads
a custom AppSpec file), submits it to CodeDeploy as an inline revision, and
waits until the deployment succeeds or fails.
"""

from codedeploy_trigger.lib.errors import (
    CodeDeployTriggerError,
    ConfigError,
    DeploymentError,
    ValidationError,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "CodeDeployTriggerError",
    "ConfigError",
    "DeploymentError",
    "ValidationError",
]

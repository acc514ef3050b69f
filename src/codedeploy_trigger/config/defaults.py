"""Default configuration values for codedeploy-trigger."""

from datetime import timedelta

# Maximum time to wait for a deployment to reach a terminal state
DEFAULT_MAX_WAIT_DURATION = timedelta(minutes=30)

# Delay between GetDeployment polls (matches the DeploymentSuccessful waiter)
DEFAULT_POLL_INTERVAL = timedelta(seconds=15)

# Prefix for environment variables backing CLI options
ENV_VAR_PREFIX = "CODEDEPLOY_TRIGGER"

# AWS service name used when creating the boto3 client
CODEDEPLOY_SERVICE_NAME = "codedeploy"

"""AppSpec construction and serialization.

The builders create an AppSpec with commonly used defaults for ECS service
and Lambda function deployments. They perform no validation; input is
checked at the command-line boundary.
"""

from __future__ import annotations

from pydantic_core import PydanticSerializationError

from codedeploy_trigger.lib.errors import SerializationError
from codedeploy_trigger.models.appspec import (
    APPSPEC_VERSION,
    AppSpec,
    ECSProperties,
    ECSTargetService,
    LambdaProperties,
    LambdaTargetService,
    LoadBalancerInfo,
    Resource,
)


def new_ecs_appspec(
    task_definition_arn: str, container_name: str, container_port: int
) -> AppSpec:
    """Create an AppSpec for an ECS service deployment.

    Args:
        task_definition_arn: ARN of the task definition to deploy
        container_name: Container receiving load balancer traffic
        container_port: Port of that container

    Returns:
        AppSpec with a single ECS service resource
    """
    return AppSpec(
        version=APPSPEC_VERSION,
        resources=[
            Resource(
                target_service=ECSTargetService(
                    properties=ECSProperties(
                        task_definition=task_definition_arn,
                        load_balancer_info=LoadBalancerInfo(
                            container_name=container_name,
                            container_port=container_port,
                        ),
                    ),
                )
            )
        ],
    )


def new_lambda_appspec(
    function_name: str,
    function_alias: str,
    current_version: str,
    target_version: str,
) -> AppSpec:
    """Create an AppSpec for a Lambda function deployment.

    Args:
        function_name: Name of the Lambda function
        function_alias: Alias shifted between versions
        current_version: Version the alias currently points to
        target_version: Version the alias should point to afterwards

    Returns:
        AppSpec with a single Lambda function resource
    """
    return AppSpec(
        version=APPSPEC_VERSION,
        resources=[
            Resource(
                target_service=LambdaTargetService(
                    properties=LambdaProperties(
                        function_name=function_name,
                        function_alias=function_alias,
                        current_version=current_version,
                        target_version=target_version,
                    ),
                )
            )
        ],
    )


def serialize_appspec(appspec: AppSpec) -> bytes:
    """Serialize an AppSpec to compact JSON bytes.

    Field order follows the model definitions, so repeated calls on the same
    AppSpec produce identical bytes.

    Raises:
        SerializationError: If the AppSpec cannot be serialized
    """
    try:
        return appspec.model_dump_json(by_alias=True).encode("utf-8")
    except PydanticSerializationError as exc:
        raise SerializationError(f"cannot marshal JSON: {exc}") from exc

"""Pydantic models for the CodeDeploy AppSpec document.

The AppSpec describes what to deploy and where. Each resource names a target
service whose ``Type`` decides the shape of its ``Properties``; the two
supported shapes are modelled as variants of a discriminated union so the
tag and the properties can never disagree.

Reference: https://docs.aws.amazon.com/codedeploy/latest/userguide/reference-appspec-file.html
"""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

APPSPEC_VERSION = "0.0"

ECS_SERVICE_TYPE = "AWS::ECS::Service"
LAMBDA_FUNCTION_TYPE = "AWS::Lambda::Function"


class AppSpecModel(BaseModel):
    """Base model for AppSpec nodes serialized under their AppSpec key names."""

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)


class LoadBalancerInfo(AppSpecModel):
    """Load balancer binding for an ECS service.

    Attributes:
        container_name: Name of the container receiving traffic
        container_port: Port the container listens on
    """

    container_name: str = Field(..., alias="ContainerName")
    container_port: int = Field(..., alias="ContainerPort")


class ECSProperties(AppSpecModel):
    """Properties of an ECS service target."""

    task_definition: str = Field(
        ..., alias="TaskDefinition", description="Task definition ARN"
    )
    load_balancer_info: LoadBalancerInfo = Field(..., alias="LoadBalancerInfo")


class LambdaProperties(AppSpecModel):
    """Properties of a Lambda function target."""

    function_name: str = Field(..., alias="Name")
    function_alias: str = Field(..., alias="Alias")
    current_version: str = Field(..., alias="CurrentVersion")
    target_version: str = Field(..., alias="TargetVersion")


class ECSTargetService(AppSpecModel):
    """Target service entry for an ECS service deployment."""

    type: Literal["AWS::ECS::Service"] = Field(default=ECS_SERVICE_TYPE, alias="Type")
    properties: ECSProperties = Field(..., alias="Properties")


class LambdaTargetService(AppSpecModel):
    """Target service entry for a Lambda function deployment."""

    type: Literal["AWS::Lambda::Function"] = Field(
        default=LAMBDA_FUNCTION_TYPE, alias="Type"
    )
    properties: LambdaProperties = Field(..., alias="Properties")


TargetService = Annotated[
    ECSTargetService | LambdaTargetService, Field(discriminator="type")
]


class Resource(AppSpecModel):
    """A single AppSpec resource wrapping its target service."""

    target_service: TargetService = Field(..., alias="TargetService")


class AppSpec(AppSpecModel):
    """Application specification submitted to CodeDeploy.

    Attributes:
        version: AppSpec schema version (always "0.0")
        resources: Ordered resources; the builders create exactly one
    """

    version: str = Field(default=APPSPEC_VERSION, alias="version")
    resources: list[Resource] = Field(default_factory=list, alias="Resources")

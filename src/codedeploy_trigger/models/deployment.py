"""Pydantic models for deployment configuration and status.

This module defines the validated trigger configuration built from the
command line, along with the models describing a deployment's state as
reported by CodeDeploy.
"""

from __future__ import annotations

from datetime import timedelta
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from codedeploy_trigger.config.defaults import (
    DEFAULT_MAX_WAIT_DURATION,
    DEFAULT_POLL_INTERVAL,
)
from codedeploy_trigger.lib.validation import MAX_PORT, MIN_PORT
from codedeploy_trigger.models.appspec import AppSpec


class TargetType(str, Enum):
    """Deployment targets supported by the AppSpec builders."""

    ECS = "ECS"
    LAMBDA = "Lambda"


class DeploymentPhase(str, Enum):
    """Lifecycle phases of a single deployment orchestration."""

    EMPTY = "empty"
    STAGED = "staged"
    SUBMITTED = "submitted"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class DeploymentStatus(str, Enum):
    """Deployment statuses reported by CodeDeploy."""

    CREATED = "Created"
    QUEUED = "Queued"
    IN_PROGRESS = "InProgress"
    BAKING = "Baking"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    STOPPED = "Stopped"
    READY = "Ready"


TERMINAL_FAILURE_STATUSES = frozenset(
    {DeploymentStatus.FAILED.value, DeploymentStatus.STOPPED.value}
)


class DeploymentInfo(BaseModel):
    """Subset of CodeDeploy's deploymentInfo used for status reporting.

    Attributes:
        deployment_id: CodeDeploy deployment identifier
        status: Current deployment status (e.g. "InProgress", "Failed")
        error_code: Error code reported for a failed deployment
        error_message: Human-readable failure reason
    """

    model_config = ConfigDict(extra="forbid")

    deployment_id: str | None = Field(default=None, description="Deployment ID")
    status: str | None = Field(default=None, description="Deployment status")
    error_code: str | None = Field(default=None, description="Error code")
    error_message: str | None = Field(default=None, description="Error message")

    @classmethod
    def from_response(cls, response: dict[str, Any] | None) -> DeploymentInfo | None:
        """Build from a GetDeployment response, or None if it has no deploymentInfo."""
        if not response:
            return None
        info = response.get("deploymentInfo")
        if not info:
            return None
        error_information = info.get("errorInformation") or {}
        return cls(
            deployment_id=info.get("deploymentId"),
            status=info.get("status"),
            error_code=error_information.get("code"),
            error_message=error_information.get("message"),
        )


class DeploymentLookup(BaseModel):
    """Outcome of a GetDeployment call.

    Both fields can be set together: a failed call may still carry a parsed
    response body.

    Attributes:
        info: Parsed deployment information, if any was returned
        error: Error raised by the call, if it failed
    """

    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    info: DeploymentInfo | None = None
    error: Exception | None = None


class TriggerConfig(BaseModel):
    """Validated input for a single deployment trigger.

    Attributes:
        application_name: CodeDeploy application name
        deployment_group_name: CodeDeploy deployment group name
        max_wait: Max wait duration for a deployment to finish
        poll_interval: Delay between deployment status polls
        appspec_file: Custom AppSpec file; structured fields are ignored if set
        target: Deployment target when no AppSpec file is given
        task_definition_arn: ECS task definition ARN
        container_name: ECS container name
        container_port: ECS container port
        function_name: Lambda function name
        function_alias: Lambda function alias
        current_version: Current Lambda function version
        target_version: Target Lambda function version
        region: AWS region override
        profile: AWS shared credentials profile
    """

    model_config = ConfigDict(extra="forbid")

    application_name: str = Field(
        ..., min_length=1, description="CodeDeploy application name"
    )
    deployment_group_name: str = Field(
        ..., min_length=1, description="CodeDeploy deployment group name"
    )
    max_wait: timedelta = Field(
        default=DEFAULT_MAX_WAIT_DURATION,
        description="Max wait duration for a deployment to finish",
    )
    poll_interval: timedelta = Field(
        default=DEFAULT_POLL_INTERVAL,
        description="Delay between deployment status polls",
    )
    appspec_file: Path | None = Field(
        default=None, description="Custom AppSpec file name"
    )
    target: TargetType | None = Field(default=None, description="Deployment target")
    task_definition_arn: str | None = Field(
        default=None, description="ECS task definition ARN"
    )
    container_name: str | None = Field(default=None, description="ECS container name")
    container_port: int = Field(
        default=0, ge=MIN_PORT, le=MAX_PORT, description="ECS container port"
    )
    function_name: str | None = Field(default=None, description="Lambda function name")
    function_alias: str | None = Field(
        default=None, description="Lambda function alias"
    )
    current_version: str | None = Field(
        default=None, description="Current Lambda function version"
    )
    target_version: str | None = Field(
        default=None, description="Target Lambda function version"
    )
    region: str | None = Field(default=None, description="AWS region")
    profile: str | None = Field(default=None, description="AWS profile name")

    @field_validator("appspec_file", mode="before")
    @classmethod
    def validate_appspec_file(cls, v: object) -> object:
        """Reject an explicitly empty AppSpec file name."""
        if isinstance(v, str) and not v.strip():
            raise ValueError("must not be empty")
        return v

    @field_validator("max_wait", "poll_interval")
    @classmethod
    def validate_positive_duration(cls, v: timedelta) -> timedelta:
        """Validate that durations are greater than zero."""
        if v <= timedelta(0):
            raise ValueError("must be greater than zero")
        return v

    @model_validator(mode="after")
    def validate_target_fields(self) -> TriggerConfig:
        """Validate that the fields required by the selected target are set."""
        if self.appspec_file is not None:
            return self

        if self.target is None:
            raise ValueError(
                f"target must be either '{TargetType.ECS.value}' or "
                f"'{TargetType.LAMBDA.value}' when appspec_file is unset"
            )

        if self.target == TargetType.ECS:
            required = ("task_definition_arn", "container_name")
        else:
            required = (
                "function_name",
                "function_alias",
                "current_version",
                "target_version",
            )

        for field_name in required:
            if not getattr(self, field_name):
                raise ValueError(
                    f"{field_name} must not be empty for target "
                    f"'{self.target.value}'"
                )
        return self

    def build_appspec(self) -> AppSpec | None:
        """Build the AppSpec for the configured target.

        Returns:
            The constructed AppSpec, or None when a custom AppSpec file is used
        """
        from codedeploy_trigger.deploy.appspec import (
            new_ecs_appspec,
            new_lambda_appspec,
        )

        if self.appspec_file is not None:
            return None

        if self.target == TargetType.ECS:
            return new_ecs_appspec(
                self.task_definition_arn or "",
                self.container_name or "",
                self.container_port,
            )

        return new_lambda_appspec(
            self.function_name or "",
            self.function_alias or "",
            self.current_version or "",
            self.target_version or "",
        )

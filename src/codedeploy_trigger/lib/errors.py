"""Custom exception hierarchy for codedeploy-trigger operations."""

from __future__ import annotations

from pathlib import Path


class CodeDeployTriggerError(Exception):
    """Base exception for all codedeploy-trigger errors.

    All project-specific exceptions inherit from this class, enabling
    centralized exception handling in the CLI.
    """

    pass


class ConfigError(CodeDeployTriggerError):
    """Exception raised for configuration errors.

    Raised when a configuration file cannot be loaded or parsed, or when the
    AWS session cannot be created from the supplied settings.

    Attributes:
        field: The configuration field that caused the error
        message: Human-readable error message describing the issue
    """

    def __init__(self, field: str, message: str) -> None:
        """Initialize ConfigError with field and message.

        Args:
            field: Configuration field name where error occurred
            message: Descriptive error message
        """
        self.field = field
        self.message = message
        super().__init__(f"Configuration error in '{field}': {message}")


class ValidationError(CodeDeployTriggerError):
    """Exception raised when command-line input fails validation.

    No deployment is attempted once this error is raised.

    Attributes:
        field: The field that failed validation
        message: Description of the validation failure
        expected: Human description of expected value/type
        actual: The actual value that failed validation
    """

    def __init__(
        self,
        field: str,
        message: str,
        expected: str | None = None,
        actual: str | None = None,
    ) -> None:
        """Initialize ValidationError with detailed information.

        Args:
            field: Field that failed validation
            message: Description of what went wrong
            expected: Human-readable description of expected value
            actual: The actual value that failed
        """
        self.field = field
        self.message = message
        self.expected = expected
        self.actual = actual
        full_message = f"Validation error in '{field}': {message}"
        if expected is not None:
            full_message += f" (expected: {expected})"
        if actual is not None:
            full_message += f" (got: {actual})"
        super().__init__(full_message)


class DeploymentError(CodeDeployTriggerError):
    """Exception raised when a deployment operation fails.

    Attributes:
        operation: Lifecycle step that failed (stage, serialize, submit, wait)
        message: Human-readable error message
    """

    def __init__(self, operation: str, message: str) -> None:
        """Create a deployment error for the given operation."""
        self.operation = operation
        self.message = message
        super().__init__(message)


class EmptyInputError(DeploymentError):
    """Exception raised when staging is attempted without any AppSpec content."""

    def __init__(self, source: str = "input") -> None:
        """Create an empty input error naming the content source."""
        self.source = source
        super().__init__(
            operation="stage",
            message=f"cannot stage app spec: {source} is empty",
        )


class FileReadError(DeploymentError):
    """Exception raised when an AppSpec file cannot be read.

    Attributes:
        path: Path of the file that could not be read
        cause: The underlying I/O error
    """

    def __init__(self, path: str | Path, cause: Exception) -> None:
        """Create a file read error wrapping the underlying cause."""
        self.path = str(path)
        self.cause = cause
        super().__init__(operation="stage", message=f"cannot read file: {cause}")


class SerializationError(DeploymentError):
    """Exception raised when an AppSpec cannot be turned into bytes."""

    def __init__(self, message: str) -> None:
        """Create a serialization error."""
        super().__init__(operation="serialize", message=message)


class NotStagedError(DeploymentError):
    """Exception raised when submitting before any AppSpec was staged."""

    def __init__(self) -> None:
        """Create a not-staged error."""
        super().__init__(
            operation="submit",
            message="cannot create deployment: app spec is empty",
        )


class SubmissionError(DeploymentError):
    """Exception raised when the CreateDeployment call fails."""

    def __init__(self, message: str) -> None:
        """Create a submission error."""
        super().__init__(operation="submit", message=message)


class WaitError(DeploymentError):
    """Exception raised when a deployment fails or the wait times out.

    Attributes:
        deployment_id: Deployment the wait was performed for
        detail: Error detail reported by CodeDeploy, when it was folded in
    """

    def __init__(
        self, deployment_id: str, message: str, detail: str | None = None
    ) -> None:
        """Create a wait error for a deployment."""
        self.deployment_id = deployment_id
        self.detail = detail
        super().__init__(operation="wait", message=message)


class DeploymentCancelledError(DeploymentError):
    """Exception raised when the caller cancels a wait.

    Kept apart from WaitError: a cancelled wait says nothing about the
    deployment itself, so no status lookup follows it.
    """

    def __init__(self, deployment_id: str) -> None:
        """Create a cancellation error for a deployment."""
        self.deployment_id = deployment_id
        super().__init__(
            operation="wait",
            message=f"waiting for deployment {deployment_id!r} was cancelled",
        )

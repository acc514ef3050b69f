"""Unit tests for DeploymentOrchestrator.

Tests cover:
- Staging raw bytes, AppSpecs and files
- Submission preconditions and error wrapping
- Waiting, including the error-detail enrichment gate and cancellation
"""

from __future__ import annotations

import threading
from datetime import timedelta
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from codedeploy_trigger.deploy.appspec import new_ecs_appspec, serialize_appspec
from codedeploy_trigger.deploy.orchestrator import (
    DeploymentOrchestrator,
    load_appspec_content,
)
from codedeploy_trigger.deploy.revision import AppSpecRevision, compute_sha256
from codedeploy_trigger.lib.errors import (
    DeploymentCancelledError,
    EmptyInputError,
    FileReadError,
    NotStagedError,
    SerializationError,
    SubmissionError,
    WaitError,
)
from codedeploy_trigger.models.deployment import (
    DeploymentInfo,
    DeploymentLookup,
    DeploymentPhase,
)

MAX_WAIT = timedelta(minutes=1)


@pytest.fixture
def orchestrator(
    mock_client: MagicMock, mock_waiter: MagicMock
) -> DeploymentOrchestrator:
    """Create an orchestrator wired to mocked collaborators."""
    return DeploymentOrchestrator(mock_client, mock_waiter)


class TestStage:
    """Tests for staging AppSpec content."""

    def test_initial_state_is_empty(
        self, orchestrator: DeploymentOrchestrator
    ) -> None:
        """Test a new orchestrator has nothing staged."""
        assert orchestrator.phase == DeploymentPhase.EMPTY
        assert orchestrator.staged_content is None

    def test_stage_stores_bytes_verbatim(
        self, orchestrator: DeploymentOrchestrator
    ) -> None:
        """Test staged bytes are kept exactly as given."""
        content = b'{ "version" : "0.0" }\n'

        result = orchestrator.stage(content)

        assert result is orchestrator
        assert orchestrator.staged_content is content
        assert orchestrator.phase == DeploymentPhase.STAGED

    @pytest.mark.parametrize("content", [b"", None])
    def test_stage_rejects_empty_content(
        self, orchestrator: DeploymentOrchestrator, content: bytes | None
    ) -> None:
        """Test empty content cannot be staged."""
        with pytest.raises(EmptyInputError):
            orchestrator.stage(content)

        assert orchestrator.phase == DeploymentPhase.EMPTY

    def test_restage_overwrites_previous_content(
        self, orchestrator: DeploymentOrchestrator
    ) -> None:
        """Test only the most recently staged AppSpec is kept."""
        orchestrator.stage(b"first")
        orchestrator.stage(b"second")

        assert orchestrator.staged_content == b"second"

    def test_stage_appspec_serializes(
        self, orchestrator: DeploymentOrchestrator
    ) -> None:
        """Test staging an AppSpec stores its serialized form."""
        appspec = new_ecs_appspec("arn", "web", 8080)

        orchestrator.stage_appspec(appspec)

        assert orchestrator.staged_content == serialize_appspec(appspec)

    def test_stage_file_uses_file_reader(
        self, mock_client: MagicMock, mock_waiter: MagicMock
    ) -> None:
        """Test file staging goes through the injected reader."""
        reader = MagicMock(return_value=b"{}")
        orchestrator = DeploymentOrchestrator(mock_client, mock_waiter, reader)

        orchestrator.stage_file("appspec.json")

        reader.assert_called_once_with(Path("appspec.json"))
        assert orchestrator.staged_content == b"{}"

    def test_stage_file_reads_real_file(
        self, orchestrator: DeploymentOrchestrator, appspec_file: Path
    ) -> None:
        """Test the default reader stages file bytes unmodified."""
        orchestrator.stage_file(appspec_file)

        assert orchestrator.staged_content == appspec_file.read_bytes()

    def test_stage_file_wraps_read_failure(
        self, mock_client: MagicMock, mock_waiter: MagicMock
    ) -> None:
        """Test read failures become FileReadError with the cause chained."""
        cause = OSError("permission denied")
        reader = MagicMock(side_effect=cause)
        orchestrator = DeploymentOrchestrator(mock_client, mock_waiter, reader)

        with pytest.raises(FileReadError, match="cannot read file") as exc_info:
            orchestrator.stage_file("appspec.json")

        assert exc_info.value.__cause__ is cause
        assert exc_info.value.path == "appspec.json"
        assert orchestrator.phase == DeploymentPhase.EMPTY

    def test_stage_file_missing_file(
        self, orchestrator: DeploymentOrchestrator, tmp_path: Path
    ) -> None:
        """Test a missing file raises FileReadError."""
        with pytest.raises(FileReadError):
            orchestrator.stage_file(tmp_path / "missing.json")

    def test_stage_file_rejects_empty_file(
        self, orchestrator: DeploymentOrchestrator, tmp_path: Path
    ) -> None:
        """Test an empty file raises EmptyInputError."""
        path = tmp_path / "empty.json"
        path.write_bytes(b"")

        with pytest.raises(EmptyInputError, match="empty.json"):
            orchestrator.stage_file(path)

    def test_load_appspec_content_returns_bytes(self, appspec_file: Path) -> None:
        """Test the standalone loader returns file bytes."""
        assert load_appspec_content(appspec_file) == appspec_file.read_bytes()


class TestSubmit:
    """Tests for creating deployments."""

    def test_submit_before_stage_fails_without_calling_client(
        self, orchestrator: DeploymentOrchestrator, mock_client: MagicMock
    ) -> None:
        """Test submitting with nothing staged raises NotStagedError."""
        with pytest.raises(NotStagedError, match="app spec is empty"):
            orchestrator.submit("app", "group")

        mock_client.create_deployment.assert_not_called()

    def test_submit_returns_deployment_id(
        self, orchestrator: DeploymentOrchestrator, mock_client: MagicMock
    ) -> None:
        """Test a successful submission returns the handle."""
        orchestrator.stage(b"{}")

        deployment_id = orchestrator.submit("app", "group")

        assert deployment_id == "d-EXAMPLE123"
        assert orchestrator.phase == DeploymentPhase.SUBMITTED
        mock_client.create_deployment.assert_called_once_with(
            application_name="app",
            deployment_group_name="group",
            revision=AppSpecRevision(content=b"{}", sha256=compute_sha256(b"{}")),
        )

    def test_submit_fingerprints_exact_staged_bytes(
        self,
        orchestrator: DeploymentOrchestrator,
        mock_client: MagicMock,
        appspec_file: Path,
    ) -> None:
        """Test the digest is computed over the file bytes, not a re-serialization."""
        orchestrator.stage_file(appspec_file)

        orchestrator.submit("app", "group")

        revision = mock_client.create_deployment.call_args.kwargs["revision"]
        assert revision.content == appspec_file.read_bytes()
        assert revision.sha256 == compute_sha256(appspec_file.read_bytes())

    def test_submit_keeps_staged_content(
        self, orchestrator: DeploymentOrchestrator
    ) -> None:
        """Test staged content survives a submission."""
        orchestrator.stage(b"{}")

        orchestrator.submit("app", "group")

        assert orchestrator.staged_content == b"{}"

    def test_submit_wraps_client_error(
        self, orchestrator: DeploymentOrchestrator, mock_client: MagicMock
    ) -> None:
        """Test client failures become SubmissionError."""
        cause = RuntimeError("mock")
        mock_client.create_deployment.side_effect = cause
        orchestrator.stage(b"{}")

        with pytest.raises(SubmissionError) as exc_info:
            orchestrator.submit("app", "group")

        assert str(exc_info.value) == "cannot create deployment: mock"
        assert exc_info.value.__cause__ is cause
        assert orchestrator.phase == DeploymentPhase.STAGED

    def test_submit_rejects_non_utf8_content(
        self, orchestrator: DeploymentOrchestrator, mock_client: MagicMock
    ) -> None:
        """Test content that cannot be sent is rejected before the call."""
        orchestrator.stage(b"\xff\xfe")

        with pytest.raises(SerializationError):
            orchestrator.submit("app", "group")

        mock_client.create_deployment.assert_not_called()


class TestAwaitCompletion:
    """Tests for waiting on a deployment."""

    def test_success(
        self,
        orchestrator: DeploymentOrchestrator,
        mock_client: MagicMock,
        mock_waiter: MagicMock,
    ) -> None:
        """Test a successful wait marks the deployment succeeded."""
        orchestrator.await_completion("d-1", MAX_WAIT)

        mock_waiter.wait.assert_called_once_with("d-1", MAX_WAIT, None)
        mock_client.get_deployment.assert_not_called()
        assert orchestrator.phase == DeploymentPhase.SUCCEEDED

    def test_success_ignores_lookup_content(
        self, orchestrator: DeploymentOrchestrator, mock_client: MagicMock
    ) -> None:
        """Test success does not depend on what a lookup would return."""
        mock_client.get_deployment.return_value = DeploymentLookup(
            info=DeploymentInfo(error_message="info"), error=RuntimeError("lookup")
        )

        orchestrator.await_completion("d-1", MAX_WAIT)

        assert orchestrator.phase == DeploymentPhase.SUCCEEDED

    def test_passes_cancel_event_to_waiter(
        self, orchestrator: DeploymentOrchestrator, mock_waiter: MagicMock
    ) -> None:
        """Test the cancel event reaches the waiter."""
        cancel_event = threading.Event()

        orchestrator.await_completion("d-1", MAX_WAIT, cancel_event)

        mock_waiter.wait.assert_called_once_with("d-1", MAX_WAIT, cancel_event)

    def test_failure_without_detail_reraises_original(
        self,
        orchestrator: DeploymentOrchestrator,
        mock_client: MagicMock,
        mock_waiter: MagicMock,
    ) -> None:
        """Test an empty lookup leaves the wait error unchanged."""
        wait_error = WaitError("d-1", "mock")
        mock_waiter.wait.side_effect = wait_error

        with pytest.raises(WaitError) as exc_info:
            orchestrator.await_completion("d-1", MAX_WAIT)

        assert exc_info.value is wait_error
        mock_client.get_deployment.assert_called_once_with("d-1")
        assert orchestrator.phase == DeploymentPhase.FAILED

    def test_detail_without_lookup_error_is_not_folded_in(
        self,
        orchestrator: DeploymentOrchestrator,
        mock_client: MagicMock,
        mock_waiter: MagicMock,
    ) -> None:
        """Test a successful lookup with a message leaves the error unchanged."""
        mock_waiter.wait.side_effect = WaitError("d-1", "mock")
        mock_client.get_deployment.return_value = DeploymentLookup(
            info=DeploymentInfo(error_message="info")
        )

        with pytest.raises(WaitError) as exc_info:
            orchestrator.await_completion("d-1", MAX_WAIT)

        assert str(exc_info.value) == "mock"
        assert exc_info.value.detail is None

    def test_detail_with_lookup_error_is_folded_in(
        self,
        orchestrator: DeploymentOrchestrator,
        mock_client: MagicMock,
        mock_waiter: MagicMock,
    ) -> None:
        """Test the detail is prepended when the lookup also reported an error."""
        wait_error = WaitError("d-1", "mock")
        mock_waiter.wait.side_effect = wait_error
        mock_client.get_deployment.return_value = DeploymentLookup(
            info=DeploymentInfo(error_message="info"), error=RuntimeError("lookup")
        )

        with pytest.raises(WaitError) as exc_info:
            orchestrator.await_completion("d-1", MAX_WAIT)

        assert str(exc_info.value) == "info (mock)"
        assert exc_info.value.detail == "info"
        assert exc_info.value.deployment_id == "d-1"
        assert exc_info.value.__cause__ is wait_error
        assert orchestrator.phase == DeploymentPhase.FAILED

    def test_lookup_error_without_info_reraises_original(
        self,
        orchestrator: DeploymentOrchestrator,
        mock_client: MagicMock,
        mock_waiter: MagicMock,
    ) -> None:
        """Test a failed lookup without deployment info adds nothing."""
        wait_error = WaitError("d-1", "mock")
        mock_waiter.wait.side_effect = wait_error
        mock_client.get_deployment.return_value = DeploymentLookup(
            error=RuntimeError("lookup")
        )

        with pytest.raises(WaitError) as exc_info:
            orchestrator.await_completion("d-1", MAX_WAIT)

        assert exc_info.value is wait_error

    def test_lookup_error_with_empty_message_reraises_original(
        self,
        orchestrator: DeploymentOrchestrator,
        mock_client: MagicMock,
        mock_waiter: MagicMock,
    ) -> None:
        """Test deployment info without a message adds nothing."""
        wait_error = WaitError("d-1", "mock")
        mock_waiter.wait.side_effect = wait_error
        mock_client.get_deployment.return_value = DeploymentLookup(
            info=DeploymentInfo(status="Failed", error_message=""),
            error=RuntimeError("lookup"),
        )

        with pytest.raises(WaitError) as exc_info:
            orchestrator.await_completion("d-1", MAX_WAIT)

        assert exc_info.value is wait_error

    def test_non_wait_error_from_waiter_is_enriched(
        self,
        orchestrator: DeploymentOrchestrator,
        mock_client: MagicMock,
        mock_waiter: MagicMock,
    ) -> None:
        """Test any waiter failure goes through the same enrichment gate."""
        mock_waiter.wait.side_effect = RuntimeError("transport")
        mock_client.get_deployment.return_value = DeploymentLookup(
            info=DeploymentInfo(error_message="info"), error=RuntimeError("lookup")
        )

        with pytest.raises(WaitError, match=r"^info \(transport\)$"):
            orchestrator.await_completion("d-1", MAX_WAIT)

    def test_cancellation_skips_lookup(
        self,
        orchestrator: DeploymentOrchestrator,
        mock_client: MagicMock,
        mock_waiter: MagicMock,
    ) -> None:
        """Test a cancelled wait is re-raised without a status lookup."""
        cancelled = DeploymentCancelledError("d-1")
        mock_waiter.wait.side_effect = cancelled

        with pytest.raises(DeploymentCancelledError) as exc_info:
            orchestrator.await_completion("d-1", MAX_WAIT)

        assert exc_info.value is cancelled
        mock_client.get_deployment.assert_not_called()
        assert orchestrator.phase == DeploymentPhase.FAILED

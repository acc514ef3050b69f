"""Revision packaging for CodeDeploy submissions.

A revision carries the AppSpec inline together with the SHA-256 digest of
its content. CodeDeploy validates the digest against the content it
receives, so the digest is always computed over the exact bytes sent.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Any

from codedeploy_trigger.lib.errors import SerializationError

REVISION_TYPE_APPSPEC_CONTENT = "AppSpecContent"


def compute_sha256(content: bytes) -> str:
    """Return the lower-case hex SHA-256 digest of content."""
    return hashlib.sha256(content).hexdigest()


@dataclass(frozen=True)
class AppSpecRevision:
    """Inline AppSpec content and its fingerprint.

    Attributes:
        content: Exact AppSpec bytes to submit
        sha256: Hex-encoded SHA-256 digest of content
    """

    content: bytes
    sha256: str

    @classmethod
    def from_content(cls, content: bytes) -> AppSpecRevision:
        """Create a revision, fingerprinting the given bytes."""
        return cls(content=content, sha256=compute_sha256(content))

    def to_revision_location(self) -> dict[str, Any]:
        """Return the RevisionLocation structure expected by CodeDeploy.

        Raises:
            SerializationError: If the content is not valid UTF-8
        """
        try:
            text = self.content.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise SerializationError(
                f"app spec content must be valid UTF-8: {exc}"
            ) from exc

        return {
            "revisionType": REVISION_TYPE_APPSPEC_CONTENT,
            "appSpecContent": {
                "content": text,
                "sha256": self.sha256,
            },
        }


def build_create_deployment_request(
    application_name: str,
    deployment_group_name: str,
    revision: AppSpecRevision,
) -> dict[str, Any]:
    """Assemble keyword arguments for the CreateDeployment API call."""
    return {
        "applicationName": application_name,
        "deploymentGroupName": deployment_group_name,
        "revision": revision.to_revision_location(),
    }

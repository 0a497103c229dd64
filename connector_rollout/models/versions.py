"""Typed models for registry version snapshots.

- ``SupportState``: Registry-reported lifecycle status of a version
- ``VersionSnapshot``: The default version of an actor definition as
  observed by one registry read

Design notes:
- Frozen dataclasses; a snapshot is never mutated after it is read.
- ``from_api_dict`` accepts the camelCase ``ActorDefinitionVersionRead``
  body of the configuration API; ``to_dict`` / ``from_dict`` use the
  snake_case keys exchanged between activities and the orchestrator.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any


class SupportState(enum.Enum):
    """Lifecycle state of a connector version. Informational only."""

    SUPPORTED = "supported"
    DEPRECATED = "deprecated"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True, slots=True)
class VersionSnapshot:
    """Default version of an actor definition at the time of one read.

    Only ``docker_image_tag`` takes part in the verification decision;
    the remaining fields pass through unchanged for logging.

    Attributes:
        docker_repository: Image repository (e.g. ``airbyte/source-faker``).
        docker_image_tag: Image tag currently marked as default.
        is_version_override_applied: Whether a scoped override is in effect.
        support_state: Registry-reported lifecycle state.
        supports_refreshes: Whether the version supports refreshes.
        supports_file_transfer: Whether the version supports file transfer.
    """

    docker_repository: str
    docker_image_tag: str
    is_version_override_applied: bool = False
    support_state: SupportState = SupportState.SUPPORTED
    supports_refreshes: bool = False
    supports_file_transfer: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a JSON-compatible dict."""
        return {
            "docker_repository": self.docker_repository,
            "docker_image_tag": self.docker_image_tag,
            "is_version_override_applied": self.is_version_override_applied,
            "support_state": self.support_state.value,
            "supports_refreshes": self.supports_refreshes,
            "supports_file_transfer": self.supports_file_transfer,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> VersionSnapshot:
        """Deserialise from a dict produced by ``to_dict``."""
        return cls(
            docker_repository=str(data.get("docker_repository", "")),
            docker_image_tag=str(data.get("docker_image_tag", "")),
            is_version_override_applied=bool(data.get("is_version_override_applied", False)),
            support_state=SupportState(str(data.get("support_state", "supported")).lower()),
            supports_refreshes=bool(data.get("supports_refreshes", False)),
            supports_file_transfer=bool(data.get("supports_file_transfer", False)),
        )

    @classmethod
    def from_api_dict(cls, data: dict[str, Any]) -> VersionSnapshot:
        """Build a snapshot from an ``ActorDefinitionVersionRead`` body.

        Raises:
            KeyError: If ``dockerRepository`` or ``dockerImageTag`` is absent.
            ValueError: If either of those is not a non-empty string, or
                ``supportState`` is not a known state.
        """
        return cls(
            docker_repository=_require_text(data, "dockerRepository"),
            docker_image_tag=_require_text(data, "dockerImageTag"),
            is_version_override_applied=bool(data.get("isVersionOverrideApplied", False)),
            support_state=SupportState(str(data.get("supportState", "supported")).lower()),
            supports_refreshes=bool(data.get("supportsRefreshes", False)),
            supports_file_transfer=bool(data.get("supportsFileTransfer", False)),
        )


def _require_text(data: dict[str, Any], key: str) -> str:
    value = data[key]
    if not isinstance(value, str) or not value:
        raise ValueError(f"{key} must be a non-empty string, got {value!r}")
    return value

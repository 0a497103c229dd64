"""Verification request and poll budget models.

- ``VerificationRequest``: Immutable input of one verification
- ``PollBudget``: Resolved deadline / interval pair the poller runs with

Both validate their invariants on construction and raise
``InvalidRequestError`` so malformed input never reaches the poll loop.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from connector_rollout.core.exceptions import ValidationError

if TYPE_CHECKING:
    from connector_rollout.core.config import WorkerConfig


class InvalidRequestError(ValidationError):
    """Raised when a verification request violates its invariants.

    Attributes:
        field_name: The offending field.
        value: The invalid value.
    """

    default_stage = "verify_default_version"
    default_code = "INVALID_VERIFICATION_REQUEST"

    def __init__(self, field_name: str, value: object, message: str) -> None:
        self.field_name = field_name
        self.value = value
        super().__init__(f"VerificationRequest.{field_name}={value!r}: {message}")


@dataclass(frozen=True, slots=True)
class VerificationRequest:
    """One default-version verification.

    Attributes:
        docker_repository: Image repository of the actor definition.
        expected_tag: Tag the rollout is expected to have promoted to
            default. May carry a ``-rc.N`` suffix.
        actor_definition_id: Actor definition whose default is queried.
        rollout_id: Rollout that triggered the verification. Used for
            correlation only.
        deadline_seconds: Total convergence budget, or ``None`` for the
            configured default.
        poll_interval_seconds: Spacing between observations, or ``None``
            for the configured default.
    """

    docker_repository: str
    expected_tag: str
    actor_definition_id: uuid.UUID
    rollout_id: uuid.UUID
    deadline_seconds: float | None = None
    poll_interval_seconds: float | None = None

    def __post_init__(self) -> None:
        _require_text("docker_repository", self.docker_repository)
        _require_text("expected_tag", self.expected_tag)
        if self.deadline_seconds is not None and self.deadline_seconds <= 0:
            raise InvalidRequestError("deadline_seconds", self.deadline_seconds, "must be > 0")
        if self.poll_interval_seconds is not None and self.poll_interval_seconds <= 0:
            raise InvalidRequestError(
                "poll_interval_seconds", self.poll_interval_seconds, "must be > 0"
            )
        if (
            self.deadline_seconds is not None
            and self.poll_interval_seconds is not None
            and self.poll_interval_seconds > self.deadline_seconds
        ):
            raise InvalidRequestError(
                "poll_interval_seconds",
                self.poll_interval_seconds,
                f"must be <= deadline_seconds ({self.deadline_seconds})",
            )

    @property
    def correlation_id(self) -> str:
        """Rollout identifier as a string, for logs and error payloads."""
        return str(self.rollout_id)

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a JSON-compatible dict."""
        return {
            "docker_repository": self.docker_repository,
            "expected_tag": self.expected_tag,
            "actor_definition_id": str(self.actor_definition_id),
            "rollout_id": str(self.rollout_id),
            "deadline_seconds": self.deadline_seconds,
            "poll_interval_seconds": self.poll_interval_seconds,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> VerificationRequest:
        """Deserialise and validate an activity payload.

        Raises:
            InvalidRequestError: If an identifier is not a UUID, a
                duration is not numeric, a repository or tag is
                not a non-empty string, or any invariant is violated.
        """
        return cls(
            docker_repository=data.get("docker_repository", ""),
            expected_tag=data.get("expected_tag", ""),
            actor_definition_id=parse_uuid(
                "actor_definition_id", data.get("actor_definition_id")
            ),
            rollout_id=parse_uuid("rollout_id", data.get("rollout_id")),
            deadline_seconds=_parse_seconds("deadline_seconds", data.get("deadline_seconds")),
            poll_interval_seconds=_parse_seconds(
                "poll_interval_seconds", data.get("poll_interval_seconds")
            ),
        )


@dataclass(frozen=True, slots=True)
class PollBudget:
    """Deadline and poll interval, both in seconds."""

    deadline_seconds: float
    poll_interval_seconds: float

    def __post_init__(self) -> None:
        if self.deadline_seconds <= 0:
            raise InvalidRequestError("deadline_seconds", self.deadline_seconds, "must be > 0")
        if self.poll_interval_seconds <= 0:
            raise InvalidRequestError(
                "poll_interval_seconds", self.poll_interval_seconds, "must be > 0"
            )
        if self.poll_interval_seconds > self.deadline_seconds:
            raise InvalidRequestError(
                "poll_interval_seconds",
                self.poll_interval_seconds,
                f"must be <= deadline_seconds ({self.deadline_seconds})",
            )

    @classmethod
    def resolve(cls, request: VerificationRequest, config: WorkerConfig) -> PollBudget:
        """Fill missing durations from *config*.

        A configured interval longer than an explicit request deadline
        is clamped to that deadline; an explicit interval is never
        adjusted.
        """
        deadline = (
            request.deadline_seconds
            if request.deadline_seconds is not None
            else config.verify_deadline_seconds
        )
        if request.poll_interval_seconds is not None:
            interval = request.poll_interval_seconds
        else:
            interval = min(config.verify_poll_interval_seconds, deadline)
        return cls(deadline_seconds=deadline, poll_interval_seconds=interval)

    def to_dict(self) -> dict[str, float]:
        """Serialise to a JSON-compatible dict."""
        return {
            "deadline_seconds": self.deadline_seconds,
            "poll_interval_seconds": self.poll_interval_seconds,
        }


def parse_uuid(field_name: str, raw: object) -> uuid.UUID:
    """Coerce *raw* to a UUID or raise ``InvalidRequestError`` naming *field_name*."""
    if isinstance(raw, uuid.UUID):
        return raw
    try:
        return uuid.UUID(str(raw))
    except (ValueError, TypeError) as exc:
        raise InvalidRequestError(field_name, raw, "must be a UUID") from exc


def _require_text(field_name: str, raw: object) -> None:
    if not isinstance(raw, str) or not raw.strip():
        raise InvalidRequestError(field_name, raw, "must be a non-empty string")


def _parse_seconds(field_name: str, raw: object) -> float | None:
    if raw is None or raw == "":
        return None
    if isinstance(raw, bool):
        raise InvalidRequestError(field_name, raw, "must be a number of seconds")
    try:
        return float(raw)  # type: ignore[arg-type]
    except (ValueError, TypeError) as exc:
        raise InvalidRequestError(field_name, raw, "must be a number of seconds") from exc

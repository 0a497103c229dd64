"""Wire contracts between the HTTP starter, the orchestrator and activities.

Durable Functions moves plain JSON between functions, so each hop is
described by a ``TypedDict`` for static checking, and ``validate_payload``
rejects a payload that lacks a required key before any work starts.
"""

from __future__ import annotations

from typing import Any, NotRequired, TypedDict

from connector_rollout.core.exceptions import ContractError

# ---------------------------------------------------------------------------
# Verify default version (in-process poll)
# ---------------------------------------------------------------------------


class VerifyDefaultVersionInput(TypedDict):
    """Orchestrator → ``verify_default_version`` activity."""

    docker_repository: str
    expected_tag: str
    actor_definition_id: str
    rollout_id: str
    deadline_seconds: NotRequired[float | None]
    poll_interval_seconds: NotRequired[float | None]


# Output is ``None``; failures are raised.

# ---------------------------------------------------------------------------
# Fetch default version (durable poll)
# ---------------------------------------------------------------------------


class FetchDefaultVersionInput(TypedDict):
    """Orchestrator → ``fetch_default_version`` activity."""

    actor_definition_id: str
    rollout_id: NotRequired[str]


class VersionSnapshotPayload(TypedDict):
    """``fetch_default_version`` activity → orchestrator (``VersionSnapshot.to_dict()``)."""

    docker_repository: str
    docker_image_tag: str
    is_version_override_applied: bool
    support_state: str
    supports_refreshes: bool
    supports_file_transfer: bool


# ---------------------------------------------------------------------------
# Verification orchestration
# ---------------------------------------------------------------------------


class VerificationOrchestratorInput(TypedDict):
    """HTTP starter → ``verify_default_version_orchestrator``.

    Durations are already resolved against configuration so replays
    never depend on environment state.
    """

    docker_repository: str
    expected_tag: str
    actor_definition_id: str
    rollout_id: str
    deadline_seconds: float
    poll_interval_seconds: float


class VerificationSummary(TypedDict):
    """``verify_default_version_orchestrator`` → caller."""

    status: str
    rollout_id: str
    actor_definition_id: str
    expected_tag: str
    observed_tag: str
    poll_count: int
    elapsed_seconds: float
    outcome: dict[str, Any]
    error: dict[str, object] | None


_REQUIRED_KEYS: dict[type, frozenset[str]] = {
    VerifyDefaultVersionInput: frozenset(
        {"docker_repository", "expected_tag", "actor_definition_id", "rollout_id"}
    ),
    FetchDefaultVersionInput: frozenset({"actor_definition_id"}),
    VerificationOrchestratorInput: frozenset(
        {
            "docker_repository",
            "expected_tag",
            "actor_definition_id",
            "rollout_id",
            "deadline_seconds",
            "poll_interval_seconds",
        }
    ),
}


def validate_payload(
    raw: dict[str, Any],
    schema: type,
    *,
    activity: str,
) -> None:
    """Raise ``ContractError`` unless *raw* has every key *schema* requires.

    Schemas without a registration are not checked.
    """
    missing = sorted(_REQUIRED_KEYS.get(schema, frozenset()).difference(raw))
    if not missing:
        return
    msg = f"{activity}: missing required payload key(s): {', '.join(missing)}"
    raise ContractError(msg, stage=activity, code="PAYLOAD_MISSING_KEYS")

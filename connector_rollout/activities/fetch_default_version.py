"""Fetch default version activity: one registry read.

Called by the durable verification orchestrator once per observation.
Returns a serialisable ``VersionSnapshot`` dict; the orchestrator owns
the match, deadline, and wait decisions.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from connector_rollout.models.verification import parse_uuid
from connector_rollout.registry.base import RegistryError
from connector_rollout.verification.errors import RegistryUnavailableError

if TYPE_CHECKING:
    from connector_rollout.registry.base import VersionRegistryClient

logger = logging.getLogger("connector_rollout.activities.fetch_default_version")


def fetch_default_version(
    payload: dict[str, Any],
    *,
    client: VersionRegistryClient,
) -> dict[str, Any]:
    """Read the current default version of an actor definition.

    Args:
        payload: Dict containing ``actor_definition_id`` and optionally
            ``rollout_id`` for log correlation.
        client: Registry client.

    Returns:
        ``VersionSnapshot.to_dict()`` of the current default.

    Raises:
        InvalidRequestError: If ``actor_definition_id`` is not a UUID.
        RegistryUnavailableError: If the registry read fails.
    """
    actor_definition_id = parse_uuid("actor_definition_id", payload.get("actor_definition_id"))
    rollout_id = str(payload.get("rollout_id", ""))

    try:
        snapshot = client.fetch_default_version(actor_definition_id)
    except RegistryError as exc:
        msg = f"Default version read failed for actor definition {actor_definition_id}: {exc}"
        raise RegistryUnavailableError(
            msg, retryable=exc.retryable, correlation_id=rollout_id
        ) from exc

    logger.info(
        "fetch_default_version completed | rollout_id=%s | actor_definition_id=%s | tag=%s",
        rollout_id,
        actor_definition_id,
        snapshot.docker_image_tag,
    )
    return snapshot.to_dict()

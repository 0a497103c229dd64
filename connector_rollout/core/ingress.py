"""Boundary helpers between Azure Functions bindings and the verifier.

``function_app.py`` hands raw binding values to these functions and gets
back validated, JSON-ready payloads:

- ``deserialize_activity_input`` accepts the JSON string a fresh activity
  receives or the dict a replayed one receives.
- ``build_orchestrator_input`` turns an HTTP verification request into the
  orchestrator input, with durations already resolved against
  configuration.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from connector_rollout.core.exceptions import ContractError
from connector_rollout.models.payloads import VerifyDefaultVersionInput, validate_payload
from connector_rollout.models.verification import PollBudget, VerificationRequest

if TYPE_CHECKING:
    from connector_rollout.core.config import WorkerConfig
    from connector_rollout.models.payloads import VerificationOrchestratorInput

logger = logging.getLogger("connector_rollout.core.ingress")

_STAGE = "ingress"


def deserialize_activity_input(raw: object) -> dict[str, Any]:
    """Return the activity payload as a dict.

    Raises:
        ContractError: ``INVALID_JSON`` when a string does not decode,
            ``INVALID_INPUT_TYPE`` when the payload is not an object.
    """
    payload = raw
    if isinstance(raw, str):
        try:
            payload = json.loads(raw)
        except ValueError as exc:
            msg = f"Activity input is not valid JSON: {exc}"
            raise ContractError(msg, stage=_STAGE, code="INVALID_JSON") from exc

    if not isinstance(payload, dict):
        kind = "JSON value" if isinstance(raw, str) else "input"
        msg = f"Activity {kind} must be an object, got {type(payload).__name__}"
        raise ContractError(msg, stage=_STAGE, code="INVALID_INPUT_TYPE")
    return payload


def build_orchestrator_input(
    body: dict[str, Any],
    config: WorkerConfig,
) -> VerificationOrchestratorInput:
    """Build the canonical orchestrator input from an HTTP request body.

    Args:
        body: Request JSON with ``docker_repository``, ``expected_tag``,
            ``actor_definition_id``, ``rollout_id`` and optional
            ``deadline_seconds`` / ``poll_interval_seconds``.
        config: Worker configuration supplying default durations.

    Returns:
        Validated ``VerificationOrchestratorInput`` with resolved durations.

    Raises:
        ContractError: If required keys are missing.
        InvalidRequestError: If a value violates the request invariants.
    """
    validate_payload(body, VerifyDefaultVersionInput, activity="ingress")
    request = VerificationRequest.from_dict(body)
    budget = PollBudget.resolve(request, config)

    payload: VerificationOrchestratorInput = {
        "docker_repository": request.docker_repository,
        "expected_tag": request.expected_tag,
        "actor_definition_id": str(request.actor_definition_id),
        "rollout_id": str(request.rollout_id),
        "deadline_seconds": budget.deadline_seconds,
        "poll_interval_seconds": budget.poll_interval_seconds,
    }

    logger.debug(
        "Built orchestrator input | rollout_id=%s | actor_definition_id=%s | "
        "deadline=%gs | interval=%gs",
        payload["rollout_id"],
        payload["actor_definition_id"],
        payload["deadline_seconds"],
        payload["poll_interval_seconds"],
    )

    return payload

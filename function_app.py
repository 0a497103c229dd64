"""Function app for the connector rollout verifier.

Registers the HTTP routes, the durable verification orchestrator and the
two activities with the Python v2 programming model.  Handlers only
decode bindings and hand off to ``connector_rollout``.
"""

from __future__ import annotations

import json
import logging

import azure.durable_functions as df
import azure.functions as func

from connector_rollout.core.config import WorkerConfig
from connector_rollout.core.exceptions import ContractError, ValidationError
from connector_rollout.core.ingress import build_orchestrator_input, deserialize_activity_input
from connector_rollout.models.payloads import (
    FetchDefaultVersionInput,
    VerifyDefaultVersionInput,
    validate_payload,
)
from connector_rollout.orchestrators.verify_rollout import CANCEL_EVENT

app = func.FunctionApp()

logger = logging.getLogger("connector_rollout.function_app")


def _json_response(body: dict[str, object], status_code: int) -> func.HttpResponse:
    return func.HttpResponse(
        json.dumps(body),
        status_code=status_code,
        mimetype="application/json",
    )


# ---------------------------------------------------------------------------
# HTTP: Start a verification
# ---------------------------------------------------------------------------


@app.function_name("start_verification")
@app.route(route="rollouts/verify", methods=["POST"])
@app.durable_client_input(client_name="client")
async def start_verification(
    req: func.HttpRequest,
    client: df.DurableOrchestrationClient,
) -> func.HttpResponse:
    """Start the durable verification orchestrator for one rollout.

    Body (JSON):
        ``docker_repository``, ``expected_tag``, ``actor_definition_id``,
        ``rollout_id`` and optional ``deadline_seconds`` /
        ``poll_interval_seconds`` (defaults come from app settings).

    Returns:
        202 with the Durable Functions check-status payload, or 400 with
        a structured error when the request is malformed.
    """
    try:
        body = req.get_json()
    except ValueError:
        return _json_response({"message": "Request body must be JSON"}, 400)
    if not isinstance(body, dict):
        return _json_response({"message": "Request body must be a JSON object"}, 400)

    try:
        orchestrator_input = build_orchestrator_input(body, WorkerConfig.from_env())
    except (ContractError, ValidationError) as exc:
        logger.warning("Rejected verification request | error=%s", exc)
        return _json_response(exc.to_error_dict(), 400)

    try:
        instance_id = await client.start_new(
            "verify_default_version_orchestrator",
            client_input=orchestrator_input,
        )
    except Exception:
        logger.exception(
            "Failed to start verification for rollout_id=%s",
            orchestrator_input["rollout_id"],
        )
        raise

    logger.info(
        "Verification started | instance_id=%s | rollout_id=%s | actor_definition_id=%s",
        instance_id,
        orchestrator_input["rollout_id"],
        orchestrator_input["actor_definition_id"],
    )
    return client.create_check_status_response(req, instance_id)


# ---------------------------------------------------------------------------
# HTTP: Cancel a running verification
# ---------------------------------------------------------------------------


@app.function_name("cancel_verification")
@app.route(route="rollouts/verify/{instance_id}/cancel", methods=["POST"])
@app.durable_client_input(client_name="client")
async def cancel_verification(
    req: func.HttpRequest,
    client: df.DurableOrchestrationClient,
) -> func.HttpResponse:
    """Raise the cancel event on a running verification orchestrator."""
    instance_id = req.route_params.get("instance_id", "")
    if not instance_id:
        return func.HttpResponse("Missing instance_id", status_code=400)

    status = await client.get_status(instance_id)
    if not status:
        return func.HttpResponse("Instance not found", status_code=404)

    reason = "rollout aborted"
    try:
        body = req.get_json()
    except ValueError:
        body = None
    if isinstance(body, dict) and isinstance(body.get("reason"), str):
        reason = body["reason"]

    await client.raise_event(instance_id, CANCEL_EVENT, {"reason": reason})
    logger.info("Cancel requested | instance_id=%s | reason=%s", instance_id, reason)
    return _json_response({"instance_id": instance_id, "reason": reason}, 202)


# ---------------------------------------------------------------------------
# HTTP: Verification status (convenience for operators)
# ---------------------------------------------------------------------------


@app.function_name("verification_status")
@app.route(route="rollouts/verify/{instance_id}", methods=["GET"])
@app.durable_client_input(client_name="client")
async def verification_status(
    req: func.HttpRequest,
    client: df.DurableOrchestrationClient,
) -> func.HttpResponse:
    """Return the status of a verification orchestrator instance.

    The custom status carries the latest heartbeat (observed tag and
    poll count) while the orchestrator is waiting.
    """
    instance_id = req.route_params.get("instance_id", "")
    if not instance_id:
        return func.HttpResponse("Missing instance_id", status_code=400)

    status = await client.get_status(instance_id)
    if not status:
        return func.HttpResponse("Instance not found", status_code=404)

    return client.create_check_status_response(req, instance_id)


# ---------------------------------------------------------------------------
# Orchestrator: Durable default-version verification
# ---------------------------------------------------------------------------


@app.function_name("verify_default_version_orchestrator")
@app.orchestration_trigger(context_name="context")
def verify_default_version_orchestrator(context: df.DurableOrchestrationContext) -> object:
    """Durable poll loop: fetch → compare → heartbeat → timer or cancel.

    See ``connector_rollout.orchestrators.verify_rollout`` for implementation.
    """
    from connector_rollout.orchestrators.verify_rollout import orchestrator_function

    return orchestrator_function(context)


# ---------------------------------------------------------------------------
# Activities
# ---------------------------------------------------------------------------


@app.function_name("fetch_default_version")
@app.activity_trigger(input_name="activityInput")
def fetch_default_version_activity(activityInput: str) -> dict[str, object]:  # noqa: N803
    """Durable Functions activity: read the current default version once.

    Input:
        JSON string (or dict when replaying) containing
        ``actor_definition_id`` and optionally ``rollout_id``.

    Returns:
        Serialised ``VersionSnapshot`` dict.

    Raises:
        RegistryUnavailableError: If the registry read fails.
    """
    from connector_rollout.activities.fetch_default_version import fetch_default_version
    from connector_rollout.registry.factory import get_registry_client

    payload = deserialize_activity_input(activityInput)
    validate_payload(payload, FetchDefaultVersionInput, activity="fetch_default_version")

    with get_registry_client(WorkerConfig.from_env()) as registry:
        return fetch_default_version(payload, client=registry)


@app.function_name("verify_default_version")
@app.activity_trigger(input_name="activityInput")
def verify_default_version_activity(activityInput: str) -> None:  # noqa: N803
    """Durable Functions activity: poll in-process until the default converges.

    Input:
        JSON string (or dict when replaying) containing a
        ``VerifyDefaultVersionInput`` payload.

    Returns:
        ``None`` on convergence.

    Raises:
        InvalidRequestError: If the request is malformed.
        RegistryUnavailableError: If a registry read fails.
        DeadlineExceededError: If the poll window is exhausted.
        VerificationCancelledError: If cancellation is observed.
    """
    from connector_rollout.activities.verify_default_version import verify_default_version
    from connector_rollout.registry.factory import get_registry_client

    payload = deserialize_activity_input(activityInput)
    validate_payload(payload, VerifyDefaultVersionInput, activity="verify_default_version")

    config = WorkerConfig.from_env()

    logger.info(
        "verify_default_version activity started | rollout_id=%s",
        payload.get("rollout_id", ""),
    )

    with get_registry_client(config) as registry:
        verify_default_version(payload, client=registry, config=config)

    logger.info(
        "verify_default_version activity completed | rollout_id=%s",
        payload.get("rollout_id", ""),
    )

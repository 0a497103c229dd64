"""Durable default-version verification orchestrator.

Durable-timer rendition of the bounded poller.  Instead of blocking a
worker inside one long activity, the orchestrator

1. reads the default version via the ``fetch_default_version`` activity,
2. applies the shared ``evaluate_observation`` decision (match first,
   then deadline),
3. publishes a heartbeat through ``context.set_custom_status``, and
4. races a durable timer against the ``cancel_verification`` external
   event with ``task_any``.

Elapsed time is measured on ``context.current_utc_datetime`` from the
first fetch, so replays are deterministic.  A failing fetch activity
raises into the generator and fails the orchestration unchanged.  A fetch
result that is not a snapshot object raises ``ContractError``.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import TYPE_CHECKING, Any

from connector_rollout.core.exceptions import ContractError
from connector_rollout.models.outcomes import PollOutcome, PollState
from connector_rollout.models.payloads import (
    VerificationOrchestratorInput,
    VerificationSummary,
    validate_payload,
)
from connector_rollout.models.verification import PollBudget, VerificationRequest
from connector_rollout.models.versions import VersionSnapshot
from connector_rollout.verification.errors import outcome_error
from connector_rollout.verification.poller import evaluate_observation

if TYPE_CHECKING:
    from collections.abc import Generator

    import azure.durable_functions as df

logger = logging.getLogger("connector_rollout.orchestrators.verify_rollout")

#: External event that cancels a running verification.
CANCEL_EVENT = "cancel_verification"

FETCH_ACTIVITY = "fetch_default_version"

_STATUS_LABELS = {
    PollState.CONVERGED: "converged",
    PollState.DEADLINE_EXCEEDED: "timed_out",
    PollState.CANCELLED: "cancelled",
}


def orchestrator_function(
    context: df.DurableOrchestrationContext,
) -> Generator[Any, Any, VerificationSummary]:
    """Verify one rollout's default version with durable waits.

    Input (via ``context.get_input``):
        ``VerificationOrchestratorInput`` with resolved durations.

    Returns:
        ``VerificationSummary`` describing the terminal outcome.

    Raises:
        ContractError: If the input is missing required keys, or a fetch
            result is not a snapshot object.
        InvalidRequestError: If the input violates request invariants.
    """
    raw: dict[str, Any] = context.get_input() or {}
    validate_payload(
        raw, VerificationOrchestratorInput, activity="verify_default_version_orchestrator"
    )
    request = VerificationRequest.from_dict(raw)
    budget = PollBudget(
        deadline_seconds=float(raw["deadline_seconds"]),
        poll_interval_seconds=float(raw["poll_interval_seconds"]),
    )

    outcome = yield from poll_until_converged(
        context,
        request,
        budget,
        instance_id=str(context.instance_id),
    )
    return build_verification_summary(request, budget, outcome)


def poll_until_converged(
    context: df.DurableOrchestrationContext,
    request: VerificationRequest,
    budget: PollBudget,
    *,
    instance_id: str = "",
) -> Generator[Any, Any, PollOutcome]:
    """Poll the registry with durable timers until a terminal outcome.

    Args:
        context: Durable orchestration context.
        request: Verification being served.
        budget: Resolved deadline and interval.
        instance_id: Orchestration instance ID for logging.

    Yields:
        Durable activity, timer, external-event and task_any calls.

    Returns:
        The terminal ``PollOutcome``.
    """
    start = context.current_utc_datetime
    fetch_count = 0
    wait_count = 0
    cancel_event = context.wait_for_external_event(CANCEL_EVENT)

    while True:
        snapshot_dict = yield context.call_activity(
            FETCH_ACTIVITY,
            {
                "actor_definition_id": str(request.actor_definition_id),
                "rollout_id": str(request.rollout_id),
            },
        )
        fetch_count += 1
        if not isinstance(snapshot_dict, dict):
            msg = (
                f"{FETCH_ACTIVITY} returned {type(snapshot_dict).__name__}, "
                "expected a version snapshot object"
            )
            raise ContractError(
                msg,
                stage="verify_default_version_orchestrator",
                code="INVALID_ACTIVITY_OUTPUT",
            )
        snapshot = VersionSnapshot.from_dict(snapshot_dict)
        elapsed = (context.current_utc_datetime - start).total_seconds()

        if not context.is_replaying:
            logger.info(
                "Poll result | instance=%s | rollout_id=%s | observed=%s | expected=%s | "
                "poll_count=%d | elapsed=%.1fs",
                instance_id,
                request.rollout_id,
                snapshot.docker_image_tag,
                request.expected_tag,
                fetch_count,
                elapsed,
            )

        outcome = evaluate_observation(
            snapshot,
            request.expected_tag,
            elapsed_seconds=elapsed,
            deadline_seconds=budget.deadline_seconds,
            fetch_count=fetch_count,
            wait_count=wait_count,
        )
        if outcome is not None:
            return outcome

        # Heartbeat before every wait.
        context.set_custom_status(
            {
                "state": "polling",
                "rollout_id": str(request.rollout_id),
                "observed_tag": snapshot.docker_image_tag,
                "expected_tag": request.expected_tag,
                "poll_count": fetch_count,
                "elapsed_seconds": elapsed,
            }
        )

        fire_at = context.current_utc_datetime + timedelta(seconds=budget.poll_interval_seconds)
        timer = context.create_timer(fire_at)
        winner = yield context.task_any([timer, cancel_event])

        if winner is cancel_event:
            timer.cancel()
            reason = _cancel_reason(getattr(cancel_event, "result", None))
            if not context.is_replaying:
                logger.warning(
                    "Verification cancelled | instance=%s | rollout_id=%s | reason=%s | "
                    "poll_count=%d",
                    instance_id,
                    request.rollout_id,
                    reason,
                    fetch_count,
                )
            return PollOutcome(
                state=PollState.CANCELLED,
                snapshot=snapshot,
                elapsed_seconds=(context.current_utc_datetime - start).total_seconds(),
                fetch_count=fetch_count,
                wait_count=wait_count,
                reason=reason,
            )
        wait_count += 1


def build_verification_summary(
    request: VerificationRequest,
    budget: PollBudget,
    outcome: PollOutcome,
) -> VerificationSummary:
    """Build the orchestration result from a terminal outcome."""
    error = outcome_error(request, budget, outcome)
    return VerificationSummary(
        status=_STATUS_LABELS[outcome.state],
        rollout_id=str(request.rollout_id),
        actor_definition_id=str(request.actor_definition_id),
        expected_tag=request.expected_tag,
        observed_tag=outcome.last_observed_tag,
        poll_count=outcome.fetch_count,
        elapsed_seconds=outcome.elapsed_seconds,
        outcome=outcome.to_dict(),
        error=error.to_error_dict() if error is not None else None,
    )


def _cancel_reason(event_data: object) -> str:
    if isinstance(event_data, dict):
        reason = event_data.get("reason")
        if isinstance(reason, str) and reason:
            return reason
    if isinstance(event_data, str) and event_data:
        return event_data
    return f"{CANCEL_EVENT} event raised"

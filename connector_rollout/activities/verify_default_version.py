"""Verify default version activity: confirm a rollout reached the registry.

Thin façade over the bounded poller.  It validates the request, builds
the poll budget from configuration, runs the poll loop against the
injected registry client, and turns a non-converged outcome into a
typed failure the orchestrator can act on.

The activity is read-only and holds no state between invocations, so
the orchestrator may re-run it after a crash.

Failure kinds:
    ``InvalidRequestError``        malformed input, raised before any read.
    ``RegistryUnavailableError``   a registry read failed; not retried here.
    ``DeadlineExceededError``      poll window exhausted without convergence.
    ``VerificationCancelledError`` orchestrator cancelled during a wait.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

from connector_rollout.core.config import WorkerConfig
from connector_rollout.models.outcomes import PollState
from connector_rollout.models.verification import PollBudget, VerificationRequest
from connector_rollout.registry.base import RegistryError
from connector_rollout.verification.checkpoint import Checkpoint, logging_heartbeat
from connector_rollout.verification.errors import RegistryUnavailableError, outcome_error
from connector_rollout.verification.poller import poll_default_version

if TYPE_CHECKING:
    from collections.abc import Callable

    from connector_rollout.models.versions import VersionSnapshot
    from connector_rollout.registry.base import VersionRegistryClient

logger = logging.getLogger("connector_rollout.activities.verify_default_version")


def verify_default_version(
    request: VerificationRequest | dict[str, Any],
    *,
    client: VersionRegistryClient,
    config: WorkerConfig | None = None,
    checkpoint: Checkpoint | None = None,
    clock: Callable[[], float] = time.monotonic,
) -> None:
    """Block until the actor definition's default version matches the expected tag.

    Args:
        request: A ``VerificationRequest`` or its serialised dict.
        client: Registry client used for every read.
        config: Worker configuration for default durations
            (loaded from the environment when omitted).
        checkpoint: Suspend point between reads (a logging heartbeat on
            a fresh cancellation token when omitted).
        clock: Monotonic clock in seconds.

    Raises:
        InvalidRequestError: If the request is malformed.
        RegistryUnavailableError: If a registry read fails.
        DeadlineExceededError: If the poll window is exhausted.
        VerificationCancelledError: If cancellation is observed.
    """
    if not isinstance(request, VerificationRequest):
        request = VerificationRequest.from_dict(request)
    config = config or WorkerConfig.from_env()
    budget = PollBudget.resolve(request, config)
    checkpoint = checkpoint or Checkpoint(heartbeat=logging_heartbeat)

    logger.info(
        "verify_default_version started | rollout_id=%s | actor_definition_id=%s | "
        "repository=%s | expected_tag=%s | deadline=%gs | interval=%gs",
        request.rollout_id,
        request.actor_definition_id,
        request.docker_repository,
        request.expected_tag,
        budget.deadline_seconds,
        budget.poll_interval_seconds,
    )

    def fetch() -> VersionSnapshot:
        try:
            return client.fetch_default_version(request.actor_definition_id)
        except RegistryError as exc:
            msg = (
                f"Registry unavailable while verifying rollout {request.rollout_id} "
                f"(actor definition {request.actor_definition_id}): {exc}"
            )
            raise RegistryUnavailableError(
                msg, retryable=exc.retryable, correlation_id=request.correlation_id
            ) from exc

    outcome = poll_default_version(request, budget, fetch, checkpoint=checkpoint, clock=clock)

    if outcome.state is PollState.CONVERGED and outcome.snapshot is not None:
        logger.info(
            "verify_default_version converged | rollout_id=%s | actor_definition_id=%s | "
            "tag=%s | override=%s | support_state=%s | polls=%d | elapsed=%.1fs",
            request.rollout_id,
            request.actor_definition_id,
            outcome.snapshot.docker_image_tag,
            outcome.snapshot.is_version_override_applied,
            outcome.snapshot.support_state.value,
            outcome.fetch_count,
            outcome.elapsed_seconds,
        )
        return

    logger.warning(
        "verify_default_version failed | rollout_id=%s | actor_definition_id=%s | "
        "state=%s | expected=%s | last_observed=%s | polls=%d | elapsed=%.1fs | reason=%s",
        request.rollout_id,
        request.actor_definition_id,
        outcome.state.value,
        request.expected_tag,
        outcome.last_observed_tag,
        outcome.fetch_count,
        outcome.elapsed_seconds,
        outcome.reason,
    )
    error = outcome_error(request, budget, outcome)
    if error is not None:
        raise error

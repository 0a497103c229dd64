"""Bounded poller: wait for a registry default version to converge.

Loop, per observation:

1. ``fetch()`` a snapshot.  Fetch failures propagate unchanged; the
   poller never retries them itself.
2. If the observed tag matches the expected tag, stop: ``CONVERGED``.
3. If the elapsed time since the first fetch reached the deadline,
   stop: ``DEADLINE_EXCEEDED``.
4. Otherwise heartbeat and wait one poll interval at the checkpoint.
   Cancellation observed there stops the loop with ``CANCELLED`` before
   the next fetch.

The match test runs before the deadline test, so an observation that
converges exactly at the deadline is reported as a success.

``evaluate_observation`` holds steps 2 and 3 and is shared with the
durable-timer rendition in ``orchestrators.verify_rollout``.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from connector_rollout.models.outcomes import PollOutcome, PollState
from connector_rollout.verification.tag_matcher import matches

if TYPE_CHECKING:
    from collections.abc import Callable

    from connector_rollout.models.verification import PollBudget, VerificationRequest
    from connector_rollout.models.versions import VersionSnapshot
    from connector_rollout.verification.checkpoint import Checkpoint

logger = logging.getLogger(__name__)


def evaluate_observation(
    snapshot: VersionSnapshot,
    expected_tag: str,
    *,
    elapsed_seconds: float,
    deadline_seconds: float,
    fetch_count: int,
    wait_count: int,
) -> PollOutcome | None:
    """Decide whether one observation ends the poll.

    Returns:
        A terminal ``PollOutcome``, or ``None`` to keep polling.
    """
    if matches(snapshot.docker_image_tag, expected_tag):
        return PollOutcome(
            state=PollState.CONVERGED,
            snapshot=snapshot,
            elapsed_seconds=elapsed_seconds,
            fetch_count=fetch_count,
            wait_count=wait_count,
        )
    if elapsed_seconds >= deadline_seconds:
        return PollOutcome(
            state=PollState.DEADLINE_EXCEEDED,
            snapshot=snapshot,
            elapsed_seconds=elapsed_seconds,
            fetch_count=fetch_count,
            wait_count=wait_count,
        )
    return None


def poll_default_version(
    request: VerificationRequest,
    budget: PollBudget,
    fetch: Callable[[], VersionSnapshot],
    *,
    checkpoint: Checkpoint,
    clock: Callable[[], float] = time.monotonic,
) -> PollOutcome:
    """Poll *fetch* until the expected tag appears, the budget runs out,
    or the orchestrator cancels.

    Args:
        request: The verification being served (expected tag, identifiers).
        budget: Resolved deadline and poll interval.
        fetch: Zero-argument registry read.
        checkpoint: Suspend point used between observations.
        clock: Monotonic clock in seconds.

    Returns:
        The terminal ``PollOutcome``.

    Raises:
        Exception: Whatever ``fetch`` raises, unchanged.
    """
    start = clock()
    fetch_count = 0
    wait_count = 0

    while True:
        snapshot = fetch()
        fetch_count += 1
        elapsed = clock() - start

        logger.info(
            "Default version observed | rollout_id=%s | actor_definition_id=%s | "
            "observed=%s | expected=%s | fetch_count=%d | elapsed=%.1fs",
            request.rollout_id,
            request.actor_definition_id,
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

        cancelled = checkpoint.suspend(
            budget.poll_interval_seconds,
            {
                "rollout_id": str(request.rollout_id),
                "actor_definition_id": str(request.actor_definition_id),
                "fetch_count": fetch_count,
                "observed_tag": snapshot.docker_image_tag,
                "expected_tag": request.expected_tag,
                "elapsed_seconds": elapsed,
            },
        )
        if cancelled:
            return PollOutcome(
                state=PollState.CANCELLED,
                snapshot=snapshot,
                elapsed_seconds=clock() - start,
                fetch_count=fetch_count,
                wait_count=wait_count,
                reason=checkpoint.token.reason,
            )
        wait_count += 1

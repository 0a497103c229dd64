"""Verification failure kinds.

Raised by the activity façade and the durable orchestrator when a
verification does not converge.  ``InvalidRequestError`` lives with the
request model in ``connector_rollout.models.verification``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from connector_rollout.core.exceptions import (
    CancellationError,
    PermanentError,
    RolloutWorkerError,
)
from connector_rollout.models.outcomes import PollState

if TYPE_CHECKING:
    from connector_rollout.models.outcomes import PollOutcome
    from connector_rollout.models.verification import PollBudget, VerificationRequest

STAGE = "verify_default_version"


class RegistryUnavailableError(RolloutWorkerError):
    """A registry read failed during verification.

    ``retryable`` mirrors the underlying ``RegistryError`` so the
    orchestrator can decide whether to re-run the activity.
    """

    default_stage = STAGE
    default_code = "REGISTRY_UNAVAILABLE"


class DeadlineExceededError(PermanentError):
    """The poll window ran out before the default version converged.

    Attributes:
        rollout_id: Rollout being verified.
        actor_definition_id: Actor definition that was polled.
        expected_tag: Tag the rollout promoted.
        last_observed_tag: Tag seen on the final read.
        elapsed_seconds: Length of the exhausted window.
    """

    default_stage = STAGE
    default_code = "VERIFICATION_TIMED_OUT"

    def __init__(
        self,
        request: VerificationRequest,
        budget: PollBudget,
        outcome: PollOutcome,
    ) -> None:
        self.rollout_id = str(request.rollout_id)
        self.actor_definition_id = str(request.actor_definition_id)
        self.expected_tag = request.expected_tag
        self.last_observed_tag = outcome.last_observed_tag
        self.elapsed_seconds = outcome.elapsed_seconds
        msg = (
            f"Timed out after polling the default version for {outcome.elapsed_seconds:.1f}s: "
            f"the {budget.deadline_seconds:g}s poll window was exhausted without convergence "
            f"| rollout_id={self.rollout_id} | actor_definition_id={self.actor_definition_id} "
            f"| expected_tag={self.expected_tag} | last_observed_tag={self.last_observed_tag} "
            f"| polls={outcome.fetch_count}"
        )
        super().__init__(msg, correlation_id=self.rollout_id)


class VerificationCancelledError(CancellationError):
    """The orchestrator cancelled the verification during a wait."""

    default_stage = STAGE
    default_code = "VERIFICATION_CANCELLED"

    def __init__(self, request: VerificationRequest, outcome: PollOutcome) -> None:
        self.rollout_id = str(request.rollout_id)
        self.actor_definition_id = str(request.actor_definition_id)
        self.reason = outcome.reason
        msg = (
            f"Verification cancelled after {outcome.fetch_count} poll(s): {outcome.reason} "
            f"| rollout_id={self.rollout_id} | actor_definition_id={self.actor_definition_id}"
        )
        super().__init__(msg, correlation_id=self.rollout_id)


def outcome_error(
    request: VerificationRequest,
    budget: PollBudget,
    outcome: PollOutcome,
) -> RolloutWorkerError | None:
    """Return the failure matching a non-converged *outcome*, else ``None``."""
    if outcome.state is PollState.DEADLINE_EXCEEDED:
        return DeadlineExceededError(request, budget, outcome)
    if outcome.state is PollState.CANCELLED:
        return VerificationCancelledError(request, outcome)
    return None

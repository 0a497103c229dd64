"""Default-version verification core.

- tag_matcher: Tag comparison with release-candidate tolerance
- checkpoint: Heartbeat-then-wait suspend point and cancellation token
- poller: Bounded poll loop and the shared per-observation decision
- errors: Failure kinds raised when a verification does not converge
"""

from connector_rollout.verification.checkpoint import (
    CancellationToken,
    Checkpoint,
    logging_heartbeat,
)
from connector_rollout.verification.errors import (
    DeadlineExceededError,
    RegistryUnavailableError,
    VerificationCancelledError,
    outcome_error,
)
from connector_rollout.verification.poller import evaluate_observation, poll_default_version
from connector_rollout.verification.tag_matcher import matches, strip_rc_suffix

__all__ = [
    "CancellationToken",
    "Checkpoint",
    "DeadlineExceededError",
    "RegistryUnavailableError",
    "VerificationCancelledError",
    "evaluate_observation",
    "logging_heartbeat",
    "matches",
    "outcome_error",
    "poll_default_version",
    "strip_rc_suffix",
]

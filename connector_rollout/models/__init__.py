"""Data models and schemas.

Defines the data structures exchanged by the verification worker:
- VersionSnapshot: Default version of an actor definition as read from the registry
- VerificationRequest / PollBudget: Input of one verification and its resolved budget
- PollOutcome: Terminal result of one poll run
"""

from connector_rollout.models.outcomes import PollOutcome, PollState
from connector_rollout.models.verification import (
    InvalidRequestError,
    PollBudget,
    VerificationRequest,
)
from connector_rollout.models.versions import SupportState, VersionSnapshot

__all__ = [
    "InvalidRequestError",
    "PollBudget",
    "PollOutcome",
    "PollState",
    "SupportState",
    "VerificationRequest",
    "VersionSnapshot",
]

"""Poll outcome model.

One ``PollOutcome`` is produced per run of the bounded poller.  Its
``state`` is the variant tag; the remaining fields carry what that
variant needs for diagnostics:

- ``CONVERGED``: ``snapshot`` is the matching observation.
- ``DEADLINE_EXCEEDED``: ``snapshot`` is the last observation and
  ``elapsed_seconds`` how long the window lasted.
- ``CANCELLED``: ``reason`` names who asked to stop; ``snapshot`` is the
  last observation before the interrupted wait.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any

from connector_rollout.models.versions import VersionSnapshot


class PollState(enum.Enum):
    """Terminal state of one poll run."""

    CONVERGED = "converged"
    DEADLINE_EXCEEDED = "deadline_exceeded"
    CANCELLED = "cancelled"


@dataclass(frozen=True, slots=True)
class PollOutcome:
    """Result of a bounded poll.

    Attributes:
        state: Which terminal state the loop reached.
        snapshot: Matching (converged) or last observed snapshot.
        elapsed_seconds: Time since the first fetch started.
        fetch_count: Number of registry reads performed.
        wait_count: Number of completed waits between reads.
        reason: Cancellation reason (empty unless cancelled).
    """

    state: PollState
    snapshot: VersionSnapshot | None
    elapsed_seconds: float
    fetch_count: int
    wait_count: int
    reason: str = ""

    @property
    def converged(self) -> bool:
        """Whether the expected tag was observed."""
        return self.state is PollState.CONVERGED

    @property
    def last_observed_tag(self) -> str:
        """Tag of the carried snapshot, or empty when none was read."""
        return self.snapshot.docker_image_tag if self.snapshot else ""

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a JSON-compatible dict."""
        return {
            "state": self.state.value,
            "snapshot": self.snapshot.to_dict() if self.snapshot else None,
            "elapsed_seconds": self.elapsed_seconds,
            "fetch_count": self.fetch_count,
            "wait_count": self.wait_count,
            "reason": self.reason,
        }

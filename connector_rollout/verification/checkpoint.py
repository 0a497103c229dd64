"""Cooperative suspend point between registry observations.

The poller blocks in exactly one place: after a non-matching
observation it calls ``Checkpoint.suspend``, which

1. sends a heartbeat to the supervising orchestrator, then
2. waits for the poll interval on a cancellable timer.

Cancellation can arrive two ways.  The heartbeat callback may answer
that the orchestrator wants the work stopped, or another thread may
call ``CancellationToken.cancel`` while the wait is in progress, which
wakes the waiter immediately.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping
from typing import Any

logger = logging.getLogger(__name__)

#: Heartbeat callback.  A truthy return value requests cancellation.
HeartbeatFn = Callable[[Mapping[str, Any]], bool | None]


class CancellationToken:
    """Thread-safe, one-shot cancellation flag with a cancellable wait."""

    def __init__(self) -> None:
        self._event = threading.Event()
        self._reason = ""
        self._lock = threading.Lock()

    def cancel(self, reason: str = "cancelled") -> None:
        """Request cancellation.  Only the first reason is kept."""
        with self._lock:
            if not self._event.is_set():
                self._reason = reason
                self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> str:
        return self._reason

    def wait(self, seconds: float) -> bool:
        """Block up to *seconds*; return ``True`` if cancelled meanwhile."""
        return self._event.wait(timeout=max(seconds, 0.0))


class Checkpoint:
    """Heartbeat-then-wait suspend point bound to one verification.

    Args:
        token: Cancellation token; a fresh one is created when omitted.
        heartbeat: Called once per suspend with liveness details.  A
            truthy return value cancels the token.
        sleep: Replacement for the timer wait (simulated clocks in
            tests).  When given, cancellation is checked after it returns.
    """

    def __init__(
        self,
        token: CancellationToken | None = None,
        *,
        heartbeat: HeartbeatFn | None = None,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        self.token = token or CancellationToken()
        self._heartbeat = heartbeat
        self._sleep = sleep
        self.heartbeat_count = 0

    def suspend(self, interval_seconds: float, details: Mapping[str, Any]) -> bool:
        """Heartbeat, then wait *interval_seconds*.

        Returns:
            ``True`` when cancellation was observed, in which case the
            remaining wait is abandoned.
        """
        self.heartbeat_count += 1
        if self._heartbeat is not None and self._heartbeat(details):
            self.token.cancel("cancellation requested by orchestrator heartbeat")
        if self.token.cancelled:
            return True

        if self._sleep is None:
            return self.token.wait(interval_seconds)
        self._sleep(interval_seconds)
        return self.token.cancelled


def logging_heartbeat(details: Mapping[str, Any]) -> None:
    """Heartbeat that only records liveness in the log."""
    logger.info(
        "heartbeat | rollout_id=%s | actor_definition_id=%s | fetch_count=%s | observed=%s",
        details.get("rollout_id", ""),
        details.get("actor_definition_id", ""),
        details.get("fetch_count", 0),
        details.get("observed_tag", ""),
    )

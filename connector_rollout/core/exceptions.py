"""Exception hierarchy shared by the verifier's activities, registry
clients and orchestrator.

Every domain error derives from ``RolloutWorkerError`` and carries what
an orchestrator needs to decide the next step: the worker stage that
failed, a machine-readable code, whether retrying can help, and the
rollout it belongs to.

Categories
----------
``validation``  malformed request or model; retrying cannot help.
``contract``    an activity payload drifted from its schema.
``transient``   the registry or network may recover.
``permanent``   the verification failed for good (deadline exhausted).
``cancelled``   the supervising orchestrator asked the work to stop.

``to_error_dict()`` renders the stable structure kept in orchestration
history.
"""

from __future__ import annotations

from typing import ClassVar

_ERROR_DICT_KEYS = ("category", "code", "stage", "message", "retryable", "correlation_id")


class RolloutWorkerError(Exception):
    """Base class for every verifier error.

    Subclasses set their defaults through class attributes; keyword
    arguments override them per instance.

    Attributes:
        message: Description for operators.
        stage: Worker stage that raised (``"registry"``, ``"ingress"``, ...).
        code: Stable machine-readable code (e.g. ``"VERIFICATION_TIMED_OUT"``).
        retryable: Whether re-running the failed step may succeed.
        correlation_id: Rollout identifier, when known.
    """

    default_stage: ClassVar[str] = ""
    default_code: ClassVar[str] = ""
    default_retryable: ClassVar[bool] = False
    #: Fixed category of the class; ``None`` derives it from ``retryable``.
    category_name: ClassVar[str | None] = None

    def __init__(
        self,
        message: str = "",
        *,
        stage: str = "",
        code: str = "",
        retryable: bool | None = None,
        correlation_id: str = "",
    ) -> None:
        super().__init__(message)
        self.message = message
        self.stage = stage or self.default_stage
        self.code = code or self.default_code
        self.retryable = self.default_retryable if retryable is None else retryable
        self.correlation_id = correlation_id

    @property
    def category(self) -> str:
        if self.category_name is not None:
            return self.category_name
        return "transient" if self.retryable else "permanent"

    def to_error_dict(self) -> dict[str, object]:
        """Structured error payload for orchestration history and logs."""
        return {key: getattr(self, key) for key in _ERROR_DICT_KEYS}


class ValidationError(RolloutWorkerError):
    """A request or model failed validation."""

    category_name = "validation"


class ContractError(RolloutWorkerError):
    """An activity payload does not match its declared schema."""

    category_name = "contract"


class TransientError(RolloutWorkerError):
    """A failure that may clear up on retry."""

    category_name = "transient"
    default_retryable = True


class PermanentError(RolloutWorkerError):
    """Unrecoverable domain failure. Not retryable."""

    category_name = "permanent"


class CancellationError(RolloutWorkerError):
    """Work stopped because the supervising orchestrator requested it."""

    category_name = "cancelled"

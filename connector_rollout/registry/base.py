"""VersionRegistryClient abstract base class.

Defines the single read the verification core needs from the version
registry.  The poller never knows which concrete client is behind it;
the activity façade injects one per task.

Each concrete client (``AirbyteApiRegistryClient``, test doubles, ...)
implements ``fetch_default_version`` per its transport's specifics.
"""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING

from connector_rollout.core.exceptions import RolloutWorkerError

if TYPE_CHECKING:
    import uuid
    from types import TracebackType

    from connector_rollout.core.config import WorkerConfig
    from connector_rollout.models.versions import VersionSnapshot


class VersionRegistryClient(abc.ABC):
    """Abstract base class for version registry clients.

    Clients are safe for concurrent read-only use; they hold no
    per-verification state.  Usable as a context manager so the owner
    of a transport releases it deterministically::

        with get_registry_client(config) as client:
            snapshot = client.fetch_default_version(actor_definition_id)
    """

    name: str = ""

    def __init__(self, config: WorkerConfig) -> None:
        self._config = config

    @property
    def config(self) -> WorkerConfig:
        """Return the worker configuration (read-only)."""
        return self._config

    @abc.abstractmethod
    def fetch_default_version(self, actor_definition_id: uuid.UUID) -> VersionSnapshot:
        """Return the current default version of *actor_definition_id*.

        Raises:
            RegistryError: On transport, HTTP, or decoding failures.
        """

    def close(self) -> None:
        """Release any transport owned by the client."""

    def __enter__(self) -> VersionRegistryClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


# ---------------------------------------------------------------------------
# Registry exceptions
# ---------------------------------------------------------------------------


class RegistryError(RolloutWorkerError):
    """Raised when a registry read fails.

    Attributes:
        client: Name of the client that raised the error.
        message: Human-readable error description.
        retryable: Whether a later attempt may succeed.
    """

    default_stage = "registry"
    default_code = "REGISTRY_ERROR"

    def __init__(
        self,
        client: str,
        message: str,
        *,
        retryable: bool = False,
    ) -> None:
        self.client = client
        super().__init__(
            message,
            retryable=retryable,
            code=self.default_code,
            stage=self.default_stage,
        )

    def __str__(self) -> str:
        return f"[{self.client}] {self.message}"

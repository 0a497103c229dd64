"""Registry client factory: selects the active client by name.

The factory maintains a registry of known clients. New clients are
registered by adding an entry to ``_CLIENT_REGISTRY`` or calling
``register_registry_client``.

Usage::

    from connector_rollout.registry.factory import get_registry_client

    with get_registry_client(config) as client:
        snapshot = client.fetch_default_version(actor_definition_id)

The client name is read from the ``REGISTRY_CLIENT`` environment variable
via ``WorkerConfig.registry_client``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from connector_rollout.registry.base import RegistryError, VersionRegistryClient

if TYPE_CHECKING:
    from collections.abc import Callable

    from connector_rollout.core.config import WorkerConfig

logger = logging.getLogger(__name__)

AIRBYTE_API = "airbyte_api"

# Each entry maps a client name to a callable that returns the client
# *class*, so transport dependencies load only when selected.
_CLIENT_REGISTRY: dict[str, Callable[[], type[VersionRegistryClient]]] = {}


def _register_builtin_clients() -> None:
    def _airbyte_api() -> type[VersionRegistryClient]:
        from connector_rollout.registry.airbyte_api import AirbyteApiRegistryClient

        return AirbyteApiRegistryClient

    _CLIENT_REGISTRY[AIRBYTE_API] = _airbyte_api


def _ensure_registry() -> None:
    """Initialise the client registry once (idempotent)."""
    if not _CLIENT_REGISTRY:
        _register_builtin_clients()


def register_registry_client(
    name: str,
    loader: Callable[[], type[VersionRegistryClient]],
) -> None:
    """Register a custom registry client.

    Args:
        name: Client name (e.g. ``"my_registry"``).
        loader: A zero-argument callable that returns the client class.

    Raises:
        ValueError: If the name is empty.
    """
    if not name:
        msg = "Registry client name must be non-empty"
        raise ValueError(msg)
    _ensure_registry()
    _CLIENT_REGISTRY[name] = loader
    logger.debug("Registered registry client: %s", name)


def get_registry_client(config: WorkerConfig, **kwargs: Any) -> VersionRegistryClient:
    """Create the registry client named by ``config.registry_client``.

    Args:
        config: Worker configuration.
        **kwargs: Passed through to the client constructor
            (e.g. ``http_client`` for a shared pool).

    Raises:
        RegistryError: If the named client is not registered.
    """
    _ensure_registry()

    name = config.registry_client
    loader = _CLIENT_REGISTRY.get(name)
    if loader is None:
        available = ", ".join(sorted(_CLIENT_REGISTRY))
        msg = f"Unknown registry client: {name!r}. Available: {available}"
        raise RegistryError(client=name, message=msg)

    client_cls = loader()
    logger.info("Creating registry client: %s", name)
    return client_cls(config, **kwargs)


def list_registry_clients() -> list[str]:
    """Return the names of all registered clients."""
    _ensure_registry()
    return sorted(_CLIENT_REGISTRY)

"""Version registry clients.

- VersionRegistryClient: Abstract base class defining the single read
- AirbyteApiRegistryClient: Configuration API over HTTP (httpx)

The active client is selected via configuration.
"""

from connector_rollout.registry.base import RegistryError, VersionRegistryClient
from connector_rollout.registry.factory import (
    AIRBYTE_API,
    get_registry_client,
    list_registry_clients,
    register_registry_client,
)

__all__ = [
    "AIRBYTE_API",
    "RegistryError",
    "VersionRegistryClient",
    "get_registry_client",
    "list_registry_clients",
    "register_registry_client",
]

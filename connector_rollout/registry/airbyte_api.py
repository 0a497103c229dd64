"""Configuration API registry client (HTTP).

Concrete ``VersionRegistryClient`` that asks the platform's
configuration API for the default version of an actor definition::

    POST {base_url}/v1/actor_definition_versions/get_default
    {"actorDefinitionId": "<uuid>"}

and decodes the ``ActorDefinitionVersionRead`` response.

Error mapping:
    - timeouts / connection failures  -> retryable ``RegistryError``
    - HTTP 429 and 5xx                -> retryable ``RegistryError``
    - any other non-2xx               -> non-retryable ``RegistryError``
    - body that is not a valid read   -> non-retryable ``RegistryError``
    - any other request failure       -> non-retryable ``RegistryError``
      (undecodable content encoding, redirect loops, invalid URL)

The ``httpx.Client`` may be injected so one connection pool is shared
across concurrent verifications; a client the adapter created itself is
closed by ``close()``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

from connector_rollout.models.versions import VersionSnapshot
from connector_rollout.registry.base import RegistryError, VersionRegistryClient

if TYPE_CHECKING:
    import uuid

    from connector_rollout.core.config import WorkerConfig

logger = logging.getLogger(__name__)

GET_DEFAULT_VERSION_PATH = "/v1/actor_definition_versions/get_default"

_RETRYABLE_STATUS_CODES = frozenset({429})


class AirbyteApiRegistryClient(VersionRegistryClient):
    """HTTP registry client backed by ``httpx``."""

    name = "airbyte_api"

    def __init__(
        self,
        config: WorkerConfig,
        *,
        http_client: httpx.Client | None = None,
    ) -> None:
        super().__init__(config)
        self._owns_http_client = http_client is None
        self._http = http_client or httpx.Client(
            base_url=config.registry_api_base_url.rstrip("/"),
            timeout=config.registry_request_timeout_seconds,
            headers={"Accept": "application/json"},
        )

    def fetch_default_version(self, actor_definition_id: uuid.UUID) -> VersionSnapshot:
        """Read the default version for *actor_definition_id*.

        Raises:
            RegistryError: See the module docstring for the mapping.
        """
        body = {"actorDefinitionId": str(actor_definition_id)}
        try:
            response = self._http.post(GET_DEFAULT_VERSION_PATH, json=body)
        except httpx.TimeoutException as exc:
            msg = f"Timed out reading default version of {actor_definition_id}: {exc}"
            raise RegistryError(self.name, msg, retryable=True) from exc
        except httpx.TransportError as exc:
            msg = f"Transport error reading default version of {actor_definition_id}: {exc}"
            raise RegistryError(self.name, msg, retryable=True) from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            msg = f"Request for default version of {actor_definition_id} failed: {exc}"
            raise RegistryError(self.name, msg) from exc

        if response.is_error:
            status = response.status_code
            retryable = status >= 500 or status in _RETRYABLE_STATUS_CODES
            msg = (
                f"Registry returned HTTP {status} for actor definition "
                f"{actor_definition_id}: {response.text[:200]}"
            )
            raise RegistryError(self.name, msg, retryable=retryable)

        snapshot = _decode_snapshot(response, actor_definition_id, client=self.name)

        logger.debug(
            "Default version read | actor_definition_id=%s | repository=%s | tag=%s | "
            "override=%s | support_state=%s",
            actor_definition_id,
            snapshot.docker_repository,
            snapshot.docker_image_tag,
            snapshot.is_version_override_applied,
            snapshot.support_state.value,
        )
        return snapshot

    def close(self) -> None:
        """Close the HTTP client if this adapter created it."""
        if self._owns_http_client:
            self._http.close()


def _decode_snapshot(
    response: httpx.Response,
    actor_definition_id: uuid.UUID,
    *,
    client: str,
) -> VersionSnapshot:
    """Decode an ``ActorDefinitionVersionRead`` body into a snapshot."""
    try:
        payload: Any = response.json()
    except ValueError as exc:
        msg = f"Registry response for {actor_definition_id} is not valid JSON: {exc}"
        raise RegistryError(client, msg) from exc

    if not isinstance(payload, dict):
        msg = (
            f"Registry response for {actor_definition_id} must be an object, "
            f"got {type(payload).__name__}"
        )
        raise RegistryError(client, msg)

    try:
        return VersionSnapshot.from_api_dict(payload)
    except KeyError as exc:
        msg = f"Registry response for {actor_definition_id} is missing field {exc}"
        raise RegistryError(client, msg) from exc
    except ValueError as exc:
        msg = f"Registry response for {actor_definition_id} is invalid: {exc}"
        raise RegistryError(client, msg) from exc

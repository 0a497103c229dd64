"""Tests for the registry client factory.

Covers: get_registry_client, list_registry_clients,
register_registry_client, and unknown-name handling.
"""

from __future__ import annotations

import unittest
import uuid

from connector_rollout.core.config import WorkerConfig
from connector_rollout.models.versions import VersionSnapshot
from connector_rollout.registry.airbyte_api import AirbyteApiRegistryClient
from connector_rollout.registry.base import RegistryError, VersionRegistryClient
from connector_rollout.registry.factory import (
    _CLIENT_REGISTRY,
    AIRBYTE_API,
    get_registry_client,
    list_registry_clients,
    register_registry_client,
)


class _FixedTagClient(VersionRegistryClient):
    name = "fixed"

    def __init__(self, config: WorkerConfig, *, tag: str = "1.0.0") -> None:
        super().__init__(config)
        self.tag = tag

    def fetch_default_version(self, actor_definition_id: uuid.UUID) -> VersionSnapshot:
        return VersionSnapshot(docker_repository="airbyte/fixed", docker_image_tag=self.tag)


class TestListRegistryClients(unittest.TestCase):
    """list_registry_clients returns known clients."""

    def test_includes_builtin_client(self) -> None:
        assert AIRBYTE_API in list_registry_clients()

    def test_returns_sorted(self) -> None:
        names = list_registry_clients()
        assert names == sorted(names)


class TestGetRegistryClient(unittest.TestCase):
    """get_registry_client creates the configured client."""

    def test_default_config_builds_airbyte_api_client(self) -> None:
        client = get_registry_client(WorkerConfig())
        try:
            assert isinstance(client, AirbyteApiRegistryClient)
            assert client.name == AIRBYTE_API
        finally:
            client.close()

    def test_unknown_client_raises(self) -> None:
        with self.assertRaises(RegistryError) as ctx:
            get_registry_client(WorkerConfig(registry_client="carrier_pigeon"))
        assert "carrier_pigeon" in str(ctx.exception)
        assert AIRBYTE_API in str(ctx.exception)
        assert ctx.exception.retryable is False


class TestRegisterRegistryClient(unittest.TestCase):
    """Custom clients can be registered and selected by name."""

    def tearDown(self) -> None:
        _CLIENT_REGISTRY.pop("fixed", None)

    def test_register_and_select(self) -> None:
        register_registry_client("fixed", lambda: _FixedTagClient)
        assert "fixed" in list_registry_clients()

        with get_registry_client(WorkerConfig(registry_client="fixed"), tag="2.0.0") as client:
            snapshot = client.fetch_default_version(uuid.uuid4())

        assert snapshot.docker_image_tag == "2.0.0"

    def test_empty_name_rejected(self) -> None:
        with self.assertRaises(ValueError):
            register_registry_client("", lambda: _FixedTagClient)

    def test_builtin_survives_custom_registration(self) -> None:
        register_registry_client("fixed", lambda: _FixedTagClient)
        assert AIRBYTE_API in list_registry_clients()

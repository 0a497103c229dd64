"""Tests for the fetch_default_version activity (single registry read)."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from conftest import ACTOR_DEFINITION_ID, ROLLOUT_ID, make_snapshot
from connector_rollout.activities.fetch_default_version import fetch_default_version
from connector_rollout.models.verification import InvalidRequestError
from connector_rollout.registry.base import RegistryError, VersionRegistryClient
from connector_rollout.verification.errors import RegistryUnavailableError


def _client(**kwargs: object) -> MagicMock:
    client = MagicMock(spec=VersionRegistryClient)
    client.fetch_default_version.configure_mock(**kwargs)
    return client


class TestFetchDefaultVersion:
    def test_returns_serialised_snapshot(self) -> None:
        client = _client(return_value=make_snapshot("6.2.21"))

        result = fetch_default_version(
            {"actor_definition_id": str(ACTOR_DEFINITION_ID), "rollout_id": str(ROLLOUT_ID)},
            client=client,
        )

        client.fetch_default_version.assert_called_once_with(ACTOR_DEFINITION_ID)
        assert result["docker_image_tag"] == "6.2.21"
        assert result["docker_repository"] == "airbyte/source-faker"
        assert result["support_state"] == "supported"

    def test_rollout_id_is_optional(self) -> None:
        client = _client(return_value=make_snapshot("6.2.21"))
        result = fetch_default_version(
            {"actor_definition_id": str(ACTOR_DEFINITION_ID)}, client=client
        )
        assert result["docker_image_tag"] == "6.2.21"

    def test_bad_actor_definition_id(self) -> None:
        client = _client()
        with pytest.raises(InvalidRequestError, match="actor_definition_id"):
            fetch_default_version({"actor_definition_id": "nope"}, client=client)
        client.fetch_default_version.assert_not_called()

    @pytest.mark.parametrize("retryable", [True, False])
    def test_registry_error_wrapped(self, retryable: bool) -> None:
        cause = RegistryError("airbyte_api", "HTTP 500", retryable=retryable)
        client = _client(side_effect=cause)

        with pytest.raises(RegistryUnavailableError) as excinfo:
            fetch_default_version(
                {"actor_definition_id": str(ACTOR_DEFINITION_ID), "rollout_id": "r-1"},
                client=client,
            )

        assert excinfo.value.retryable is retryable
        assert excinfo.value.correlation_id == "r-1"
        assert excinfo.value.__cause__ is cause

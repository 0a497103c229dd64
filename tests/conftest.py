"""Shared pytest fixtures for the connector rollout verifier test suite."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

import pytest

from connector_rollout.core.config import WorkerConfig
from connector_rollout.models.verification import VerificationRequest
from connector_rollout.models.versions import SupportState, VersionSnapshot

if TYPE_CHECKING:
    from collections.abc import Iterator

ACTOR_DEFINITION_ID = uuid.UUID("3b4bf8f7-5e4b-4b42-9a35-3b8c3c7e1f10")
ROLLOUT_ID = uuid.UUID("9c0d6f5e-2a71-4e0b-8f0f-6b5d7a4c2e91")
DOCKER_REPOSITORY = "airbyte/source-faker"

_CONFIG_ENV_VARS = (
    "REGISTRY_CLIENT",
    "REGISTRY_API_BASE_URL",
    "REGISTRY_REQUEST_TIMEOUT_SECONDS",
    "VERIFY_DEADLINE_SECONDS",
    "VERIFY_POLL_INTERVAL_SECONDS",
)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_snapshot(tag: str, **overrides: object) -> VersionSnapshot:
    """Build a ``VersionSnapshot`` for the sample repository."""
    fields: dict[str, object] = {
        "docker_repository": DOCKER_REPOSITORY,
        "docker_image_tag": tag,
        "is_version_override_applied": False,
        "support_state": SupportState.SUPPORTED,
    }
    fields.update(overrides)
    return VersionSnapshot(**fields)  # type: ignore[arg-type]


def make_request(expected_tag: str = "0.2.0", **overrides: object) -> VerificationRequest:
    """Build a ``VerificationRequest`` with the sample identifiers."""
    fields: dict[str, object] = {
        "docker_repository": DOCKER_REPOSITORY,
        "expected_tag": expected_tag,
        "actor_definition_id": ACTOR_DEFINITION_ID,
        "rollout_id": ROLLOUT_ID,
    }
    fields.update(overrides)
    return VerificationRequest(**fields)  # type: ignore[arg-type]


@pytest.fixture(autouse=True)
def _clean_config_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep host app settings out of ``WorkerConfig.from_env``."""
    for name in _CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture()
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def worker_config() -> WorkerConfig:
    """Default configuration with a short poll budget."""
    return WorkerConfig(verify_deadline_seconds=60.0, verify_poll_interval_seconds=10.0)


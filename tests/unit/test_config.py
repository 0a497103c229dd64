"""Tests for worker configuration.

Covers:
- Default values
- Loading from environment variables
- Type coercion (string env vars to numeric fields)
- Fail-fast range validation
"""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest

from connector_rollout.core.config import (
    DEFAULT_VERIFY_DEADLINE_SECONDS,
    DEFAULT_VERIFY_POLL_INTERVAL_SECONDS,
    ConfigValidationError,
    WorkerConfig,
)
from connector_rollout.core.exceptions import RolloutWorkerError


class TestWorkerConfigDefaults:
    """Verify default configuration values."""

    def test_default_registry_client(self) -> None:
        cfg = WorkerConfig()
        assert cfg.registry_client == "airbyte_api"

    def test_default_base_url(self) -> None:
        cfg = WorkerConfig()
        assert cfg.registry_api_base_url == "http://airbyte-server-svc:8001/api"

    def test_default_poll_budget(self) -> None:
        cfg = WorkerConfig()
        assert cfg.verify_deadline_seconds == DEFAULT_VERIFY_DEADLINE_SECONDS == 600.0
        assert cfg.verify_poll_interval_seconds == DEFAULT_VERIFY_POLL_INTERVAL_SECONDS == 30.0

    def test_from_env_without_variables_matches_defaults(self) -> None:
        assert WorkerConfig.from_env() == WorkerConfig()


class TestWorkerConfigFromEnv:
    """Verify loading from environment variables."""

    def test_loads_from_environment(self) -> None:
        env = {
            "REGISTRY_CLIENT": "custom",
            "REGISTRY_API_BASE_URL": "https://config.example.com/api",
            "REGISTRY_REQUEST_TIMEOUT_SECONDS": "2.5",
            "VERIFY_DEADLINE_SECONDS": "120",
            "VERIFY_POLL_INTERVAL_SECONDS": "15",
        }
        with patch.dict(os.environ, env):
            cfg = WorkerConfig.from_env()

        assert cfg.registry_client == "custom"
        assert cfg.registry_api_base_url == "https://config.example.com/api"
        assert cfg.registry_request_timeout_seconds == 2.5
        assert cfg.verify_deadline_seconds == 120.0
        assert cfg.verify_poll_interval_seconds == 15.0

    def test_non_numeric_value_raises_value_error(self) -> None:
        with patch.dict(os.environ, {"VERIFY_DEADLINE_SECONDS": "ten minutes"}):
            with pytest.raises(ValueError):
                WorkerConfig.from_env()

    def test_config_is_frozen(self) -> None:
        cfg = WorkerConfig()
        with pytest.raises(AttributeError):
            cfg.verify_deadline_seconds = 1.0  # type: ignore[misc]


class TestWorkerConfigValidation:
    """Fail-fast range validation in from_env."""

    @pytest.mark.parametrize(
        ("key", "value"),
        [
            ("REGISTRY_CLIENT", ""),
            ("REGISTRY_API_BASE_URL", ""),
            ("REGISTRY_REQUEST_TIMEOUT_SECONDS", "0"),
            ("VERIFY_DEADLINE_SECONDS", "-1"),
            ("VERIFY_POLL_INTERVAL_SECONDS", "0"),
        ],
    )
    def test_out_of_range_value(self, key: str, value: str) -> None:
        with patch.dict(os.environ, {key: value}):
            with pytest.raises(ConfigValidationError) as excinfo:
                WorkerConfig.from_env()
        assert excinfo.value.key == key
        assert key in str(excinfo.value)

    def test_interval_longer_than_deadline(self) -> None:
        env = {"VERIFY_DEADLINE_SECONDS": "20", "VERIFY_POLL_INTERVAL_SECONDS": "30"}
        with patch.dict(os.environ, env):
            with pytest.raises(ConfigValidationError, match="VERIFY_DEADLINE_SECONDS") as excinfo:
                WorkerConfig.from_env()
        assert excinfo.value.key == "VERIFY_POLL_INTERVAL_SECONDS"

    def test_error_is_worker_error(self) -> None:
        err = ConfigValidationError("VERIFY_DEADLINE_SECONDS", -1.0, "must be > 0 (seconds)")
        assert isinstance(err, RolloutWorkerError)
        assert err.stage == "config"
        assert err.code == "CONFIG_VALIDATION_FAILED"
        assert err.value == -1.0

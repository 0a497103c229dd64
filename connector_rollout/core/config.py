"""Worker configuration read from app settings.

Every setting has a default, so a bare Functions app runs against the
in-cluster configuration API with a ten-minute verification window.
``WorkerConfig.from_env()`` checks the values once per invocation and
raises ``ConfigValidationError`` naming the offending setting.

Settings:
    REGISTRY_CLIENT                   registry client name
    REGISTRY_API_BASE_URL             configuration API base URL
    REGISTRY_REQUEST_TIMEOUT_SECONDS  per-request HTTP timeout
    VERIFY_DEADLINE_SECONDS           default poll window
    VERIFY_POLL_INTERVAL_SECONDS      default spacing between reads
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from connector_rollout.core.exceptions import RolloutWorkerError

DEFAULT_REGISTRY_CLIENT = "airbyte_api"
DEFAULT_REGISTRY_API_BASE_URL = "http://airbyte-server-svc:8001/api"
DEFAULT_REGISTRY_REQUEST_TIMEOUT_SECONDS = 30.0

# Used when a verification request omits its poll budget.
DEFAULT_VERIFY_DEADLINE_SECONDS = 600.0
DEFAULT_VERIFY_POLL_INTERVAL_SECONDS = 30.0


class ConfigValidationError(RolloutWorkerError):
    """An app setting holds an unusable value.

    Attributes:
        key: Name of the app setting.
        value: The rejected value.
    """

    default_stage = "config"
    default_code = "CONFIG_VALIDATION_FAILED"

    def __init__(self, key: str, value: object, message: str) -> None:
        self.key = key
        self.value = value
        super().__init__(f"Invalid configuration {key}={value!r}: {message}")


@dataclass(frozen=True, slots=True)
class WorkerConfig:
    """Immutable worker configuration.

    Attributes:
        registry_client: Name of the registry client
            (``airbyte_api`` unless a custom client is registered).
        registry_api_base_url: Base URL of the configuration API that
            serves actor-definition versions.
        registry_request_timeout_seconds: Per-request HTTP timeout.
        verify_deadline_seconds: Default total poll budget.
        verify_poll_interval_seconds: Default spacing between observations.
    """

    registry_client: str = DEFAULT_REGISTRY_CLIENT
    registry_api_base_url: str = DEFAULT_REGISTRY_API_BASE_URL
    registry_request_timeout_seconds: float = DEFAULT_REGISTRY_REQUEST_TIMEOUT_SECONDS
    verify_deadline_seconds: float = DEFAULT_VERIFY_DEADLINE_SECONDS
    verify_poll_interval_seconds: float = DEFAULT_VERIFY_POLL_INTERVAL_SECONDS

    @classmethod
    def from_env(cls) -> WorkerConfig:
        """Read the settings from ``os.environ`` and check them.

        Raises:
            ConfigValidationError: If a setting is empty or out of range.
            ValueError: If a numeric setting does not parse as a number.
        """
        config = cls(
            registry_client=os.getenv("REGISTRY_CLIENT", DEFAULT_REGISTRY_CLIENT),
            registry_api_base_url=os.getenv(
                "REGISTRY_API_BASE_URL", DEFAULT_REGISTRY_API_BASE_URL
            ),
            registry_request_timeout_seconds=_env_seconds(
                "REGISTRY_REQUEST_TIMEOUT_SECONDS", DEFAULT_REGISTRY_REQUEST_TIMEOUT_SECONDS
            ),
            verify_deadline_seconds=_env_seconds(
                "VERIFY_DEADLINE_SECONDS", DEFAULT_VERIFY_DEADLINE_SECONDS
            ),
            verify_poll_interval_seconds=_env_seconds(
                "VERIFY_POLL_INTERVAL_SECONDS", DEFAULT_VERIFY_POLL_INTERVAL_SECONDS
            ),
        )
        _validate(config)
        return config


def _env_seconds(key: str, default: float) -> float:
    raw = os.getenv(key)
    return default if raw is None else float(raw)


def _validate(config: WorkerConfig) -> None:
    required = {
        "REGISTRY_CLIENT": config.registry_client,
        "REGISTRY_API_BASE_URL": config.registry_api_base_url,
    }
    for key, text in required.items():
        if not text:
            raise ConfigValidationError(key, text, "must not be empty")

    durations = {
        "REGISTRY_REQUEST_TIMEOUT_SECONDS": config.registry_request_timeout_seconds,
        "VERIFY_DEADLINE_SECONDS": config.verify_deadline_seconds,
        "VERIFY_POLL_INTERVAL_SECONDS": config.verify_poll_interval_seconds,
    }
    for key, seconds in durations.items():
        if seconds <= 0:
            raise ConfigValidationError(key, seconds, "must be > 0 (seconds)")

    if config.verify_poll_interval_seconds > config.verify_deadline_seconds:
        raise ConfigValidationError(
            "VERIFY_POLL_INTERVAL_SECONDS",
            config.verify_poll_interval_seconds,
            f"must be <= VERIFY_DEADLINE_SECONDS ({config.verify_deadline_seconds:g})",
        )

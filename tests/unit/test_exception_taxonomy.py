"""Tests for the unified exception taxonomy.

Validates:
- RolloutWorkerError hierarchy and structured attributes
- Category classification (validation, transient, permanent, contract, cancelled)
- ``to_error_dict()`` produces stable payload keys
- Retry semantics are consistent with taxonomy class
- All worker exceptions are RolloutWorkerError subclasses
"""

from __future__ import annotations

from typing import ClassVar

from conftest import make_request, make_snapshot
from connector_rollout.core.config import ConfigValidationError
from connector_rollout.core.exceptions import (
    CancellationError,
    ContractError,
    PermanentError,
    RolloutWorkerError,
    TransientError,
    ValidationError,
)
from connector_rollout.models.outcomes import PollOutcome, PollState
from connector_rollout.models.verification import InvalidRequestError, PollBudget
from connector_rollout.registry.base import RegistryError
from connector_rollout.verification.errors import (
    DeadlineExceededError,
    RegistryUnavailableError,
    VerificationCancelledError,
    outcome_error,
)


def _outcome(state: PollState, **kwargs: object) -> PollOutcome:
    fields: dict[str, object] = {
        "state": state,
        "snapshot": make_snapshot("0.1.0"),
        "elapsed_seconds": 600.0,
        "fetch_count": 21,
        "wait_count": 20,
    }
    fields.update(kwargs)
    return PollOutcome(**fields)  # type: ignore[arg-type]


_BUDGET = PollBudget(deadline_seconds=600.0, poll_interval_seconds=30.0)


class TestRolloutWorkerErrorBase:
    """RolloutWorkerError base class behavior."""

    def test_default_attributes(self) -> None:
        err = RolloutWorkerError("boom")
        assert err.message == "boom"
        assert err.stage == ""
        assert err.code == ""
        assert err.retryable is False
        assert err.correlation_id == ""

    def test_custom_attributes(self) -> None:
        err = RolloutWorkerError(
            "fail",
            stage="verify_default_version",
            code="X",
            retryable=True,
            correlation_id="rollout-1",
        )
        assert err.stage == "verify_default_version"
        assert err.code == "X"
        assert err.retryable is True
        assert err.correlation_id == "rollout-1"

    def test_uncategorised_falls_back_on_retryable(self) -> None:
        assert RolloutWorkerError("x", retryable=True).category == "transient"
        assert RolloutWorkerError("x").category == "permanent"

    def test_to_error_dict_keys(self) -> None:
        err = RolloutWorkerError("x", stage="s", code="C", correlation_id="c")
        assert err.to_error_dict() == {
            "category": "permanent",
            "code": "C",
            "stage": "s",
            "message": "x",
            "retryable": False,
            "correlation_id": "c",
        }


class TestCategoryBases:
    CASES: ClassVar[list[tuple[type[RolloutWorkerError], str, bool]]] = [
        (ValidationError, "validation", False),
        (TransientError, "transient", True),
        (PermanentError, "permanent", False),
        (ContractError, "contract", False),
        (CancellationError, "cancelled", False),
    ]

    def test_categories_and_default_retryability(self) -> None:
        for cls, category, retryable in self.CASES:
            err = cls("x")
            assert err.category == category, cls.__name__
            assert err.retryable is retryable, cls.__name__

    def test_every_category_is_documented(self) -> None:
        for cls, _, _ in self.CASES:
            assert cls.__doc__, cls.__name__

    def test_retryable_override(self) -> None:
        assert TransientError("x", retryable=False).retryable is False


class TestDomainErrors:
    def test_invalid_request(self) -> None:
        err = InvalidRequestError("expected_tag", "", "must not be empty")
        assert err.category == "validation"
        assert err.stage == "verify_default_version"
        assert err.code == "INVALID_VERIFICATION_REQUEST"

    def test_registry_error(self) -> None:
        err = RegistryError("airbyte_api", "HTTP 503", retryable=True)
        assert err.category == "transient"
        assert err.to_error_dict()["code"] == "REGISTRY_ERROR"

    def test_registry_unavailable_inherits_retryability(self) -> None:
        err = RegistryUnavailableError("down", retryable=True, correlation_id="r")
        assert err.category == "transient"
        assert err.code == "REGISTRY_UNAVAILABLE"
        assert RegistryUnavailableError("bad").category == "permanent"

    def test_deadline_exceeded(self) -> None:
        request = make_request("0.2.0")
        err = DeadlineExceededError(request, _BUDGET, _outcome(PollState.DEADLINE_EXCEEDED))
        payload = err.to_error_dict()
        assert payload["category"] == "permanent"
        assert payload["code"] == "VERIFICATION_TIMED_OUT"
        assert payload["correlation_id"] == str(request.rollout_id)
        assert "600s poll window was exhausted" in err.message
        assert "last_observed_tag=0.1.0" in err.message
        assert "polls=21" in err.message

    def test_cancelled(self) -> None:
        request = make_request("0.2.0")
        err = VerificationCancelledError(
            request, _outcome(PollState.CANCELLED, reason="rollout aborted")
        )
        assert err.category == "cancelled"
        assert err.code == "VERIFICATION_CANCELLED"
        assert err.reason == "rollout aborted"

    def test_config_validation(self) -> None:
        err = ConfigValidationError("VERIFY_DEADLINE_SECONDS", 0.0, "must be > 0")
        assert err.to_error_dict()["stage"] == "config"


class TestOutcomeError:
    def test_converged_has_no_error(self) -> None:
        assert outcome_error(make_request(), _BUDGET, _outcome(PollState.CONVERGED)) is None

    def test_deadline_maps_to_deadline_exceeded(self) -> None:
        err = outcome_error(make_request(), _BUDGET, _outcome(PollState.DEADLINE_EXCEEDED))
        assert isinstance(err, DeadlineExceededError)

    def test_cancelled_maps_to_cancelled_error(self) -> None:
        err = outcome_error(make_request(), _BUDGET, _outcome(PollState.CANCELLED, reason="r"))
        assert isinstance(err, VerificationCancelledError)

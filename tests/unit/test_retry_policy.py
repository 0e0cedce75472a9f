"""Tests for the exponential-backoff retry policy."""

import pytest

from core.config import UpstreamConfig
from core.errors import ErrorCode, Ok
from core.resilience import (
    ExponentialBackoff,
    FailureKind,
    PermanentFailure,
    RateLimited,
    RetryConfig,
    RetryPolicy,
    RetryTally,
    Success,
    retry_tally,
)
from tests.conftest import SleepRecorder


class ScriptedAction:
    """Zero-argument action returning a fixed sequence of outcomes."""

    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        return self.outcomes.pop(0)


@pytest.fixture
def sleeps():
    return SleepRecorder()


@pytest.fixture
def policy(sleeps):
    return RetryPolicy(RetryConfig(), sleep=sleeps)


class TestExponentialBackoff:

    def test_default_schedule(self):
        backoff = ExponentialBackoff(RetryConfig())
        assert [backoff.delay_ms(n) for n in range(1, 6)] == [4000, 8000, 16000, 32000, 64000]

    def test_config_from_upstream(self):
        config = RetryConfig.from_upstream(
            UpstreamConfig(max_attempts=3, initial_delay_ms=100, multiplier=3.0)
        )
        assert config == RetryConfig(max_attempts=3, initial_delay_ms=100, multiplier=3.0)

    def test_rejects_zero_attempts(self):
        with pytest.raises(ValueError):
            RetryConfig(max_attempts=0)


class TestRetryPolicy:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("k", [0, 1, 2, 3, 4, 5])
    async def test_succeeds_after_k_rate_limits(self, policy, sleeps, k):
        action = ScriptedAction([RateLimited()] * k + [Success(payload="done")])

        retried = await policy.execute(action, operation="test")

        assert retried.result == Ok("done")
        assert action.calls == k + 1
        assert retried.delays_ms == [4000 * 2 ** i for i in range(k)]
        assert sleeps.calls == [4.0 * 2 ** i for i in range(k)]

    @pytest.mark.asyncio
    async def test_exhaustion_after_six_rate_limits(self, policy, sleeps):
        action = ScriptedAction([RateLimited()] * 6)

        retried = await policy.execute(action, operation="list_employees")

        assert retried.result.is_err()
        error = retried.result.unwrap_err()
        assert error.code is ErrorCode.E1002_RATE_LIMIT_EXHAUSTED
        assert error.metadata["attempts"] == 6
        assert action.calls == 6
        assert sleeps.calls == [4.0, 8.0, 16.0, 32.0, 64.0]
        assert retried.attempt_count == 6

    @pytest.mark.asyncio
    async def test_permanent_failure_short_circuits(self, policy, sleeps):
        action = ScriptedAction([
            PermanentFailure(kind=FailureKind.REJECTED, message="bad request", status_code=400),
            Success(payload="never reached"),
        ])

        retried = await policy.execute(action)

        assert action.calls == 1
        assert sleeps.calls == []
        error = retried.result.unwrap_err()
        assert error.code is ErrorCode.E1003_UPSTREAM_REJECTED
        assert error.metadata["status_code"] == 400

    @pytest.mark.asyncio
    async def test_not_found_is_not_retried(self, policy, sleeps):
        action = ScriptedAction([
            PermanentFailure(kind=FailureKind.NOT_FOUND, message="missing", status_code=404),
        ])

        retried = await policy.execute(action)

        assert retried.result.unwrap_err().code is ErrorCode.E1001_NOT_FOUND
        assert sleeps.calls == []

    @pytest.mark.asyncio
    async def test_permanent_failure_after_rate_limit_stops(self, policy, sleeps):
        action = ScriptedAction([
            RateLimited(),
            PermanentFailure(kind=FailureKind.TRANSPORT, message="connection reset"),
        ])

        retried = await policy.execute(action)

        assert retried.result.unwrap_err().code is ErrorCode.E1004_TRANSPORT
        assert sleeps.calls == [4.0]

    @pytest.mark.asyncio
    async def test_crashing_action_becomes_internal_error(self, policy, sleeps):
        async def boom():
            raise RuntimeError("unexpected")

        retried = await policy.execute(boom)

        error = retried.result.unwrap_err()
        assert error.code is ErrorCode.E9000_UNEXPECTED
        assert isinstance(error.cause, RuntimeError)
        assert sleeps.calls == []

    @pytest.mark.asyncio
    async def test_executions_do_not_share_state(self, policy, sleeps):
        first = await policy.execute(ScriptedAction([RateLimited(), Success(payload=1)]))
        second = await policy.execute(ScriptedAction([RateLimited(), Success(payload=2)]))

        assert first.delays_ms == [4000]
        assert second.delays_ms == [4000]
        assert sleeps.calls == [4.0, 4.0]

    @pytest.mark.asyncio
    async def test_retries_are_counted_on_request_tally(self, policy):
        tally = RetryTally()
        token = retry_tally.set(tally)
        try:
            await policy.execute(ScriptedAction([RateLimited(), RateLimited(), Success(payload=1)]))
            await policy.execute(ScriptedAction([RateLimited()] * 6))
        finally:
            retry_tally.reset(token)

        assert tally.retries == 2 + 5
        assert tally.wait_ms == (4000 + 8000) + (4000 + 8000 + 16000 + 32000 + 64000)
        assert tally.exhausted == 1

    @pytest.mark.asyncio
    async def test_runs_without_a_tally(self, policy, sleeps):
        retried = await policy.execute(ScriptedAction([RateLimited(), Success(payload=1)]))

        assert retried.result == Ok(1)
        assert retry_tally.get() is None

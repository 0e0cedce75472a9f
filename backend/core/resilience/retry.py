"""Retry Policy with Exponential Backoff

Runs an action that returns a CallOutcome in an explicit loop over the
attempt count. Only RateLimited outcomes are retried; success and permanent
failures return immediately. Running out of attempts yields a
RATE_LIMIT_EXHAUSTED error, distinct from any upstream rejection.
"""
from __future__ import annotations

import asyncio
from contextvars import ContextVar
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Awaitable, Callable, Generic, TypeVar

from core.config import UpstreamConfig
from core.errors import AppError, Ok, Result, internal_error, rate_limit_exhausted
from core.logging import upstream_logger

from .outcome import CallOutcome, PermanentFailure, RateLimited, Success

log = upstream_logger()

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


@dataclass
class RetryTally:
    """Backoff spent on behalf of one inbound request, across all its upstream calls."""
    retries: int = 0
    wait_ms: int = 0
    exhausted: int = 0


# Set per request by the HTTP middleware; unset outside a request
retry_tally: ContextVar[RetryTally | None] = ContextVar("retry_tally", default=None)


@dataclass(frozen=True)
class RetryConfig:
    """Configuration for retry behavior."""
    max_attempts: int = 6
    initial_delay_ms: int = 4000
    multiplier: float = 2.0

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.initial_delay_ms < 0 or self.multiplier < 1:
            raise ValueError("backoff must not shrink or go negative")

    @classmethod
    def from_upstream(cls, config: UpstreamConfig) -> RetryConfig:
        return cls(
            max_attempts=config.max_attempts,
            initial_delay_ms=config.initial_delay_ms,
            multiplier=config.multiplier,
        )


class ExponentialBackoff:
    """delay(n) = initial * multiplier^(n-1), for the n-th retryable failure."""

    def __init__(self, config: RetryConfig):
        self.config = config

    def delay_ms(self, failure_number: int) -> int:
        return round(self.config.initial_delay_ms * self.config.multiplier ** (failure_number - 1))


@dataclass
class RetryAttempt:
    """Information about a single attempt."""
    attempt_number: int
    started_at: datetime
    outcome: str
    delay_ms: int = 0  # Wait performed after this attempt


@dataclass
class RetryResult(Generic[T]):
    """Final result of a retried operation with its attempt history."""
    result: Result[T, AppError]
    attempts: list[RetryAttempt]
    total_duration_seconds: float

    @property
    def attempt_count(self) -> int:
        return len(self.attempts)

    @property
    def delays_ms(self) -> list[int]:
        return [a.delay_ms for a in self.attempts if a.delay_ms]


class RetryPolicy:
    """Bounded exponential-backoff retry for rate-limited upstream calls.

    Usage:
        policy = RetryPolicy(RetryConfig(max_attempts=6))
        retried = await policy.execute(
            lambda: invoker.attempt("GET", url, ListEnvelope),
            operation="list_employees",
        )
        match retried.result:
            case Ok(envelope):
                ...
            case Err(error):
                ...

    Every call to execute keeps its own attempt counter, so one policy can be
    shared by concurrent requests.
    """

    def __init__(self, config: RetryConfig | None = None, sleep: Sleep = asyncio.sleep):
        self.config = config or RetryConfig()
        self._backoff = ExponentialBackoff(self.config)
        self._sleep = sleep

    async def execute(
        self,
        action: Callable[[], Awaitable[CallOutcome[T]]],
        operation: str = "upstream_call",
    ) -> RetryResult[T]:
        attempts: list[RetryAttempt] = []
        start_time = datetime.now(timezone.utc)

        def finish(result: Result[T, AppError]) -> RetryResult[T]:
            elapsed = (datetime.now(timezone.utc) - start_time).total_seconds()
            return RetryResult(result=result, attempts=attempts, total_duration_seconds=elapsed)

        for attempt in range(1, self.config.max_attempts + 1):
            started_at = datetime.now(timezone.utc)
            try:
                outcome = await action()
            except Exception as e:
                log.exception("retry_action_crashed", operation=operation, attempt=attempt)
                attempts.append(RetryAttempt(attempt, started_at, "crashed"))
                return finish(internal_error(str(e), origin=operation, cause=e))

            match outcome:
                case Success(payload=payload):
                    attempts.append(RetryAttempt(attempt, started_at, "success"))
                    if attempt > 1:
                        log.info("retry_succeeded", operation=operation, attempt=attempt)
                    return finish(Ok(payload))

                case PermanentFailure():
                    attempts.append(RetryAttempt(attempt, started_at, outcome.kind.value))
                    return finish(outcome.to_error(origin=operation))

                case RateLimited():
                    if attempt == self.config.max_attempts:
                        attempts.append(RetryAttempt(attempt, started_at, "rate_limited"))
                        break

                    delay_ms = self._backoff.delay_ms(attempt)
                    attempts.append(RetryAttempt(attempt, started_at, "rate_limited", delay_ms))
                    log.info(
                        "retry_scheduled",
                        operation=operation,
                        attempt=attempt,
                        next_attempt=attempt + 1,
                        delay_ms=delay_ms,
                    )
                    if (tally := retry_tally.get()) is not None:
                        tally.retries += 1
                        tally.wait_ms += delay_ms
                    await self._sleep(delay_ms / 1000)

        log.error(
            "retry_exhausted",
            operation=operation,
            attempts=self.config.max_attempts,
        )
        if (tally := retry_tally.get()) is not None:
            tally.exhausted += 1
        return finish(rate_limit_exhausted(
            operation, self.config.max_attempts, origin="retry_policy",
        ))

"""Resilience Patterns

Resilient API-call layer for the upstream employee API:
- Error classification of single HTTP attempts
- One-shot invoker returning tagged call outcomes
- Retry policy with bounded exponential backoff on rate limiting
"""
from .classifier import Classification, classify

from .outcome import (
    CallOutcome,
    FailureKind,
    PermanentFailure,
    RateLimited,
    Success,
)

from .invoker import ResilientInvoker

from .retry import (
    ExponentialBackoff,
    RetryAttempt,
    RetryConfig,
    RetryPolicy,
    RetryResult,
    RetryTally,
    retry_tally,
)

__all__ = [
    # Classification
    "Classification",
    "classify",
    # Outcomes
    "CallOutcome",
    "FailureKind",
    "PermanentFailure",
    "RateLimited",
    "Success",
    # Invoker
    "ResilientInvoker",
    # Retry
    "ExponentialBackoff",
    "RetryAttempt",
    "RetryConfig",
    "RetryPolicy",
    "RetryResult",
    "RetryTally",
    "retry_tally",
]

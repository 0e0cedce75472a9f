"""Upstream Error Classification

Single source of truth for retry eligibility: only RATE_LIMITED is retryable.
"""
from __future__ import annotations

from enum import Enum, auto

DEFAULT_RATE_LIMIT_STATUSES = frozenset({429})


class Classification(Enum):
    SUCCESS = auto()
    RATE_LIMITED = auto()
    NOT_FOUND = auto()
    REJECTED = auto()   # Any other non-2xx status
    TRANSPORT = auto()  # No response at all

    @property
    def retryable(self) -> bool:
        return self is Classification.RATE_LIMITED


def classify(
    status_code: int | None,
    error: Exception | None = None,
    rate_limit_statuses: frozenset[int] = DEFAULT_RATE_LIMIT_STATUSES,
) -> Classification:
    """Classify one HTTP attempt by its status code or transport error.

    A 2xx status is a success regardless of the payload shape; the caller
    decides how to interpret an absent payload.
    """
    if status_code is None:
        # Transport failures are permanent
        return Classification.TRANSPORT if error is not None else Classification.REJECTED
    if 200 <= status_code < 300:
        return Classification.SUCCESS
    if status_code in rate_limit_statuses:
        return Classification.RATE_LIMITED
    if status_code == 404:
        return Classification.NOT_FOUND
    return Classification.REJECTED

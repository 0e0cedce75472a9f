"""Per-attempt Call Outcomes

Tagged result of a single outbound attempt. The retry policy inspects the
tag by value; nothing in the resilience layer raises to request a retry.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar, Union

from core.errors import (
    AppError,
    Err,
    ErrorCode,
    malformed_response,
    transport_error,
    upstream_error,
    upstream_rejected,
)

T = TypeVar("T")


class FailureKind(Enum):
    """Permanent failure kinds. None of these are retried."""
    NOT_FOUND = "not_found"
    REJECTED = "rejected"
    TRANSPORT = "transport"
    MALFORMED = "malformed"


@dataclass(frozen=True, slots=True)
class Success(Generic[T]):
    payload: T
    status_code: int = 200


@dataclass(frozen=True, slots=True)
class RateLimited:
    status_code: int = 429
    retry_after: str | None = None  # Logged only; the policy owns the delay


@dataclass(frozen=True, slots=True)
class PermanentFailure:
    kind: FailureKind
    message: str
    status_code: int | None = None
    url: str | None = None
    cause: Exception | None = None

    def to_error(self, origin: str = "") -> Err[AppError]:
        """Map the failure onto the gateway's error taxonomy."""
        match self.kind:
            case FailureKind.NOT_FOUND:
                return upstream_error(
                    self.message,
                    code=ErrorCode.E1001_NOT_FOUND,
                    status_code=self.status_code,
                    url=self.url,
                    origin=origin,
                )
            case FailureKind.TRANSPORT:
                return transport_error(self.message, url=self.url, origin=origin, cause=self.cause)
            case FailureKind.MALFORMED:
                return malformed_response(
                    self.message, status_code=self.status_code, url=self.url, origin=origin,
                )
            case _:
                return upstream_rejected(
                    self.message, status_code=self.status_code, url=self.url, origin=origin,
                )


CallOutcome = Union[Success[T], RateLimited, PermanentFailure]

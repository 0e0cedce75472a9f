"""Resilient Invoker

Executes exactly one outbound attempt and returns a tagged CallOutcome.
Never sleeps, never loops: retrying is the RetryPolicy's job.
"""
from __future__ import annotations

from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from core.config import UpstreamConfig
from core.logging import upstream_logger

from .classifier import Classification, classify
from .outcome import CallOutcome, FailureKind, PermanentFailure, RateLimited, Success

log = upstream_logger()

EnvelopeT = TypeVar("EnvelopeT", bound=BaseModel)

_PERMANENT_KINDS = {
    Classification.NOT_FOUND: FailureKind.NOT_FOUND,
    Classification.REJECTED: FailureKind.REJECTED,
    Classification.TRANSPORT: FailureKind.TRANSPORT,
}


def _error_message(response: httpx.Response) -> str:
    """Prefer the envelope's error field, then the raw body, then the reason."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return response.text or response.reason_phrase or f"HTTP {response.status_code}"


class ResilientInvoker:
    """One-shot HTTP caller for the upstream employee API."""

    def __init__(self, client: httpx.AsyncClient, config: UpstreamConfig):
        self.client = client
        self.config = config

    async def attempt(
        self,
        method: str,
        url: str,
        envelope_type: type[EnvelopeT],
        json: Any | None = None,
    ) -> CallOutcome[EnvelopeT]:
        try:
            response = await self.client.request(
                method, url, json=json, timeout=self.config.timeout_seconds,
            )
        except httpx.HTTPError as e:
            log.warning("upstream_transport_error", method=method, url=url, error=str(e))
            classification = classify(None, e, self.config.rate_limit_statuses)
            return PermanentFailure(
                kind=_PERMANENT_KINDS[classification],
                message=str(e) or type(e).__name__,
                url=url,
                cause=e,
            )

        classification = classify(response.status_code, None, self.config.rate_limit_statuses)

        if classification is Classification.RATE_LIMITED:
            log.warning(
                "upstream_rate_limited",
                method=method,
                url=url,
                status=response.status_code,
                retry_after=response.headers.get("Retry-After"),
            )
            return RateLimited(
                status_code=response.status_code,
                retry_after=response.headers.get("Retry-After"),
            )

        if classification is not Classification.SUCCESS:
            message = _error_message(response)
            log.info(
                "upstream_failure",
                method=method,
                url=url,
                status=response.status_code,
                classification=classification.name,
                message=message,
            )
            return PermanentFailure(
                kind=_PERMANENT_KINDS[classification],
                message=message,
                status_code=response.status_code,
                url=url,
            )

        try:
            envelope = envelope_type.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            log.warning("upstream_malformed_body", method=method, url=url, error=str(e))
            return PermanentFailure(
                kind=FailureKind.MALFORMED,
                message=f"Unreadable upstream response: {e}",
                status_code=response.status_code,
                url=url,
                cause=e,
            )

        return Success(payload=envelope, status_code=response.status_code)

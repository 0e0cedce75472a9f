"""Request Middleware for Logging and Tracing

Binds a correlation ID for every inbound request so that the upstream
attempts, retries and the final response share one trace in the logs, and
reports the backoff each request spent waiting on the upstream API.
"""
import time
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from core.logging import (
    generate_correlation_id,
    bind_context,
    clear_context,
    api_logger,
)
from core.resilience.retry import RetryTally, retry_tally

log = api_logger()


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs requests/responses and manages the correlation context."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        correlation_id = request.headers.get("X-Correlation-ID") or generate_correlation_id()

        clear_context()
        bind_context(
            correlation_id=correlation_id,
            method=request.method,
            path=request.url.path,
        )

        start = time.perf_counter()
        log.info("request_started")

        try:
            response = await call_next(request)
            duration_ms = (time.perf_counter() - start) * 1000
            response.headers["X-Correlation-ID"] = correlation_id

            status = response.status_code
            log_method = log.info if status < 400 else (log.warning if status < 500 else log.error)
            log_method(
                "request_completed",
                status=status,
                duration_ms=round(duration_ms, 2),
            )
            return response

        except Exception as exc:
            duration_ms = (time.perf_counter() - start) * 1000
            log.exception(
                "request_failed",
                error=str(exc),
                error_type=type(exc).__name__,
                duration_ms=round(duration_ms, 2),
            )
            raise
        finally:
            clear_context()


class UpstreamBackoffMiddleware(BaseHTTPMiddleware):
    """Reports how much upstream backoff a request sat through.

    Installs a fresh RetryTally for the request; RetryPolicy fills it in.
    Requests that needed retries get an ``X-Upstream-Retries`` header and a
    ``request_backed_off`` log line.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        tally = RetryTally()
        token = retry_tally.set(tally)
        try:
            response = await call_next(request)
        finally:
            retry_tally.reset(token)

        if tally.retries or tally.exhausted:
            response.headers["X-Upstream-Retries"] = str(tally.retries)
            log.warning(
                "request_backed_off",
                retries=tally.retries,
                wait_ms=tally.wait_ms,
                exhausted_calls=tally.exhausted,
            )

        return response

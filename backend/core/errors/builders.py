"""Error Builders

Ergonomic constructors for the gateway's typed errors.
Each builder returns an Err wrapping an AppError with the matching code.
"""
from .types import AppError, ErrorCode, ErrorContext, Err


def upstream_error(
    message: str,
    *,
    code: ErrorCode = ErrorCode.E1003_UPSTREAM_REJECTED,
    url: str | None = None,
    status_code: int | None = None,
    origin: str = "",
    cause: Exception | None = None,
    **metadata,
) -> Err[AppError]:
    """Create an error describing an upstream employee API outcome."""
    meta = {"url": url, "status_code": status_code, **metadata}
    return Err(AppError(
        code=code,
        message=message,
        context=ErrorContext(origin=origin),
        metadata={k: v for k, v in meta.items() if v is not None},
        cause=cause,
    ))


def not_found(resource: str, identifier: str, origin: str = "") -> Err[AppError]:
    return upstream_error(
        f"{resource} not found: {identifier}",
        code=ErrorCode.E1001_NOT_FOUND,
        origin=origin,
        resource=resource,
        identifier=identifier,
        status_code=404,
    )


def rate_limit_exhausted(
    operation: str, attempts: int, origin: str = ""
) -> Err[AppError]:
    return upstream_error(
        f"Upstream kept rate limiting '{operation}' after {attempts} attempts",
        code=ErrorCode.E1002_RATE_LIMIT_EXHAUSTED,
        origin=origin,
        operation=operation,
        attempts=attempts,
    )


def upstream_rejected(
    message: str,
    *,
    status_code: int | None = None,
    url: str | None = None,
    origin: str = "",
) -> Err[AppError]:
    return upstream_error(
        message,
        code=ErrorCode.E1003_UPSTREAM_REJECTED,
        status_code=status_code,
        url=url,
        origin=origin,
    )


def transport_error(
    message: str, url: str | None = None, origin: str = "", cause: Exception | None = None
) -> Err[AppError]:
    return upstream_error(
        f"Could not reach upstream: {message}",
        code=ErrorCode.E1004_TRANSPORT,
        url=url,
        origin=origin,
        cause=cause,
    )


def malformed_response(
    message: str, *, status_code: int | None = None, url: str | None = None, origin: str = ""
) -> Err[AppError]:
    return upstream_error(
        message,
        code=ErrorCode.E1005_MALFORMED_RESPONSE,
        status_code=status_code,
        url=url,
        origin=origin,
    )


def validation_error(message: str, origin: str = "", **metadata) -> Err[AppError]:
    return Err(AppError(
        code=ErrorCode.E2000_VALIDATION,
        message=message,
        context=ErrorContext(origin=origin),
        metadata=metadata,
    ))


def internal_error(
    message: str = "An unexpected error occurred",
    origin: str = "",
    cause: Exception | None = None,
) -> Err[AppError]:
    return Err(AppError(
        code=ErrorCode.E9000_UNEXPECTED,
        message=message,
        context=ErrorContext(origin=origin),
        cause=cause,
    ))

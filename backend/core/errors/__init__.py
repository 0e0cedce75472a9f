"""Monadic Error Handling System

Key components:
- Result[T, E]: Monadic container for success/failure
- AppError: Base error type with full context
- ErrorCode: Error code taxonomy for upstream, validation and internal errors
- Builder functions: Ergonomic error construction

Usage:
    from core.errors import Ok, Result, AppError, not_found

    async def get_employee(employee_id: str) -> Result[Employee, AppError]:
        ...
        if outcome.kind is FailureKind.NOT_FOUND:
            return not_found("Employee", employee_id, origin="employee_service")
        return Ok(employee)
"""
from .types import (
    Result,
    Ok,
    Err,
    AppError,
    ErrorCode,
    ErrorContext,
)

from .builders import (
    upstream_error,
    not_found,
    rate_limit_exhausted,
    upstream_rejected,
    transport_error,
    malformed_response,
    validation_error,
    internal_error,
)

from .handlers import (
    AppErrorException,
    register_error_handlers,
    result_to_response,
    raise_result,
)

__all__ = [
    # Core types
    "Result",
    "Ok",
    "Err",
    "AppError",
    "ErrorCode",
    "ErrorContext",
    # Builders
    "upstream_error",
    "not_found",
    "rate_limit_exhausted",
    "upstream_rejected",
    "transport_error",
    "malformed_response",
    "validation_error",
    "internal_error",
    # Handlers
    "AppErrorException",
    "register_error_handlers",
    "result_to_response",
    "raise_result",
]

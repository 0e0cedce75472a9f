"""Employee Operations

CRUD proxy for the upstream employee API plus read-only queries computed
over the full listing. Every outbound call goes through the RetryPolicy.

Failure handling is deliberately uneven across operations:
- list_employees degrades any failure to an empty list, except exhausted
  retries, which propagate
- get_employee_by_id never returns empty: a missing payload is an error
- delete_employee aborts before issuing the DELETE if the lookup fails
"""
from __future__ import annotations

import asyncio
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from core.config import UpstreamConfig
from core.errors import (
    AppError,
    Err,
    ErrorCode,
    Ok,
    Result,
    malformed_response,
    not_found,
    upstream_rejected,
)
from core.logging import service_logger, upstream_logger
from core.resilience import ResilientInvoker, RetryConfig, RetryPolicy
from core.resilience.retry import Sleep
from models.employee import (
    CreateEmployeeInput,
    DeleteEmployeeInput,
    DeleteEnvelope,
    Employee,
    EmployeeEnvelope,
    EmployeeListEnvelope,
)

log = service_logger()
upstream_log = upstream_logger()

TOP_EARNERS_CAP = 10


def _valid_employees(records: list) -> list[Employee]:
    """Validate listing records one at a time, skipping the ones that break invariants."""
    employees: list[Employee] = []
    for position, record in enumerate(records):
        try:
            employees.append(Employee.model_validate(record))
        except ValidationError as e:
            upstream_log.warning(
                "employee_record_skipped",
                position=position,
                employee_id=record.get("id") if isinstance(record, dict) else None,
                errors=[err["msg"] for err in e.errors()],
            )
    return employees


class EmployeeService:
    """Resilient facade over the upstream employee API."""

    def __init__(self, invoker: ResilientInvoker, policy: RetryPolicy, config: UpstreamConfig):
        self.invoker = invoker
        self.policy = policy
        self.base_url = config.base_url.rstrip("/")

    @classmethod
    def from_client(
        cls,
        client: httpx.AsyncClient,
        config: UpstreamConfig,
        sleep: Sleep = asyncio.sleep,
    ) -> EmployeeService:
        return cls(
            invoker=ResilientInvoker(client, config),
            policy=RetryPolicy(RetryConfig.from_upstream(config), sleep=sleep),
            config=config,
        )

    def _employee_url(self, employee_id: str) -> str:
        return f"{self.base_url}/{quote(employee_id, safe='')}"

    # === Upstream operations ===

    async def list_employees(self) -> Result[list[Employee], AppError]:
        retried = await self.policy.execute(
            lambda: self.invoker.attempt("GET", self.base_url, EmployeeListEnvelope),
            operation="list_employees",
        )

        match retried.result:
            case Ok(envelope):
                employees = _valid_employees(envelope.data or [])
                log.debug("employees_listed", count=len(employees))
                return Ok(employees)
            case Err(error) if error.code is ErrorCode.E1002_RATE_LIMIT_EXHAUSTED:
                return retried.result
            case Err(error):
                log.warning(
                    "list_employees_degraded",
                    error_code=error.code.name,
                    message=error.message,
                )
                return Ok([])

    async def get_employee_by_id(self, employee_id: str) -> Result[Employee, AppError]:
        url = self._employee_url(employee_id)
        retried = await self.policy.execute(
            lambda: self.invoker.attempt("GET", url, EmployeeEnvelope),
            operation="get_employee_by_id",
        )

        match retried.result:
            case Ok(envelope) if envelope.data is not None:
                return Ok(envelope.data)
            case Ok(_):
                return malformed_response(
                    f"Upstream returned no employee for id {employee_id}",
                    url=url,
                    origin="employee_service",
                )
            case Err(error) if error.code is ErrorCode.E1001_NOT_FOUND:
                return not_found("Employee", employee_id, origin="employee_service")
            case Err(_):
                return retried.result

    async def create_employee(self, employee_input: CreateEmployeeInput) -> Result[Employee, AppError]:
        log.info("employee_create_requested", name=employee_input.name)
        body = employee_input.model_dump()
        retried = await self.policy.execute(
            lambda: self.invoker.attempt("POST", self.base_url, EmployeeEnvelope, json=body),
            operation="create_employee",
        )

        match retried.result:
            case Ok(envelope) if envelope.data is not None:
                log.info("employee_created", employee_id=envelope.data.id)
                return Ok(envelope.data)
            case Ok(_):
                return malformed_response(
                    "Upstream did not return the created employee",
                    url=self.base_url,
                    origin="employee_service",
                )
            case Err(_):
                return retried.result

    async def delete_employee(self, employee_id: str) -> Result[str, AppError]:
        """Delete in two phases: resolve id to name, then delete by name.

        A failed lookup ends the workflow before any DELETE is sent. Nothing
        has been mutated at that point, so there is nothing to roll back.
        """
        lookup = await self.get_employee_by_id(employee_id)
        if lookup.is_err():
            log.info(
                "employee_delete_aborted",
                employee_id=employee_id,
                error_code=lookup.unwrap_err().code.name,
            )
            return lookup

        name = lookup.unwrap().name
        if not name:
            return malformed_response(
                f"Employee {employee_id} has no name to delete by",
                origin="employee_service",
            )

        log.info("employee_delete_requested", employee_id=employee_id, name=name)
        body = DeleteEmployeeInput(name=name).model_dump()
        retried = await self.policy.execute(
            lambda: self.invoker.attempt("DELETE", self.base_url, DeleteEnvelope, json=body),
            operation="delete_employee",
        )

        match retried.result:
            case Ok(envelope) if envelope.data is True:
                log.info("employee_deleted", employee_id=employee_id, name=name)
                return Ok(name)
            case Ok(_):
                return upstream_rejected(
                    f"Upstream did not delete employee '{name}'",
                    url=self.base_url,
                    origin="employee_service",
                )
            case Err(_):
                return retried.result

    # === Derived queries (no extra outbound calls beyond the listing) ===

    async def search_by_name(self, fragment: str | None) -> Result[list[Employee], AppError]:
        if fragment is None or not fragment.strip():
            return Ok([])

        needle = fragment.lower()
        listing = await self.list_employees()
        return listing.map(
            lambda employees: [e for e in employees if e.name and needle in e.name.lower()]
        )

    async def max_salary(self) -> Result[int, AppError]:
        listing = await self.list_employees()
        return listing.map(lambda employees: max((e.salary for e in employees), default=0))

    async def top_earning_names(self, limit: int = TOP_EARNERS_CAP) -> Result[list[str], AppError]:
        """Names of the best-paid employees, highest salary first.

        Ties keep their listing order. ``limit`` is capped at TOP_EARNERS_CAP.
        """
        count = max(0, min(limit, TOP_EARNERS_CAP))
        listing = await self.list_employees()

        def rank(employees: list[Employee]) -> list[str]:
            ranked = sorted(employees, key=lambda e: e.salary, reverse=True)
            return [e.name for e in ranked[:count] if e.name]

        return listing.map(rank)

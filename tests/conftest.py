"""Shared fixtures: an in-memory upstream employee API behind httpx.MockTransport."""

import json
from uuid import uuid4

import httpx
import pytest

from core.config import UpstreamConfig
from services.employees import EmployeeService

BASE_URL = "http://upstream.test/api/v1/employee"


def employee_wire(name: str, salary: int, **extra) -> dict:
    """Employee in upstream wire format."""
    return {
        "id": extra.pop("id", str(uuid4())),
        "employee_name": name,
        "employee_salary": salary,
        "employee_age": extra.pop("age", 30),
        "employee_title": extra.pop("title", "Engineer"),
        "employee_email": extra.pop("email", None),
    }


def envelope(data, error: str | None = None) -> dict:
    return {"data": data, "status": "Successfully processed request.", "error": error}


class FakeUpstream:
    """Mock employee API.

    Responses queued in ``scripted`` are served first, in order; after that
    requests hit the in-memory store.
    """

    def __init__(self):
        self.employees: list[dict] = []
        self.requests: list[httpx.Request] = []
        self.scripted: list[httpx.Response | Exception] = []

    def add(self, name: str, salary: int, **extra) -> dict:
        employee = employee_wire(name, salary, **extra)
        self.employees.append(employee)
        return employee

    def requests_for(self, method: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.scripted:
            scripted = self.scripted.pop(0)
            if isinstance(scripted, Exception):
                raise scripted
            return scripted
        return self._serve(request)

    def _serve(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.rstrip("/")
        base_path = httpx.URL(BASE_URL).path

        if request.method == "GET" and path == base_path:
            return httpx.Response(200, json=envelope(self.employees))

        if request.method == "GET":
            employee_id = path.rsplit("/", 1)[-1]
            for employee in self.employees:
                if employee["id"] == employee_id:
                    return httpx.Response(200, json=envelope(employee))
            return httpx.Response(404, json=envelope(None, error="Employee not found"))

        if request.method == "POST":
            body = json.loads(request.content)
            created = self.add(body["name"], body["salary"], age=body["age"], title=body["title"])
            return httpx.Response(200, json=envelope(created))

        if request.method == "DELETE":
            name = json.loads(request.content)["name"]
            before = len(self.employees)
            self.employees = [e for e in self.employees if e["employee_name"] != name]
            return httpx.Response(200, json=envelope(len(self.employees) < before))

        return httpx.Response(405)


class SleepRecorder:
    """Stands in for asyncio.sleep and remembers every requested wait."""

    def __init__(self):
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def rate_limited_response() -> httpx.Response:
    return httpx.Response(429, headers={"Retry-After": "1"}, text="Too Many Requests")


@pytest.fixture
def upstream_config():
    return UpstreamConfig(base_url=BASE_URL)


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def sleeps():
    return SleepRecorder()


@pytest.fixture
def client(upstream):
    return httpx.AsyncClient(transport=httpx.MockTransport(upstream))


@pytest.fixture
def service(client, upstream_config, sleeps):
    return EmployeeService.from_client(client, upstream_config, sleep=sleeps)

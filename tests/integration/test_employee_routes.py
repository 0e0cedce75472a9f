"""End-to-end route tests: FastAPI app -> EmployeeService -> mocked upstream."""

import pytest
from fastapi.testclient import TestClient

from api.employees import get_employee_service
from main import app
from tests.conftest import rate_limited_response

PREFIX = "/api/v1/employee"


@pytest.fixture
def api(service):
    app.dependency_overrides[get_employee_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestEmployeeRoutes:

    def test_health(self, api):
        response = api.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_list_uses_wire_field_names(self, api, upstream):
        upstream.add("Alice Smith", 60000)

        response = api.get(f"{PREFIX}/")

        assert response.status_code == 200
        body = response.json()
        assert body[0]["employee_name"] == "Alice Smith"
        assert body[0]["employee_salary"] == 60000
        assert "X-Correlation-ID" in response.headers

    def test_get_by_id_not_found(self, api):
        response = api.get(f"{PREFIX}/missing-id")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "E1001_NOT_FOUND"

    def test_search(self, api, upstream):
        upstream.add("Alice Smith", 60000)
        upstream.add("Bob Johnson", 120000)

        response = api.get(f"{PREFIX}/search/JOHN")

        assert [e["employee_name"] for e in response.json()] == ["Bob Johnson"]

    def test_highest_salary(self, api, upstream):
        upstream.add("Alice Smith", 60000)
        upstream.add("Bob Johnson", 120000)

        response = api.get(f"{PREFIX}/highestSalary")

        assert response.json() == 120000

    def test_top_ten_names(self, api, upstream):
        for i in range(12):
            upstream.add(f"Employee {i}", 1000 * (i + 1))

        names = api.get(f"{PREFIX}/topTenHighestEarningEmployeeNames").json()

        assert len(names) == 10
        assert names[0] == "Employee 11"

    def test_create_and_delete(self, api, upstream):
        created = api.post(
            f"{PREFIX}/",
            json={"name": "Carol White", "salary": 95000, "age": 41, "title": "Director"},
        )
        assert created.status_code == 201
        employee_id = created.json()["id"]

        deleted = api.delete(f"{PREFIX}/{employee_id}")

        assert deleted.status_code == 200
        assert deleted.json() == "Carol White"
        assert upstream.employees == []

    def test_create_rejects_invalid_input(self, api, upstream):
        response = api.post(f"{PREFIX}/", json={"name": "", "salary": -5, "age": 41, "title": "x"})

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "E2000_VALIDATION"
        fields = {d["field"] for d in response.json()["error"]["metadata"]["details"]}
        assert {"body.name", "body.salary"} <= fields
        assert upstream.requests == []

    def test_delete_unknown_id_is_404(self, api, upstream):
        response = api.delete(f"{PREFIX}/ghost")

        assert response.status_code == 404
        assert upstream.requests_for("DELETE") == []

    def test_exhausted_retries_is_503(self, api, upstream, sleeps):
        upstream.scripted.extend([rate_limited_response() for _ in range(6)])

        response = api.get(f"{PREFIX}/")

        assert response.status_code == 503
        assert response.json()["error"]["code"] == "E1002_RATE_LIMIT_EXHAUSTED"
        assert sleeps.calls == [4.0, 8.0, 16.0, 32.0, 64.0]
        assert response.headers["X-Upstream-Retries"] == "5"

    def test_retried_request_reports_backoff(self, api, upstream, sleeps):
        upstream.add("Alice Smith", 60000)
        upstream.scripted.extend([rate_limited_response(), rate_limited_response()])

        response = api.get(f"{PREFIX}/highestSalary")

        assert response.status_code == 200
        assert response.json() == 60000
        assert response.headers["X-Upstream-Retries"] == "2"

    def test_unretried_request_has_no_backoff_header(self, api, upstream):
        upstream.add("Alice Smith", 60000)

        response = api.get(f"{PREFIX}/highestSalary")

        assert "X-Upstream-Retries" not in response.headers

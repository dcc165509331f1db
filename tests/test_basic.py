"""
Basic application tests.

Validates that the FastAPI app starts, creates its schema and answers
the unauthenticated health probe.
"""

from fastapi.testclient import TestClient
from sqlalchemy import inspect


class TestHealthEndpoint:
    """Tests for the health check endpoint."""

    def test_health_needs_no_credentials(self, anonymous_client: TestClient) -> None:
        """Health endpoint must answer 200 without an Authorization header."""
        response = anonymous_client.get("/api/v1/health")
        assert response.status_code == 200

    def test_health_response_body(self, anonymous_client: TestClient) -> None:
        """Health endpoint must return status and version fields."""
        body = anonymous_client.get("/api/v1/health").json()
        assert body["status"] == "ok"
        assert body["version"]


class TestStartup:
    """Tests for the application lifespan."""

    def test_schema_created_on_startup(self, client: TestClient, engine) -> None:
        """All management tables exist once the app has started."""
        tables = set(inspect(engine).get_table_names())
        assert {"users", "projects", "tasks", "task_assignees"} <= tables

    def test_unknown_route_uses_error_shape(self, client: TestClient) -> None:
        """Unknown paths return the uniform error body with NOT_FOUND."""
        response = client.get("/api/v1/nothing-here")
        assert response.status_code == 404
        assert response.json()["error_code"] == "NOT_FOUND"

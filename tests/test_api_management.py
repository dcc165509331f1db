"""
Tests for the management API endpoints.

Drives the FastAPI routes end to end with TestClient against a fresh
in-memory database. Validates status codes, the uniform error body,
authentication, security headers and rate limiting.
"""

from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from app.domain.management.entities import EntityKind
from app.domain.management.errors import (
    BusinessRuleError,
    DuplicateResourceError,
    EntityNotFoundError,
    FieldError,
    MalformedRequestError,
    ReferentialConflictError,
    ValidationFailedError,
)
from app.shared.errors.mapper import map_error
from app.shared.security.rate_limiting import build_limiter, rate_limit_exceeded_handler
from conftest import basic_auth_header


USER_PAYLOAD = {
    "username": "john_doe",
    "email": "john@example.com",
    "password": "password123",
    "fullName": "John Doe",
}


def _create_user(client: TestClient, **overrides) -> dict:
    response = client.post("/api/v1/users", json={**USER_PAYLOAD, **overrides})
    assert response.status_code == 201, response.text
    return response.json()


def _create_project(client: TestClient, owner_id: int, **overrides) -> dict:
    payload = {
        "name": "Website Redesign",
        "description": "Complete redesign of company website",
        "ownerId": owner_id,
        **overrides,
    }
    response = client.post("/api/v1/projects", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def _create_task(client: TestClient, project_id: int, **overrides) -> dict:
    payload = {"title": "Design homepage mockup", "projectId": project_id, **overrides}
    response = client.post("/api/v1/tasks", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


class TestUserEndpoints:
    """Tests for /api/v1/users."""

    def test_create_user(self, client: TestClient) -> None:
        body = _create_user(client)
        assert body["username"] == "john_doe"
        assert body["full_name"] == "John Doe"
        assert "password" not in body
        assert "password_hash" not in body

    def test_snake_case_keys_accepted(self, client: TestClient) -> None:
        payload = {**USER_PAYLOAD}
        payload["full_name"] = payload.pop("fullName")
        response = client.post("/api/v1/users", json=payload)
        assert response.status_code == 201

    def test_invalid_fields_reported_together(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/users",
            json={"username": "", "email": "notanemail", "password": "123", "fullName": "J"},
        )
        assert response.status_code == 400
        body = response.json()
        assert body["error_code"] == "VALIDATION_FAILED"
        assert body["path"] == "/api/v1/users"
        assert {(e["field"], e["code"]) for e in body["field_errors"]} == {
            ("username", "BLANK_FIELD"),
            ("email", "INVALID_EMAIL"),
            ("password", "TOO_SHORT"),
        }
        assert client.get("/api/v1/users").json() == []

    def test_duplicate_username_conflict(self, client: TestClient) -> None:
        """Registering john_doe twice returns 409 DUPLICATE_RESOURCE."""
        _create_user(client)
        response = client.post(
            "/api/v1/users", json={**USER_PAYLOAD, "email": "other@example.com"}
        )
        assert response.status_code == 409
        assert response.json()["error_code"] == "DUPLICATE_RESOURCE"
        assert "john_doe" in response.json()["message"]

    def test_get_missing_user(self, client: TestClient) -> None:
        response = client.get("/api/v1/users/9999")
        assert response.status_code == 404
        body = response.json()
        assert body["error_code"] == "NOT_FOUND"
        assert body["message"] == "User not found with ID: 9999"

    def test_update_user(self, client: TestClient) -> None:
        user = _create_user(client)
        response = client.put(f"/api/v1/users/{user['id']}", json={"fullName": "Johnny"})
        assert response.status_code == 200
        assert response.json()["full_name"] == "Johnny"
        assert response.json()["email"] == "john@example.com"

    def test_list_users_active_filter(self, client: TestClient) -> None:
        user = _create_user(client)
        client.put(f"/api/v1/users/{user['id']}", json={"active": False})
        assert client.get("/api/v1/users", params={"active": "true"}).json() == []
        assert len(client.get("/api/v1/users", params={"active": "false"}).json()) == 1

    def test_delete_user(self, client: TestClient) -> None:
        user = _create_user(client)
        response = client.delete(f"/api/v1/users/{user['id']}")
        assert response.status_code == 204
        assert client.get(f"/api/v1/users/{user['id']}").status_code == 404

    def test_delete_owner_conflict(self, client: TestClient) -> None:
        user = _create_user(client)
        _create_project(client, user["id"])
        response = client.delete(f"/api/v1/users/{user['id']}")
        assert response.status_code == 409
        assert response.json()["error_code"] == "REFERENTIAL_CONFLICT"

    def test_email_without_dot_accepted(self, client: TestClient) -> None:
        body = _create_user(client, email="john@localhost")
        assert body["email"] == "john@localhost"

    def test_deactivate_and_restore(self, client: TestClient) -> None:
        """Deactivating unassigns the user; restoring brings the account back."""
        user = _create_user(client)
        project = _create_project(client, user["id"])
        task = _create_task(client, project["id"], assigneeIds=[user["id"]])

        response = client.post(f"/api/v1/users/{user['id']}/deactivate")
        assert response.status_code == 200
        assert response.json()["active"] is False
        assert client.get(f"/api/v1/tasks/{task['id']}").json()["assignees"] == []
        assert client.get(f"/api/v1/projects/{project['id']}").status_code == 200

        again = client.post(f"/api/v1/users/{user['id']}/deactivate")
        assert again.status_code == 422
        assert again.json()["error_code"] == "BUSINESS_RULE_VIOLATION"

        restored = client.post(f"/api/v1/users/{user['id']}/restore")
        assert restored.status_code == 200
        assert restored.json()["active"] is True

        active_again = client.post(f"/api/v1/users/{user['id']}/restore")
        assert active_again.status_code == 422

    def test_restore_missing_user(self, client: TestClient) -> None:
        response = client.post("/api/v1/users/9999/restore")
        assert response.status_code == 404


class TestProjectEndpoints:
    """Tests for /api/v1/projects."""

    def test_create_project(self, client: TestClient) -> None:
        user = _create_user(client)
        body = _create_project(client, user["id"], startDate="2024-01-01")
        assert body["owner"]["username"] == "john_doe"
        assert body["start_date"] == "2024-01-01"
        assert body["task_statistics"]["total"] == 0

    def test_end_before_start(self, client: TestClient) -> None:
        user = _create_user(client)
        response = client.post(
            "/api/v1/projects",
            json={
                "name": "Mobile App",
                "ownerId": user["id"],
                "startDate": "2024-03-10",
                "endDate": "2024-03-01",
            },
        )
        assert response.status_code == 400
        assert response.json()["field_errors"][0]["code"] == "INVALID_DATE_RANGE"

    def test_unknown_owner(self, client: TestClient) -> None:
        response = client.post("/api/v1/projects", json={"name": "Mobile App", "ownerId": 42})
        assert response.status_code == 404

    def test_archive_and_reactivate(self, client: TestClient) -> None:
        user = _create_user(client)
        project = _create_project(client, user["id"])

        archived = client.post(f"/api/v1/projects/{project['id']}/archive")
        assert archived.status_code == 200
        assert archived.json()["active"] is False
        assert client.get("/api/v1/projects").json() == []
        assert len(client.get("/api/v1/projects", params={"include_archived": "true"}).json()) == 1

        again = client.post(f"/api/v1/projects/{project['id']}/archive")
        assert again.status_code == 422
        assert again.json()["error_code"] == "BUSINESS_RULE_VIOLATION"

        reactivated = client.post(f"/api/v1/projects/{project['id']}/reactivate")
        assert reactivated.json()["active"] is True

    def test_delete_missing_project(self, client: TestClient) -> None:
        response = client.delete("/api/v1/projects/9999")
        assert response.status_code == 404
        assert response.json()["error_code"] == "NOT_FOUND"


class TestTaskEndpoints:
    """Tests for /api/v1/tasks."""

    def test_invalid_status_value(self, client: TestClient) -> None:
        user = _create_user(client)
        project = _create_project(client, user["id"])
        response = client.post(
            "/api/v1/tasks",
            json={"title": "Write copy", "projectId": project["id"], "status": "in_progress"},
        )
        assert response.status_code == 400
        errors = response.json()["field_errors"]
        assert errors == [
            {
                "field": "status",
                "code": "INVALID_ENUM_VALUE",
                "message": "status must be one of: PENDING, IN_PROGRESS, COMPLETED, BLOCKED",
            }
        ]

    def test_list_filter_by_status(self, client: TestClient) -> None:
        user = _create_user(client)
        project = _create_project(client, user["id"])
        _create_task(client, project["id"])
        blocked = _create_task(client, project["id"], title="Review copy", status="BLOCKED")

        response = client.get("/api/v1/tasks", params={"status": "BLOCKED"})
        assert [t["id"] for t in response.json()] == [blocked["id"]]

        bad = client.get("/api/v1/tasks", params={"status": "DONE"})
        assert bad.status_code == 400

    def test_unassign_with_empty_list(self, client: TestClient) -> None:
        user = _create_user(client)
        project = _create_project(client, user["id"])
        task = _create_task(client, project["id"], assigneeIds=[user["id"]])
        assert len(task["assignees"]) == 1

        response = client.put(f"/api/v1/tasks/{task['id']}", json={"assigneeIds": []})
        assert response.json()["assignees"] == []

    def test_missing_assignee(self, client: TestClient) -> None:
        user = _create_user(client)
        project = _create_project(client, user["id"])
        response = client.post(
            "/api/v1/tasks",
            json={"title": "Write copy", "projectId": project["id"], "assigneeIds": [404]},
        )
        assert response.status_code == 404
        assert "[404]" in response.json()["message"]

    def test_get_missing_task(self, client: TestClient) -> None:
        response = client.get("/api/v1/tasks/9999")
        assert response.status_code == 404


class TestMalformedRequests:
    """Tests for bodies and parameters the transport cannot parse."""

    def test_invalid_json(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/users",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["error_code"] == "MALFORMED_REQUEST"

    def test_wrong_value_type(self, client: TestClient) -> None:
        response = client.post("/api/v1/projects", json={"name": "Mobile App", "ownerId": "abc"})
        assert response.status_code == 400
        body = response.json()
        assert body["error_code"] == "MALFORMED_REQUEST"
        assert body["field_errors"][0]["field"] == "ownerId"

    def test_non_integer_path_id(self, client: TestClient) -> None:
        response = client.get("/api/v1/users/abc")
        assert response.status_code == 400
        assert response.json()["error_code"] == "MALFORMED_REQUEST"

    def test_oversized_body_rejected(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/users",
            content=b"x" * 2_000_000,
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 413
        assert response.json()["error_code"] == "PAYLOAD_TOO_LARGE"

    def test_chunked_oversized_body_rejected(self, client: TestClient) -> None:
        """A body streamed without Content-Length is counted as it arrives."""

        def chunks():
            for _ in range(4):
                yield b"x" * 500_000

        response = client.post(
            "/api/v1/users",
            content=chunks(),
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 413
        assert response.json()["error_code"] == "PAYLOAD_TOO_LARGE"

    def test_wrong_method(self, client: TestClient) -> None:
        response = client.patch("/api/v1/users", json={})
        assert response.status_code == 405
        assert response.json()["error_code"] == "METHOD_NOT_ALLOWED"


class TestOutOfRangeIds:
    """Ids too large for an INTEGER column are reported as missing records."""

    @pytest.mark.parametrize(
        "method,path",
        [
            ("delete", f"/api/v1/users/{2**63}"),
            ("get", f"/api/v1/users/{2**64}"),
            ("post", f"/api/v1/users/{2**63}/deactivate"),
            ("get", f"/api/v1/projects/{2**63}"),
            ("delete", f"/api/v1/projects/{2**63}"),
            ("get", f"/api/v1/projects/{2**63}/tasks"),
            ("get", f"/api/v1/tasks/{2**64}"),
            ("delete", f"/api/v1/tasks/{2**63}"),
        ],
    )
    def test_path_id_not_found(self, client: TestClient, method: str, path: str) -> None:
        response = client.request(method, path)
        assert response.status_code == 404
        assert response.json()["error_code"] == "NOT_FOUND"

    def test_unknown_owner_id(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/projects", json={"name": "Website Redesign", "ownerId": 2**63}
        )
        assert response.status_code == 404
        assert response.json()["message"] == f"User not found with ID: {2**63}"

    def test_unknown_project_and_assignee_ids(self, client: TestClient) -> None:
        user = _create_user(client)
        project = _create_project(client, user["id"])

        no_project = client.post(
            "/api/v1/tasks", json={"title": "Write copy", "projectId": 2**63}
        )
        assert no_project.status_code == 404

        no_assignee = client.post(
            "/api/v1/tasks",
            json={
                "title": "Write copy",
                "projectId": project["id"],
                "assigneeIds": [user["id"], 2**63],
            },
        )
        assert no_assignee.status_code == 404

    def test_list_filters_match_nothing(self, client: TestClient) -> None:
        response = client.get("/api/v1/tasks", params={"project_id": 2**63})
        assert response.status_code == 200
        assert response.json() == []


class TestAuthentication:
    """Tests for HTTP Basic authentication."""

    def test_missing_credentials(self, anonymous_client: TestClient) -> None:
        response = anonymous_client.get("/api/v1/users")
        assert response.status_code == 401
        assert response.json()["error_code"] == "UNAUTHORIZED"
        assert response.headers["WWW-Authenticate"] == "Basic"

    def test_wrong_password(self, anonymous_client: TestClient) -> None:
        response = anonymous_client.get(
            "/api/v1/users", headers=basic_auth_header("admin", "wrong")
        )
        assert response.status_code == 401

    def test_other_configured_account(self, anonymous_client: TestClient) -> None:
        response = anonymous_client.get(
            "/api/v1/users", headers=basic_auth_header("user", "user")
        )
        assert response.status_code == 200


class TestSecurityHeaders:
    """Tests for security headers on responses."""

    def test_security_headers_present(self, client: TestClient) -> None:
        """Success and error responses both carry the secure headers."""
        for response in (client.get("/api/v1/health"), client.get("/api/v1/users/9999")):
            assert response.headers["X-Content-Type-Options"] == "nosniff"
            assert response.headers["X-Frame-Options"] == "DENY"
            assert response.headers["Cache-Control"] == "no-store"
            assert "Content-Security-Policy" in response.headers


class TestRateLimiting:
    """Tests for rate limiting behavior."""

    def test_rate_limit_returns_429(self) -> None:
        """Exceeding the default limit returns the uniform 429 body."""
        app = FastAPI()
        app.state.limiter = build_limiter(True, "2/minute")
        app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
        app.add_middleware(SlowAPIMiddleware)

        @app.get("/ping")
        def ping() -> dict:
            return {"ok": True}

        client = TestClient(app)
        assert client.get("/ping").status_code == 200
        assert client.get("/ping").status_code == 200
        response = client.get("/ping")
        assert response.status_code == 429
        assert response.json()["error_code"] == "RATE_LIMITED"


class TestProjectTaskScenario:
    """End-to-end project and task lifecycle over HTTP."""

    def test_website_redesign(self, client: TestClient) -> None:
        user = _create_user(client)
        project = _create_project(client, user["id"])
        task = _create_task(
            client,
            project["id"],
            priority="HIGH",
            estimatedHours=8,
            dueDate="2030-01-15T17:00:00Z",
            assigneeIds=[user["id"]],
        )
        assert task["status"] == "PENDING"
        assert task["project"]["name"] == "Website Redesign"
        assert task["overdue"] is False

        for status in ("IN_PROGRESS", "BLOCKED", "COMPLETED"):
            response = client.put(f"/api/v1/tasks/{task['id']}", json={"status": status})
            assert response.status_code == 200
            assert response.json()["status"] == status
        assert response.json()["completed_at"] is not None

        project_tasks = client.get(f"/api/v1/projects/{project['id']}/tasks").json()
        assert [t["id"] for t in project_tasks] == [task["id"]]
        stats = client.get(f"/api/v1/projects/{project['id']}").json()["task_statistics"]
        assert stats == {
            "total": 1,
            "pending": 0,
            "in_progress": 0,
            "completed": 1,
            "blocked": 0,
        }

        blocked_delete = client.delete(f"/api/v1/projects/{project['id']}")
        assert blocked_delete.status_code == 409

        assert client.delete(f"/api/v1/tasks/{task['id']}").status_code == 204
        assert client.delete(f"/api/v1/projects/{project['id']}").status_code == 204
        assert client.delete(f"/api/v1/users/{user['id']}").status_code == 204


class TestErrorMapper:
    """Tests for the domain error to status/code mapping."""

    @pytest.mark.parametrize(
        "exc, status, code",
        [
            (EntityNotFoundError(EntityKind.TASK, 1), 404, "NOT_FOUND"),
            (ValidationFailedError([]), 400, "VALIDATION_FAILED"),
            (MalformedRequestError(), 400, "MALFORMED_REQUEST"),
            (
                ReferentialConflictError(EntityKind.PROJECT, 1, "project still has 2 task(s)"),
                409,
                "REFERENTIAL_CONFLICT",
            ),
            (
                DuplicateResourceError(EntityKind.USER, "email", "john@example.com"),
                409,
                "DUPLICATE_RESOURCE",
            ),
            (BusinessRuleError("Project 1 is already active"), 422, "BUSINESS_RULE_VIOLATION"),
            (KeyError("users.password_hash"), 500, "INTERNAL_ERROR"),
        ],
    )
    def test_mapping(self, exc, status: int, code: str) -> None:
        body = map_error(exc)
        assert (body.status, body.error_code) == (status, code)

    def test_field_errors_carried(self) -> None:
        field_error = FieldError("name", "BLANK_FIELD", "name must not be blank")
        body = map_error(ValidationFailedError([field_error]))
        assert body.to_dict()["field_errors"] == [
            {"field": "name", "code": "BLANK_FIELD", "message": "name must not be blank"}
        ]

    def test_internal_message_is_generic(self) -> None:
        body = map_error(RuntimeError("connection to db:5432 refused"))
        assert "5432" not in body.message


class TestInternalErrors:
    """Tests for the catch-all handler."""

    def test_unexpected_error_is_hidden(self, engine) -> None:
        """An unexpected exception becomes a generic 500 with no internals."""
        from app.interfaces.management.dependencies import get_engine, get_user_service
        from app.main import app

        broken = MagicMock()
        broken.get_by_id.side_effect = RuntimeError("secret connection string")
        app.dependency_overrides[get_engine] = lambda: engine
        app.dependency_overrides[get_user_service] = lambda: broken
        try:
            with TestClient(
                app,
                raise_server_exceptions=False,
                headers=basic_auth_header("admin", "admin"),
            ) as test_client:
                response = test_client.get("/api/v1/users/1")
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 500
        assert response.json()["error_code"] == "INTERNAL_ERROR"
        assert "secret" not in response.text

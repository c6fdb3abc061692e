"""Tests for the error boundary: every failure becomes a JSON error body."""

from fastapi import status

from src.config.settings import settings
from src.shared.error_handlers import format_validation_error


class TestFormatValidationError:
    def test_invalid_json(self):
        assert format_validation_error({"type": "json_invalid", "loc": ("body", 1)}) == "Request body is not valid JSON"

    def test_value_error_uses_message(self):
        error = {"type": "value_error", "loc": ("body", "name"), "msg": "Value error, x", "ctx": {"error": ValueError("x")}}
        assert format_validation_error(error) == "x"

    def test_other_errors_are_prefixed_with_field(self):
        error = {"type": "greater_than_equal", "loc": ("query", "page"), "msg": "Input should be greater than or equal to 1"}
        assert format_validation_error(error) == "page: Input should be greater than or equal to 1"


class TestErrorResponses:
    async def test_unhandled_error_hides_details(self, client):
        response = await client.get(f"{settings.api_prefix}/test-error")

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        body = response.json()
        assert body["error"] == "Internal server error"
        assert "timestamp" in body
        assert "stack" not in body
        assert "message" not in body

    async def test_unhandled_error_details_in_debug(self, client, monkeypatch):
        monkeypatch.setattr(settings, "debug", True)

        response = await client.get(f"{settings.api_prefix}/test-error")

        body = response.json()
        assert body["message"] == "This is a test error for demonstrating error handling"
        assert "RuntimeError" in body["stack"]
        assert body["development"] is True

    async def test_unknown_route(self, client):
        response = await client.get("/api/nope")
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json() == {"error": "Not Found"}

    async def test_method_not_allowed(self, client):
        response = await client.patch(f"{settings.api_prefix}/users")
        assert response.status_code == status.HTTP_405_METHOD_NOT_ALLOWED
        assert "error" in response.json()


class TestSystemEndpoints:
    async def test_root_lists_endpoints(self, client):
        response = await client.get("/")
        assert response.status_code == status.HTTP_200_OK
        assert response.headers["content-type"].startswith("text/plain")
        assert "/api/auth/login" in response.text
        assert "WS /ws" in response.text

    async def test_status(self, client):
        response = await client.get(f"{settings.api_prefix}/status")
        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["status"] == "running"
        assert body["version"] == settings.app_version
        assert body["stats"]["users"] == 2
        assert body["stats"]["posts"] == 2
        assert body["stats"]["files"] == 0
        assert body["websocket"]["endpoint"] == "/ws"

    async def test_health(self, client):
        response = await client.get(f"{settings.api_prefix}/health")
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == "ok"
        assert response.json()["database"] == "connected (SQLite)"

    async def test_health_reports_unavailable_database(self, client, monkeypatch):
        from contextlib import asynccontextmanager

        from sqlalchemy.exc import OperationalError

        from src.features.system import router as system_router

        @asynccontextmanager
        async def broken_session():
            raise OperationalError("SELECT 1", {}, Exception("unable to open database file"))
            yield

        monkeypatch.setattr(system_router, "get_session", broken_session)

        response = await client.get(f"{settings.api_prefix}/health")
        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.json()["status"] == "error"

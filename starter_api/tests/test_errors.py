"""
Fallback Handler Tests

Tests the not-found payload for unmatched routes and the 500 payload for
handlers that raise.
"""

import pytest
from fastapi import HTTPException, status
from fastapi.testclient import TestClient

from starter_api.main import create_app

NOT_FOUND = {"success": False, "message": "API route does not exist"}


def add_failing_routes(app):
    @app.get("/boom")
    async def boom():
        raise RuntimeError("boom")

    @app.get("/teapot")
    async def teapot():
        raise HTTPException(status_code=418, detail="short and stout")


@pytest.fixture
def error_client(app):
    add_failing_routes(app)
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client


class TestNotFound:
    """Test suite for the 404 fallback"""

    @pytest.mark.parametrize("path", ["/nonexistent-path", "/obviously/this/route/cant/exist", "/api/v2"])
    def test_unmatched_get(self, client, path):
        response = client.get(path)

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json() == NOT_FOUND

    def test_unsupported_method_on_known_path(self, client):
        response = client.post("/health", json={})

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json() == NOT_FOUND


class TestErrorHandler:
    """Test suite for the 500 fallback"""

    def test_exception_message_echoed(self, error_client):
        response = error_client.get("/boom")

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json() == {"success": False, "status": 500, "message": "boom"}

    def test_exception_message_hidden_when_disabled(self, settings, http_client):
        settings.EXPOSE_ERROR_DETAILS = False
        app = create_app(settings, http_client=http_client)
        add_failing_routes(app)

        with TestClient(app, raise_server_exceptions=False) as test_client:
            response = test_client.get("/boom")

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json() == {"success": False, "status": 500, "message": "Internal Server Error"}

    def test_other_http_errors_keep_default_body(self, error_client):
        response = error_client.get("/teapot")

        assert response.status_code == 418
        assert response.json() == {"detail": "short and stout"}

    def test_error_response_carries_cors_headers(self, error_client):
        response = error_client.get("/boom", headers={"Origin": "https://client.example.com"})

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json() == {"success": False, "status": 500, "message": "boom"}
        assert response.headers["access-control-allow-origin"] == "*"

    def test_exception_does_not_escape_the_app(self, app):
        add_failing_routes(app)

        with TestClient(app) as test_client:
            response = test_client.get("/boom")

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR

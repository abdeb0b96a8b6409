"""
Unit Tests for Demo Routes
==========================

Tests for starter_api/demo/routes.py

Test Coverage:
--------------
1. Health check payload
2. Home page for anonymous sessions
3. External demo call: success, transport failure, malformed URL,
   non-2xx status, redirects
4. Self-ping outcome reporting
"""

import httpx
import pytest
from fastapi import status

from starter_api.demo.routes import NOT_LOGGED_IN, ping_self

DEMO_URL = "https://demo.example.test/"


# ============================================================================
# Health / Home
# ============================================================================

def test_health_returns_live_message(client):
    response = client.get("/health")

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"message": "API is Live!"}


def test_home_without_login_returns_plain_text(client):
    response = client.get("/")

    assert response.status_code == status.HTTP_200_OK
    assert response.text == NOT_LOGGED_IN
    assert response.headers["content-type"].startswith("text/plain")


# ============================================================================
# External API Call
# ============================================================================

class TestExternalApiCall:
    """Test suite for GET /api"""

    def test_success_returns_remote_status(self, client, upstream):
        upstream.add(DEMO_URL, httpx.Response(200, text="<html></html>"))

        response = client.get("/api")

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {
            "message": "Demo API called (httpbin.org)",
            "data": 200,
        }
        assert len(upstream.requests_to(DEMO_URL)) == 1

    def test_network_failure_returns_500(self, client, upstream):
        upstream.add(DEMO_URL, httpx.ConnectError("Connection refused"))

        response = client.get("/api")

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json() == {"error": "Failed to call external API"}

    def test_malformed_url_returns_500(self, client, settings, upstream):
        settings.DEMO_API_URL = "http://exa mple.com:notaport/"

        response = client.get("/api")

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json() == {"error": "Failed to call external API"}
        assert upstream.requests == []

    def test_redirect_is_followed(self, client, upstream):
        moved = "https://demo.example.test/moved"
        upstream.add(DEMO_URL, httpx.Response(301, headers={"Location": moved}))
        upstream.add(moved, httpx.Response(200, text="<html></html>"))

        response = client.get("/api")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"] == 200
        assert len(upstream.requests_to(moved)) == 1

    def test_remote_error_status_returns_500(self, client, upstream):
        upstream.add(DEMO_URL, httpx.Response(503))

        response = client.get("/api")

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json() == {"error": "Failed to call external API"}

    def test_failure_is_not_retried(self, client, upstream):
        upstream.add(DEMO_URL, httpx.Response(500))

        client.get("/api")

        assert len(upstream.requests_to(DEMO_URL)) == 1


# ============================================================================
# Self-ping
# ============================================================================

class TestPingSelf:
    """Test suite for the keep-alive ping"""

    @pytest.mark.asyncio
    async def test_ping_success(self, upstream):
        upstream.add("http://testserver/", httpx.Response(200, text=NOT_LOGGED_IN))

        async with httpx.AsyncClient(transport=httpx.MockTransport(upstream)) as client:
            assert await ping_self(client, "http://testserver/") is True

    @pytest.mark.asyncio
    async def test_ping_unreachable(self, upstream):
        upstream.add("http://testserver/", httpx.ConnectError("down"))

        async with httpx.AsyncClient(transport=httpx.MockTransport(upstream)) as client:
            assert await ping_self(client, "http://testserver/") is False

    @pytest.mark.asyncio
    async def test_ping_malformed_base_url(self, upstream):
        async with httpx.AsyncClient(transport=httpx.MockTransport(upstream)) as client:
            assert await ping_self(client, "http://exa mple.com:notaport/") is False

        assert upstream.requests == []

    def test_ping_not_scheduled_by_default(self, settings):
        assert settings.SELF_PING_INTERVAL_SECONDS is None

"""
Shared fixtures for the starter API tests.

Outbound HTTP (Facebook Graph API, the demo API, self-ping) never leaves
the process: the app is built with an httpx.AsyncClient backed by
httpx.MockTransport, routed through FakeUpstream.
"""

import json
from typing import Any, Dict, List, Union

import httpx
import pytest
from fastapi.testclient import TestClient

from starter_api.config import Settings
from starter_api.main import create_app


class FakeUpstream:
    """
    MockTransport handler returning canned responses keyed by URL.

    Keys are ``scheme://host/path`` (query string ignored). A value may be
    an httpx.Response or an exception to raise.
    """

    def __init__(self):
        self.routes: Dict[str, Union[httpx.Response, Exception]] = {}
        self.requests: List[httpx.Request] = []

    def add(self, url: str, response: Union[httpx.Response, Exception]) -> None:
        self.routes[url] = response

    def add_json(self, url: str, data: Any, status_code: int = 200) -> None:
        self.routes[url] = httpx.Response(
            status_code,
            content=json.dumps(data).encode(),
            headers={"Content-Type": "application/json"},
        )

    def requests_to(self, url: str) -> List[httpx.Request]:
        return [r for r in self.requests if _key(r) == url]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        entry = self.routes.get(_key(request))
        if entry is None:
            return httpx.Response(404, json={"error": "not mocked"})
        if isinstance(entry, Exception):
            raise entry
        return entry


def _key(request: httpx.Request) -> str:
    return f"{request.url.scheme}://{request.url.host}{request.url.path}"


@pytest.fixture
def settings():
    """Settings isolated from the developer's environment and .env file"""
    return Settings(
        _env_file=None,
        BASE_URL="http://testserver",
        FACEBOOK_APP_ID="test-app-id",
        FACEBOOK_APP_SECRET="test-app-secret",
        SESSION_SECRET="test-session-secret-1234567890abcdef",
        DEMO_API_URL="https://demo.example.test/",
    )


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def http_client(upstream):
    return httpx.AsyncClient(transport=httpx.MockTransport(upstream), follow_redirects=True)


@pytest.fixture
def app(settings, http_client):
    return create_app(settings, http_client=http_client)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client

"""
API Documentation Tests
"""

from fastapi import status

from starter_api.docs import NOT_FOUND_EXAMPLE_PATH


def test_openapi_document_metadata(client):
    response = client.get("/openapi.json")

    assert response.status_code == status.HTTP_200_OK
    document = response.json()

    assert document["info"]["title"] == "Python SFA"
    assert document["info"]["version"] == "1.0.0"
    assert document["info"]["contact"]["name"] == "Starter API Maintainers"
    assert document["servers"] == [{"url": "http://testserver"}]
    assert [tag["name"] for tag in document["tags"]] == ["Default", "Auth"]


def test_openapi_document_lists_routes(client):
    paths = client.get("/openapi.json").json()["paths"]

    for path in ["/", "/api", "/health", "/auth/{provider_name}", "/auth/{provider_name}/callback"]:
        assert "get" in paths[path]

    assert "404" in paths[NOT_FOUND_EXAMPLE_PATH]["get"]["responses"]


def test_openapi_document_built_once(app, client):
    first = client.get("/openapi.json").json()

    @app.get("/added-later")
    async def added_later():
        return {}

    second = client.get("/openapi.json").json()

    assert second == first
    assert "/added-later" not in second["paths"]
    assert NOT_FOUND_EXAMPLE_PATH in second["paths"]
    assert second["servers"] == [{"url": "http://testserver"}]
    assert app.openapi() is app.openapi()


def test_interactive_docs_served(client):
    response = client.get("/docs")

    assert response.status_code == status.HTTP_200_OK
    assert "swagger-ui" in response.text.lower()

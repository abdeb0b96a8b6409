"""
OpenAPI document for the starter API.

The document is generated once, from the route table plus the static
definition block below, when the app is created. FastAPI then serves it
unchanged at /openapi.json, with Swagger UI at /docs and ReDoc at /redoc.
"""

from typing import Any, Dict

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi

from .models import NotFoundResponse

OPENAPI_TITLE = "Python SFA"
OPENAPI_VERSION = "1.0.0"
OPENAPI_DESCRIPTION = (
    "This is a single file python template app for faster idea testing and "
    "prototyping. It contains tests, one demo root API call, basic async error "
    "handling, one demo httpx call and .env support."
)
OPENAPI_CONTACT = {
    "name": "Starter API Maintainers",
}
OPENAPI_TAGS = [
    {
        "name": "Default",
        "description": "Default API Operations that come inbuilt",
    },
    {
        "name": "Auth",
        "description": "Login through a third-party identity provider",
    },
]

NOT_FOUND_EXAMPLE_PATH = "/obviously/this/route/cant/exist"


def build_openapi_schema(app: FastAPI) -> Dict[str, Any]:
    """
    Generate the OpenAPI document for ``app``.

    Uses the servers and tags the app was created with, and adds an example
    path documenting the not-found fallback, which has no route of its own.
    """
    openapi_schema = get_openapi(
        title=app.title,
        version=app.version,
        description=app.description,
        routes=app.routes,
        tags=app.openapi_tags,
        servers=app.servers,
        contact=app.contact,
    )

    openapi_schema.setdefault("paths", {})[NOT_FOUND_EXAMPLE_PATH] = {
        "get": {
            "summary": "API 404 Response",
            "description": "Returns a non-crashing result when you try to run a route that doesn't exist",
            "tags": ["Default"],
            "responses": {
                "404": {
                    "description": "Route not found",
                    "content": {
                        "application/json": {
                            "schema": NotFoundResponse.model_json_schema(),
                        },
                    },
                },
            },
        },
    }

    return openapi_schema


def install_openapi(app: FastAPI) -> Dict[str, Any]:
    """
    Build the document now and make ``app.openapi`` return it from then on.

    Routes registered after this call are not added to the document.
    """
    openapi_schema = build_openapi_schema(app)

    def custom_openapi() -> Dict[str, Any]:
        return openapi_schema

    app.openapi = custom_openapi
    return openapi_schema

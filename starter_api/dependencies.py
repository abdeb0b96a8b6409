import httpx
from fastapi import HTTPException, Request, status

from .config import Settings


def get_app_settings(request: Request) -> Settings:
    """
    Dependency returning the Settings the app was created with.
    """
    return request.app.state.settings


def get_http_client(request: Request) -> httpx.AsyncClient:
    """
    Dependency returning the shared outbound HTTP client.

    The client is opened by the app lifespan; requests served outside it
    (no lifespan ran) get a 503.
    """
    client = getattr(request.app.state, "http_client", None)
    if client is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="HTTP client not initialized"
        )
    return client

"""
Demo Routes
===========

Routes that come with the template:

- GET /        : shows whether the session is logged in
- GET /api     : calls an external demo API once (httpbin.org by default)
- GET /health  : liveness check, no dependency checks

Also holds the self-ping used to keep free-tier hosts awake. It only runs
when SELF_PING_INTERVAL_SECONDS is configured.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import httpx
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, PlainTextResponse

from ..auth.session import get_current_user
from ..config import Settings
from ..dependencies import get_app_settings, get_http_client
from ..models import DemoApiError, DemoApiResponse, HealthResponse, HomeResponse

logger = logging.getLogger(__name__)

NOT_LOGGED_IN = "You are not logged in"

demo_router = APIRouter(tags=["Default"])


# ============================================================================
# Endpoints
# ============================================================================

@demo_router.get(
    "/",
    response_model=None,
    summary="Home page",
    responses={
        200: {
            "model": HomeResponse,
            "description": f"Profile of the logged-in user, or the text '{NOT_LOGGED_IN}'.",
        },
    },
)
async def home(user: Optional[Dict[str, Any]] = Depends(get_current_user)):
    """Displays the user's information if authenticated."""
    if user is None:
        return PlainTextResponse(NOT_LOGGED_IN)

    return {"success": True, "message": "Logged in successfully", "user": user}


@demo_router.get(
    "/api",
    response_model=DemoApiResponse,
    summary="Call a demo external API (httpbin.org)",
    responses={500: {"model": DemoApiError, "description": "External API call failed."}},
)
async def call_external_api(
    settings: Settings = Depends(get_app_settings),
    http_client: httpx.AsyncClient = Depends(get_http_client),
):
    """
    Returns the status code of one GET to the demo API.

    Any transport error, malformed URL or non-2xx status is reported as a
    500. There are no retries.
    """
    try:
        response = await http_client.get(settings.DEMO_API_URL)
        response.raise_for_status()
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.error(f"Error calling external API: {e}")
        return JSONResponse(status_code=500, content={"error": "Failed to call external API"})

    return DemoApiResponse(message="Demo API called (httpbin.org)", data=response.status_code)


@demo_router.get("/health", response_model=HealthResponse, summary="API Health check")
async def health_check():
    """Returns a message indicating that the API is live."""
    return HealthResponse(message="API is Live!")


# ============================================================================
# Self-ping
# ============================================================================

async def ping_self(http_client: httpx.AsyncClient, base_url: str) -> bool:
    """
    Request the server's own base URL once.

    Returns:
        True if the server answered with a 2xx status, False otherwise
    """
    try:
        response = await http_client.get(base_url)
        response.raise_for_status()
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.error(f"Error pinging server: {e}")
        return False

    logger.info(f"Server pinged successfully: {response.status_code}")
    return True


async def keep_alive(http_client: httpx.AsyncClient, base_url: str, interval_seconds: int) -> None:
    """Ping the server every ``interval_seconds`` until cancelled."""
    while True:
        await asyncio.sleep(interval_seconds)
        await ping_self(http_client, base_url)

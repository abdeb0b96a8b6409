"""
Authentication routes for provider login and callback handling.

Two states exist per session: anonymous and authenticated. The only way
from one to the other is a successful round trip through a provider:

    GET /auth/{provider}            -> 302 to the provider consent screen
    GET /auth/{provider}/callback   -> 302 to / (profile stored on success)

Failures are never surfaced to the browser beyond the redirect.
"""

import logging
from typing import Dict

import httpx
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import RedirectResponse

from ..dependencies import get_http_client
from .providers import AuthError, AuthProvider, get_provider_registry
from .session import SessionContext, get_session

logger = logging.getLogger(__name__)

SUCCESS_REDIRECT = "/"
FAILURE_REDIRECT = "/"


# =============================================================================
# Router Setup
# =============================================================================

auth_router = APIRouter(
    prefix="/auth",
    tags=["Auth"],
)


def _resolve_provider(provider_name: str, providers: Dict[str, AuthProvider]) -> AuthProvider:
    provider = providers.get(provider_name)
    if provider is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return provider


# =============================================================================
# Login Endpoint
# =============================================================================

@auth_router.get(
    "/{provider_name}",
    response_class=RedirectResponse,
    status_code=status.HTTP_302_FOUND,
    summary="Redirects to the provider for authentication",
    responses={302: {"description": "Redirects to the provider consent screen."}},
)
async def login(
    provider_name: str,
    providers: Dict[str, AuthProvider] = Depends(get_provider_registry),
):
    """
    Initiate the login flow by redirecting to the identity provider.

    Accepts no parameters; e.g. ``GET /auth/facebook`` always redirects to
    the Facebook login dialog.
    """
    provider = _resolve_provider(provider_name, providers)
    authorization_url = provider.initiate_login()

    logger.info(f"Redirecting to {provider.name} for login")

    return RedirectResponse(url=authorization_url, status_code=status.HTTP_302_FOUND)


# =============================================================================
# Callback Endpoint
# =============================================================================

@auth_router.get(
    "/{provider_name}/callback",
    response_class=RedirectResponse,
    status_code=status.HTTP_302_FOUND,
    summary="Provider authentication callback",
    responses={302: {"description": "Redirects to the home page, whether or not login succeeded."}},
)
async def callback(
    provider_name: str,
    request: Request,
    session: SessionContext = Depends(get_session),
    providers: Dict[str, AuthProvider] = Depends(get_provider_registry),
    http_client: httpx.AsyncClient = Depends(get_http_client),
):
    """
    Handle the redirect back from the identity provider.

    This endpoint:
    1. Hands the query parameters (code, or error) to the provider
    2. Stores the returned profile in the session, unchanged
    3. Redirects to the home page

    Any AuthError also ends in a redirect to the home page.
    """
    provider = _resolve_provider(provider_name, providers)

    try:
        profile = await provider.complete_login(request.query_params, http_client)
    except AuthError as e:
        logger.warning(
            f"{provider.name} login failed: {e}",
            extra={"provider": provider.name},
        )
        return RedirectResponse(url=FAILURE_REDIRECT, status_code=status.HTTP_302_FOUND)

    session.set_user(profile.to_session())

    logger.info(
        f"{provider.name} login succeeded",
        extra={"provider": provider.name, "user_id": profile.id},
    )

    return RedirectResponse(url=SUCCESS_REDIRECT, status_code=status.HTTP_302_FOUND)

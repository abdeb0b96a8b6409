"""
OAuth provider implementations.

Each provider turns the login handshake of one identity provider into two
calls:

- ``initiate_login()`` returns the URL of the provider's consent screen
- ``complete_login(artifact, http_client)`` exchanges the callback query
  parameters for a Profile, raising AuthError on any failure

Only Facebook is shipped. Providers are registered by name on
``app.state.auth_providers``.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Mapping, Optional
from urllib.parse import urlencode

import httpx
from fastapi import Request

from ..config import Settings
from ..models import Profile, ProfileName, ProfileValue

logger = logging.getLogger(__name__)


# =============================================================================
# Exceptions
# =============================================================================

class AuthError(Exception):
    """Login could not be completed with the identity provider."""
    pass


# =============================================================================
# Provider Interface
# =============================================================================

class AuthProvider(ABC):
    """Interface implemented by every identity provider."""

    name: str = ""

    @abstractmethod
    def initiate_login(self) -> str:
        """Return the URL the browser is redirected to for consent."""

    @abstractmethod
    async def complete_login(
        self,
        artifact: Mapping[str, str],
        http_client: httpx.AsyncClient,
    ) -> Profile:
        """
        Exchange the callback artifact for the user's profile.

        Args:
            artifact: Query parameters the provider sent to the callback
            http_client: Shared client for outbound calls

        Raises:
            AuthError: If the provider reported an error or any step failed
        """


# =============================================================================
# Facebook
# =============================================================================

# Profile field names mapped to Graph API field names. Names not listed
# here are passed to the Graph API unchanged.
FACEBOOK_FIELD_MAP: Dict[str, List[str]] = {
    "id": ["id"],
    "username": ["username"],
    "displayName": ["name"],
    "name": ["last_name", "first_name", "middle_name"],
    "gender": ["gender"],
    "birthday": ["birthday"],
    "profileUrl": ["link"],
    "emails": ["email"],
    "email": ["email"],
    "photos": ["picture.type(large)"],
}


def convert_profile_fields(fields: Iterable[str]) -> str:
    """
    Translate profile field names to a Graph API ``fields`` parameter.

    Example:
        >>> convert_profile_fields(["id", "displayName", "photos"])
        'id,name,picture.type(large)'
    """
    graph_fields: List[str] = []
    for field in fields:
        for graph_field in FACEBOOK_FIELD_MAP.get(field, [field]):
            if graph_field not in graph_fields:
                graph_fields.append(graph_field)
    return ",".join(graph_fields)


def parse_facebook_profile(body: str, data: Dict[str, Any]) -> Profile:
    """Build a Profile from a Graph API ``/me`` response."""
    name = None
    if any(key in data for key in ("last_name", "first_name", "middle_name")):
        name = ProfileName(
            familyName=data.get("last_name"),
            givenName=data.get("first_name"),
            middleName=data.get("middle_name"),
        )

    emails = None
    if data.get("email"):
        emails = [ProfileValue(value=data["email"])]

    photos = None
    picture = data.get("picture")
    if isinstance(picture, dict):
        url = (picture.get("data") or {}).get("url")
        if url:
            photos = [ProfileValue(value=url)]
    elif isinstance(picture, str):
        photos = [ProfileValue(value=picture)]

    return Profile(
        provider="facebook",
        id=str(data["id"]),
        displayName=data.get("name"),
        username=data.get("username"),
        name=name,
        gender=data.get("gender"),
        profileUrl=data.get("link"),
        emails=emails,
        photos=photos,
        raw=body,
        raw_json=data,
    )


def _graph_error_message(response: httpx.Response, default: str) -> str:
    """Pull the error message out of a Graph API error body."""
    try:
        body = response.json()
    except ValueError:
        return default
    if not isinstance(body, dict) or not body.get("error"):
        return default
    error = body["error"]
    if isinstance(error, dict):
        return error.get("message") or default
    return str(error)


class FacebookProvider(AuthProvider):
    """Facebook Login via the Graph API authorization code flow."""

    name = "facebook"

    DIALOG_URL = "https://www.facebook.com/{version}/dialog/oauth"
    GRAPH_URL = "https://graph.facebook.com/{version}"

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        callback_url: str,
        profile_fields: Optional[List[str]] = None,
        scope: Optional[List[str]] = None,
        api_version: str = "v18.0",
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.callback_url = callback_url
        self.profile_fields = profile_fields or []
        self.scope = scope or []
        self.api_version = api_version

    @classmethod
    def from_settings(cls, settings: Settings) -> "FacebookProvider":
        return cls(
            client_id=settings.FACEBOOK_APP_ID,
            client_secret=settings.FACEBOOK_APP_SECRET,
            callback_url=f"{settings.base_url}/auth/facebook/callback",
            profile_fields=settings.facebook_profile_fields_list,
            scope=settings.facebook_scope_list,
            api_version=settings.FACEBOOK_GRAPH_API_VERSION,
        )

    @property
    def graph_url(self) -> str:
        return self.GRAPH_URL.format(version=self.api_version)

    def initiate_login(self) -> str:
        params = {
            "response_type": "code",
            "redirect_uri": self.callback_url,
            "client_id": self.client_id,
        }
        if self.scope:
            params["scope"] = ",".join(self.scope)

        dialog_url = self.DIALOG_URL.format(version=self.api_version)
        return f"{dialog_url}?{urlencode(params)}"

    async def complete_login(
        self,
        artifact: Mapping[str, str],
        http_client: httpx.AsyncClient,
    ) -> Profile:
        error = artifact.get("error")
        if error:
            raise AuthError(artifact.get("error_description") or artifact.get("error_reason") or error)

        code = artifact.get("code")
        if not code:
            raise AuthError("Missing authorization code")

        access_token = await self._exchange_code_for_token(code, http_client)
        return await self._fetch_profile(access_token, http_client)

    async def _exchange_code_for_token(self, code: str, http_client: httpx.AsyncClient) -> str:
        params = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "redirect_uri": self.callback_url,
            "code": code,
        }

        try:
            response = await http_client.get(
                f"{self.graph_url}/oauth/access_token",
                params=params,
                timeout=10.0,
            )
        except httpx.HTTPError as e:
            raise AuthError(f"Token exchange failed: {e}") from e

        if not response.is_success:
            message = _graph_error_message(response, "Token exchange failed")
            raise AuthError(f"Token exchange failed: {message}")

        try:
            token_data = response.json()
        except ValueError as e:
            raise AuthError("Token response is not valid JSON") from e

        access_token = token_data.get("access_token") if isinstance(token_data, dict) else None
        if not access_token:
            raise AuthError("Token response missing access_token")

        return access_token

    async def _fetch_profile(self, access_token: str, http_client: httpx.AsyncClient) -> Profile:
        params = {"access_token": access_token}
        if self.profile_fields:
            params["fields"] = convert_profile_fields(self.profile_fields)

        try:
            response = await http_client.get(f"{self.graph_url}/me", params=params, timeout=10.0)
        except httpx.HTTPError as e:
            raise AuthError(f"Failed to fetch user profile: {e}") from e

        if not response.is_success:
            message = _graph_error_message(response, "Failed to fetch user profile")
            raise AuthError(f"Failed to fetch user profile: {message}")

        try:
            data = response.json()
        except ValueError as e:
            raise AuthError("Profile response is not valid JSON") from e

        if not isinstance(data, dict) or "id" not in data:
            raise AuthError("Profile response missing id")

        return parse_facebook_profile(response.text, data)


# =============================================================================
# Registry
# =============================================================================

def build_provider_registry(settings: Settings) -> Dict[str, AuthProvider]:
    """Create every configured provider, keyed by route name."""
    providers: List[AuthProvider] = [FacebookProvider.from_settings(settings)]
    return {provider.name: provider for provider in providers}


def get_provider_registry(request: Request) -> Dict[str, AuthProvider]:
    """FastAPI dependency returning the providers registered on the app."""
    return request.app.state.auth_providers

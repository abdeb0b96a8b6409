"""
Data Models Module

Pydantic models for the profile returned by the identity provider and for
the response bodies of the demo, health and fallback routes. The response
models are used for OpenAPI documentation.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Authentication Models
# ============================================================================

class ProfileName(BaseModel):
    """Structured name parts, when the provider returns them."""
    familyName: Optional[str] = None
    givenName: Optional[str] = None
    middleName: Optional[str] = None


class ProfileValue(BaseModel):
    """Single entry of the ``emails`` or ``photos`` lists."""
    value: str


class Profile(BaseModel):
    """
    User profile produced by an auth provider.

    Stored verbatim in the session after login. ``_raw`` and ``_json`` keep
    the provider's unparsed response.
    """
    model_config = ConfigDict(populate_by_name=True)

    provider: str = Field(..., description="Identity provider name")
    id: str = Field(..., description="Provider-scoped user identifier")
    displayName: Optional[str] = Field(None, description="User display name")
    username: Optional[str] = None
    name: Optional[ProfileName] = None
    gender: Optional[str] = None
    profileUrl: Optional[str] = None
    emails: Optional[List[ProfileValue]] = None
    photos: Optional[List[ProfileValue]] = None
    raw: Optional[str] = Field(None, alias="_raw", description="Raw response body")
    raw_json: Optional[Dict[str, Any]] = Field(None, alias="_json", description="Parsed response body")

    def to_session(self) -> Dict[str, Any]:
        """Serialize for the session store, keeping the provider aliases."""
        return self.model_dump(by_alias=True, exclude_none=True)


# ============================================================================
# Response Models
# ============================================================================

class HomeResponse(BaseModel):
    """Body of GET / for an authenticated session."""
    success: bool = True
    message: str = "Logged in successfully"
    user: Dict[str, Any] = Field(..., description="Profile stored at login")


class DemoApiResponse(BaseModel):
    """Body of a successful GET /api."""
    message: str = Field(..., description="Description of the call made")
    data: int = Field(..., description="Status code returned by the remote API")


class HealthResponse(BaseModel):
    """Health check response model."""
    message: str = Field(..., description="Liveness message")


class DemoApiError(BaseModel):
    """Body of a failed GET /api."""
    error: str


class NotFoundResponse(BaseModel):
    """Body returned for unmatched routes."""
    success: bool = False
    message: str = "API route does not exist"


class ErrorResponse(BaseModel):
    """Body returned for unhandled exceptions."""
    success: bool = False
    status: int = 500
    message: str

"""
Authentication Package

Session-based login through third-party identity providers.

Modules:
- routes: Login-initiate and login-complete endpoints (/auth/{provider}, /auth/{provider}/callback)
- providers: Provider interface, the Facebook implementation and the provider registry
- session: In-memory session store, signed session cookies and session dependencies

The authentication flow:
1. Browser requests /auth/facebook and is redirected to Facebook
2. User approves the app on Facebook
3. Facebook redirects back to /auth/facebook/callback with a code
4. The provider exchanges the code for the user's profile
5. The profile is stored in the session and the browser goes back to /
"""

from .providers import AuthError, AuthProvider, FacebookProvider
from .routes import auth_router
from .session import InMemorySessionStore, SessionContext, get_current_user, get_session

__all__ = [
    "auth_router",
    "AuthError",
    "AuthProvider",
    "FacebookProvider",
    "InMemorySessionStore",
    "SessionContext",
    "get_current_user",
    "get_session",
]

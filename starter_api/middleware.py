"""
HTTP middleware for the starter API.

- ErrorResponseMiddleware: uncaught exceptions become the 500 payload
- RequestLoggingMiddleware: one log line per request, morgan "dev" style
- SessionMiddleware: loads (or lazily creates) the session behind the
  cookie, exposes it to handlers and re-issues the cookie on the way out
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from .auth.session import InMemorySessionStore, SessionContext, create_session_token, verify_session_token
from .config import Settings
from .models import ErrorResponse

logger = logging.getLogger(__name__)

RED = "\x1b[31m"
RESET = "\x1b[0m"


class ErrorResponseMiddleware(BaseHTTPMiddleware):
    """
    Turn any uncaught exception into the fixed 500 payload.

    Sits inside CORSMiddleware so error responses carry the CORS headers
    like every other response.
    """

    def __init__(self, app: ASGIApp, settings: Settings):
        super().__init__(app)
        self.settings = settings

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            logger.error(
                f"{RED}{exc}{RESET}",
                extra={
                    "path": request.url.path,
                    "method": request.method,
                    "exception_type": type(exc).__name__
                },
                exc_info=True
            )

            message = str(exc) if self.settings.EXPOSE_ERROR_DETAILS else "Internal Server Error"
            return JSONResponse(
                status_code=500,
                content=ErrorResponse(message=message).model_dump()
            )


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log ``METHOD path status duration ms - length`` for every request."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            self._log(request, 500, start, "-")
            raise

        self._log(request, response.status_code, start, response.headers.get("content-length", "-"))
        return response

    @staticmethod
    def _log(request: Request, status_code: int, start: float, length: str) -> None:
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            f"{request.method} {request.url.path} {status_code} {duration_ms:.3f} ms - {length}",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": status_code,
            },
        )


class SessionMiddleware(BaseHTTPMiddleware):
    """
    Attach a SessionContext to ``request.state.session``.

    A request without a valid cookie gets a new empty session. Every
    successful response saves the session and sets the cookie again, which
    pushes its expiry forward.
    """

    def __init__(self, app: ASGIApp, store: InMemorySessionStore, settings: Settings):
        super().__init__(app)
        self.store = store
        self.settings = settings

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        session = self._load_session(request)
        request.state.session = session

        response = await call_next(request)

        self.store.save(session.record)
        response.set_cookie(
            key=self.settings.SESSION_COOKIE_NAME,
            value=create_session_token(session.sid, self.settings),
            max_age=self.settings.SESSION_MAX_AGE_SECONDS,
            path="/",
            httponly=True,
            samesite="lax",
        )
        return response

    def _load_session(self, request: Request) -> SessionContext:
        token = request.cookies.get(self.settings.SESSION_COOKIE_NAME)
        sid = verify_session_token(token, self.settings) if token else None

        record = self.store.get(sid) if sid else None
        if record is not None:
            return SessionContext(record)

        return SessionContext(self.store.create())

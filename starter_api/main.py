"""
FastAPI Application Factory
===========================

Main entry point for the starter API.

Middleware chain (outermost first):
    body parsing (built into FastAPI request handling)
    -> CORS -> error response -> request logging -> session attachment
Authentication state is resolved per handler through the
``get_current_user`` dependency.

Routers:
    - /auth/*       : Provider login and callback
    - /, /api, /health : Demo routes
    - /docs, /redoc, /openapi.json : API documentation

Fallbacks:
    - Unmatched routes        -> 404 {"success": false, "message": "API route does not exist"}
    - Unhandled exceptions    -> 500 {"success": false, "status": 500, "message": "..."}

Environment Variables (all optional):
    PORT, HOST, BASE_URL, FACEBOOK_APP_ID, FACEBOOK_APP_SECRET,
    SESSION_SECRET, ALLOWED_ORIGINS, DEMO_API_URL, SELF_PING_INTERVAL_SECONDS,
    EXPOSE_ERROR_DETAILS, LOG_LEVEL

Running the Service:
    Development:
        uvicorn starter_api.main:app --reload --port 5000

    Console script:
        starter-api
"""

import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

import httpx
import uvicorn
from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .auth.providers import build_provider_registry
from .auth.routes import auth_router
from .auth.session import InMemorySessionStore
from .config import Settings, get_settings, validate_configuration
from .demo.routes import demo_router, keep_alive
from .docs import (
    OPENAPI_CONTACT,
    OPENAPI_DESCRIPTION,
    OPENAPI_TAGS,
    OPENAPI_TITLE,
    OPENAPI_VERSION,
    install_openapi,
)
from .middleware import ErrorResponseMiddleware, RequestLoggingMiddleware, SessionMiddleware
from .models import NotFoundResponse

logger = logging.getLogger("starter_api.main")


def setup_logging(log_level: str = "INFO") -> None:
    """
    Configure structured logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format='{"timestamp": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s", "module": "%(module)s", "function": "%(funcName)s"}',
        handlers=[logging.StreamHandler(sys.stdout)]
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Startup:
        - Configure logging and report insecure configuration fallbacks
        - Open the shared outbound HTTP client (unless one was injected)
        - Start the self-ping loop when SELF_PING_INTERVAL_SECONDS is set

    Shutdown:
        - Cancel the self-ping loop
        - Close the HTTP client if this lifespan opened it
    """
    settings: Settings = app.state.settings

    setup_logging(settings.LOG_LEVEL)
    logger.info(
        "Starting starter API",
        extra={"base_url": settings.base_url, "port": settings.PORT}
    )

    status = validate_configuration(settings)
    for warning in status["warnings"]:
        logger.warning(f"Configuration warning: {warning}")

    owns_client = app.state.http_client is None
    if owns_client:
        app.state.http_client = httpx.AsyncClient(follow_redirects=True)

    keep_alive_task: Optional[asyncio.Task] = None
    if settings.SELF_PING_INTERVAL_SECONDS:
        keep_alive_task = asyncio.create_task(
            keep_alive(app.state.http_client, settings.base_url, settings.SELF_PING_INTERVAL_SECONDS)
        )
        logger.info(f"Self-ping scheduled every {settings.SELF_PING_INTERVAL_SECONDS}s")

    logger.info(f"Server running on port {settings.PORT}")

    yield

    logger.info("Shutting down starter API")

    if keep_alive_task is not None:
        keep_alive_task.cancel()
        try:
            await keep_alive_task
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.error(f"Self-ping loop had already failed: {e}")

    if owns_client:
        await app.state.http_client.aclose()
        app.state.http_client = None

    logger.info("Shutdown complete")


def create_app(
    settings: Optional[Settings] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> FastAPI:
    """
    Application factory function.

    Args:
        settings: Configuration to run with; loaded from the environment if omitted
        http_client: Outbound client to use instead of opening one at startup

    Returns:
        FastAPI: Configured application instance
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=OPENAPI_TITLE,
        description=OPENAPI_DESCRIPTION,
        version=OPENAPI_VERSION,
        contact=OPENAPI_CONTACT,
        servers=[{"url": settings.base_url}],
        openapi_tags=OPENAPI_TAGS,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc"
    )

    app.state.settings = settings
    app.state.http_client = http_client
    app.state.session_store = InMemorySessionStore(settings.SESSION_MAX_AGE_SECONDS)
    app.state.auth_providers = build_provider_registry(settings)

    # Starlette wraps each new middleware around the previous ones, so the
    # last one added runs first.
    app.add_middleware(
        SessionMiddleware,
        store=app.state.session_store,
        settings=settings,
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(ErrorResponseMiddleware, settings=settings)

    origins = settings.allowed_origins_list
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=origins != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth_router)
    app.include_router(demo_router)

    @app.exception_handler(StarletteHTTPException)
    async def not_found_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        """
        Turn unmatched routes into the fixed not-found payload.

        A 405 means the path exists for another method only; it is treated
        as unmatched too. Other HTTP errors keep FastAPI's default body.
        """
        if exc.status_code in (404, 405):
            return JSONResponse(
                status_code=404,
                content=NotFoundResponse().model_dump()
            )
        return await http_exception_handler(request, exc)

    install_openapi(app)

    return app


# Create app instance for uvicorn
app = create_app()


def run() -> None:
    """Console entry point: serve ``app`` with uvicorn on HOST:PORT."""
    settings = get_settings()

    uvicorn.run(
        "starter_api.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower()
    )


if __name__ == "__main__":
    run()

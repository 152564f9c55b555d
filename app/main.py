# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the FinPlatform API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Startup sequence (lifespan):
# 1. Connect to the datastore - failure aborts startup
# 2. In development only, start the in-process cron jobs
# 3. Log "Server is running on port ... in ... mode"
#
# Usage:
#   uvicorn app.main:app --reload
#   finplatform-api            # console script, see run()
# =============================================================================

import asyncio
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import Settings, settings
from app.cors import AllowlistCORSMiddleware, CorsPolicy
from app.exceptions import (
    BadRequestException,
    FinPlatformException,
    RequestTimeoutError,
    UnhandledExceptionMiddleware,
    finplatform_exception_handler,
    http_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from app.routers import mount_routes
from lib.supabase_client import connect_database
from workers.schedule import initialize_crons, shutdown_crons

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def build_lifespan(config: Settings):
    """Lifespan handler bound to one Settings instance."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Runs on startup and shutdown:
        - Startup: connect the datastore, start dev cron jobs
        - Shutdown: stop cron jobs
        """
        await asyncio.to_thread(connect_database)

        crons_started = False
        if config.is_development:
            await initialize_crons()
            crons_started = True
        else:
            logger.info(f"Cron jobs skipped in {config.NODE_ENV} mode (run by Celery beat)")

        logger.info(f"Server is running on port {config.PORT} in {config.NODE_ENV} mode")

        yield

        logger.info("Shutting down FinPlatform API")
        if crons_started:
            await shutdown_crons()

    return lifespan


def create_app(config: Settings = settings) -> FastAPI:
    """
    Build the application for one configuration.

    The CORS policy and base path are computed once here and handed to the
    middleware and the route mounter; neither changes afterwards.
    """
    base_path = config.base_path
    policy = CorsPolicy(allowed_origins=config.allowed_origins)

    app = FastAPI(
        title="FinPlatform API",
        description="AI financial platform API: transactions, reports and analytics.",
        version="1.0.0",
        docs_url=f"{base_path}/docs",
        redoc_url=f"{base_path}/redoc",
        openapi_url=f"{base_path}/openapi.json",
        lifespan=build_lifespan(config),
    )
    app.state.settings = config
    app.state.base_path = base_path
    app.state.cors_policy = policy

    # =========================================================================
    # Middleware
    # =========================================================================

    timeout = config.REQUEST_TIMEOUT_SECONDS

    @app.middleware("http")
    async def enforce_request_timeout(request: Request, call_next):
        try:
            return await asyncio.wait_for(call_next(request), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Request timed out after {timeout:g}s: {request.method} {request.url.path}")
            return await finplatform_exception_handler(request, RequestTimeoutError(timeout))

    # Inside CORS so 500 responses still carry the CORS headers
    app.add_middleware(UnhandledExceptionMiddleware)

    # Added last so it wraps everything, including timeout and 500 responses
    app.add_middleware(AllowlistCORSMiddleware, policy=policy)

    # =========================================================================
    # Exception Handlers
    # =========================================================================

    app.add_exception_handler(FinPlatformException, finplatform_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # =========================================================================
    # Root Endpoint
    # =========================================================================

    @app.get("/", tags=["Root"])
    async def root():
        """Welcome message. With DEBUG_ROOT_ERROR set, raises a test error instead."""
        if config.DEBUG_ROOT_ERROR:
            raise BadRequestException("This is a test error")
        return {"message": "Hi welcome to AI Financial Platform API"}

    # =========================================================================
    # Routers
    # =========================================================================

    mount_routes(app, base_path)

    logger.debug(f"App built: base_path={base_path!r}, allowed_origins={sorted(policy.allowed_origins)}")
    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn on HOST:PORT."""
    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.is_development and settings.DEBUG,
        log_level="debug" if settings.DEBUG else "info",
    )


if __name__ == "__main__":
    run()

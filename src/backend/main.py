"""
One World Backend Application

Civic-engagement app backend: project votings plus the settings the mobile
app loads at startup, with a small server-rendered admin panel.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from api.admin_panel import router as admin_panel_router
from api.v1 import router as api_v1_router
from core.config import settings
from core.events import create_start_app_handler, create_stop_app_handler
from core.exceptions import InvalidOptionError, OneWorldError, VotingValidationError
from core.middleware import SecurityHeadersMiddleware

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup and shutdown events."""
    # Startup
    await create_start_app_handler(app)()
    yield
    # Shutdown
    await create_stop_app_handler(app)()


def create_application() -> FastAPI:
    """Create and configure the FastAPI application."""
    application = FastAPI(
        title=settings.APP_NAME,
        description="One World civic-engagement API: project votings and app settings",
        version=settings.APP_VERSION,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        openapi_url="/openapi.json" if settings.DEBUG else None,
        lifespan=lifespan,
    )

    # Add middleware (order matters - processed in reverse)
    # 1. Security headers - added to all responses
    application.add_middleware(SecurityHeadersMiddleware)

    # 2. Admin panel session cookie
    application.add_middleware(
        SessionMiddleware,
        secret_key=settings.ADMIN_SESSION_SECRET,
        session_cookie=settings.ADMIN_SESSION_COOKIE,
        max_age=settings.ADMIN_SESSION_MAX_AGE_SECONDS,
        same_site="strict",
        https_only=settings.is_production,
    )

    # 3. CORS
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type"],
    )

    # 4. GZip compression for responses
    application.add_middleware(GZipMiddleware, minimum_size=1000)

    # Include routers
    application.include_router(api_v1_router, prefix=f"/api/{settings.API_VERSION}")
    application.include_router(admin_panel_router, prefix="/admin", tags=["Admin Panel"])

    @application.exception_handler(OneWorldError)
    async def domain_exception_handler(request: Request, exc: OneWorldError) -> JSONResponse:
        """Render domain errors as ``{"detail": ..., "error_code": ...}``."""
        logger.info(
            "request_rejected",
            error_code=exc.error_code,
            path=request.url.path,
            method=request.method,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message, "error_code": exc.error_code},
        )

    votings_prefix = f"/api/{settings.API_VERSION}/votings"

    @application.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """
        Malformed voting bodies are rejected like any other voting input.

        Body errors on the voting routes answer 400 with ``invalid_option``
        (bad ``option_id``) or ``validation_error``. Everything else, path ids
        included, keeps FastAPI's 422.
        """
        errors = exc.errors()
        body_errors = [error for error in errors if error.get("loc", ())[:1] == ("body",)]
        if not request.url.path.startswith(votings_prefix) or not body_errors or len(body_errors) != len(errors):
            return await request_validation_exception_handler(request, exc)

        if any("option_id" in error["loc"] for error in body_errors):
            rejected = InvalidOptionError()
        else:
            first = body_errors[0]
            field = ".".join(str(part) for part in first["loc"][1:]) or "body"
            rejected = VotingValidationError(f"Invalid {field}: {first['msg']}")

        logger.info(
            "request_rejected",
            error_code=rejected.error_code,
            path=request.url.path,
            method=request.method,
        )
        return JSONResponse(
            status_code=rejected.status_code,
            content={"detail": rejected.message, "error_code": rejected.error_code},
        )

    # Add global exception handler to ensure CORS headers are present on error responses
    @application.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """
        Global exception handler to catch unhandled exceptions.

        Store failures end up here too. The caller gets a generic body; the
        details only go to the log.
        """
        logger.exception(
            "unhandled_exception",
            error=str(exc),
            error_type=type(exc).__name__,
            path=request.url.path,
            method=request.method,
        )

        return JSONResponse(
            status_code=500,
            content={
                "detail": "An internal server error occurred. Please try again later.",
                "error_code": "internal_error",
            },
        )

    @application.get("/health", tags=["Health"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint for load balancers and monitoring."""
        return {"status": "healthy", "service": "oneworld-api"}

    @application.get("/", tags=["Root"])
    async def root() -> dict[str, str]:
        """Root endpoint with API information."""
        return {
            "name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "docs": "/docs" if settings.DEBUG else "Documentation disabled in production",
        }

    return application


app = create_application()

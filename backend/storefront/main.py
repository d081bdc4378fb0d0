"""
Big Dawgs RC Store API - FastAPI Application Entry Point

This module initializes the FastAPI application with all middleware,
exception handlers, routes, and lifecycle event handlers.

Run locally:
    uvicorn storefront.main:app --reload
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storefront import __version__
from storefront.api.routes import admin, auth, contact, health, inventory, orders
from storefront.core.config import settings
from storefront.core.database import init_db, close_db
from storefront.core.errors import register_exception_handlers
from storefront.core.logging_config import get_logger, setup_logging
from storefront.middleware.context import RequestContextMiddleware
from storefront.middleware.logging import LoggingMiddleware
from storefront.middleware.security_headers import SecurityHeadersMiddleware
from storefront.middleware.rate_limit import RateLimitMiddleware
from storefront.schemas.health import ServiceInfo

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Startup:
        - Set up structured logging
        - Initialize database (tables only with DB_CREATE_ALL)
        - Report which optional providers are configured

    Shutdown:
        - Close database connections
    """
    setup_logging(level=settings.log_level, json_format=settings.log_json)

    await init_db()

    logger.info(
        "Store API started",
        extra={
            "version": __version__,
            "payments_configured": settings.razorpay_configured,
            "customer_email_configured": bool(settings.resend_api_key),
            "admin_email_configured": settings.smtp_configured,
            "storage_configured": settings.storage_configured,
        }
    )

    yield

    await close_db()


def create_app() -> FastAPI:
    """
    Build the application.

    Middleware executes in reverse order of registration (last registered
    runs first): CORS, request id, logging, rate limiting, security headers.
    """
    app = FastAPI(
        title=settings.project_name,
        version=__version__,
        description="Catalog, OTP sign-in, Razorpay checkout and admin panel for the Big Dawgs RC Store",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    register_exception_handlers(app)

    # Security headers (innermost, decorates every routed response)
    app.add_middleware(SecurityHeadersMiddleware)

    if not settings.disable_rate_limit:
        app.add_middleware(
            RateLimitMiddleware,
            auth_limit=settings.auth_rate_limit,
            default_limit=settings.default_rate_limit,
        )

    # Logging middleware (inside the context layer so request_id is set)
    app.add_middleware(LoggingMiddleware)

    # Correlation id and client address
    app.add_middleware(RequestContextMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    app.include_router(health.router)
    app.include_router(auth.router, prefix=settings.api_prefix)
    app.include_router(inventory.router, prefix=settings.api_prefix)
    app.include_router(orders.router, prefix=settings.api_prefix)
    app.include_router(admin.router, prefix=settings.api_prefix)
    app.include_router(contact.router, prefix=settings.api_prefix)

    @app.get("/", response_model=ServiceInfo, tags=["health"])
    async def root() -> ServiceInfo:
        """Basic API information."""
        return ServiceInfo(
            name=settings.project_name,
            version=__version__,
            docs="/docs",
            health="/health",
        )

    return app


app = create_app()

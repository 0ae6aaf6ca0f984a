"""
FastAPI Application

Main entry point for the Bio Storefront API.
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from bio_storefront.config import get_settings
from bio_storefront.config.logging import configure_logging
from bio_storefront.database import Database
from bio_storefront.serving.api import (
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
    register_exception_handlers,
)
from bio_storefront.serving.api.routes import (
    analytics_router,
    components_router,
    health_router,
    pages_router,
    public_router,
    sales_router,
)

logger = structlog.get_logger(__name__)


def create_app(database: Optional[Database] = None) -> FastAPI:
    """
    Build the API application.

    Args:
        database: pre-built Database to serve from; when omitted one is
            created from settings on startup and disposed on shutdown
    """
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings=settings)
        logger.info("Starting Bio Storefront API", environment=settings.app_env, version=settings.version)

        owned = database is None
        app.state.database = database or Database.from_settings(settings)
        await app.state.database.connect(create_tables=settings.is_development)

        yield

        logger.info("Shutting down...")
        if owned:
            await app.state.database.dispose()

    app = FastAPI(
        title="Bio Storefront API",
        description="Link-in-bio pages, components, analytics and sales",
        version=settings.version,
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
        lifespan=lifespan,
    )
    if database is not None:
        app.state.database = database

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.security.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestLoggingMiddleware)

    register_exception_handlers(app)

    app.include_router(health_router, prefix="/api/v1", tags=["Health"])
    app.include_router(public_router, prefix="/api/v1/public", tags=["Public"])
    app.include_router(pages_router, prefix="/api/v1/pages", tags=["Pages"])
    app.include_router(components_router, prefix="/api/v1/components", tags=["Components"])
    app.include_router(analytics_router, prefix="/api/v1/analytics", tags=["Analytics"])
    app.include_router(sales_router, prefix="/api/v1/sales", tags=["Sales"])

    @app.get("/api/v1/info")
    async def api_info():
        """API information endpoint."""
        return {
            "name": settings.app_name,
            "version": settings.version,
            "environment": settings.app_env,
            "documentation": "/docs",
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=get_settings().api_host, port=get_settings().api_port)

"""
SampleHub Backend - FastAPI Application

Multi-tenant catalog backend: user and admin accounts with cookie-delivered
JWT sessions, OTP login, and CRUD over samples, artists, categories and carts.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from samplehub.config import Settings, get_settings
from samplehub.core.error_handlers import register_exception_handlers
from samplehub.database.connections import close_connections, get_mongo_client
from samplehub.database.registry import bootstrap_super_admin, create_indexes, sync_registry
from samplehub.logging_config import install_request_logging, setup_logging
from samplehub.routers import admins, catalog, health, users
from samplehub.services.notifier import Notifier

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Startup:
    - Sync database registry
    - Create indexes
    - Create the bootstrap super admin when configured

    Shutdown:
    - Flush pending notifications
    - Close all database connections
    """
    settings: Settings = app.state.settings
    logger.info("Starting up %s backend (%s)", settings.app_name, settings.environment)

    try:
        client = await get_mongo_client()
        await sync_registry(client)
        await create_indexes(client)
        if await bootstrap_super_admin(client, settings):
            logger.info("Bootstrap super admin created")
        logger.info("Database registry synced and indexes created")
    except Exception as e:
        logger.warning("Database initialization warning: %s", e)

    yield

    logger.info("Shutting down %s backend", settings.app_name)
    await app.state.notifier.close()
    await close_connections()
    logger.info("Database connections closed")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application for the given settings."""
    settings = settings or get_settings()
    setup_logging(settings)

    app = FastAPI(
        title=f"{settings.app_name} API",
        description="""
## SampleHub API

### Authentication
Login returns the access token in the body and sets it, with the refresh
token, as HTTP-only cookies. Protected endpoints expect both:
```
Authorization: Bearer <access token>
Cookie: AccessToken=<access token>
```

Refresh the session with `GET /api/v1/{user|admin}/upgrade-access-token`.
        """,
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.notifier = Notifier(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    install_request_logging(app, settings)
    register_exception_handlers(app, settings)

    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(admins.router)
    for router in catalog.catalog_routers:
        app.include_router(router)

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint with API information."""
        return {
            "name": f"{settings.app_name} API",
            "version": "0.1.0",
            "docs": "/docs",
            "health": "/health",
        }

    return app


app = create_app()

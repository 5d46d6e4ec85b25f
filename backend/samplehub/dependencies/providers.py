"""
Providers for datastores, settings and services used by route handlers.

Settings come from the app that `create_app` built. Tests replace
`get_mongo`, `get_redis` and `get_notifier` through
`app.dependency_overrides`.
"""
from typing import Annotated, Callable

from fastapi import Depends, Request
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from redis.asyncio import Redis

from samplehub.config import Settings
from samplehub.core.tokens import TokenService
from samplehub.database.connections import get_mongo_client, get_redis_client
from samplehub.database.databases import auth_db, catalog_db
from samplehub.services.catalog_service import CatalogService, CatalogSpec
from samplehub.services.credential_store import AdminStore, UserStore
from samplehub.services.notifier import Notifier
from samplehub.services.principal_service import PrincipalService
from samplehub.services.session_service import SessionService
from samplehub.services.token_registry import RefreshTokenRegistry


def get_app_settings(request: Request) -> Settings:
    """The settings the application was created with."""
    return request.app.state.settings


async def get_mongo() -> AsyncIOMotorClient:
    return await get_mongo_client()


async def get_redis() -> Redis:
    return await get_redis_client()


def get_notifier(
    request: Request,
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> Notifier:
    """One notifier per application, created on first use."""
    notifier = getattr(request.app.state, "notifier", None)
    if notifier is None:
        notifier = Notifier(settings)
        request.app.state.notifier = notifier
    return notifier


AppSettings = Annotated[Settings, Depends(get_app_settings)]
RedisClient = Annotated[Redis, Depends(get_redis)]
AppNotifier = Annotated[Notifier, Depends(get_notifier)]


def get_auth_db(client: Annotated[AsyncIOMotorClient, Depends(get_mongo)]) -> AsyncIOMotorDatabase:
    return client[auth_db.DB_NAME]


def get_catalog_db(client: Annotated[AsyncIOMotorClient, Depends(get_mongo)]) -> AsyncIOMotorDatabase:
    return client[catalog_db.DB_NAME]


def get_token_service(settings: AppSettings) -> TokenService:
    return TokenService(settings)


def get_user_store(
    db: Annotated[AsyncIOMotorDatabase, Depends(get_auth_db)],
    settings: AppSettings,
) -> UserStore:
    return UserStore(db, settings)


def get_admin_store(
    db: Annotated[AsyncIOMotorDatabase, Depends(get_auth_db)],
    settings: AppSettings,
) -> AdminStore:
    return AdminStore(db, settings)


def get_user_sessions(
    store: Annotated[UserStore, Depends(get_user_store)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
    redis: RedisClient,
    notifier: AppNotifier,
    settings: AppSettings,
) -> SessionService:
    return SessionService(store, tokens, RefreshTokenRegistry(redis), notifier, settings)


def get_admin_sessions(
    store: Annotated[AdminStore, Depends(get_admin_store)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
    redis: RedisClient,
    notifier: AppNotifier,
    settings: AppSettings,
) -> SessionService:
    return SessionService(store, tokens, RefreshTokenRegistry(redis), notifier, settings)


def get_user_service(
    store: Annotated[UserStore, Depends(get_user_store)],
    notifier: AppNotifier,
    settings: AppSettings,
) -> PrincipalService:
    return PrincipalService(store, notifier, settings)


def get_admin_service(
    store: Annotated[AdminStore, Depends(get_admin_store)],
    notifier: AppNotifier,
    settings: AppSettings,
) -> PrincipalService:
    return PrincipalService(store, notifier, settings)


def catalog_service_provider(spec: CatalogSpec) -> Callable[..., CatalogService]:
    """Dependency building the CatalogService of one catalog collection."""

    def get_catalog_service(
        db: Annotated[AsyncIOMotorDatabase, Depends(get_catalog_db)],
        settings: AppSettings,
    ) -> CatalogService:
        return CatalogService(db, spec, settings)

    return get_catalog_service

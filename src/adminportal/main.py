from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi

from adminportal.identity.api.routes.auth import router as auth_router
from adminportal.identity.api.routes.client_users import router as client_users_router
from adminportal.identity.api.routes.clients import router as clients_router
from adminportal.identity.api.routes.external import router as external_router
from adminportal.identity.api.routes.users import router as users_router
from adminportal.identity.application.ports import ExternalIdentityProvider, SessionStore
from adminportal.identity.infrastructure.external_auth_client import HttpExternalIdentityProvider
from adminportal.identity.infrastructure.jwt_service import JWTSessionTokenService
from adminportal.identity.infrastructure.password_hasher import Pbkdf2PasswordHasher
from adminportal.identity.infrastructure.persistence import models  # noqa: F401  (registers tables)
from adminportal.identity.infrastructure.session_store import RedisSessionStore
from adminportal.shared.config import Settings, get_settings
from adminportal.shared.database.session import Database
from adminportal.shared.exceptions import register_exception_handlers
from adminportal.shared.health import router as health_router
from adminportal.shared.http.middleware.edge_auth_middleware import EdgeAuthMiddleware
from adminportal.shared.http.middleware.logging_middleware import LoggingMiddleware
from adminportal.shared.http.middleware.request_id_middleware import RequestIdMiddleware
from adminportal.shared.logging import configure_logging, get_logger

logger = get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    *,
    database: Optional[Database] = None,
    session_store: Optional[SessionStore] = None,
    external_identity_provider: Optional[ExternalIdentityProvider] = None,
    configure_logs: bool = True,
) -> FastAPI:
    """
    Build the API.

    Collaborators passed in are used as-is and left open on shutdown; missing
    ones are built from settings (database and session store during startup)
    and disposed on shutdown.
    """
    settings = settings or get_settings()
    if configure_logs:
        configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        owned_database = owned_store = None
        if getattr(app.state, "database", None) is None:
            owned_database = app.state.database = Database.from_settings(settings)
        if getattr(app.state, "session_store", None) is None and settings.redis_url:
            owned_store = app.state.session_store = RedisSessionStore.from_url(
                settings.redis_url, key_prefix=settings.legacy_session_key_prefix
            )
        if settings.database_auto_create:
            await app.state.database.create_all()
        logger.info("startup_complete", settings=settings.safe_dict())
        try:
            yield
        finally:
            if owned_store is not None:
                await owned_store.close()
            if owned_database is not None:
                await owned_database.dispose()

    app = FastAPI(
        title="Admin Portal API",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.database = database
    app.state.session_store = session_store
    app.state.token_service = JWTSessionTokenService(
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        expiry_days=settings.session_expiry_days,
    )
    app.state.password_hasher = Pbkdf2PasswordHasher()
    if external_identity_provider is None and settings.external_auth_url:
        external_identity_provider = HttpExternalIdentityProvider(
            login_url=settings.external_auth_url,
            timeout=float(settings.external_auth_timeout_seconds),
        )
    app.state.external_identity_provider = external_identity_provider

    # Last added runs first: request id → access log → edge gate → routes
    app.add_middleware(
        EdgeAuthMiddleware,
        session_cookie_name=settings.session_cookie_name,
        legacy_cookie_names=settings.legacy_session_cookie_names,
        verify_token=app.state.token_service.verify,
    )
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIdMiddleware)

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(clients_router)
    app.include_router(users_router)
    app.include_router(client_users_router)
    app.include_router(external_router)

    # Centralized error handling → {code, message, details?, correlation_id?}
    register_exception_handlers(app)

    # ---- Custom OpenAPI: session cookie + API key schemes ----
    def custom_openapi():
        if app.openapi_schema:
            return app.openapi_schema
        schema = get_openapi(title=app.title, version=app.version, routes=app.routes)
        schemes = schema.setdefault("components", {}).setdefault("securitySchemes", {})
        schemes["sessionCookie"] = {"type": "apiKey", "in": "cookie", "name": settings.session_cookie_name}
        schemes["externalApiKey"] = {"type": "apiKey", "in": "header", "name": settings.api_key_header}
        schema["security"] = [{"sessionCookie": []}]
        app.openapi_schema = schema
        return schema

    app.openapi = custom_openapi

    return app

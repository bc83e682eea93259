"""
Request dependencies.

Process-wide collaborators (settings, database handle, token service, session
store, password hasher) are created once by the app factory and read from
``app.state``; everything else is built per request from them.
"""
from __future__ import annotations

from typing import Annotated, Optional

from fastapi import Depends, Request

from adminportal.identity.application import role_authority
from adminportal.identity.application.api_key_gate import ExternalApiKeyGate
from adminportal.identity.application.assignment_service import EngineerAssignmentService
from adminportal.identity.application.auth_service import AuthService
from adminportal.identity.application.credential_resolver import (
    CredentialResolver,
    CredentialStrategy,
    LegacySessionStrategy,
    SignedTokenStrategy,
)
from adminportal.identity.application.deletion_orchestrator import CascadingDeletionOrchestrator
from adminportal.identity.application.directory_service import DirectoryService
from adminportal.identity.application.ports import (
    PasswordHasher,
    SessionStore,
    SessionTokenService,
    UnitOfWorkFactory,
)
from adminportal.identity.application.tenant_access_gate import TenantAccessGate
from adminportal.identity.application.user_lookup import UnitOfWorkUserReader
from adminportal.identity.domain.identity import Identity
from adminportal.identity.domain.roles import Role
from adminportal.identity.infrastructure.portal_unit_of_work import unit_of_work_factory
from adminportal.shared.config import Settings
from adminportal.shared.database.session import Database
from adminportal.shared.exceptions import UnauthenticatedError
from adminportal.shared.logging import bind_request_context


# ─── Process-wide state ───────────────────────────────────────────────────

def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_token_service(request: Request) -> SessionTokenService:
    return request.app.state.token_service


def get_session_store(request: Request) -> Optional[SessionStore]:
    return getattr(request.app.state, "session_store", None)


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


def get_uow_factory(database: Annotated[Database, Depends(get_database)]) -> UnitOfWorkFactory:
    return unit_of_work_factory(database.session_factory)


def get_user_reader(factory: Annotated[UnitOfWorkFactory, Depends(get_uow_factory)]) -> UnitOfWorkUserReader:
    """User lookups for identity resolution and gates; no transaction outlives a lookup."""
    return UnitOfWorkUserReader(factory)


# ─── Identity ─────────────────────────────────────────────────────────────

async def get_current_identity(
    request: Request,
    users: Annotated[UnitOfWorkUserReader, Depends(get_user_reader)],
    settings: Annotated[Settings, Depends(get_settings)],
    tokens: Annotated[SessionTokenService, Depends(get_token_service)],
    store: Annotated[Optional[SessionStore], Depends(get_session_store)],
) -> Optional[Identity]:
    """
    Resolve the caller, or None. Never raises for a bad credential; the
    route's role check turns None into 401.
    """
    strategies: list[CredentialStrategy] = [
        SignedTokenStrategy(tokens, users, cookie_name=settings.session_cookie_name),
    ]
    if store is not None:
        strategies.append(LegacySessionStrategy(store, cookie_names=settings.legacy_session_cookie_names))

    identity = await CredentialResolver(strategies).resolve(request)
    if identity is not None:
        bind_request_context(user_id=identity.id, role=identity.role.value, tenant_id=identity.tenant_id)
    return identity


async def require_identity(
    identity: Annotated[Optional[Identity], Depends(get_current_identity)],
) -> Identity:
    if identity is None:
        raise UnauthenticatedError()
    return identity


def require_roles(*allowed_roles: Role):
    """
    Dependency factory enforcing an explicit allow set.

    Usage:
        @router.get("/x")
        async def handler(identity: Identity = Depends(require_roles(Role.ADMIN))): ...
    """
    allowed = frozenset(allowed_roles)

    async def check_roles(
        identity: Annotated[Optional[Identity], Depends(get_current_identity)],
    ) -> Identity:
        return role_authority.require_roles(identity, allowed)

    return check_roles


# ─── Gates & services ─────────────────────────────────────────────────────

def get_tenant_access_gate(users: Annotated[UnitOfWorkUserReader, Depends(get_user_reader)]) -> TenantAccessGate:
    return TenantAccessGate(users)


def get_api_key_gate(settings: Annotated[Settings, Depends(get_settings)]) -> ExternalApiKeyGate:
    return ExternalApiKeyGate(
        settings.api_key,
        header_name=settings.api_key_header,
        query_param=settings.api_key_query_param,
        allow_query_param=settings.api_key_query_param_enabled,
    )


def get_directory_service(
    factory: Annotated[UnitOfWorkFactory, Depends(get_uow_factory)],
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
) -> DirectoryService:
    return DirectoryService(factory, hasher=hasher)


def get_assignment_service(
    factory: Annotated[UnitOfWorkFactory, Depends(get_uow_factory)],
) -> EngineerAssignmentService:
    return EngineerAssignmentService(factory)


def get_deletion_orchestrator(
    factory: Annotated[UnitOfWorkFactory, Depends(get_uow_factory)],
) -> CascadingDeletionOrchestrator:
    return CascadingDeletionOrchestrator(factory)


def get_auth_service(
    request: Request,
    factory: Annotated[UnitOfWorkFactory, Depends(get_uow_factory)],
    settings: Annotated[Settings, Depends(get_settings)],
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
    tokens: Annotated[SessionTokenService, Depends(get_token_service)],
) -> AuthService:
    return AuthService(
        factory,
        hasher=hasher,
        tokens=tokens,
        external_provider=getattr(request.app.state, "external_identity_provider", None),
        provisioning_tenant_id=settings.external_auth_default_tenant_id,
    )

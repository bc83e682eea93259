"""
Credential Resolver

Turns the raw request into an Identity by trying each credential strategy in
priority order. A strategy that cannot resolve (no cookie, bad signature,
expired token, unknown or stale session) returns None and the next one is
tried; nothing here raises for a bad credential.
"""
from __future__ import annotations

from typing import Any, Dict, Optional, Protocol, Sequence

from jwt.exceptions import InvalidTokenError
from starlette.requests import Request

from adminportal.identity.application.ports import SessionStore, SessionStoreError, SessionTokenService
from adminportal.identity.domain.entities.user import ClientUserProfile
from adminportal.identity.domain.identity import Identity
from adminportal.identity.domain.repositories import UserReader
from adminportal.identity.domain.roles import Role, parse_role
from adminportal.shared.logging import get_logger

logger = get_logger(__name__)


class CredentialStrategy(Protocol):
    name: str

    async def resolve(self, request: Request) -> Optional[Identity]: ...


class SignedTokenStrategy:
    """Primary channel: signed session token in the HTTP-only session cookie."""

    name = "signed_token"

    def __init__(self, tokens: SessionTokenService, users: UserReader, *, cookie_name: str) -> None:
        self._tokens = tokens
        self._users = users
        self._cookie_name = cookie_name

    async def resolve(self, request: Request) -> Optional[Identity]:
        token = request.cookies.get(self._cookie_name)
        if not token:
            return None
        try:
            claims = self._tokens.verify(token)
        except InvalidTokenError as exc:
            logger.debug("session_token_rejected", error_type=exc.__class__.__name__)
            return None

        user_id = claims.get("userId") or claims.get("sub")
        role = parse_role(claims.get("role"))
        if not user_id or role is None:
            logger.debug("session_token_claims_incomplete")
            return None

        if role is not Role.CLIENT_USER:
            return Identity(id=str(user_id), role=role, email=claims.get("email"))

        # tenant linkage is never taken from the token
        user = await self._users.get(str(user_id))
        if user is None or not isinstance(user.profile, ClientUserProfile):
            logger.info("session_token_user_stale", user_id=str(user_id))
            return None
        return Identity(
            id=user.id,
            role=Role.CLIENT_USER,
            email=user.email,
            tenant_id=user.profile.tenant_id,
        )


def identity_from_projection(projection: Dict[str, Any]) -> Optional[Identity]:
    """Identity from a stored session user projection; None when malformed."""
    role = parse_role(projection.get("role"))
    user_id = projection.get("id")
    if role is None or not user_id:
        return None
    try:
        return Identity(
            id=str(user_id),
            role=role,
            email=projection.get("email"),
            tenant_id=projection.get("tenant_id") if role is Role.CLIENT_USER else None,
        )
    except ValueError:
        return None


class LegacySessionStrategy:
    """Secondary channel: opaque session cookie looked up in the session store."""

    name = "legacy_session"

    def __init__(self, store: SessionStore, *, cookie_names: Sequence[str]) -> None:
        self._store = store
        self._cookie_names = tuple(cookie_names)

    def _session_token(self, request: Request) -> Optional[str]:
        for name in self._cookie_names:
            value = request.cookies.get(name)
            if value:
                return value
        return None

    async def resolve(self, request: Request) -> Optional[Identity]:
        session_token = self._session_token(request)
        if session_token is None:
            return None
        try:
            projection = await self._store.get(session_token)
        except SessionStoreError as exc:
            logger.warning("legacy_session_store_unavailable", error=str(exc))
            return None
        if projection is None:
            logger.debug("legacy_session_unknown")
            return None

        identity = identity_from_projection(projection)
        if identity is None:
            logger.warning("legacy_session_projection_malformed")
        return identity


class CredentialResolver:
    def __init__(self, strategies: Sequence[CredentialStrategy]) -> None:
        self._strategies = tuple(strategies)

    async def resolve(self, request: Request) -> Optional[Identity]:
        for strategy in self._strategies:
            identity = await strategy.resolve(request)
            if identity is not None:
                logger.debug("identity_resolved", strategy=strategy.name, user_id=identity.id, role=identity.role.value)
                return identity
        return None

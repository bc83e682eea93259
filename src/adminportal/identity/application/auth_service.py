"""
Login and current-user lookup.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from adminportal.identity.application.ports import (
    ExternalIdentityProvider,
    PasswordHasher,
    SessionTokenService,
    UnitOfWork,
    UnitOfWorkFactory,
)
from adminportal.identity.domain.entities.user import ClientUserProfile, User, normalize_email
from adminportal.identity.domain.identity import Identity
from adminportal.shared.exceptions import InvalidCredentialsError, UnauthenticatedError
from adminportal.shared.logging import get_logger, log_security_event

logger = get_logger(__name__)


@dataclass(frozen=True)
class LoginResult:
    user: User
    token: str


class AuthService:
    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        *,
        hasher: PasswordHasher,
        tokens: SessionTokenService,
        external_provider: Optional[ExternalIdentityProvider] = None,
        provisioning_tenant_id: Optional[str] = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._hasher = hasher
        self._tokens = tokens
        self._external = external_provider
        self._provisioning_tenant_id = provisioning_tenant_id

    async def login(self, email: str, password: str) -> LoginResult:
        """
        Authenticate with local password material when the account has it,
        otherwise against the external identity provider.

        Raises:
            InvalidCredentialsError: Unknown account, wrong password, provider
                rejection, or an external login that cannot be provisioned
        """
        email = normalize_email(email)
        async with self._uow_factory() as uow:
            user = await uow.users.get_by_email(email)
            if user is not None and user.password is not None:
                authenticated = self._hasher.verify(password, user.password)
            elif self._external is not None:
                authenticated = await self._external.authenticate(email, password)
                if authenticated and user is None:
                    user = await self._provision(uow, email)
            else:
                authenticated = False

            if not authenticated or user is None:
                log_security_event("login_failed", details={"email": email})
                raise InvalidCredentialsError()
            await uow.commit()

        log_security_event("login_succeeded", user_id=user.id, tenant_id=user.tenant_id)
        return LoginResult(user=user, token=self._tokens.issue(user))

    async def _provision(self, uow: UnitOfWork, email: str) -> Optional[User]:
        """First external login: create a client user in the provisioning tenant, if one is configured."""
        tenant_id = self._provisioning_tenant_id
        if not tenant_id or await uow.tenants.get(tenant_id) is None:
            logger.warning("external_login_not_provisioned", tenant_configured=bool(tenant_id))
            return None
        user = User(
            id=User.new_id(),
            name=email.split("@", 1)[0],
            email=email,
            profile=ClientUserProfile(tenant_id=tenant_id),
        )
        await uow.users.add(user)
        log_security_event("user_provisioned", user_id=user.id, tenant_id=tenant_id)
        return user

    async def current_user(self, identity: Optional[Identity]) -> User:
        if identity is None:
            raise UnauthenticatedError()
        async with self._uow_factory() as uow:
            user = await uow.users.get(identity.id)
        if user is None:
            raise UnauthenticatedError()
        return user

# src/adminportal/identity/domain/entities/user.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import ClassVar, Optional, Tuple, Union
from uuid import uuid4

from adminportal.identity.domain.identity import Identity
from adminportal.identity.domain.roles import Role


def normalize_email(email: str) -> str:
    return email.strip().lower()


@dataclass(frozen=True)
class PasswordMaterial:
    """Locally stored credential: hex PBKDF2 digest plus its hex salt."""
    hash: str
    salt: str


# ─── Role-specific payloads ────────────────────────────────────────────────

@dataclass(frozen=True)
class AdminProfile:
    role: ClassVar[Role] = Role.ADMIN


@dataclass(frozen=True)
class SolutionsEngineerProfile:
    role: ClassVar[Role] = Role.SOLUTIONS_ENGINEER
    # Tenants this engineer is assigned to (mirror of each tenant's engineer list)
    assigned_tenant_ids: Tuple[str, ...] = ()

    def is_assigned_to(self, tenant_id: str) -> bool:
        return tenant_id in self.assigned_tenant_ids


@dataclass(frozen=True)
class ClientUserProfile:
    role: ClassVar[Role] = Role.CLIENT_USER
    tenant_id: str
    is_org_admin: bool = False
    has_billing_access: bool = False

    def __post_init__(self) -> None:
        if not self.tenant_id:
            raise ValueError("Client user profile requires tenant_id")


UserProfile = Union[AdminProfile, SolutionsEngineerProfile, ClientUserProfile]


@dataclass(frozen=True)
class User:
    """
    A persisted account: common envelope plus a role-tagged profile.

    The role is the profile's role; role-specific fields are only reachable
    through the matching profile type. ``password`` is None for accounts that
    authenticate against the external identity provider.
    """
    id: str
    name: str
    email: str
    profile: UserProfile
    password: Optional[PasswordMaterial] = None
    phone: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if not self.email or "@" not in self.email:
            raise ValueError("User email must be a valid address")
        object.__setattr__(self, "email", normalize_email(self.email))
        if not self.name or not self.name.strip():
            raise ValueError("User name cannot be empty")

    @staticmethod
    def new_id() -> str:
        return str(uuid4())

    @property
    def role(self) -> Role:
        return self.profile.role

    @property
    def tenant_id(self) -> Optional[str]:
        return self.profile.tenant_id if isinstance(self.profile, ClientUserProfile) else None

    def to_identity(self) -> Identity:
        return Identity(id=self.id, role=self.role, email=self.email, tenant_id=self.tenant_id)

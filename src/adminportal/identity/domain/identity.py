# src/adminportal/identity/domain/identity.py

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from adminportal.identity.domain.roles import Role


@dataclass(frozen=True)
class Identity:
    """
    The resolved caller for one request.

    Never persisted; rebuilt from a credential on every request.
    ``tenant_id`` is set if and only if the role is CLIENT_USER.
    """
    id: str
    role: Role
    email: Optional[str] = None
    tenant_id: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Identity id cannot be empty")
        if not isinstance(self.role, Role):
            raise ValueError(f"Unknown role: {self.role!r}")
        if self.role is Role.CLIENT_USER and not self.tenant_id:
            raise ValueError("CLIENT_USER identity requires tenant_id")
        if self.role is not Role.CLIENT_USER and self.tenant_id is not None:
            raise ValueError(f"{self.role.value} identity cannot carry tenant_id")


class DenialReason(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"


@dataclass(frozen=True)
class PermissionDecision:
    allowed: bool
    reason: Optional[DenialReason] = None

    @classmethod
    def allow(cls) -> PermissionDecision:
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: DenialReason) -> PermissionDecision:
        return cls(allowed=False, reason=reason)

    def __bool__(self) -> bool:
        return self.allowed

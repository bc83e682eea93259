"""
Role Authority

Pure allow/deny decisions from a resolved identity and an explicit set of
allowed roles. Every protected operation passes its own allow set; there is
no role inheritance.
"""
from __future__ import annotations

from typing import AbstractSet, Optional

from adminportal.identity.domain.identity import DenialReason, Identity, PermissionDecision
from adminportal.identity.domain.roles import Role, describe_roles
from adminportal.shared.exceptions import ForbiddenError, UnauthenticatedError
from adminportal.shared.logging import get_logger

logger = get_logger(__name__)


def is_allowed(identity: Optional[Identity], allowed_roles: AbstractSet[Role]) -> bool:
    """
    Args:
        identity: Resolved caller, or None when no credential resolved
        allowed_roles: Roles the operation accepts

    Returns:
        True iff an identity is present and its role is in ``allowed_roles``
    """
    return identity is not None and identity.role in allowed_roles


def authorize(identity: Optional[Identity], allowed_roles: AbstractSet[Role]) -> PermissionDecision:
    if identity is None:
        return PermissionDecision.deny(DenialReason.UNAUTHENTICATED)
    if identity.role not in allowed_roles:
        return PermissionDecision.deny(DenialReason.FORBIDDEN)
    return PermissionDecision.allow()


def forbidden_message(allowed_roles: AbstractSet[Role]) -> str:
    return f"Forbidden: {describe_roles(allowed_roles)} access required"


def require_roles(identity: Optional[Identity], allowed_roles: AbstractSet[Role]) -> Identity:
    """
    Raise unless the identity's role is allowed.

    Returns:
        The identity, now known to be present and allowed

    Raises:
        UnauthenticatedError: No identity (401)
        ForbiddenError: Identity present, role not in ``allowed_roles`` (403)
    """
    decision = authorize(identity, allowed_roles)
    if decision.allowed:
        return identity  # type: ignore[return-value]
    if decision.reason is DenialReason.UNAUTHENTICATED:
        raise UnauthenticatedError()

    logger.info(
        "role_denied",
        user_id=identity.id if identity else None,
        role=identity.role.value if identity else None,
        required_roles=sorted(r.value for r in allowed_roles),
    )
    raise ForbiddenError(
        forbidden_message(allowed_roles),
        details={"required_roles": sorted(r.value for r in allowed_roles)},
    )

import itertools

import pytest

from adminportal.identity.application import role_authority
from adminportal.identity.domain.identity import DenialReason, Identity
from adminportal.identity.domain.roles import ADMIN_ONLY, STAFF, Role, describe_roles
from adminportal.shared.exceptions import ForbiddenError, UnauthenticatedError


def _identity(role: Role) -> Identity:
    return Identity(id="u-1", role=role, tenant_id="t-1" if role is Role.CLIENT_USER else None)


ALLOW_SETS = [
    frozenset(combo)
    for size in range(len(Role) + 1)
    for combo in itertools.combinations(Role, size)
]


@pytest.mark.parametrize("allowed", ALLOW_SETS)
@pytest.mark.parametrize("role", list(Role))
def test_is_allowed_truth_table(role, allowed):
    assert role_authority.is_allowed(_identity(role), allowed) is (role in allowed)


@pytest.mark.parametrize("allowed", ALLOW_SETS)
def test_no_identity_is_never_allowed(allowed):
    assert role_authority.is_allowed(None, allowed) is False


def test_no_role_inheritance():
    # ADMIN does not imply SOLUTIONS_ENGINEER access
    assert role_authority.is_allowed(_identity(Role.ADMIN), frozenset({Role.SOLUTIONS_ENGINEER})) is False
    assert role_authority.is_allowed(_identity(Role.SOLUTIONS_ENGINEER), frozenset({Role.CLIENT_USER})) is False


def test_authorize_reasons():
    assert role_authority.authorize(None, STAFF).reason is DenialReason.UNAUTHENTICATED
    denied = role_authority.authorize(_identity(Role.CLIENT_USER), STAFF)
    assert not denied
    assert denied.reason is DenialReason.FORBIDDEN
    assert role_authority.authorize(_identity(Role.ADMIN), STAFF)


def test_require_roles_raises_401_without_identity():
    with pytest.raises(UnauthenticatedError) as exc:
        role_authority.require_roles(None, ADMIN_ONLY)
    assert exc.value.status_code == 401
    assert exc.value.message == "Not authenticated"


def test_require_roles_raises_403_naming_required_roles():
    with pytest.raises(ForbiddenError) as exc:
        role_authority.require_roles(_identity(Role.SOLUTIONS_ENGINEER), ADMIN_ONLY)
    assert exc.value.status_code == 403
    assert exc.value.message == "Forbidden: Admin access required"
    assert exc.value.details == {"required_roles": ["ADMIN"]}


def test_require_roles_returns_identity():
    identity = _identity(Role.ADMIN)
    assert role_authority.require_roles(identity, STAFF) is identity


def test_describe_roles_uses_declaration_order():
    assert describe_roles({Role.SOLUTIONS_ENGINEER, Role.ADMIN}) == "Admin or Solutions Engineer"
    assert role_authority.forbidden_message(STAFF) == "Forbidden: Admin or Solutions Engineer access required"

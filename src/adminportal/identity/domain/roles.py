# src/adminportal/identity/domain/roles.py

from enum import Enum
from typing import FrozenSet, Iterable, Optional


class Role(str, Enum):
    """
    Platform roles.

    There is no hierarchy between them: every protected operation names its
    own explicit set of allowed roles, and ADMIN is not implied to include
    SOLUTIONS_ENGINEER (nor SOLUTIONS_ENGINEER to include CLIENT_USER).
    """
    ADMIN = "ADMIN"
    SOLUTIONS_ENGINEER = "SOLUTIONS_ENGINEER"
    CLIENT_USER = "CLIENT_USER"

    @property
    def label(self) -> str:
        return _ROLE_LABELS[self]


_ROLE_LABELS = {
    Role.ADMIN: "Admin",
    Role.SOLUTIONS_ENGINEER: "Solutions Engineer",
    Role.CLIENT_USER: "Client User",
}

# Route-level allow sets
ADMIN_ONLY: FrozenSet[Role] = frozenset({Role.ADMIN})
STAFF: FrozenSet[Role] = frozenset({Role.ADMIN, Role.SOLUTIONS_ENGINEER})


def parse_role(value: object) -> Optional[Role]:
    """Role from a raw claim/column value, or None when it is not a known role."""
    try:
        return Role(value)
    except ValueError:
        return None


def describe_roles(roles: Iterable[Role]) -> str:
    """'Admin or Solutions Engineer' style description, in enum order."""
    wanted = set(roles)
    return " or ".join(role.label for role in Role if role in wanted)

"""
Role assignment: which users hold which role tier over which organization node.

Roles are additive. A user with a department role on one department and a unit
role on a unit elsewhere is authorized for both scopes independently.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from .errors import HierarchyError
from .hierarchy import NodeType, OrganizationTree


class RoleType(str, Enum):
    ADMIN = "admin"
    DIVISION = "division"
    DEPARTMENT = "department"
    UNIT = "unit"

    @property
    def rank(self) -> int:
        """Authority ranking: admin > division > department > unit."""
        return _RANKS[self]

    @property
    def scope_type(self) -> NodeType | None:
        return _SCOPE_TYPES[self]

    def at_least(self, other: RoleType) -> bool:
        return self.rank >= other.rank


_RANKS = {
    RoleType.ADMIN: 3,
    RoleType.DIVISION: 2,
    RoleType.DEPARTMENT: 1,
    RoleType.UNIT: 0,
}

_SCOPE_TYPES: dict[RoleType, NodeType | None] = {
    RoleType.ADMIN: None,
    RoleType.DIVISION: NodeType.DIVISION,
    RoleType.DEPARTMENT: NodeType.DEPARTMENT,
    RoleType.UNIT: NodeType.UNIT,
}


@dataclass(frozen=True)
class Role:
    user_id: int
    role_type: RoleType
    scope_id: int | None = None

    @property
    def is_admin(self) -> bool:
        return self.role_type is RoleType.ADMIN


@dataclass(frozen=True)
class Principal:
    """The acting user as the kernel sees it: an id plus its full role set."""

    user_id: int
    roles: frozenset[Role] = field(default_factory=frozenset)
    name: str | None = None

    @property
    def is_admin(self) -> bool:
        return any(role.is_admin for role in self.roles)


def validate_role(role: Role, tree: OrganizationTree) -> None:
    """Ensure the role's scope node exists and has the type its tier requires."""

    expected = role.role_type.scope_type
    if expected is None:
        if role.scope_id is not None:
            raise HierarchyError(f"{role.role_type.value} role for user {role.user_id} cannot have a scope")
        return
    if role.scope_id is None:
        raise HierarchyError(f"{role.role_type.value} role for user {role.user_id} requires a {expected.value}")
    node = tree.get(role.scope_id)
    if node.node_type is not expected:
        raise HierarchyError(
            f"{role.role_type.value} role for user {role.user_id} must be scoped to a "
            f"{expected.value}, not {node.node_type.value} {node.code!r}"
        )


class RoleAssignments:
    """Validated index of roles by user."""

    def __init__(self, roles: Iterable[Role], tree: OrganizationTree) -> None:
        by_user: dict[int, set[Role]] = {}
        for role in roles:
            validate_role(role, tree)
            by_user.setdefault(role.user_id, set()).add(role)
        self._by_user = {user_id: frozenset(rs) for user_id, rs in by_user.items()}

    def roles_for(self, user_id: int) -> frozenset[Role]:
        return self._by_user.get(user_id, frozenset())

    def principal(self, user_id: int, name: str | None = None) -> Principal:
        return Principal(user_id=user_id, roles=self.roles_for(user_id), name=name)

"""
Scope resolution: which departments, units and requests a user can see.

Visibility ignores cutoffs. Form options (the departments/units an edit or
create form offers) only use roles that can still write, and always keep the
record's current department and unit selectable.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from typing import Callable, Iterable

from .cutoffs import CutoffRules
from .hierarchy import NodeType, OrganizationNode, OrganizationTree
from .records import RequestRecord
from .roles import Principal, Role, RoleType


@dataclass(frozen=True)
class ListingScope:
    """
    Listing filter for requests, applied in SQL by ``db/filters.py``.

    A request is listed when its department is granted whole, or when its unit
    is granted on its own.
    """

    unrestricted: bool = False
    department_ids: frozenset[int] = frozenset()
    unit_ids: frozenset[int] = frozenset()


@dataclass(frozen=True)
class Option:
    id: int | None
    code: str
    name: str


NO_UNIT = Option(id=None, code="", name="<Clear Unit>")


def _options(nodes: Iterable[OrganizationNode]) -> list[Option]:
    ordered = sorted(nodes, key=lambda n: (n.name.lower(), n.code))
    return [Option(id=n.id, code=n.code, name=n.name) for n in ordered]


class ScopeResolver:
    def __init__(
        self,
        tree: OrganizationTree,
        cutoffs: CutoffRules,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._tree = tree
        self._cutoffs = cutoffs
        self._today = today

    def _grants(self, roles: Iterable[Role]) -> tuple[set[OrganizationNode], set[OrganizationNode]]:
        """Split roles into whole departments and individually granted units."""

        departments: set[OrganizationNode] = set()
        units: set[OrganizationNode] = set()
        for role in roles:
            if role.scope_id is None:
                continue
            node = self._tree.get(role.scope_id)
            if role.role_type is RoleType.DIVISION:
                departments.update(self._tree.departments_under(node))
            elif role.role_type is RoleType.DEPARTMENT:
                departments.add(node)
            elif role.role_type is RoleType.UNIT:
                units.add(node)
        return departments, units

    def visible_departments(self, user: Principal, current: RequestRecord | None = None) -> frozenset[OrganizationNode]:
        if user.is_admin:
            result = set(self._tree.nodes_of_type(NodeType.DEPARTMENT))
        else:
            departments, units = self._grants(user.roles)
            result = departments | {self._tree.get(u.parent_id) for u in units}
        if current is not None:
            result.add(self._tree.get(current.department_id))
        return frozenset(result)

    def visible_units(
        self,
        user: Principal,
        department: OrganizationNode,
        current: RequestRecord | None = None,
    ) -> frozenset[OrganizationNode]:
        department = self._tree.get(department.id)
        departments, units = self._grants(user.roles)
        if user.is_admin or department in departments:
            result = set(self._tree.children_of(department))
        else:
            result = {u for u in units if u.parent_id == department.id}

        if current is not None and current.unit_id is not None:
            unit = self._tree.get(current.unit_id)
            if unit.parent_id == department.id:
                result.add(unit)
        return frozenset(result)

    def listing_scope(self, user: Principal) -> ListingScope:
        if user.is_admin:
            return ListingScope(unrestricted=True)
        departments, units = self._grants(user.roles)
        return ListingScope(
            department_ids=frozenset(d.id for d in departments),
            unit_ids=frozenset(u.id for u in units),
        )

    # ---- Form population --------------------------------------------------------------

    def _writable(self, user: Principal, as_of: date | None) -> Principal:
        as_of = as_of or self._today()
        roles = frozenset(
            r
            for r in user.roles
            if r.scope_id is None or not self._cutoffs.is_cutoff(r.role_type, self._tree.get(r.scope_id), as_of)
        )
        return replace(user, roles=roles)

    def department_options(
        self,
        user: Principal,
        current: RequestRecord | None = None,
        as_of: date | None = None,
    ) -> list[Option]:
        return _options(self.visible_departments(self._writable(user, as_of), current))

    def unit_options(
        self,
        user: Principal,
        department: OrganizationNode,
        current: RequestRecord | None = None,
        as_of: date | None = None,
    ) -> list[Option]:
        units = self.visible_units(self._writable(user, as_of), department, current)
        return [NO_UNIT, *_options(units)]

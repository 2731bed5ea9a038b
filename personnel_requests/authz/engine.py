"""
Authorization engine for personnel requests.

Answers two questions for a (user, request record) pair:

    can(user, action, record)?      -> bool
    editable_fields(user, record)   -> frozenset of field names

Decision outline:
1. Admins may do anything to any record; cutoffs do not apply to them.
2. Every other role must *qualify* for the record: its scope is the record's
   unit, the record's department, or the division above that department.
3. Viewing needs any qualifying role. Writing needs a qualifying role that is
   not cut off for its own (role type, scope node).
4. Review fields are writable only through a department-tier (or higher)
   role that is able to write.

The engine is pure: it reads the tree and cutoff table it was built with and
never mutates them or its arguments.
"""

from __future__ import annotations

from datetime import date
from enum import Enum
import logging
from typing import Any, Callable, Iterable, Mapping

from .cutoffs import CutoffRules
from .errors import MalformedRecord
from .hierarchy import NodeType, OrganizationNode, OrganizationTree
from .policy import policy_for
from .records import RequestRecord, RequestVariant
from .roles import Principal, Role, RoleType

logger = logging.getLogger(__name__)


class Action(str, Enum):
    VIEW = "view"
    LIST = "list"
    CREATE = "create"
    EDIT = "edit"
    DESTROY = "destroy"


_READ_ACTIONS = frozenset({Action.VIEW, Action.LIST})


def _ordered(roles: Iterable[Role]) -> tuple[Role, ...]:
    return tuple(sorted(roles, key=lambda r: (-r.role_type.rank, r.scope_id or 0)))


class AuthorizationEngine:
    def __init__(
        self,
        tree: OrganizationTree,
        cutoffs: CutoffRules,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._tree = tree
        self._cutoffs = cutoffs
        self._today = today

    @property
    def tree(self) -> OrganizationTree:
        return self._tree

    # ---- Record path ------------------------------------------------------------------

    def check_record(self, record: RequestRecord) -> tuple[OrganizationNode, OrganizationNode | None]:
        """Resolve the record's department and unit, failing fast on inconsistent references."""

        department = self._tree.get(record.department_id)
        if department.node_type is not NodeType.DEPARTMENT:
            raise MalformedRecord(
                f"request {record.id} references {department.node_type.value} "
                f"{department.code!r} as its department"
            )
        if record.unit_id is None:
            return department, None

        unit = self._tree.get(record.unit_id)
        if unit.node_type is not NodeType.UNIT:
            raise MalformedRecord(f"request {record.id} references {unit.node_type.value} {unit.code!r} as its unit")
        if unit.parent_id != department.id:
            raise MalformedRecord(
                f"request {record.id} unit {unit.code!r} does not belong to department {department.code!r}"
            )
        return department, unit

    # ---- Role selection ---------------------------------------------------------------

    def qualifying_roles(self, user: Principal, record: RequestRecord) -> tuple[Role, ...]:
        """Non-admin roles whose scope covers the record's organizational path."""

        department, unit = self.check_record(record)
        division = self._tree.division_of(department)

        matched: list[Role] = []
        for role in user.roles:
            if role.role_type is RoleType.DIVISION and role.scope_id == division.id:
                matched.append(role)
            elif role.role_type is RoleType.DEPARTMENT and role.scope_id == department.id:
                matched.append(role)
            elif role.role_type is RoleType.UNIT and unit is not None and role.scope_id == unit.id:
                matched.append(role)
        return _ordered(matched)

    def is_cut_off(self, role: Role, as_of: date | None = None) -> bool:
        if role.is_admin or role.scope_id is None:
            return False
        as_of = as_of or self._today()
        return self._cutoffs.is_cutoff(role.role_type, self._tree.get(role.scope_id), as_of)

    def writable_roles(self, user: Principal, record: RequestRecord, as_of: date | None = None) -> tuple[Role, ...]:
        as_of = as_of or self._today()
        return tuple(r for r in self.qualifying_roles(user, record) if not self.is_cut_off(r, as_of))

    # ---- Main decision API ------------------------------------------------------------

    def can(
        self,
        user: Principal,
        action: Action | str,
        record: RequestRecord | None = None,
        as_of: date | None = None,
    ) -> bool:
        """
        Decide whether ``user`` may perform ``action`` on ``record``.

        Without a record, ``create`` asks whether the user may open a new
        request at all and ``list`` whether the index is reachable.
        """

        action = Action(action)
        as_of = as_of or self._today()

        if record is not None:
            self.check_record(record)

        if user.is_admin:
            logger.debug("Authz: admin allowed user=%s action=%s request=%s", user.user_id, action.value, _rid(record))
            return True

        if record is None:
            if action is Action.CREATE:
                return any(not self.is_cut_off(r, as_of) for r in user.roles)
            if action is Action.LIST:
                return bool(user.roles)
            return False

        qualifying = self.qualifying_roles(user, record)
        if not qualifying:
            logger.debug(
                "Authz: denied, no qualifying role user=%s action=%s request=%s",
                user.user_id,
                action.value,
                _rid(record),
            )
            return False

        if action in _READ_ACTIONS:
            return True

        if record.archived:
            logger.debug("Authz: denied, archived record user=%s action=%s request=%s", user.user_id, action.value, _rid(record))
            return False

        if any(not self.is_cut_off(r, as_of) for r in qualifying):
            return True

        logger.debug(
            "Authz: denied, all qualifying roles cut off user=%s action=%s request=%s roles=%s",
            user.user_id,
            action.value,
            _rid(record),
            [(r.role_type.value, r.scope_id) for r in qualifying],
        )
        return False

    def editable_fields(self, user: Principal, record: RequestRecord, as_of: date | None = None) -> frozenset[str]:
        rules = policy_for(record.variant)
        self.check_record(record)

        if user.is_admin:
            return rules.all_fields
        if record.archived:
            return frozenset()

        writable = self.writable_roles(user, record, as_of)
        if not writable:
            return frozenset()
        if any(r.role_type.at_least(RoleType.DEPARTMENT) for r in writable):
            return rules.all_fields
        return rules.substantive_fields

    def creatable_fields(
        self,
        user: Principal,
        variant: RequestVariant,
        as_of: date | None = None,
    ) -> frozenset[str]:
        """Fields a new-request form offers before its department and unit are known."""

        rules = policy_for(variant)
        if user.is_admin:
            return rules.all_fields

        writable = [r for r in user.roles if not self.is_cut_off(r, as_of)]
        if not writable:
            return frozenset()
        if any(r.role_type.at_least(RoleType.DEPARTMENT) for r in writable):
            return rules.all_fields
        return rules.substantive_fields

    def permitted_changes(
        self,
        user: Principal,
        record: RequestRecord,
        submitted: Mapping[str, Any],
        as_of: date | None = None,
    ) -> dict[str, Any]:
        """
        Keep only the submitted values ``user`` may write.

        Everything else is dropped without error so previously persisted values
        stay in place.
        """

        allowed = self.editable_fields(user, record, as_of)
        permitted = {name: value for name, value in submitted.items() if name in allowed}
        ignored = sorted(set(submitted) - allowed)
        if ignored:
            logger.debug(
                "Authz: ignoring fields outside permission user=%s request=%s fields=%s",
                user.user_id,
                _rid(record),
                ignored,
            )
        return permitted


def _rid(record: RequestRecord | None) -> object:
    if record is None:
        return None
    return record.id if record.id is not None else "new"

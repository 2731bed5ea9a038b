"""Tests for role tiers and role assignment validation."""
from __future__ import annotations

import pytest

from personnel_requests.authz import HierarchyError, NotFound, Role, RoleAssignments, RoleType
from personnel_requests.authz.roles import validate_role


def test_rank_ordering():
    assert RoleType.ADMIN.at_least(RoleType.DIVISION)
    assert RoleType.DIVISION.at_least(RoleType.DEPARTMENT)
    assert RoleType.DEPARTMENT.at_least(RoleType.DEPARTMENT)
    assert not RoleType.UNIT.at_least(RoleType.DEPARTMENT)


def test_roles_are_additive_per_user(tree):
    assignments = RoleAssignments(
        [
            Role(1, RoleType.DEPARTMENT, 10),
            Role(1, RoleType.UNIT, 200),
            Role(2, RoleType.ADMIN),
        ],
        tree,
    )

    principal = assignments.principal(1, name="Pat")
    assert principal.name == "Pat"
    assert {(r.role_type, r.scope_id) for r in principal.roles} == {
        (RoleType.DEPARTMENT, 10),
        (RoleType.UNIT, 200),
    }
    assert not principal.is_admin
    assert assignments.principal(2).is_admin
    assert assignments.roles_for(3) == frozenset()


def test_role_scope_must_match_its_tier(tree):
    with pytest.raises(HierarchyError):
        validate_role(Role(1, RoleType.UNIT, 10), tree)
    with pytest.raises(HierarchyError):
        validate_role(Role(1, RoleType.DIVISION, None), tree)
    with pytest.raises(HierarchyError):
        validate_role(Role(1, RoleType.ADMIN, 1), tree)


def test_role_scope_must_exist(tree):
    with pytest.raises(NotFound):
        validate_role(Role(1, RoleType.DEPARTMENT, 999), tree)

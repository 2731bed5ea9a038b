"""Tests for visibility, listing scope and form options."""
from __future__ import annotations

from datetime import date, timedelta

from personnel_requests.authz import (
    NO_UNIT,
    ListingScope,
    Principal,
    RequestRecord,
    RequestVariant,
    Role,
    RoleCutoff,
    RoleType,
)

TODAY = date(2024, 3, 15)
YESTERDAY = TODAY - timedelta(days=1)


def principal(user_id, *roles):
    return Principal(user_id, frozenset(Role(user_id, role_type, scope_id) for role_type, scope_id in roles))


def codes(nodes):
    return {n.code for n in nodes}


def test_admin_sees_every_department_and_is_unrestricted(make_resolver):
    resolver = make_resolver()
    admin = principal(1, (RoleType.ADMIN, None))
    assert codes(resolver.visible_departments(admin)) == {"PRG", "DCR", "REF"}
    assert resolver.listing_scope(admin).unrestricted


def test_division_role_covers_its_departments(make_resolver, tree):
    resolver = make_resolver()
    user = principal(2, (RoleType.DIVISION, 1))
    assert codes(resolver.visible_departments(user)) == {"PRG", "DCR"}
    assert codes(resolver.visible_units(user, tree.get(10))) == {"PRG-A", "PRG-B"}

    scope = resolver.listing_scope(user)
    assert scope.department_ids == {10, 11}
    assert scope.unit_ids == frozenset()
    assert not scope.unrestricted


def test_unit_role_sees_parent_department_but_only_its_unit(make_resolver, tree):
    resolver = make_resolver()
    user = principal(4, (RoleType.UNIT, 100))

    assert codes(resolver.visible_departments(user)) == {"PRG"}
    assert codes(resolver.visible_units(user, tree.get(10))) == {"PRG-A"}

    # The parent department is visible, but only the unit itself is listed.
    scope = resolver.listing_scope(user)
    assert scope.department_ids == frozenset()
    assert scope.unit_ids == {100}


def test_user_without_roles_sees_nothing(make_resolver):
    resolver = make_resolver()
    nobody = principal(5)
    assert resolver.visible_departments(nobody) == frozenset()
    assert resolver.listing_scope(nobody) == ListingScope()


def test_current_selection_stays_visible(make_resolver, tree):
    resolver = make_resolver()
    user = principal(4, (RoleType.UNIT, 100))
    current = RequestRecord(variant=RequestVariant.STAFF, department_id=20, unit_id=200, id=9)

    assert codes(resolver.visible_departments(user, current)) == {"PRG", "REF"}
    assert codes(resolver.visible_units(user, tree.get(20), current)) == {"REF-X"}
    # The pinned unit is only offered under its own department.
    assert codes(resolver.visible_units(user, tree.get(10), current)) == {"PRG-A"}


def test_visibility_ignores_cutoffs(make_resolver):
    resolver = make_resolver(RoleCutoff(RoleType.UNIT, 100, YESTERDAY))
    user = principal(4, (RoleType.UNIT, 100))
    assert codes(resolver.visible_departments(user)) == {"PRG"}
    assert resolver.listing_scope(user).unit_ids == {100}


def test_unit_options_start_with_clear_unit_and_are_sorted(make_resolver, tree):
    resolver = make_resolver()
    user = principal(3, (RoleType.DEPARTMENT, 10))

    options = resolver.unit_options(user, tree.get(10))
    assert options[0] == NO_UNIT
    assert options[0].name == "<Clear Unit>"
    assert [o.name for o in options[1:]] == ["Applications", "Backend Services"]


def test_form_options_drop_cut_off_roles_but_keep_current(make_resolver, tree):
    resolver = make_resolver(RoleCutoff(RoleType.UNIT, 100, YESTERDAY))
    user = principal(6, (RoleType.UNIT, 100), (RoleType.DEPARTMENT, 11))

    assert [o.code for o in resolver.department_options(user)] == ["DCR"]
    assert resolver.unit_options(user, tree.get(10)) == [NO_UNIT]

    current = RequestRecord(variant=RequestVariant.STAFF, department_id=10, unit_id=100, id=3)
    assert [o.code for o in resolver.department_options(user, current)] == ["DCR", "PRG"]
    assert [o.code for o in resolver.unit_options(user, tree.get(10), current)] == ["", "PRG-A"]

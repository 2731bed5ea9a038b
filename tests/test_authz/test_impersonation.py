"""Tests for impersonation eligibility."""
from __future__ import annotations

from personnel_requests.authz import Principal, Role, RoleType, can_impersonate

ADMIN = Principal(1, frozenset({Role(1, RoleType.ADMIN)}))
OTHER_ADMIN = Principal(2, frozenset({Role(2, RoleType.ADMIN)}))
UNIT_USER = Principal(3, frozenset({Role(3, RoleType.UNIT, 100)}))


def test_admin_can_impersonate_non_admin():
    assert can_impersonate(ADMIN, UNIT_USER)
    assert can_impersonate(ADMIN, Principal(4))


def test_admin_cannot_impersonate_admins_or_self():
    assert not can_impersonate(ADMIN, OTHER_ADMIN)
    assert not can_impersonate(ADMIN, ADMIN)


def test_non_admin_cannot_impersonate():
    assert not can_impersonate(UNIT_USER, Principal(4))


def test_missing_target_is_not_allowed():
    assert not can_impersonate(ADMIN, None)

"""
Tests for user-loading data access (ORM).

Uses db_session fixture: in-memory SQLite, rolled back after each test.
"""
from __future__ import annotations

import pytest
from fastapi import HTTPException

from personnel_requests.authz import NodeType, RoleType
from personnel_requests.models.organization import Organization
from personnel_requests.models.security import Role, User
from personnel_requests.security.auth import load_user
from personnel_requests.services.snapshot import load_tree, principal_for


def test_load_user_returns_user_with_roles(db_session):
    # Arrange: create a division and a user holding a division role (like init_db does)
    division = Organization(organization_type=NodeType.DIVISION, code="SSDR", name="Digital Systems")
    db_session.add(division)
    db_session.flush()

    user = User(cas_directory_id="testuser", name="Test User", is_active=True)
    user.roles.append(Role(role_type=RoleType.DIVISION, organization_id=division.id))
    db_session.add(user)
    db_session.commit()

    # Act
    loaded = load_user(db_session, user.id)

    # Assert
    assert loaded.id == user.id
    assert loaded.cas_directory_id == "testuser"
    assert len(loaded.roles) == 1
    assert loaded.roles[0].role_type is RoleType.DIVISION
    assert loaded.roles[0].organization.code == "SSDR"
    assert not loaded.is_admin

    principal = principal_for(loaded, load_tree(db_session))
    assert principal.user_id == user.id
    assert {(r.role_type, r.scope_id) for r in principal.roles} == {(RoleType.DIVISION, division.id)}


def test_load_user_raises_when_not_found(db_session):
    with pytest.raises(HTTPException) as exc_info:
        load_user(db_session, 99999)
    assert exc_info.value.status_code == 401


def test_load_user_raises_when_inactive(db_session):
    user = User(cas_directory_id="inactive", name="Inactive User", is_active=False)
    db_session.add(user)
    db_session.commit()

    with pytest.raises(HTTPException) as exc_info:
        load_user(db_session, user.id)
    assert exc_info.value.status_code == 401


def test_admin_role_has_no_organization(db_session):
    user = User(cas_directory_id="admin", name="Admin")
    user.roles.append(Role(role_type=RoleType.ADMIN))
    db_session.add(user)
    db_session.commit()

    loaded = load_user(db_session, user.id)
    assert loaded.is_admin
    assert principal_for(loaded, load_tree(db_session)).is_admin


def test_role_organization_must_match_its_tier():
    division = Organization(organization_type=NodeType.DIVISION, code="SSDR", name="Digital Systems")
    department = Organization(organization_type=NodeType.DEPARTMENT, code="PRG", name="Programming")

    with pytest.raises(ValueError):
        Role(role_type=RoleType.UNIT, organization=department)
    with pytest.raises(ValueError):
        Role(role_type=RoleType.ADMIN, organization=division)

    role = Role(role_type=RoleType.DEPARTMENT, organization=department)
    with pytest.raises(ValueError):
        role.role_type = RoleType.DIVISION

"""
Tests for building authorization snapshots from database rows.

Uses the ``seeded`` fixture: the demo data ``init_db`` would create.
"""
from __future__ import annotations

from datetime import date

import pytest
from sqlalchemy import select

from personnel_requests.authz import Action, HierarchyError, NodeType, RoleType
from personnel_requests.models.organization import Organization
from personnel_requests.models.requests import ArchivedRequest, PersonnelRequest
from personnel_requests.models.security import Role, RoleCutoff
from personnel_requests.services.snapshot import build_authorizer, load_tree, principal_for, record_of


def test_load_tree_mirrors_organization_rows(seeded, org):
    tree = load_tree(seeded)

    prg_a = tree.get(org("PRG-A").id)
    assert prg_a.node_type is NodeType.UNIT
    assert [n.code for n in tree.ancestors_of(prg_a)] == ["PRG-A", "PRG", "SSDR"]
    assert len(tree) == len(seeded.scalars(select(Organization)).all())


def test_load_tree_rejects_misplaced_unit(db_session):
    division = Organization(organization_type=NodeType.DIVISION, code="D", name="Division")
    db_session.add(division)
    db_session.flush()
    db_session.add(Organization(organization_type=NodeType.UNIT, code="U", name="Unit", parent_id=division.id))
    db_session.flush()

    with pytest.raises(HierarchyError):
        load_tree(db_session)


def test_principal_rejects_role_on_wrong_node_type(seeded, org, user_named):
    user = user_named("prg_a_unit")
    # Set by id, so only the snapshot can catch the mismatch.
    user.roles.append(Role(role_type=RoleType.UNIT, organization_id=org("PRG").id))
    seeded.flush()

    with pytest.raises(HierarchyError):
        principal_for(user, load_tree(seeded))


def test_cutoff_rows_drive_engine_decisions(seeded, org, user_named):
    unit_user = principal_for(user_named("prg_a_unit"), load_tree(seeded))
    row = seeded.scalars(select(PersonnelRequest).where(PersonnelRequest.unit_id == org("PRG-A").id)).one()

    authorizer = build_authorizer(seeded, today=lambda: date(2024, 1, 1))
    assert authorizer.engine.can(unit_user, Action.EDIT, record_of(row))

    seeded.add(RoleCutoff(role_type=RoleType.UNIT, organization_id=org("PRG").id, cutoff_date=date(2024, 1, 1)))
    seeded.flush()

    authorizer = build_authorizer(seeded, today=lambda: date(2024, 1, 1))
    assert not authorizer.engine.can(unit_user, Action.EDIT, record_of(row))
    assert authorizer.engine.can(unit_user, Action.VIEW, record_of(row))


def test_record_of_live_request(seeded, org):
    row = seeded.scalars(select(PersonnelRequest).where(PersonnelRequest.unit_id == org("PRG-A").id)).one()
    record = record_of(row)

    assert record.id == row.id
    assert record.department_id == org("PRG").id
    assert record.values["position_title"] == "Software Developer"
    assert "department_id" not in record.values
    assert not record.archived


def test_record_of_archived_request_and_its_proxy(seeded):
    archived = seeded.scalars(select(ArchivedRequest)).one()

    record = record_of(archived)
    assert record.archived
    assert record.fiscal_year == "FY2016"

    proxy_record = record_of(archived.to_source_proxy())
    assert proxy_record.archived
    assert proxy_record.fiscal_year == "FY2016"
    assert proxy_record.department_id == record.department_id

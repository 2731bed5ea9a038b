"""
Tests for the session-level listing filter.

The filter reads ``Session.info["authz"]``; these tests set it directly.
"""
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import aliased

from personnel_requests.authz import ListingScope
from personnel_requests.db import filters  # noqa: F401  (registers the listener)
from personnel_requests.models.requests import ArchivedRequest, PersonnelRequest
from personnel_requests.security.context import AuthzContext


def _bind(db, listing_scope, scope_requests=True):
    db.info["authz"] = AuthzContext(
        user_id=0,
        role_types=frozenset(),
        impersonator_id=None,
        scope_requests=scope_requests,
        listing_scope=listing_scope,
    )


def _titles(db, entity):
    return sorted(r.position_title for r in db.scalars(select(entity)).all())


def test_unit_scope_limits_plain_and_aliased_selects(seeded, org):
    _bind(seeded, ListingScope(unit_ids=frozenset({org("PRG-A").id})))

    assert _titles(seeded, PersonnelRequest) == ["Software Developer"]
    assert _titles(seeded, aliased(PersonnelRequest)) == ["Software Developer"]
    assert _titles(seeded, ArchivedRequest) == []


def test_department_scope_covers_its_units_and_archives(seeded, org):
    _bind(seeded, ListingScope(department_ids=frozenset({org("PRG").id})))

    assert _titles(seeded, PersonnelRequest) == ["Software Developer"]
    assert _titles(seeded, aliased(ArchivedRequest)) == ["Archivist"]


def test_unscoped_routes_and_admins_see_everything(seeded):
    everything = ["Reference Consultant", "Software Developer", "Student Assistant"]

    _bind(seeded, ListingScope(), scope_requests=False)
    assert _titles(seeded, PersonnelRequest) == everything

    _bind(seeded, ListingScope(unrestricted=True))
    assert _titles(seeded, PersonnelRequest) == everything

"""Tests for the request field accessor table."""
from __future__ import annotations

import pytest
from sqlalchemy import select

from personnel_requests.fields import FIELDS, INDEX_FIELDS, call_field, row_for
from personnel_requests.models.requests import ArchivedRequest, PersonnelRequest


def test_related_names_are_read_through_relationships(seeded, org):
    row = seeded.scalars(select(PersonnelRequest).where(PersonnelRequest.unit_id == org("PRG-A").id)).one()

    assert call_field(row, "department_name") == "Programming"
    assert call_field(row, "unit_name") == "Applications"
    assert call_field(row, "review_status_name") == "Under Review"
    assert call_field(row, "user_name") == "Applications Unit User"
    assert call_field(row, "request_model_type") == "staff"
    assert call_field(row, "employee_type") == "Exempt"


def test_missing_relations_read_as_none(seeded, org):
    row = seeded.scalars(select(PersonnelRequest).where(PersonnelRequest.department_id == org("DCR").id)).one()
    assert call_field(row, "unit_name") is None


def test_unknown_field_is_rejected(seeded):
    row = seeded.scalars(select(PersonnelRequest)).first()
    with pytest.raises(KeyError):
        call_field(row, "department__name")


def test_index_rows_leave_out_long_text(seeded):
    row = seeded.scalars(select(ArchivedRequest)).one().to_source_proxy()

    values = row_for(row)
    assert tuple(values) == INDEX_FIELDS
    assert "justification" not in values
    assert values["department_name"] == "Programming"
    assert values["unit_name"] == "Backend Services"
    assert set(INDEX_FIELDS) < set(FIELDS)

"""Tests for the report registry and stored report runs."""
from __future__ import annotations

import pytest
from sqlalchemy.orm import Session

from personnel_requests.authz import NotFound
from personnel_requests.models.report import ReportFormat, ReportStatus
from personnel_requests.reports.registry import REPORTS, definition_for, report_for, run_report


def test_registry_is_fixed():
    assert set(REPORTS) == {"requests_by_type", "requests_by_department"}
    with pytest.raises(TypeError):
        REPORTS["other"] = REPORTS["requests_by_type"]


def test_unknown_report_raises_not_found():
    with pytest.raises(NotFound):
        definition_for("missing")


def test_requests_by_type_counts(seeded, user_named):
    report = run_report(seeded, "requests_by_type", {}, user_id=user_named("test_admin").id)

    assert report.status is ReportStatus.COMPLETED
    rows = report.output["RequestsByType"]
    assert {(r["request_model_type"], r["request_type"], r["count"]) for r in rows} == {
        ("staff", "New", 1),
        ("labor", "Renewal", 1),
        ("contractor", "Backfill", 1),
    }


def test_unaccepted_parameters_are_dropped(seeded, org):
    report = run_report(seeded, "requests_by_type", {"department_id": org("DCR").id, "color": "red"})

    assert report.parameters == {"department_id": org("DCR").id}
    assert [r["request_model_type"] for r in report.output["RequestsByType"]] == ["labor"]


def test_requests_by_department_uses_archive_for_fiscal_year(seeded):
    live = report_for("requests_by_department", seeded, {}).run()
    assert list(live) == ["Digital Conversion", "Programming", "Reference"]

    archived = report_for("requests_by_department", seeded, {"fiscal_year": "FY2016"}).run()
    assert list(archived) == ["Programming"]
    assert archived["Programming"][0]["position_title"] == "Archivist"


def test_unsupported_format_is_rejected(seeded):
    with pytest.raises(ValueError):
        run_report(seeded, "requests_by_type", {}, report_format=ReportFormat.PDF)


def test_failing_report_is_stored_with_error(tables):
    # The failure path rolls back, so this runs on a plain session instead of the
    # rolled-back-per-test one.
    with Session(tables) as db:
        report = run_report(db, "requests_by_type", {"department_id": "not-a-number"})

        assert report.status is ReportStatus.ERROR
        assert report.output is None
        assert report.error_message

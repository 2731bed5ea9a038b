"""
Report registry.

The set of reports is fixed at import time. Adding a report means adding an
entry to ``REPORTS``; nothing registers itself at runtime.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from types import MappingProxyType
from typing import Any, Callable, Mapping, Protocol

from pydantic_core import to_jsonable_python
from sqlalchemy.orm import Session

from personnel_requests.authz import NotFound
from personnel_requests.models.report import Report, ReportFormat, ReportStatus
from personnel_requests.reports.definitions import RequestsByDepartmentReport, RequestsByTypeReport, Worksheets

logger = logging.getLogger(__name__)


class Runnable(Protocol):
    def run(self) -> Worksheets: ...


@dataclass(frozen=True)
class ReportDefinition:
    name: str
    description: str
    factory: Callable[[Session, Mapping[str, Any]], Runnable]
    formats: tuple[ReportFormat, ...] = (ReportFormat.XLSX,)
    worksheets: tuple[str, ...] = ()
    allowed_parameters: frozenset[str] = frozenset()


REPORTS: Mapping[str, ReportDefinition] = MappingProxyType(
    {
        "requests_by_type": ReportDefinition(
            name="requests_by_type",
            description="Number of requests for each request type, optionally for one department",
            factory=RequestsByTypeReport,
            worksheets=("RequestsByType",),
            allowed_parameters=frozenset({"department_id"}),
        ),
        "requests_by_department": ReportDefinition(
            name="requests_by_department",
            description="Requests grouped into one worksheet per department",
            factory=RequestsByDepartmentReport,
            allowed_parameters=frozenset({"department_id", "fiscal_year"}),
        ),
    }
)


def definition_for(name: str) -> ReportDefinition:
    try:
        return REPORTS[name]
    except KeyError:
        raise NotFound(f"report {name!r} is not registered") from None


def report_for(name: str, db: Session, parameters: Mapping[str, Any]) -> Runnable:
    """Instantiate a registered report, dropping parameters it does not accept."""

    definition = definition_for(name)
    accepted = {k: v for k, v in parameters.items() if k in definition.allowed_parameters}
    return definition.factory(db, accepted)


def run_report(
    db: Session,
    name: str,
    parameters: Mapping[str, Any],
    user_id: int | None = None,
    report_format: ReportFormat = ReportFormat.XLSX,
) -> Report:
    """
    Record a report request, run it and store its worksheets.

    A failing report is stored with status ``error``; the run itself does not
    raise past this point so the request can be inspected later.
    """

    definition = definition_for(name)
    if report_format not in definition.formats:
        raise ValueError(f"report {name!r} does not support format {report_format.value!r}")

    accepted = {k: v for k, v in parameters.items() if k in definition.allowed_parameters}
    report = Report(name=name, format=report_format, status=ReportStatus.PENDING, parameters=accepted, user_id=user_id)
    db.add(report)
    db.commit()

    report.status = ReportStatus.RUNNING
    db.commit()
    try:
        output = report_for(name, db, accepted).run()
    except Exception as exc:
        logger.exception("Report failed id=%s name=%s", report.id, name)
        db.rollback()
        report.status = ReportStatus.ERROR
        report.error_message = str(exc)
    else:
        report.output = to_jsonable_python(output)
        report.status = ReportStatus.COMPLETED
        logger.info("Report completed id=%s name=%s", report.id, name)
    db.commit()
    db.refresh(report)
    return report

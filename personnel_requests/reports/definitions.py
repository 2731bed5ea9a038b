"""Reports over personnel requests. Each report returns named worksheets of rows."""

from __future__ import annotations

from typing import Any, Mapping

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from personnel_requests.fields import INDEX_FIELDS, row_for
from personnel_requests.models.requests import ArchivedRequest, PersonnelRequest

Worksheets = dict[str, list[dict[str, Any]]]


class RequestsByTypeReport:
    """Counts of requests per variant and request type."""

    def __init__(self, db: Session, parameters: Mapping[str, Any]) -> None:
        self.db = db
        self.parameters = dict(parameters)

    def run(self) -> Worksheets:
        stmt = (
            select(PersonnelRequest.request_model_type, PersonnelRequest.request_type, func.count(PersonnelRequest.id))
            .group_by(PersonnelRequest.request_model_type, PersonnelRequest.request_type)
            .order_by(PersonnelRequest.request_model_type, PersonnelRequest.request_type)
        )
        department_id = self.parameters.get("department_id")
        if department_id is not None:
            stmt = stmt.where(PersonnelRequest.department_id == int(department_id))

        rows = [
            {"request_model_type": variant.value, "request_type": request_type.value, "count": count}
            for variant, request_type, count in self.db.execute(stmt)
        ]
        return {"RequestsByType": rows}


class RequestsByDepartmentReport:
    """Index rows per department; live requests, or one archived fiscal year."""

    def __init__(self, db: Session, parameters: Mapping[str, Any]) -> None:
        self.db = db
        self.parameters = dict(parameters)

    def _records(self) -> list[PersonnelRequest]:
        fiscal_year = self.parameters.get("fiscal_year")
        if fiscal_year:
            archived = self.db.scalars(
                select(ArchivedRequest).where(ArchivedRequest.fiscal_year == str(fiscal_year)).order_by(ArchivedRequest.id)
            )
            return [row.to_source_proxy() for row in archived]
        return list(self.db.scalars(select(PersonnelRequest).order_by(PersonnelRequest.id)))

    def run(self) -> Worksheets:
        department_id = self.parameters.get("department_id")
        sheets: Worksheets = {}
        for record in self._records():
            if department_id is not None and record.department_id != int(department_id):
                continue
            sheets.setdefault(record.department.name, []).append(row_for(record, INDEX_FIELDS))
        return dict(sorted(sheets.items()))

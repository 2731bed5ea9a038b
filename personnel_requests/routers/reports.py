from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from personnel_requests.authz import NotFound
from personnel_requests.db.session import get_db
from personnel_requests.models.report import Report
from personnel_requests.models.security import User
from personnel_requests.reports.registry import REPORTS, run_report
from personnel_requests.schemas.reports import ReportCreate, ReportDefinitionOut, ReportOut
from personnel_requests.security.dependencies import get_current_user

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("", response_model=list[ReportDefinitionOut])
def list_report_definitions() -> list[dict]:
    return [
        {
            "name": d.name,
            "description": d.description,
            "formats": list(d.formats),
            "worksheets": list(d.worksheets),
            "allowed_parameters": sorted(d.allowed_parameters),
        }
        for d in REPORTS.values()
    ]


@router.post("", response_model=ReportOut, status_code=status.HTTP_201_CREATED)
def create_report(
    payload: ReportCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> Report:
    try:
        return run_report(db, payload.name, payload.parameters, user_id=user.id, report_format=payload.format)
    except NotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc


@router.get("/{report_id}", response_model=ReportOut)
def show_report(report_id: int, db: Session = Depends(get_db)) -> Report:
    report = db.get(Report, report_id)
    if report is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Report not found")
    return report

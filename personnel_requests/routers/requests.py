from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from personnel_requests.authz import Action, Principal, RequestVariant
from personnel_requests.db.session import get_db
from personnel_requests.models.requests import ArchivedRequest, PersonnelRequest
from personnel_requests.schemas.requests import RequestCreate, RequestFormOut, RequestOut, RequestUpdate
from personnel_requests.security.dependencies import get_authorizer, get_current_principal
from personnel_requests.services import requests as request_service
from personnel_requests.services.snapshot import Authorizer, record_of

router = APIRouter(prefix="/requests", tags=["requests"])


@router.get("", response_model=list[RequestOut])
def list_requests(
    variant: RequestVariant | None = None,
    archived: bool = False,
    fiscal_year: str | None = None,
    db: Session = Depends(get_db),
) -> list[PersonnelRequest]:
    # Scoping to the caller's departments/units is applied by db/filters.py.
    if archived or fiscal_year:
        stmt = select(ArchivedRequest).order_by(ArchivedRequest.id)
        if variant is not None:
            stmt = stmt.where(ArchivedRequest.request_model_type == variant)
        if fiscal_year:
            stmt = stmt.where(ArchivedRequest.fiscal_year == fiscal_year)
        return [row.to_source_proxy() for row in db.scalars(stmt).all()]

    stmt = select(PersonnelRequest).order_by(PersonnelRequest.id)
    if variant is not None:
        stmt = stmt.where(PersonnelRequest.request_model_type == variant)
    return list(db.scalars(stmt).all())


@router.get("/form", response_model=RequestFormOut)
def new_request_form(
    variant: RequestVariant,
    department_id: int | None = None,
    principal: Principal = Depends(get_current_principal),
    authorizer: Authorizer = Depends(get_authorizer),
) -> dict:
    if not authorizer.engine.can(principal, Action.CREATE):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not allowed to create requests")
    return request_service.form_context(authorizer, principal, variant, department_id=department_id)


@router.post("", response_model=RequestOut, status_code=status.HTTP_201_CREATED)
def create_request(
    payload: RequestCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    authorizer: Authorizer = Depends(get_authorizer),
) -> PersonnelRequest:
    return request_service.create_request(db, authorizer, principal, payload.model_dump(exclude_unset=True))


@router.get("/{request_id}", response_model=RequestOut)
def show_request(
    request_id: int,
    archived: bool = False,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    authorizer: Authorizer = Depends(get_authorizer),
) -> PersonnelRequest:
    row = request_service.get_request(db, request_id, archived=archived)
    if not authorizer.engine.can(principal, Action.VIEW, record_of(row)):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not allowed to view this request")
    return row


@router.get("/{request_id}/form", response_model=RequestFormOut)
def edit_request_form(
    request_id: int,
    department_id: int | None = None,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    authorizer: Authorizer = Depends(get_authorizer),
) -> dict:
    row = request_service.get_request(db, request_id)
    record = record_of(row)
    if not authorizer.engine.can(principal, Action.EDIT, record):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not allowed to edit this request")
    return request_service.form_context(
        authorizer, principal, record.variant, current=record, department_id=department_id
    )


@router.patch("/{request_id}", response_model=RequestOut)
def update_request(
    request_id: int,
    payload: RequestUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    authorizer: Authorizer = Depends(get_authorizer),
) -> PersonnelRequest:
    row = request_service.get_request(db, request_id)
    return request_service.update_request(db, authorizer, principal, row, payload.model_dump(exclude_unset=True))


@router.delete("/{request_id}", status_code=status.HTTP_204_NO_CONTENT)
def destroy_request(
    request_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    authorizer: Authorizer = Depends(get_authorizer),
) -> Response:
    row = request_service.get_request(db, request_id)
    request_service.destroy_request(db, authorizer, principal, row)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

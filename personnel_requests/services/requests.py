"""
Request use cases: load, create, update, destroy and form population.

Every write goes through the authorization engine twice: once to decide
whether the action is allowed at all, and once to strip submitted values the
caller may not write. Stripped values are not errors.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from personnel_requests.authz import (
    NO_UNIT,
    Action,
    MalformedRecord,
    NotFound,
    Option,
    Principal,
    RequestRecord,
    RequestVariant,
)
from personnel_requests.models.requests import UNDER_REVIEW, ArchivedRequest, PersonnelRequest, ReviewStatus
from personnel_requests.services.snapshot import Authorizer, record_of

logger = logging.getLogger(__name__)

# Columns that cannot be cleared through an update.
_REQUIRED = frozenset({"department_id", "position_title", "employee_type", "request_type", "justification"})


def _forbidden(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


def get_request(db: Session, request_id: int, archived: bool = False) -> PersonnelRequest:
    """
    Load a live request, or an archived one cast to a live-typed proxy.

    The proxy is display-only and must not be added to the session.
    """

    if archived:
        row = db.get(ArchivedRequest, request_id)
        if row is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Archived request not found")
        return row.to_source_proxy()

    row = db.get(PersonnelRequest, request_id)
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Request not found")
    return row


def under_review_status_id(db: Session) -> int | None:
    return db.scalars(select(ReviewStatus.id).where(ReviewStatus.code == UNDER_REVIEW)).first()


def _check_placement(authorizer: Authorizer, record: RequestRecord) -> None:
    """Submitted department/unit ids must exist and fit together."""

    try:
        authorizer.engine.check_record(record)
    except (NotFound, MalformedRecord) as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc


def create_request(
    db: Session,
    authorizer: Authorizer,
    principal: Principal,
    submitted: Mapping[str, Any],
) -> PersonnelRequest:
    variant = RequestVariant(submitted["request_model_type"])
    values = {k: v for k, v in submitted.items() if k not in ("request_model_type", "department_id", "unit_id")}
    record = RequestRecord(
        variant=variant,
        department_id=submitted["department_id"],
        unit_id=submitted.get("unit_id"),
        creator_id=principal.user_id,
        values=values,
    )
    _check_placement(authorizer, record)

    if not authorizer.engine.can(principal, Action.CREATE, record):
        raise _forbidden("Not allowed to create requests for this department or unit")

    permitted = authorizer.engine.permitted_changes(
        principal, record, {k: v for k, v in submitted.items() if k != "request_model_type"}
    )
    if permitted.get("review_status_id") is None:
        permitted["review_status_id"] = under_review_status_id(db)

    row = PersonnelRequest(request_model_type=variant, user_id=principal.user_id, **permitted)
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info("Request created id=%s variant=%s user_id=%s", row.id, variant.value, principal.user_id)
    return row


def update_request(
    db: Session,
    authorizer: Authorizer,
    principal: Principal,
    row: PersonnelRequest,
    submitted: Mapping[str, Any],
) -> PersonnelRequest:
    record = record_of(row)
    if not authorizer.engine.can(principal, Action.EDIT, record):
        raise _forbidden("Not allowed to edit this request")

    changes = {k: v for k, v in submitted.items() if not (k in _REQUIRED and v is None)}
    permitted = authorizer.engine.permitted_changes(principal, record, changes)

    if "department_id" in permitted and permitted["department_id"] != record.department_id:
        permitted.setdefault("unit_id", None)

    placement = (permitted.get("department_id", record.department_id), permitted.get("unit_id", record.unit_id))
    if placement != (record.department_id, record.unit_id):
        proposed = record.with_changes(permitted)
        _check_placement(authorizer, proposed)
        if not authorizer.engine.can(principal, Action.CREATE, proposed):
            raise _forbidden("Not allowed to move this request to that department or unit")

    for name, value in permitted.items():
        setattr(row, name, value)
    db.commit()
    db.refresh(row)
    logger.info("Request updated id=%s user_id=%s fields=%s", row.id, principal.user_id, sorted(permitted))
    return row


def destroy_request(db: Session, authorizer: Authorizer, principal: Principal, row: PersonnelRequest) -> None:
    if not authorizer.engine.can(principal, Action.DESTROY, record_of(row)):
        raise _forbidden("Not allowed to delete this request")
    db.delete(row)
    db.commit()
    logger.info("Request deleted id=%s user_id=%s", row.id, principal.user_id)


def form_context(
    authorizer: Authorizer,
    principal: Principal,
    variant: RequestVariant,
    current: RequestRecord | None = None,
    department_id: int | None = None,
) -> dict[str, Any]:
    """
    Editable fields and selectable departments/units for an edit or new form.

    ``department_id`` picks the department whose units are offered; it
    defaults to the current record's department.
    """

    department_id = department_id if department_id is not None else (current.department_id if current else None)

    if department_id is not None:
        _check_placement(authorizer, RequestRecord(variant=variant, department_id=department_id))

    if current is not None:
        editable = authorizer.engine.editable_fields(principal, current)
    else:
        editable = authorizer.engine.creatable_fields(principal, variant)

    departments = authorizer.scope.department_options(principal, current=current)
    units: list[Option] = [NO_UNIT]
    if department_id is not None:
        department = authorizer.tree.get(department_id)
        units = authorizer.scope.unit_options(principal, department, current=current)

    return {
        "editable_fields": sorted(editable),
        "departments": departments,
        "units": units,
    }

from __future__ import annotations

from sqlalchemy import event, or_
from sqlalchemy.orm import Session, with_loader_criteria


@event.listens_for(Session, "do_orm_execute")
def _apply_listing_scope(execute_state) -> None:
    """
    Transparent request scoping.

    Route code keeps writing ``select(PersonnelRequest)``; when the route rule
    asks for ``scope_requests`` the rows are limited to the departments and
    units the user's roles reach.
    """

    if not execute_state.is_select:
        return

    authz = execute_state.session.info.get("authz")
    if authz is None or not authz.scope_requests or authz.listing_scope is None:
        return

    scope = authz.listing_scope
    if scope.unrestricted:
        return

    # Local import to avoid cycles.
    from personnel_requests.models.requests import ArchivedRequest, PersonnelRequest  # noqa: WPS433 (local import)

    department_ids = sorted(scope.department_ids)
    unit_ids = sorted(scope.unit_ids)

    stmt = execute_state.statement.options(
        with_loader_criteria(
            PersonnelRequest,
            lambda cls: or_(cls.department_id.in_(department_ids), cls.unit_id.in_(unit_ids)),
            include_aliases=True,
        ),
        with_loader_criteria(
            ArchivedRequest,
            lambda cls: or_(cls.department_id.in_(department_ids), cls.unit_id.in_(unit_ids)),
            include_aliases=True,
        ),
    )
    execute_state.statement = stmt

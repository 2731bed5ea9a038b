from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from personnel_requests.authz import can_impersonate
from personnel_requests.db.session import get_db
from personnel_requests.models.security import Role, User
from personnel_requests.schemas.security import MeOut, UserOut
from personnel_requests.security.dependencies import get_current_user
from personnel_requests.services.snapshot import load_tree, principal_for

router = APIRouter(tags=["users"])


@router.get("/me", response_model=MeOut)
def me(request: Request, user: User = Depends(get_current_user)) -> MeOut:
    authz = request.state.authz
    return MeOut.model_validate(user).model_copy(update={"impersonator_id": authz.impersonator_id})


@router.get("/impersonate", response_model=list[UserOut])
def impersonation_candidates(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[User]:
    """Users the caller may act as through the impersonation header."""

    tree = load_tree(db)
    actor = principal_for(user, tree)
    stmt = (
        select(User)
        .where(User.is_active.is_(True))
        .options(selectinload(User.roles).selectinload(Role.organization))
        .order_by(User.cas_directory_id)
    )
    return [u for u in db.scalars(stmt).all() if can_impersonate(actor, principal_for(u, tree))]

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from personnel_requests.db.session import get_db
from personnel_requests.models.security import Role, User
from personnel_requests.schemas.security import UserOut

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/users", response_model=list[UserOut])
def list_users(db: Session = Depends(get_db)) -> list[User]:
    stmt = (
        select(User)
        .options(selectinload(User.roles).selectinload(Role.organization))
        .order_by(User.cas_directory_id)
    )
    return list(db.scalars(stmt).all())

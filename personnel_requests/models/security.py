from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from personnel_requests.authz.roles import RoleType
from personnel_requests.db.base import Base
from personnel_requests.models.enums import value_enum
from personnel_requests.models.organization import Organization


class User(Base):
    __tablename__ = "users"
    __table_args__ = (UniqueConstraint("cas_directory_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    cas_directory_id: Mapped[str] = mapped_column(String(50), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    roles: Mapped[list["Role"]] = relationship(back_populates="user", cascade="all, delete-orphan")

    @property
    def is_admin(self) -> bool:
        return any(r.role_type is RoleType.ADMIN for r in self.roles)


class Role(Base):
    """Grants ``role_type`` authority over one organization (none for admins)."""

    __tablename__ = "roles"
    __table_args__ = (UniqueConstraint("user_id", "role_type", "organization_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    role_type: Mapped[RoleType] = mapped_column(value_enum(RoleType, 20), nullable=False)
    organization_id: Mapped[int | None] = mapped_column(ForeignKey("organizations.id"), nullable=True, index=True)

    user: Mapped[User] = relationship(back_populates="roles")
    organization: Mapped[Organization | None] = relationship()

    @validates("role_type", "organization")
    def _scope_matches_tier(self, key: str, value):
        role_type = value if key == "role_type" else self.role_type
        organization = value if key == "organization" else self.organization
        if role_type is None or organization is None:
            return value
        if role_type.scope_type is not organization.organization_type:
            raise ValueError(
                f"{role_type.value} role cannot be scoped to {organization.organization_type.value} {organization.code!r}"
            )
        return value


class RoleCutoff(Base):
    """
    Date after which ``role_type`` users lose edit rights on an organization.

    ``organization_id`` of NULL applies to the whole tier; ``cutoff_date`` of
    NULL lifts the restriction.
    """

    __tablename__ = "role_cutoffs"
    __table_args__ = (UniqueConstraint("role_type", "organization_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    role_type: Mapped[RoleType] = mapped_column(value_enum(RoleType, 20), nullable=False)
    organization_id: Mapped[int | None] = mapped_column(ForeignKey("organizations.id"), nullable=True, index=True)
    cutoff_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    organization: Mapped[Organization | None] = relationship()

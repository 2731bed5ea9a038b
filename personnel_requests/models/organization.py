from __future__ import annotations

from sqlalchemy import ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from personnel_requests.authz.hierarchy import NodeType
from personnel_requests.db.base import Base
from personnel_requests.models.enums import value_enum


class Organization(Base):
    """Division, department or unit. Units and departments point at their parent."""

    __tablename__ = "organizations"
    __table_args__ = (UniqueConstraint("organization_type", "code"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    organization_type: Mapped[NodeType] = mapped_column(value_enum(NodeType, 20), nullable=False, index=True)
    code: Mapped[str] = mapped_column(String(20), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    parent_id: Mapped[int | None] = mapped_column(ForeignKey("organizations.id"), nullable=True, index=True)

    parent: Mapped["Organization | None"] = relationship(remote_side=[id], back_populates="children")
    children: Mapped[list["Organization"]] = relationship(back_populates="parent")

    @validates("code", "name")
    def _not_blank(self, key: str, value: str | None) -> str:
        if value is None or not value.strip():
            raise ValueError(f"{key} must be present")
        return value.strip()

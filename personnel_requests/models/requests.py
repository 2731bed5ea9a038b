from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, declared_attr, mapped_column, relationship

from personnel_requests.authz.records import RequestVariant
from personnel_requests.db.base import Base
from personnel_requests.models.enums import EmployeeType, RequestType, value_enum
from personnel_requests.models.organization import Organization
from personnel_requests.models.security import User

UNDER_REVIEW = "UnderReview"


class ReviewStatus(Base):
    __tablename__ = "review_statuses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    code: Mapped[str] = mapped_column(String(30), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)


class RequestColumns:
    """Columns shared by live requests and their archived snapshots."""

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    request_model_type: Mapped[RequestVariant] = mapped_column(value_enum(RequestVariant, 20), nullable=False, index=True)

    position_title: Mapped[str] = mapped_column(String(100), nullable=False)
    employee_type: Mapped[EmployeeType] = mapped_column(value_enum(EmployeeType), nullable=False)
    request_type: Mapped[RequestType] = mapped_column(value_enum(RequestType), nullable=False)

    employee_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    contractor_name: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Money is stored with two decimal places.
    annual_base_pay: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    hourly_rate: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    nonop_funds: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    nonop_source: Mapped[str | None] = mapped_column(String(255), nullable=True)

    hours_per_week: Mapped[Decimal | None] = mapped_column(Numeric(6, 2), nullable=True)
    number_of_weeks: Mapped[int | None] = mapped_column(Integer, nullable=True)
    number_of_positions: Mapped[int | None] = mapped_column(Integer, nullable=True)

    justification: Mapped[str] = mapped_column(Text, nullable=False)
    review_comment: Mapped[str | None] = mapped_column(Text, nullable=True)

    department_id: Mapped[int] = mapped_column(ForeignKey("organizations.id"), nullable=False, index=True)
    unit_id: Mapped[int | None] = mapped_column(ForeignKey("organizations.id"), nullable=True, index=True)
    review_status_id: Mapped[int | None] = mapped_column(ForeignKey("review_statuses.id"), nullable=True)
    user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    @declared_attr
    def department(cls) -> Mapped[Organization]:
        return relationship(Organization, foreign_keys=f"{cls.__name__}.department_id")

    @declared_attr
    def unit(cls) -> Mapped[Organization | None]:
        return relationship(Organization, foreign_keys=f"{cls.__name__}.unit_id")

    @declared_attr
    def review_status(cls) -> Mapped[ReviewStatus | None]:
        return relationship(ReviewStatus)

    @declared_attr
    def user(cls) -> Mapped[User | None]:
        return relationship(User)

    @property
    def description(self) -> str:
        return self.position_title


class PersonnelRequest(RequestColumns, Base):
    """A live staff, labor or contractor request."""

    __tablename__ = "requests"

    # Set on transient copies built from an archived row; never persisted.
    archived_proxy = False
    archived_fiscal_year = None


class ArchivedRequest(RequestColumns, Base):
    """Fiscal-year snapshot of a request. Read-only once written."""

    __tablename__ = "archived_requests"

    fiscal_year: Mapped[str] = mapped_column(String(10), nullable=False, index=True)
    source_request_id: Mapped[int | None] = mapped_column(Integer, nullable=True)

    def to_source_proxy(self) -> PersonnelRequest:
        """
        Cast this snapshot to a transient live-typed request for display.

        The proxy shares ids and related objects but is never added to a session.
        """

        attrs = {column.key: getattr(self, column.key) for column in PersonnelRequest.__table__.columns}
        proxy = PersonnelRequest(**attrs)
        proxy.department = self.department
        proxy.unit = self.unit
        proxy.review_status = self.review_status
        proxy.user = self.user
        proxy.archived_proxy = True
        proxy.archived_fiscal_year = self.fiscal_year
        return proxy

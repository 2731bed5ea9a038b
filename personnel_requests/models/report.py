from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from personnel_requests.db.base import Base
from personnel_requests.models.enums import value_enum
from personnel_requests.models.security import User


class ReportStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    ERROR = "error"
    COMPLETED = "completed"


class ReportFormat(str, Enum):
    XLSX = "xlsx"
    PDF = "pdf"


class Report(Base):
    """A requested run of one registered report and its stored output."""

    __tablename__ = "reports"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    format: Mapped[ReportFormat] = mapped_column(value_enum(ReportFormat, 10), default=ReportFormat.XLSX, nullable=False)
    status: Mapped[ReportStatus] = mapped_column(
        value_enum(ReportStatus, 20), default=ReportStatus.PENDING, nullable=False
    )
    parameters: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)
    output: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    user: Mapped[User | None] = relationship()

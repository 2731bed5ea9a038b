from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from personnel_requests.models.report import ReportFormat, ReportStatus


class ReportDefinitionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    description: str
    formats: list[ReportFormat]
    worksheets: list[str]
    allowed_parameters: list[str]


class ReportCreate(BaseModel):
    name: str
    format: ReportFormat = ReportFormat.XLSX
    parameters: dict[str, Any] = Field(default_factory=dict)


class ReportOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    format: ReportFormat
    status: ReportStatus
    parameters: dict[str, Any]
    output: dict[str, Any] | None
    error_message: str | None
    user_id: int | None
    created_at: datetime

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

from personnel_requests.authz import RequestVariant
from personnel_requests.models.enums import EmployeeType, RequestType

JUSTIFICATION_WORD_LIMIT = 125

Money = Annotated[Decimal, Field(ge=0, max_digits=12, decimal_places=2)]


def check_justification(value: str | None) -> str | None:
    """New justifications are limited to 125 words. Archived rows never pass through here."""

    if value is not None and len(value.split()) > JUSTIFICATION_WORD_LIMIT:
        raise ValueError(f"Must be {JUSTIFICATION_WORD_LIMIT} words or less")
    return value


class RequestFields(BaseModel):
    employee_name: str | None = Field(default=None, max_length=100)
    contractor_name: str | None = Field(default=None, max_length=100)

    annual_base_pay: Money | None = None
    hourly_rate: Money | None = None
    nonop_funds: Money | None = None
    nonop_source: str | None = Field(default=None, max_length=255)

    hours_per_week: Decimal | None = Field(default=None, ge=0, max_digits=6, decimal_places=2)
    number_of_weeks: int | None = Field(default=None, ge=0)
    number_of_positions: int | None = Field(default=None, ge=0)

    unit_id: int | None = None
    review_status_id: int | None = None
    review_comment: str | None = None

    @field_validator("justification", check_fields=False)
    @classmethod
    def limit_justification_words(cls, value: str | None) -> str | None:
        return check_justification(value)


class RequestCreate(RequestFields):
    request_model_type: RequestVariant
    department_id: int
    position_title: str = Field(min_length=1, max_length=100)
    employee_type: EmployeeType
    request_type: RequestType
    justification: str = Field(min_length=1)


class RequestUpdate(RequestFields):
    department_id: int | None = None
    position_title: str | None = Field(default=None, min_length=1, max_length=100)
    employee_type: EmployeeType | None = None
    request_type: RequestType | None = None
    justification: str | None = Field(default=None, min_length=1)


class RequestOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    request_model_type: RequestVariant
    position_title: str
    employee_type: EmployeeType
    request_type: RequestType
    employee_name: str | None
    contractor_name: str | None
    annual_base_pay: Decimal | None
    hourly_rate: Decimal | None
    hours_per_week: Decimal | None
    number_of_weeks: int | None
    number_of_positions: int | None
    nonop_funds: Decimal | None
    nonop_source: str | None
    justification: str
    department_id: int
    unit_id: int | None
    review_status_id: int | None
    review_comment: str | None
    user_id: int | None
    created_at: datetime
    updated_at: datetime

    archived_proxy: bool = False
    archived_fiscal_year: str | None = None


class OptionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int | None
    code: str
    name: str


class RequestFormOut(BaseModel):
    """What an edit/create form may show: writable fields and selectable places."""

    editable_fields: list[str]
    departments: list[OptionOut]
    units: list[OptionOut]

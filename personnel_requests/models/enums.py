from __future__ import annotations

from enum import Enum

from sqlalchemy import Enum as SAEnum


class EmployeeType(str, Enum):
    CONTINGENT_1 = "Contingent 1"
    FACULTY_HOURLY = "Faculty Hourly"
    STUDENT = "Student"
    EXEMPT = "Exempt"
    FACULTY = "Faculty"
    GRADUATE_ASSISTANT = "Graduate Assistant"
    NON_EXEMPT = "Non-exempt"
    CONTINGENT_2 = "Contingent 2"
    CONTRACT_FACULTY = "Contract Faculty"


class RequestType(str, Enum):
    CONVERT_C1 = "ConvertC1"
    CONVERT_CONT = "ConvertCont"
    NEW = "New"
    PAY_ADJUSTMENT = "Pay Adjustment"
    BACKFILL = "Backfill"
    RENEWAL = "Renewal"
    PAY_ADJUSTMENT_OTHER = "Pay Adjustment - Other"
    PAY_ADJUSTMENT_RECLASS = "Pay Adjustment - Reclass"
    PAY_ADJUSTMENT_STIPEND = "Pay Adjustment - Stipend"


def value_enum(enum_cls: type[Enum], length: int = 40) -> SAEnum:
    """Store enums by value (the human-readable label), not by member name."""
    return SAEnum(enum_cls, native_enum=False, length=length, values_callable=lambda e: [m.value for m in e])

"""
Field accessor table for requests.

Listings and reports refer to fields by identifier. Each identifier maps to an
explicit getter so related values (department name, review status name) are
read through known relationships only.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping

from personnel_requests.models.requests import ArchivedRequest, PersonnelRequest

RequestRow = PersonnelRequest | ArchivedRequest


def _value(attr: str) -> Callable[[RequestRow], Any]:
    def getter(record: RequestRow) -> Any:
        value = getattr(record, attr)
        return getattr(value, "value", value)

    return getter


def _name_of(relation: str) -> Callable[[RequestRow], Any]:
    def getter(record: RequestRow) -> Any:
        related = getattr(record, relation)
        return related.name if related is not None else None

    return getter


FIELD_ACCESSORS: Mapping[str, Callable[[RequestRow], Any]] = MappingProxyType(
    {
        "request_model_type": _value("request_model_type"),
        "position_title": _value("position_title"),
        "employee_type": _value("employee_type"),
        "request_type": _value("request_type"),
        "contractor_name": _value("contractor_name"),
        "employee_name": _value("employee_name"),
        "annual_base_pay": _value("annual_base_pay"),
        "hourly_rate": _value("hourly_rate"),
        "nonop_funds": _value("nonop_funds"),
        "nonop_source": _value("nonop_source"),
        "justification": _value("justification"),
        "department_name": _name_of("department"),
        "unit_name": _name_of("unit"),
        "review_status_name": _name_of("review_status"),
        "review_comment": _value("review_comment"),
        "user_name": _name_of("user"),
        "created_at": _value("created_at"),
        "updated_at": _value("updated_at"),
    }
)

FIELDS: tuple[str, ...] = tuple(FIELD_ACCESSORS)

# Long-form text and timestamps are left out of index pages.
INDEX_FIELDS: tuple[str, ...] = tuple(
    f for f in FIELDS if f not in {"nonop_source", "justification", "review_comment", "created_at", "updated_at"}
)


def call_field(record: RequestRow, field: str) -> Any:
    try:
        getter = FIELD_ACCESSORS[field]
    except KeyError:
        raise KeyError(f"unknown request field {field!r}") from None
    return getter(record)


def row_for(record: RequestRow, fields: Iterable[str] = INDEX_FIELDS) -> dict[str, Any]:
    return {field: call_field(record, field) for field in fields}

"""Request snapshots handed to the kernel by the persistence layer."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping


class RequestVariant(str, Enum):
    STAFF = "staff"
    LABOR = "labor"
    CONTRACTOR = "contractor"


def _frozen(values: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(dict(values))


@dataclass(frozen=True)
class RequestRecord:
    """
    Organizational path and field values of one request.

    ``archived`` marks a fiscal-year snapshot (or a live-typed proxy of one);
    such records are read-only outside the admin tier.
    """

    variant: RequestVariant
    department_id: int
    unit_id: int | None = None
    id: int | None = None
    creator_id: int | None = None
    values: Mapping[str, Any] = field(default_factory=dict)
    archived: bool = False
    fiscal_year: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", _frozen(self.values))

    @property
    def persisted(self) -> bool:
        return self.id is not None

    def with_changes(self, changes: Mapping[str, Any]) -> RequestRecord:
        """Return the record as it would look after applying ``changes``."""

        department_id = changes.get("department_id", self.department_id)
        unit_id = changes.get("unit_id", self.unit_id)
        values = {**self.values, **{k: v for k, v in changes.items() if k not in ("department_id", "unit_id")}}
        return replace(self, department_id=department_id, unit_id=unit_id, values=values)

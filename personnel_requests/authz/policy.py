"""Per-variant field policy: which fields exist and which tier may write them."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from .records import RequestVariant

REVIEW_FIELDS = frozenset({"review_status_id", "review_comment"})
ORGANIZATION_FIELDS = frozenset({"department_id", "unit_id"})

_COMMON_FIELDS = frozenset(
    {
        "position_title",
        "employee_type",
        "request_type",
        "nonop_funds",
        "nonop_source",
        "justification",
    }
)


@dataclass(frozen=True)
class PolicyRules:
    variant: RequestVariant
    substantive_fields: frozenset[str]
    review_fields: frozenset[str] = REVIEW_FIELDS

    @property
    def all_fields(self) -> frozenset[str]:
        return self.substantive_fields | self.review_fields


_POLICIES: Mapping[RequestVariant, PolicyRules] = MappingProxyType(
    {
        RequestVariant.STAFF: PolicyRules(
            variant=RequestVariant.STAFF,
            substantive_fields=_COMMON_FIELDS | ORGANIZATION_FIELDS | {"employee_name", "annual_base_pay"},
        ),
        RequestVariant.LABOR: PolicyRules(
            variant=RequestVariant.LABOR,
            substantive_fields=_COMMON_FIELDS
            | ORGANIZATION_FIELDS
            | {"contractor_name", "hourly_rate", "hours_per_week", "number_of_weeks", "number_of_positions"},
        ),
        RequestVariant.CONTRACTOR: PolicyRules(
            variant=RequestVariant.CONTRACTOR,
            substantive_fields=_COMMON_FIELDS | ORGANIZATION_FIELDS | {"contractor_name", "annual_base_pay"},
        ),
    }
)


def policy_for(variant: RequestVariant) -> PolicyRules:
    return _POLICIES[RequestVariant(variant)]

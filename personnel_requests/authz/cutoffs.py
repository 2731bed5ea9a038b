"""
Cutoff rules: the date after which a role tier loses edit rights on a node.

Resolution walks from the most specific node up to its division, then falls
back to a tier-wide rule (``node_id=None``). The first rule found governs, even
when it carries no date, so a unit can be exempted from a department cutoff.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
import logging
from typing import Iterable

from .hierarchy import OrganizationNode, OrganizationTree
from .roles import RoleType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoleCutoff:
    role_type: RoleType
    node_id: int | None
    cutoff_date: date | None

    def active_on(self, as_of: date) -> bool:
        # Inclusive: a cutoff dated today is already in force.
        return self.cutoff_date is not None and self.cutoff_date <= as_of


class CutoffRules:
    def __init__(self, cutoffs: Iterable[RoleCutoff], tree: OrganizationTree) -> None:
        rules: dict[tuple[RoleType, int | None], RoleCutoff] = {}
        for cutoff in cutoffs:
            if cutoff.node_id is not None:
                tree.get(cutoff.node_id)
            key = (cutoff.role_type, cutoff.node_id)
            if key in rules:
                raise ValueError(
                    f"duplicate cutoff for role type {cutoff.role_type.value!r} on node {cutoff.node_id}"
                )
            rules[key] = cutoff
        self._rules = rules
        self._tree = tree

    def __len__(self) -> int:
        return len(self._rules)

    def rule_for(self, role_type: RoleType, node: OrganizationNode) -> RoleCutoff | None:
        for candidate in self._tree.ancestors_of(node):
            rule = self._rules.get((role_type, candidate.id))
            if rule is not None:
                return rule
        return self._rules.get((role_type, None))

    def is_cutoff(self, role_type: RoleType, node: OrganizationNode, as_of: date) -> bool:
        rule = self.rule_for(role_type, node)
        if rule is None:
            return False
        active = rule.active_on(as_of)
        if active:
            logger.debug(
                "Cutoff active role_type=%s node=%s cutoff_date=%s as_of=%s",
                role_type.value,
                node.code,
                rule.cutoff_date,
                as_of,
            )
        return active

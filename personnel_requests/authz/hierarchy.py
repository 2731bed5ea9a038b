"""
Organization hierarchy: division → department → unit.

The tree is read-mostly reference data. ``OrganizationTree`` is built once per
request from whatever the persistence layer returns and then only traversed.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
from typing import Iterable

from .errors import HierarchyError, NotFound

logger = logging.getLogger(__name__)


class NodeType(str, Enum):
    DIVISION = "division"
    DEPARTMENT = "department"
    UNIT = "unit"


# Required parent type for each node type.
_PARENT_TYPE: dict[NodeType, NodeType | None] = {
    NodeType.DIVISION: None,
    NodeType.DEPARTMENT: NodeType.DIVISION,
    NodeType.UNIT: NodeType.DEPARTMENT,
}


@dataclass(frozen=True)
class OrganizationNode:
    id: int
    node_type: NodeType
    code: str
    name: str
    parent_id: int | None = None


class OrganizationTree:
    """
    Immutable index over a set of organization nodes.

    Construction validates the shape: divisions are roots, departments hang off
    divisions and units hang off departments. Cycles cannot exist because every
    parent is strictly one level above its child.
    """

    def __init__(self, nodes: Iterable[OrganizationNode]) -> None:
        by_id: dict[int, OrganizationNode] = {}
        for node in nodes:
            if node.id in by_id:
                raise HierarchyError(f"duplicate organization id {node.id}")
            by_id[node.id] = node

        children: dict[int, set[OrganizationNode]] = {node_id: set() for node_id in by_id}
        for node in by_id.values():
            expected = _PARENT_TYPE[node.node_type]
            if expected is None:
                if node.parent_id is not None:
                    raise HierarchyError(f"division {node.code!r} cannot have a parent")
                continue
            parent = by_id.get(node.parent_id) if node.parent_id is not None else None
            if parent is None:
                raise HierarchyError(f"{node.node_type.value} {node.code!r} has no parent {expected.value}")
            if parent.node_type is not expected:
                raise HierarchyError(
                    f"{node.node_type.value} {node.code!r} must belong to a {expected.value}, "
                    f"not {parent.node_type.value} {parent.code!r}"
                )
            children[parent.id].add(node)

        self._nodes = by_id
        self._children = {node_id: frozenset(kids) for node_id, kids in children.items()}
        logger.debug("Organization tree loaded nodes=%d", len(by_id))

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def get(self, node_id: int) -> OrganizationNode:
        try:
            return self._nodes[node_id]
        except KeyError:
            raise NotFound(f"organization {node_id} does not exist") from None

    def parent_of(self, node: OrganizationNode) -> OrganizationNode | None:
        node = self.get(node.id)
        if node.parent_id is None:
            return None
        return self._nodes[node.parent_id]

    def children_of(self, node: OrganizationNode) -> frozenset[OrganizationNode]:
        return self._children[self.get(node.id).id]

    def ancestors_of(self, node: OrganizationNode) -> tuple[OrganizationNode, ...]:
        """Path from ``node`` (inclusive) up to its division."""

        path: list[OrganizationNode] = []
        current: OrganizationNode | None = self.get(node.id)
        while current is not None:
            path.append(current)
            current = self.parent_of(current)
        return tuple(path)

    def division_of(self, node: OrganizationNode) -> OrganizationNode:
        return self.ancestors_of(node)[-1]

    def nodes_of_type(self, node_type: NodeType) -> frozenset[OrganizationNode]:
        return frozenset(n for n in self._nodes.values() if n.node_type is node_type)

    def departments_under(self, node: OrganizationNode) -> frozenset[OrganizationNode]:
        node = self.get(node.id)
        if node.node_type is NodeType.DEPARTMENT:
            return frozenset({node})
        if node.node_type is NodeType.DIVISION:
            return self.children_of(node)
        return frozenset()

    def units_under(self, node: OrganizationNode) -> frozenset[OrganizationNode]:
        node = self.get(node.id)
        if node.node_type is NodeType.UNIT:
            return frozenset({node})
        units: set[OrganizationNode] = set()
        for department in self.departments_under(node):
            units.update(self.children_of(department))
        return frozenset(units)

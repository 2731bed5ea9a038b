"""
Build authorization kernel values from database rows.

Reference data is read once per HTTP request from that request's session, so
every decision in the request sees the same tree and cutoff table.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
import logging
from typing import Callable

from sqlalchemy import select
from sqlalchemy.orm import Session

from personnel_requests.authz import (
    AuthorizationEngine,
    CutoffRules,
    OrganizationNode,
    OrganizationTree,
    Principal,
    RequestRecord,
    Role,
    RoleAssignments,
    RoleCutoff,
    ScopeResolver,
    policy_for,
)
from personnel_requests.authz.policy import ORGANIZATION_FIELDS
from personnel_requests.models.organization import Organization
from personnel_requests.models.requests import ArchivedRequest, PersonnelRequest
from personnel_requests.models.security import RoleCutoff as RoleCutoffRow
from personnel_requests.models.security import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Authorizer:
    """Engine and resolver sharing one snapshot of reference data."""

    tree: OrganizationTree
    engine: AuthorizationEngine
    scope: ScopeResolver


def load_tree(db: Session) -> OrganizationTree:
    rows = db.scalars(select(Organization).order_by(Organization.id)).all()
    return OrganizationTree(
        OrganizationNode(
            id=row.id,
            node_type=row.organization_type,
            code=row.code,
            name=row.name,
            parent_id=row.parent_id,
        )
        for row in rows
    )


def load_cutoffs(db: Session, tree: OrganizationTree) -> CutoffRules:
    rows = db.scalars(select(RoleCutoffRow).order_by(RoleCutoffRow.id)).all()
    return CutoffRules(
        (RoleCutoff(role_type=row.role_type, node_id=row.organization_id, cutoff_date=row.cutoff_date) for row in rows),
        tree,
    )


def build_authorizer(db: Session, today: Callable[[], date] = date.today) -> Authorizer:
    tree = load_tree(db)
    cutoffs = load_cutoffs(db, tree)
    logger.debug("Authorization snapshot loaded organizations=%d cutoffs=%d", len(tree), len(cutoffs))
    return Authorizer(
        tree=tree,
        engine=AuthorizationEngine(tree, cutoffs, today=today),
        scope=ScopeResolver(tree, cutoffs, today=today),
    )


def principal_for(user: User, tree: OrganizationTree) -> Principal:
    """Kernel view of ``user``; raises ``HierarchyError`` when a role points at the wrong node type."""

    assignments = RoleAssignments(
        (Role(user_id=user.id, role_type=role.role_type, scope_id=role.organization_id) for role in user.roles),
        tree,
    )
    return assignments.principal(user.id, name=user.name)


def record_of(row: PersonnelRequest | ArchivedRequest) -> RequestRecord:
    variant = row.request_model_type
    names = policy_for(variant).all_fields - ORGANIZATION_FIELDS
    archived = isinstance(row, ArchivedRequest) or row.archived_proxy
    fiscal_year = row.fiscal_year if isinstance(row, ArchivedRequest) else row.archived_fiscal_year
    return RequestRecord(
        id=row.id,
        variant=variant,
        department_id=row.department_id,
        unit_id=row.unit_id,
        creator_id=row.user_id,
        values={name: getattr(row, name) for name in names},
        archived=archived,
        fiscal_year=fiscal_year,
    )

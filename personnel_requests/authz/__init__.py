"""
Authorization kernel for personnel requests.

This package has no dependency on the web or database layers. Callers build an
``OrganizationTree``, ``CutoffRules`` and ``Principal`` values from their own
storage and ask the engine and resolver for decisions.
"""

from .cutoffs import CutoffRules, RoleCutoff
from .engine import Action, AuthorizationEngine
from .errors import HierarchyError, MalformedRecord, NotFound
from .hierarchy import NodeType, OrganizationNode, OrganizationTree
from .impersonation import can_impersonate
from .policy import REVIEW_FIELDS, PolicyRules, policy_for
from .records import RequestRecord, RequestVariant
from .roles import Principal, Role, RoleAssignments, RoleType
from .scope import NO_UNIT, ListingScope, Option, ScopeResolver

__all__ = [
    "Action",
    "AuthorizationEngine",
    "CutoffRules",
    "HierarchyError",
    "ListingScope",
    "MalformedRecord",
    "NO_UNIT",
    "NodeType",
    "NotFound",
    "Option",
    "OrganizationNode",
    "OrganizationTree",
    "PolicyRules",
    "Principal",
    "REVIEW_FIELDS",
    "RequestRecord",
    "RequestVariant",
    "Role",
    "RoleAssignments",
    "RoleCutoff",
    "RoleType",
    "ScopeResolver",
    "can_impersonate",
    "policy_for",
]

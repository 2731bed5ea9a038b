from __future__ import annotations

from dataclasses import dataclass

from personnel_requests.authz import ListingScope


@dataclass(frozen=True)
class AuthzContext:
    """
    Per-request authorization context.

    Attached to:
    - request.state (FastAPI request lifetime)
    - Session.info (SQLAlchemy session lifetime), where the listing filter reads it
    """

    user_id: int
    role_types: frozenset[str]

    # Set when an admin is acting as ``user_id``.
    impersonator_id: int | None

    # Listing decision (driven by config)
    scope_requests: bool
    listing_scope: ListingScope | None

from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from personnel_requests.authz import Principal
from personnel_requests.db.session import bind_authz, get_db
from personnel_requests.models.security import User
from personnel_requests.security.auth import extract_user_id, load_user, resolve_impersonation
from personnel_requests.security.config import SecurityConfig
from personnel_requests.security.context import AuthzContext
from personnel_requests.services.snapshot import Authorizer, build_authorizer, principal_for


def get_security_config(request: Request) -> SecurityConfig:
    config = getattr(request.app.state, "security_config", None)
    if config is None:
        raise RuntimeError("Security config not loaded. Did app startup run?")
    return config


def get_current_user(request: Request) -> User:
    user = getattr(request.state, "user", None)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    return user


def get_authorizer(db: Session = Depends(get_db)) -> Authorizer:
    return build_authorizer(db)


def get_current_principal(
    user: User = Depends(get_current_user),
    authorizer: Authorizer = Depends(get_authorizer),
) -> Principal:
    return principal_for(user, authorizer.tree)


def enforce_security(
    request: Request,
    config: SecurityConfig = Depends(get_security_config),
    db: Session = Depends(get_db, use_cache=False),
) -> None:
    """
    Global security dependency (configuration-driven).

    Authenticates the caller, applies impersonation, checks route-level role
    requirements and prepares the listing scope. Record-level decisions are
    left to the routers, which ask the authorization engine.
    """

    path = request.url.path
    method = request.method.upper()

    rule = config.match(path, method)
    if not rule.auth_required:
        return

    user_id = extract_user_id(request, config)
    if user_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing user id")

    actor = load_user(db, user_id)
    user = resolve_impersonation(request, config, db, actor)
    request.state.user = user

    role_types = {r.role_type.value for r in user.roles}
    if rule.required_roles and not (role_types & rule.required_roles):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Insufficient role. Required one of: {sorted(rule.required_roles)}",
        )

    listing_scope = None
    if rule.scope_requests:
        authorizer = build_authorizer(db)
        listing_scope = authorizer.scope.listing_scope(principal_for(user, authorizer.tree))

    request.state.authz = AuthzContext(
        user_id=user.id,
        role_types=frozenset(role_types),
        impersonator_id=actor.id if actor.id != user.id else None,
        scope_requests=rule.scope_requests,
        listing_scope=listing_scope,
    )
    # FastAPI may hand this same session to the route, so bind it here too.
    bind_authz(db, request)

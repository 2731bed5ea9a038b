from __future__ import annotations

import logging

from fastapi import HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from personnel_requests.authz import can_impersonate
from personnel_requests.models.security import User
from personnel_requests.security.config import SecurityConfig
from personnel_requests.services.snapshot import load_tree, principal_for

logger = logging.getLogger(__name__)


def _bad_header(request: Request, config: SecurityConfig, problem: str) -> HTTPException:
    logger.warning(
        "Rejected %s header (%s) path=%s method=%s",
        config.auth.authorization_header,
        problem,
        request.url.path,
        request.method,
    )
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=(
            f"Invalid {config.auth.authorization_header}: {problem}. "
            f"Expected '{config.auth.bearer_prefix} <user id>'."
        ),
    )


def extract_user_id(request: Request, config: SecurityConfig) -> int | None:
    """
    Read the acting user's id from ``Authorization: Bearer <user id>``.

    Returns ``None`` when the header is absent. Directory sign-on happens in
    front of this service, which only sees the resolved user id.
    """

    raw = request.headers.get(config.auth.authorization_header)
    if not raw:
        logger.info("No credentials on protected route path=%s method=%s", request.url.path, request.method)
        return None

    scheme, _, token = raw.partition(" ")
    if scheme != config.auth.bearer_prefix:
        raise _bad_header(request, config, "wrong scheme")
    token = token.strip()
    if not token:
        raise _bad_header(request, config, "missing token")

    try:
        return int(token)
    except ValueError as exc:
        raise _bad_header(request, config, "token is not a user id") from exc


def find_user(db: Session, user_id: int) -> User | None:
    return db.execute(
        select(User)
        .where(User.id == user_id)
        .options(
            selectinload(User.roles),
        )
    ).scalar_one_or_none()


def load_user(db: Session, user_id: int) -> User:
    user = find_user(db, user_id)

    if user is None or not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or inactive user")

    return user


def resolve_impersonation(request: Request, config: SecurityConfig, db: Session, actor: User) -> User:
    """
    Return the user the request should act as.

    The impersonation header is honored only for admins. An id that does not
    match an active user is ignored; impersonating yourself or another admin
    is forbidden.
    """

    raw = request.headers.get(config.auth.impersonate_header)
    if raw is None or not raw.strip():
        return actor

    if not actor.is_admin:
        logger.warning("Impersonation attempt by non-admin user_id=%s", actor.id)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only admins may impersonate users")

    try:
        target_id = int(raw.strip())
    except ValueError:
        logger.info("Ignoring impersonation header with non-integer value user_id=%s", actor.id)
        return actor

    target = find_user(db, target_id)
    if target is None or not target.is_active:
        logger.info("Ignoring impersonation of unknown user user_id=%s target=%s", actor.id, target_id)
        return actor

    tree = load_tree(db)
    if not can_impersonate(principal_for(actor, tree), principal_for(target, tree)):
        logger.warning("Forbidden impersonation user_id=%s target=%s", actor.id, target_id)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="This user cannot be impersonated")

    logger.info("Impersonating user_id=%s as target=%s", actor.id, target_id)
    return target

"""Rules for letting an administrator act as another user."""

from __future__ import annotations

from .roles import Principal


def can_impersonate(actor: Principal, target: Principal | None) -> bool:
    """
    Admins may impersonate anyone except themselves and other admins.

    A missing target is not an error here; the caller decides what an unknown
    user id means.
    """

    if target is None or not actor.is_admin:
        return False
    if target.user_id == actor.user_id:
        return False
    return not target.is_admin

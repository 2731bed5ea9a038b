"""Exceptions raised by the authorization kernel.

A denial is never an exception: ``can()`` returns ``False``. These types
signal missing reference data or records that break the organization tree.
"""

from __future__ import annotations


class NotFound(LookupError):
    """Raised when a referenced organization node, user or report does not exist."""


class HierarchyError(ValueError):
    """Raised when reference data does not form a division → department → unit tree."""


class MalformedRecord(ValueError):
    """
    Raised when a request record's organizational references are inconsistent.

    This is an upstream data-integrity bug, not a user error. Callers should
    let it propagate.
    """

# Overview: Service-layer role gates; every check takes explicit caller claims.

"""
Role-Based Access Control

Roles are a single flag on the user:
- admin:   full inventory write access (create, update, duplicate, refill, delete)
- user:    read-only (list inventory)
- counter: read-only, kept for accounts created by the counting workflow

Checks take the caller's Claims as an argument rather than reading request
globals, so the same gate guards HTTP routes, the CLI and direct service calls.
"""

import logging
from typing import Iterable

from .token_service import Claims

logger = logging.getLogger(__name__)

ROLE_ADMIN = "admin"
ROLE_USER = "user"
ROLE_COUNTER = "counter"

ALL_ROLES = (ROLE_ADMIN, ROLE_USER, ROLE_COUNTER)
WRITE_ROLES = (ROLE_ADMIN,)


class PermissionDeniedError(Exception):
    """Raised when the caller's role is not allowed to perform an action."""
    pass


def has_role(caller: Claims, allowed_roles: Iterable[str]) -> bool:
    return caller is not None and caller.role in set(allowed_roles)


def require_role(caller: Claims, allowed_roles: Iterable[str], action: str = "") -> None:
    """
    Allow the call or raise PermissionDeniedError.

    Denials are logged with the caller id and action for auditing.
    """
    allowed = tuple(allowed_roles)
    if has_role(caller, allowed):
        return

    logger.warning(
        "Permission denied: user_id=%s role=%s action=%s required=%s",
        getattr(caller, "user_id", None),
        getattr(caller, "role", None),
        action or "-",
        ",".join(allowed),
    )
    raise PermissionDeniedError("Permission denied")

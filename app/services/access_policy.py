"""Authorization gate.

Pure predicates over the request's Principal (or None when the caller is
anonymous). They raise domain errors; the FastAPI dependencies in
app/api/dependencies.py turn those into 401/403 responses.
"""

from __future__ import annotations

import logging

from app.core.errors import ForbiddenError, UnauthenticatedError
from app.models.principal import Principal

logger = logging.getLogger(__name__)


def require_authenticated(principal: Principal | None) -> Principal:
    if principal is None:
        raise UnauthenticatedError("Not authenticated")
    return principal


def require_admin(principal: Principal | None) -> Principal:
    principal = require_authenticated(principal)
    if not principal.is_admin:
        logger.warning("Access denied: user=%d is not an admin", principal.user_id)
        raise ForbiddenError("Forbidden")
    return principal


def require_owner(principal: Principal, owner_id: int | None) -> None:
    """Raise unless the principal owns the resource (admins get no bypass)."""
    if owner_id is None or principal.user_id != owner_id:
        logger.warning(
            "Access denied: user=%d does not own resource of user=%s",
            principal.user_id,
            owner_id,
        )
        raise ForbiddenError("Not authorized")


def require_owner_or_admin(principal: Principal, owner_id: int | None) -> None:
    if principal.is_admin:
        return
    require_owner(principal, owner_id)

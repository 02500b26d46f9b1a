from __future__ import annotations

import logging
from typing import Annotated

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from app.api.errors import http_error
from app.core.errors import DomainError
from app.models.principal import Principal
from app.services import access_policy, token_service
from app.services.store import store

logger = logging.getLogger(__name__)

# auto_error=False: public routes (contact form, course catalogue) still want
# to know who is calling when a token is present.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/login", auto_error=False)


def get_principal(
    raw_token: Annotated[str | None, Depends(oauth2_scheme)],
) -> Principal | None:
    """Resolve the bearer token to a Principal, or None when anonymous.

    A token that is present but invalid or expired is a 401, not anonymous.
    A valid token whose user no longer exists resolves to None.
    """
    if raw_token is None:
        return None
    try:
        claims = token_service.decode_access_token(raw_token)
    except jwt.ExpiredSignatureError:
        logger.warning("Expired token rejected")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token expired",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None
    except jwt.InvalidTokenError as e:
        logger.warning("Invalid token rejected: %s", e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None

    try:
        user_id = int(claims["sub"])
    except ValueError:
        logger.warning("Token with non-numeric subject rejected")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None

    user = store.get_user(user_id)
    if user is None:
        logger.warning("Token for unknown user=%d treated as anonymous", user_id)
        return None
    return Principal.from_user(user)


def require_user(
    principal: Annotated[Principal | None, Depends(get_principal)],
) -> Principal:
    try:
        return access_policy.require_authenticated(principal)
    except DomainError as e:
        raise http_error(e) from None


def require_admin(
    principal: Annotated[Principal | None, Depends(get_principal)],
) -> Principal:
    try:
        return access_policy.require_admin(principal)
    except DomainError as e:
        raise http_error(e) from None

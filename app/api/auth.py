"""Registration, login and the current-user lookup.

Login issues a short-lived ES256 bearer token whose subject is the user id.
Admin rights are re-read from the store on every request, so the token
carries no roles.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from app.api.dependencies import require_user
from app.api.errors import http_error
from app.api.ratelimit import LOGIN_LIMIT, REGISTER_LIMIT, require_rate_limit
from app.api.schemas import UserOut
from app.core.errors import DomainError
from app.models.principal import Principal
from app.models.user import User
from app.services import auth_service, token_service, users_service
from app.services.store import store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["auth"])


class RegisterIn(BaseModel):
    username: str
    email: str
    password: str
    first_name: str | None = None
    last_name: str | None = None


class LoginIn(BaseModel):
    username: str
    password: str


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOut


def _token_for(user: User) -> TokenOut:
    return TokenOut(
        access_token=token_service.create_access_token(sub=str(user.id)),
        user=UserOut.model_validate(user),
    )


@router.post(
    "/register",
    response_model=TokenOut,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_rate_limit(REGISTER_LIMIT))],
)
def register(payload: RegisterIn) -> TokenOut:
    try:
        user = users_service.register_user(
            store,
            username=payload.username,
            email=payload.email,
            password=payload.password,
            first_name=payload.first_name,
            last_name=payload.last_name,
        )
    except DomainError as e:
        raise http_error(e) from None
    return _token_for(user)


@router.post(
    "/login",
    response_model=TokenOut,
    dependencies=[Depends(require_rate_limit(LOGIN_LIMIT))],
)
def login(payload: LoginIn) -> TokenOut:
    user = auth_service.authenticate_user(store, payload.username, payload.password)
    if user is None:
        logger.warning("Failed login attempt username=%s", payload.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    logger.info("Login succeeded user_id=%d", user.id)
    return _token_for(user)


@router.get("/user", response_model=UserOut)
def current_user(principal: Annotated[Principal, Depends(require_user)]) -> UserOut:
    try:
        user = users_service.get_user(store, principal.user_id)
    except DomainError as e:
        raise http_error(e) from None
    return UserOut.model_validate(user)

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel

from app.api.dependencies import require_admin
from app.api.errors import http_error
from app.api.schemas import UserOut
from app.core.errors import DomainError
from app.models.principal import Principal
from app.services import users_service
from app.services.store import store

# Admin user management. Field rules (username length, email shape,
# password length) are enforced in users_service so registration shares them.

router = APIRouter(prefix="/api/users", tags=["users"])


class UserCreateIn(BaseModel):
    username: str
    email: str
    password: str
    first_name: str | None = None
    last_name: str | None = None
    is_admin: bool = False


class UserUpdateIn(BaseModel):
    username: str | None = None
    email: str | None = None
    password: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    is_admin: bool | None = None


@router.get("", response_model=list[UserOut])
def get_users(_admin: Annotated[Principal, Depends(require_admin)]) -> list[UserOut]:
    return [UserOut.model_validate(u) for u in users_service.list_users(store)]


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def post_user(
    payload: UserCreateIn,
    _admin: Annotated[Principal, Depends(require_admin)],
) -> UserOut:
    try:
        user = users_service.create_user(store, **payload.model_dump())
    except DomainError as e:
        raise http_error(e) from None
    return UserOut.model_validate(user)


@router.get("/{user_id}", response_model=UserOut)
def get_user(
    user_id: int,
    _admin: Annotated[Principal, Depends(require_admin)],
) -> UserOut:
    try:
        user = users_service.get_user(store, user_id)
    except DomainError as e:
        raise http_error(e) from None
    return UserOut.model_validate(user)


@router.put("/{user_id}", response_model=UserOut)
def put_user(
    user_id: int,
    payload: UserUpdateIn,
    _admin: Annotated[Principal, Depends(require_admin)],
) -> UserOut:
    try:
        user = users_service.update_user(store, user_id, **payload.model_dump())
    except DomainError as e:
        raise http_error(e) from None
    return UserOut.model_validate(user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: int,
    _admin: Annotated[Principal, Depends(require_admin)],
) -> Response:
    try:
        users_service.delete_user(store, user_id)
    except DomainError as e:
        raise http_error(e) from None
    return Response(status_code=status.HTTP_204_NO_CONTENT)

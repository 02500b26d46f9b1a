"""Contact inbox (admin) and reply threads (admin and message owner)."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, ConfigDict, Field

from app.api.dependencies import get_principal, require_admin, require_user
from app.api.errors import http_error
from app.api.ratelimit import CONTACT_LIMIT, require_rate_limit
from app.api.schemas import EMAIL_PATTERN
from app.core.errors import DomainError
from app.models.principal import Principal
from app.services import messaging_service
from app.services.messaging_service import Thread
from app.services.store import store

router = APIRouter(prefix="/api", tags=["messages"])


class ContactIn(BaseModel):
    name: str = Field(min_length=2)
    email: str = Field(pattern=EMAIL_PATTERN)
    subject: str = Field(min_length=5)
    message: str = Field(min_length=10)


class StatusIn(BaseModel):
    status: str


class ReplyIn(BaseModel):
    content: str = Field(min_length=1)


class ReplyOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    message_id: int
    author_id: int
    content: str
    is_admin: bool
    read: bool
    created_at: datetime


class MessageOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int | None
    name: str
    email: str
    subject: str
    message: str
    status: str
    created_at: datetime


class ThreadOut(MessageOut):
    replies: list[ReplyOut] = []


class CountOut(BaseModel):
    count: int


def _thread_out(thread: Thread) -> ThreadOut:
    return ThreadOut(
        **MessageOut.model_validate(thread.message).model_dump(),
        replies=[ReplyOut.model_validate(r) for r in thread.replies],
    )


# ---------------------------------------------------------------------------
# Public contact form
# ---------------------------------------------------------------------------


@router.post(
    "/messages",
    response_model=MessageOut,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_rate_limit(CONTACT_LIMIT))],
)
def send_message(
    payload: ContactIn,
    principal: Annotated[Principal | None, Depends(get_principal)],
) -> MessageOut:
    message = messaging_service.send_message(
        store,
        name=payload.name,
        email=payload.email,
        subject=payload.subject,
        message=payload.message,
        sender=principal,
    )
    return MessageOut.model_validate(message)


# ---------------------------------------------------------------------------
# Admin inbox
# ---------------------------------------------------------------------------


@router.get("/messages", response_model=list[ThreadOut])
def list_messages(
    _admin: Annotated[Principal, Depends(require_admin)],
) -> list[ThreadOut]:
    return [_thread_out(t) for t in messaging_service.list_threads(store)]


@router.get("/messages/unread", response_model=list[ThreadOut])
def list_unread(
    _admin: Annotated[Principal, Depends(require_admin)],
) -> list[ThreadOut]:
    return [_thread_out(t) for t in messaging_service.list_threads(store, unread_only=True)]


@router.get("/messages/unread-count", response_model=CountOut)
def unread_count(_admin: Annotated[Principal, Depends(require_admin)]) -> CountOut:
    return CountOut(count=messaging_service.unread_count(store))


# ---------------------------------------------------------------------------
# Signed-in user's own threads
# ---------------------------------------------------------------------------


@router.get("/messages/mine", response_model=list[ThreadOut])
def my_messages(
    principal: Annotated[Principal, Depends(require_user)],
) -> list[ThreadOut]:
    return [
        _thread_out(t)
        for t in messaging_service.list_threads_for_user(store, principal.user_id)
    ]


@router.post("/messages/mine/read", response_model=CountOut)
def acknowledge_replies(
    principal: Annotated[Principal, Depends(require_user)],
) -> CountOut:
    return CountOut(count=messaging_service.acknowledge_all(store, principal))


# ---------------------------------------------------------------------------
# Single thread
# ---------------------------------------------------------------------------


@router.get("/messages/{message_id}", response_model=ThreadOut)
def open_message(
    message_id: int,
    _admin: Annotated[Principal, Depends(require_admin)],
) -> ThreadOut:
    try:
        thread = messaging_service.open_message(store, message_id)
    except DomainError as e:
        raise http_error(e) from None
    return _thread_out(thread)


@router.put("/messages/{message_id}/status", response_model=MessageOut)
def set_status(
    message_id: int,
    payload: StatusIn,
    _admin: Annotated[Principal, Depends(require_admin)],
) -> MessageOut:
    try:
        message = messaging_service.set_status(store, message_id, payload.status)
    except DomainError as e:
        raise http_error(e) from None
    return MessageOut.model_validate(message)


@router.delete("/messages/{message_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_message(
    message_id: int,
    _admin: Annotated[Principal, Depends(require_admin)],
) -> Response:
    try:
        messaging_service.delete_message(store, message_id)
    except DomainError as e:
        raise http_error(e) from None
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/messages/{message_id}/replies",
    response_model=ReplyOut,
    status_code=status.HTTP_201_CREATED,
)
def post_reply(
    message_id: int,
    payload: ReplyIn,
    principal: Annotated[Principal, Depends(require_user)],
) -> ReplyOut:
    try:
        created = messaging_service.reply(store, principal, message_id, payload.content)
    except DomainError as e:
        raise http_error(e) from None
    return ReplyOut.model_validate(created)


@router.put("/replies/{reply_id}/read", response_model=ReplyOut)
def mark_reply_read(
    reply_id: int,
    principal: Annotated[Principal, Depends(require_user)],
) -> ReplyOut:
    try:
        reply = messaging_service.mark_reply_read(store, principal, reply_id)
    except DomainError as e:
        raise http_error(e) from None
    return ReplyOut.model_validate(reply)

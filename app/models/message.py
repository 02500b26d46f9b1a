from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Literal, get_args

from app.models.user import UNSAVED_ID

MessageStatus = Literal["unread", "read", "replied", "pending"]
MESSAGE_STATUSES: tuple[str, ...] = get_args(MessageStatus)


@dataclass(frozen=True, slots=True)
class Message:
    """Contact-form message. user_id is None for anonymous senders."""

    id: int
    name: str
    email: str
    subject: str
    message: str
    created_at: datetime
    user_id: int | None = None
    status: MessageStatus = "unread"

    @staticmethod
    def new(
        *,
        name: str,
        email: str,
        subject: str,
        message: str,
        user_id: int | None = None,
    ) -> Message:
        return Message(
            id=UNSAVED_ID,
            name=name,
            email=email,
            subject=subject,
            message=message,
            created_at=datetime.now(UTC),
            user_id=user_id,
        )


@dataclass(frozen=True, slots=True)
class MessageReply:
    id: int
    message_id: int
    author_id: int
    content: str
    created_at: datetime
    is_admin: bool = False
    read: bool = False

    @staticmethod
    def new(
        *, message_id: int, author_id: int, content: str, is_admin: bool
    ) -> MessageReply:
        return MessageReply(
            id=UNSAVED_ID,
            message_id=message_id,
            author_id=author_id,
            content=content,
            created_at=datetime.now(UTC),
            is_admin=is_admin,
        )

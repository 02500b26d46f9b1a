"""Contact inbox and reply threads.

Status flow on a message:

    unread --(admin opens)--> read --(admin replies)--> replied

plus an admin override that sets any status directly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from app.core.errors import NotFoundError, ValidationError
from app.core.metrics import MESSAGES_RECEIVED, REPLIES_SENT
from app.models.message import Message, MessageReply
from app.models.principal import Principal
from app.services import access_policy
from app.services.store import EntityStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Thread:
    message: Message
    replies: tuple[MessageReply, ...]


def _thread(store: EntityStore, message: Message) -> Thread:
    return Thread(message=message, replies=tuple(store.list_replies(message.id)))


def _require(store: EntityStore, message_id: int) -> Message:
    message = store.get_message(message_id)
    if message is None:
        raise NotFoundError("Message not found")
    return message


def send_message(
    store: EntityStore,
    *,
    name: str,
    email: str,
    subject: str,
    message: str,
    sender: Principal | None = None,
) -> Message:
    """Store a contact-form message; signed-in senders are linked by id."""
    stored = store.create_message(
        Message.new(
            name=name,
            email=email,
            subject=subject,
            message=message,
            user_id=sender.user_id if sender is not None else None,
        )
    )
    MESSAGES_RECEIVED.labels(sender="user" if sender is not None else "anonymous").inc()
    logger.info("Message received id=%d user=%s", stored.id, stored.user_id)
    return stored


def list_threads(store: EntityStore, *, unread_only: bool = False) -> list[Thread]:
    messages = store.list_unread_messages() if unread_only else store.list_messages()
    return [_thread(store, m) for m in messages]


def list_threads_for_user(store: EntityStore, user_id: int) -> list[Thread]:
    return [_thread(store, m) for m in store.list_messages_by_user(user_id)]


def unread_count(store: EntityStore) -> int:
    return len(store.list_unread_messages())


def open_message(store: EntityStore, message_id: int) -> Thread:
    """Admin view of one message; the first open moves it from unread to read."""
    message = _require(store, message_id)
    if message.status == "unread":
        message = store.set_message_status(message_id, "read")
    return _thread(store, message)


def set_status(store: EntityStore, message_id: int, status: str) -> Message:
    message = store.set_message_status(message_id, status)
    logger.info("Message id=%d status -> %s", message_id, status)
    return message


def reply(
    store: EntityStore, principal: Principal, message_id: int, content: str
) -> MessageReply:
    """Append to the thread. Admins may reply anywhere, users only on their own."""
    content = content.strip()
    if not content:
        raise ValidationError("Reply content must not be empty")

    message = _require(store, message_id)
    access_policy.require_owner_or_admin(principal, message.user_id)

    created = store.add_reply(
        message_id, principal.user_id, content, is_admin=principal.is_admin
    )
    REPLIES_SENT.labels(author="admin" if principal.is_admin else "user").inc()
    logger.info(
        "Reply id=%d on message=%d by user=%d", created.id, message_id, principal.user_id
    )
    return created


def mark_reply_read(store: EntityStore, principal: Principal, reply_id: int) -> MessageReply:
    existing = store.get_reply(reply_id)
    if existing is None:
        raise NotFoundError("Reply not found")
    message = _require(store, existing.message_id)
    access_policy.require_owner(principal, message.user_id)
    return store.mark_reply_read(reply_id)


def acknowledge_all(store: EntityStore, principal: Principal) -> int:
    return store.acknowledge_replies(principal.user_id)


def delete_message(store: EntityStore, message_id: int) -> None:
    if not store.delete_message(message_id):
        raise NotFoundError("Message not found")

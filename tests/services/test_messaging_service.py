"""Contact inbox and reply-thread flows, end to end through the service layer."""

from __future__ import annotations

import pytest

from app.core.errors import ForbiddenError, NotFoundError, ValidationError
from app.models.principal import Principal
from app.models.user import User
from app.services import messaging_service
from app.services.store import store


def _send(sender: User | None = None):
    return messaging_service.send_message(
        store,
        name="Alice",
        email="alice@example.com",
        subject="Billing question",
        message="Can I get an invoice for my purchase?",
        sender=Principal.from_user(sender) if sender is not None else None,
    )


def test_full_thread_lifecycle(admin: User, user: User) -> None:
    message = _send(user)
    assert message.user_id == user.id
    assert messaging_service.unread_count(store) == 1

    thread = messaging_service.open_message(store, message.id)
    assert thread.message.status == "read"
    assert messaging_service.unread_count(store) == 0

    reply = messaging_service.reply(store, Principal.from_user(admin), message.id, "Sure!")
    assert reply.is_admin
    assert store.get_message(message.id).status == "replied"
    assert store.get_user(user.id).has_unread_messages is True

    messaging_service.mark_reply_read(store, Principal.from_user(user), reply.id)
    assert store.get_user(user.id).has_unread_messages is False

    threads = messaging_service.list_threads_for_user(store, user.id)
    assert [r.id for r in threads[0].replies] == [reply.id]


def test_open_does_not_downgrade_replied(admin: User, user: User) -> None:
    message = _send(user)
    messaging_service.reply(store, Principal.from_user(admin), message.id, "Done")
    assert messaging_service.open_message(store, message.id).message.status == "replied"


def test_owner_may_follow_up_without_status_change(user: User) -> None:
    message = _send(user)
    follow_up = messaging_service.reply(
        store, Principal.from_user(user), message.id, "Order #1234"
    )
    assert follow_up.is_admin is False
    assert store.get_message(message.id).status == "unread"


def test_only_owner_marks_replies_read(admin: User, user: User, other_user: User) -> None:
    message = _send(user)
    with pytest.raises(ForbiddenError):
        messaging_service.reply(store, Principal.from_user(other_user), message.id, "hi")

    reply = messaging_service.reply(store, Principal.from_user(admin), message.id, "hi")
    with pytest.raises(ForbiddenError):
        messaging_service.mark_reply_read(store, Principal.from_user(other_user), reply.id)
    with pytest.raises(ForbiddenError):
        messaging_service.mark_reply_read(store, Principal.from_user(admin), reply.id)
    assert store.get_user(user.id).has_unread_messages is True


def test_nobody_but_admin_replies_to_anonymous_message(admin: User, user: User) -> None:
    message = _send()
    with pytest.raises(ForbiddenError):
        messaging_service.reply(store, Principal.from_user(user), message.id, "hi")
    messaging_service.reply(store, Principal.from_user(admin), message.id, "hi")
    assert store.get_message(message.id).status == "replied"


def test_blank_reply_rejected(admin: User) -> None:
    message = _send()
    with pytest.raises(ValidationError):
        messaging_service.reply(store, Principal.from_user(admin), message.id, "   ")


def test_unread_only_filter(admin: User) -> None:
    first = _send()
    _send()
    messaging_service.open_message(store, first.id)
    unread = messaging_service.list_threads(store, unread_only=True)
    assert len(unread) == 1
    assert len(messaging_service.list_threads(store)) == 2


def test_acknowledge_all(admin: User, user: User) -> None:
    message = _send(user)
    messaging_service.reply(store, Principal.from_user(admin), message.id, "one")
    messaging_service.reply(store, Principal.from_user(admin), message.id, "two")
    assert messaging_service.acknowledge_all(store, Principal.from_user(user)) == 2
    assert store.get_user(user.id).has_unread_messages is False


def test_delete_missing_message() -> None:
    with pytest.raises(NotFoundError):
        messaging_service.delete_message(store, 99)
    with pytest.raises(NotFoundError):
        messaging_service.open_message(store, 99)

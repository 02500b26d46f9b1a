from __future__ import annotations

import itertools
from dataclasses import replace
from typing import Protocol

from app.models.message import Message, MessageReply


class MessageRepo(Protocol):
    def get_by_id(self, message_id: int) -> Message | None: ...
    def list_all(self) -> list[Message]: ...
    def list_by_status(self, status: str) -> list[Message]: ...
    def list_by_user(self, user_id: int) -> list[Message]: ...
    def add(self, message: Message) -> Message: ...
    def save(self, message: Message) -> None: ...
    def remove(self, message_id: int) -> bool: ...
    def clear(self) -> None: ...


class ReplyRepo(Protocol):
    def get_by_id(self, reply_id: int) -> MessageReply | None: ...
    def list_by_message(self, message_id: int) -> list[MessageReply]: ...
    def add(self, reply: MessageReply) -> MessageReply: ...
    def save(self, reply: MessageReply) -> None: ...
    def remove_by_message(self, message_id: int) -> int: ...
    def clear(self) -> None: ...


class InMemoryMessageRepo:
    def __init__(self) -> None:
        self._by_id: dict[int, Message] = {}
        self._ids = itertools.count(1)

    def get_by_id(self, message_id: int) -> Message | None:
        return self._by_id.get(message_id)

    def list_all(self) -> list[Message]:
        return list(self._by_id.values())

    def list_by_status(self, status: str) -> list[Message]:
        return [m for m in self._by_id.values() if m.status == status]

    def list_by_user(self, user_id: int) -> list[Message]:
        # Anonymous messages (user_id None) never match an int id.
        return [m for m in self._by_id.values() if m.user_id == user_id]

    def add(self, message: Message) -> Message:
        stored = replace(message, id=next(self._ids))
        self._by_id[stored.id] = stored
        return stored

    def save(self, message: Message) -> None:
        if message.id not in self._by_id:
            raise KeyError("message not found")
        self._by_id[message.id] = message

    def remove(self, message_id: int) -> bool:
        return self._by_id.pop(message_id, None) is not None

    def clear(self) -> None:
        self._by_id.clear()
        self._ids = itertools.count(1)


class InMemoryReplyRepo:
    def __init__(self) -> None:
        self._by_id: dict[int, MessageReply] = {}
        self._ids = itertools.count(1)

    def get_by_id(self, reply_id: int) -> MessageReply | None:
        return self._by_id.get(reply_id)

    def list_by_message(self, message_id: int) -> list[MessageReply]:
        # ids are assigned in creation order, so this is thread order
        replies = [r for r in self._by_id.values() if r.message_id == message_id]
        return sorted(replies, key=lambda r: (r.created_at, r.id))

    def add(self, reply: MessageReply) -> MessageReply:
        stored = replace(reply, id=next(self._ids))
        self._by_id[stored.id] = stored
        return stored

    def save(self, reply: MessageReply) -> None:
        if reply.id not in self._by_id:
            raise KeyError("reply not found")
        self._by_id[reply.id] = reply

    def remove_by_message(self, message_id: int) -> int:
        doomed = [rid for rid, r in self._by_id.items() if r.message_id == message_id]
        for rid in doomed:
            del self._by_id[rid]
        return len(doomed)

    def clear(self) -> None:
        self._by_id.clear()
        self._ids = itertools.count(1)

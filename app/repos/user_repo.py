from __future__ import annotations

import itertools
from dataclasses import replace
from typing import Protocol

from app.models.user import User


class UserRepo(Protocol):
    def get_by_id(self, user_id: int) -> User | None: ...
    def get_by_username(self, username: str) -> User | None: ...
    def get_by_email(self, email: str) -> User | None: ...
    def list_all(self) -> list[User]: ...
    def count(self) -> int: ...
    def add(self, user: User) -> User: ...
    def save(self, user: User) -> None: ...
    def remove(self, user_id: int) -> bool: ...
    def clear(self) -> None: ...


def _key(value: str) -> str:
    return value.strip().casefold()


class InMemoryUserRepo:
    """Users keyed by an auto-incrementing id, with case-insensitive indexes."""

    def __init__(self) -> None:
        self._by_id: dict[int, User] = {}
        self._by_username: dict[str, int] = {}
        self._by_email: dict[str, int] = {}
        self._ids = itertools.count(1)

    def get_by_id(self, user_id: int) -> User | None:
        return self._by_id.get(user_id)

    def get_by_username(self, username: str) -> User | None:
        user_id = self._by_username.get(_key(username))
        return None if user_id is None else self._by_id[user_id]

    def get_by_email(self, email: str) -> User | None:
        user_id = self._by_email.get(_key(email))
        return None if user_id is None else self._by_id[user_id]

    def list_all(self) -> list[User]:
        return list(self._by_id.values())

    def count(self) -> int:
        return len(self._by_id)

    def add(self, user: User) -> User:
        if _key(user.username) in self._by_username:
            raise ValueError("username already exists")
        if _key(user.email) in self._by_email:
            raise ValueError("email already exists")

        stored = replace(user, id=next(self._ids))
        self._index(stored)
        return stored

    def save(self, user: User) -> None:
        existing = self._by_id.get(user.id)
        if existing is None:
            raise KeyError("user not found")

        indexes = (
            (self._by_username, existing.username, user.username),
            (self._by_email, existing.email, user.email),
        )
        for index, _old, new in indexes:
            owner = index.get(_key(new))
            if owner is not None and owner != user.id:
                raise ValueError(f"{new!r} already exists")

        for index, old, _new in indexes:
            index.pop(_key(old), None)
        self._index(user)

    def remove(self, user_id: int) -> bool:
        user = self._by_id.pop(user_id, None)
        if user is None:
            return False
        self._by_username.pop(_key(user.username), None)
        self._by_email.pop(_key(user.email), None)
        return True

    def clear(self) -> None:
        self._by_id.clear()
        self._by_username.clear()
        self._by_email.clear()
        self._ids = itertools.count(1)

    def _index(self, user: User) -> None:
        self._by_id[user.id] = user
        self._by_username[_key(user.username)] = user.id
        self._by_email[_key(user.email)] = user.id

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

# Placeholder id for rows that have not been added to a repo yet.
UNSAVED_ID = 0


@dataclass(frozen=True, slots=True)
class User:
    id: int
    username: str
    email: str
    password_hash: str
    created_at: datetime
    first_name: str | None = None
    last_name: str | None = None
    is_admin: bool = False
    # Set only on the bootstrap admin; checked by the store on update/delete.
    is_protected: bool = False
    has_unread_messages: bool = False

    @staticmethod
    def new(
        *,
        username: str,
        email: str,
        password_hash: str,
        first_name: str | None = None,
        last_name: str | None = None,
        is_admin: bool = False,
        is_protected: bool = False,
    ) -> User:
        return User(
            id=UNSAVED_ID,
            username=username.strip(),
            email=email.strip().lower(),
            password_hash=password_hash,
            created_at=datetime.now(UTC),
            first_name=first_name,
            last_name=last_name,
            is_admin=is_admin,
            is_protected=is_protected,
        )

from __future__ import annotations

from dataclasses import dataclass

from app.models.user import User


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated identity for the current request.

    Built from the bearer token's subject and the user's *current* row, so
    an admin demotion or a deletion takes effect on the next request.
    """

    user_id: int
    username: str
    is_admin: bool = False

    @staticmethod
    def from_user(user: User) -> Principal:
        return Principal(user_id=user.id, username=user.username, is_admin=user.is_admin)

from __future__ import annotations

import logging
import re

from app.core.errors import ForbiddenError, NotFoundError, ValidationError
from app.models.user import User
from app.services import auth_service, site_settings
from app.services.store import EntityStore

logger = logging.getLogger(__name__)

USERNAME_MIN_LEN = 3
USERNAME_MAX_LEN = 20
PASSWORD_MIN_LEN = 6

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _clean_username(username: str) -> str:
    username = username.strip()
    if not USERNAME_MIN_LEN <= len(username) <= USERNAME_MAX_LEN:
        raise ValidationError(
            f"Username must be {USERNAME_MIN_LEN}-{USERNAME_MAX_LEN} characters"
        )
    return username


def _clean_email(email: str) -> str:
    email = email.strip().lower()
    if not _EMAIL_RE.match(email):
        raise ValidationError("Invalid email address")
    return email


def _check_password(password: str) -> None:
    if len(password) < PASSWORD_MIN_LEN:
        raise ValidationError(
            f"Password must be at least {PASSWORD_MIN_LEN} characters"
        )


def _optional_name(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None


def list_users(store: EntityStore) -> list[User]:
    return store.list_users()


def get_user(store: EntityStore, user_id: int) -> User:
    user = store.get_user(user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def create_user(
    store: EntityStore,
    *,
    username: str,
    email: str,
    password: str,
    first_name: str | None = None,
    last_name: str | None = None,
    is_admin: bool = False,
) -> User:
    """Validate, hash and store a new user. Raises ConflictError on duplicates."""
    username = _clean_username(username)
    email = _clean_email(email)
    _check_password(password)

    user = User.new(
        username=username,
        email=email,
        password_hash=auth_service.hash_password(password),
        first_name=_optional_name(first_name),
        last_name=_optional_name(last_name),
        is_admin=is_admin,
    )
    return store.create_user(user)


def register_user(
    store: EntityStore,
    *,
    username: str,
    email: str,
    password: str,
    first_name: str | None = None,
    last_name: str | None = None,
) -> User:
    """Public self-registration; never grants admin rights."""
    if not site_settings.get_settings().enable_registration:
        logger.warning("Registration refused: disabled in site settings")
        raise ForbiddenError("Registration is currently disabled")
    user = create_user(
        store,
        username=username,
        email=email,
        password=password,
        first_name=first_name,
        last_name=last_name,
    )
    logger.info("User registered  user_id=%d username=%s", user.id, user.username)
    return user


def update_user(
    store: EntityStore,
    user_id: int,
    *,
    username: str | None = None,
    email: str | None = None,
    password: str | None = None,
    first_name: str | None = None,
    last_name: str | None = None,
    is_admin: bool | None = None,
) -> User:
    """Partial update; None means "leave unchanged"."""
    changes: dict[str, object] = {}
    if username is not None:
        changes["username"] = _clean_username(username)
    if email is not None:
        changes["email"] = _clean_email(email)
    if password:
        _check_password(password)
        changes["password_hash"] = auth_service.hash_password(password)
    if first_name is not None:
        changes["first_name"] = _optional_name(first_name)
    if last_name is not None:
        changes["last_name"] = _optional_name(last_name)
    if is_admin is not None:
        changes["is_admin"] = is_admin

    if not changes:
        return get_user(store, user_id)

    updated = store.update_user(user_id, **changes)
    logger.info("Updated user id=%d fields=%s", user_id, sorted(changes))
    return updated


def delete_user(store: EntityStore, user_id: int) -> None:
    if not store.delete_user(user_id):
        raise NotFoundError("User not found")

from __future__ import annotations

import logging

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHash, VerificationError, VerifyMismatchError

from app.models.user import User
from app.services.store import EntityStore

logger = logging.getLogger(__name__)

# Argon2id; the encoded hash carries its own salt and cost parameters,
# so every call salts freshly and verify needs nothing but the string.
_ph = PasswordHasher()


def hash_password(plain_password: str) -> str:
    if not plain_password:
        raise ValueError("password must be non-empty")
    return _ph.hash(plain_password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    """Constant-time check. False on mismatch or any malformed hash; never raises."""
    if not plain_password or not password_hash:
        return False
    try:
        return _ph.verify(password_hash, plain_password)
    except (VerifyMismatchError, VerificationError, InvalidHash):
        return False


def authenticate_user(store: EntityStore, username: str, password: str) -> User | None:
    user = store.get_user_by_username(username)
    if user is None:
        return None
    if not verify_password(password, user.password_hash):
        return None

    # Upgrade the stored hash when the library's default parameters moved on.
    try:
        if _ph.check_needs_rehash(user.password_hash):
            user = store.update_user(user.id, password_hash=_ph.hash(password))
            logger.info("Rehashed password for user=%d", user.id)
    except InvalidHash:
        return None

    return user

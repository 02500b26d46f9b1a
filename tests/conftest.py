from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from app.api.ratelimit import _rate_limiter
from app.core.config import SETTINGS
from app.main import app
from app.models.course import Course, CourseContent, Lesson, Section
from app.models.user import User
from app.services import site_settings, token_service, users_service
from app.services.seed import seed_admin
from app.services.store import store

# Ensure repo root is on sys.path so `import app` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

PASSWORD = "secret123"


@pytest.fixture(autouse=True)
def reset_store() -> None:
    """Empty store with only the protected admin, ids restarting at 1."""
    store.clear()
    seed_admin(store, SETTINGS)


@pytest.fixture(autouse=True)
def reset_site_settings() -> None:
    site_settings.reset_settings()


@pytest.fixture(autouse=True)
def reset_rate_limiter() -> None:
    """Clear rate limit buckets between tests so limits don't bleed."""
    if hasattr(_rate_limiter, "_buckets"):
        _rate_limiter._buckets.clear()  # type: ignore[union-attr]


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def mint_token(user: User) -> str:
    """Create a valid ES256 JWT for an existing user."""
    return token_service.create_access_token(sub=str(user.id))


def auth(token: str | None) -> dict[str, str]:
    if token is None:
        return {}
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_user() -> Callable[..., User]:
    def _make(username: str = "alice", *, is_admin: bool = False) -> User:
        return users_service.create_user(
            store,
            username=username,
            email=f"{username}@example.com",
            password=PASSWORD,
            is_admin=is_admin,
        )

    return _make


@pytest.fixture
def admin() -> User:
    user = store.get_user_by_username(SETTINGS.admin_username)
    assert user is not None
    return user


@pytest.fixture
def user(make_user: Callable[..., User]) -> User:
    return make_user("alice")


@pytest.fixture
def other_user(make_user: Callable[..., User]) -> User:
    return make_user("bob")


@pytest.fixture
def admin_token(admin: User) -> str:
    return mint_token(admin)


@pytest.fixture
def user_token(user: User) -> str:
    return mint_token(user)


@pytest.fixture
def other_token(other_user: User) -> str:
    return mint_token(other_user)


def new_course(
    title: str = "Intro to Testing",
    *,
    category: str = "Development",
    featured: bool = False,
) -> Course:
    return Course.new(
        title=title,
        description="A course used by the test suite.",
        price=4999,
        duration="4 weeks",
        level="Beginner",
        image_url="https://example.com/course.png",
        instructor="Test Instructor",
        category=category,
        tags=("testing",),
        featured=featured,
        content=CourseContent(
            sections=(
                Section(
                    title="Basics",
                    lessons=(Lesson(title="Welcome", duration="05:00", content="Hi"),),
                ),
            )
        ),
    )


@pytest.fixture
def course() -> Course:
    return store.create_course(new_course())

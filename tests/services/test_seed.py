from __future__ import annotations

from dataclasses import replace

from app.core.config import SETTINGS
from app.services.seed import seed, seed_admin, seed_demo_courses
from app.services.store import store


def test_seed_admin_is_idempotent() -> None:
    first = store.get_user_by_username(SETTINGS.admin_username)
    again = seed_admin(store, SETTINGS)
    assert again == first
    assert store.count_users() == 1


def test_seeded_admin_is_protected_admin() -> None:
    admin = store.get_user_by_username(SETTINGS.admin_username)
    assert admin.is_admin and admin.is_protected
    assert admin.email == SETTINGS.admin_email.lower()


def test_demo_courses_are_featured_with_curriculum() -> None:
    courses = seed_demo_courses(store)
    assert len(courses) == 3
    assert all(c.featured for c in courses)
    assert all(c.content.lesson_count == 4 for c in courses)
    assert store.list_featured_courses() == courses


def test_demo_courses_skipped_when_catalogue_not_empty() -> None:
    seed_demo_courses(store)
    assert seed_demo_courses(store) == []
    assert store.count_courses() == 3


def test_seed_respects_demo_flag() -> None:
    store.clear()
    seed(store, replace(SETTINGS, seed_demo_data=False))
    assert store.count_users() == 1
    assert store.count_courses() == 0

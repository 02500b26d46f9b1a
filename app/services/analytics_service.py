"""Read-only aggregates for the admin dashboard. Nothing here is stored."""

from __future__ import annotations

from dataclasses import dataclass

from app.services.store import EntityStore


@dataclass(frozen=True, slots=True)
class CategoryCount:
    category: str
    count: int


@dataclass(frozen=True, slots=True)
class DashboardStats:
    total_users: int
    total_courses: int
    total_enrollments: int
    completed_enrollments: int
    completion_rate: int  # whole percent
    courses_by_category: tuple[CategoryCount, ...]


def total_users(store: EntityStore) -> int:
    return store.count_users()


def total_courses(store: EntityStore) -> int:
    return store.count_courses()


def total_enrollments(store: EntityStore) -> int:
    return len(store.list_enrollments())


def course_count_by_category(store: EntityStore) -> tuple[CategoryCount, ...]:
    return tuple(
        CategoryCount(category=category, count=count)
        for category, count in store.course_count_by_category().items()
    )


def dashboard(store: EntityStore) -> DashboardStats:
    enrollments = store.list_enrollments()
    completed = sum(1 for e in enrollments if e.completed)
    total = len(enrollments)
    # integer percent, half rounds up (12.5 -> 13)
    rate = (completed * 200 + total) // (2 * total) if total else 0
    return DashboardStats(
        total_users=total_users(store),
        total_courses=total_courses(store),
        total_enrollments=total,
        completed_enrollments=completed,
        completion_rate=rate,
        courses_by_category=course_count_by_category(store),
    )

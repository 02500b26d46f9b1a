"""Startup data: the protected admin and, optionally, demo courses."""

from __future__ import annotations

import functools
import logging

from app.core.config import Settings
from app.models.course import Course, CourseContent, Lesson, Section
from app.models.user import User
from app.services import auth_service
from app.services.store import EntityStore

logger = logging.getLogger(__name__)

_DEMO_CONTENT = CourseContent(
    sections=(
        Section(
            title="Introduction",
            lessons=(
                Lesson(
                    title="Course Overview",
                    duration="10:15",
                    content="Welcome to the course! In this lesson, we'll cover what to expect.",
                ),
                Lesson(
                    title="Setting Up Your Environment",
                    duration="15:30",
                    content="Let's set up all the tools you'll need for this course.",
                ),
            ),
        ),
        Section(
            title="Getting Started",
            lessons=(
                Lesson(
                    title="Basic Concepts",
                    duration="20:45",
                    content="We'll cover the fundamental concepts you need to understand.",
                ),
                Lesson(
                    title="Your First Project",
                    duration="25:10",
                    content="Let's build our first project together, step by step.",
                ),
            ),
        ),
    )
)

_DEMO_COURSES = (
    dict(
        title="Full Stack Web Development: React, Node & MongoDB",
        description=(
            "Master front-end and back-end technologies to build complete "
            "web applications from scratch."
        ),
        price=8999,
        duration="12 weeks",
        level="Intermediate",
        image_url="https://images.unsplash.com/photo-1516321318423-f06f85e504b3",
        instructor="John Smith",
        category="Web Development",
        tags=("JavaScript", "React", "Node.js", "MongoDB"),
    ),
    dict(
        title="Data Science & Machine Learning with Python",
        description=(
            "Learn to analyze data, create models, and implement machine "
            "learning algorithms."
        ),
        price=7499,
        duration="8 weeks",
        level="Intermediate",
        image_url="https://images.unsplash.com/photo-1551434678-e076c223a692",
        instructor="Olivia Johnson",
        category="Data Science",
        tags=("Python", "Machine Learning", "Data Analysis"),
    ),
    dict(
        title="UI/UX Design Masterclass: Create Modern Interfaces",
        description=(
            "Learn design principles and tools to create beautiful, "
            "user-friendly interfaces."
        ),
        price=6999,
        duration="10 weeks",
        level="Beginner",
        image_url="https://images.unsplash.com/photo-1522542550221-31fd19575a2d",
        instructor="Michael Davis",
        category="Design",
        tags=("UI", "UX", "Figma", "Design Principles"),
    ),
)


@functools.cache
def _hash_once(password: str) -> str:
    # Reseeding (tests reset the store constantly) should not pay Argon2 each time.
    return auth_service.hash_password(password)


def seed_admin(store: EntityStore, settings: Settings) -> User:
    """Create the protected admin if it is not there yet."""
    existing = store.get_user_by_username(settings.admin_username)
    if existing is not None:
        return existing
    admin = store.create_user(
        User.new(
            username=settings.admin_username,
            email=settings.admin_email,
            password_hash=_hash_once(settings.admin_password),
            first_name="Admin",
            last_name="User",
            is_admin=True,
            is_protected=True,
        )
    )
    logger.info("Seeded protected admin id=%d username=%s", admin.id, admin.username)
    return admin


def seed_demo_courses(store: EntityStore) -> list[Course]:
    if store.count_courses():
        return []
    created = [
        store.create_course(Course.new(**fields, featured=True, content=_DEMO_CONTENT))
        for fields in _DEMO_COURSES
    ]
    logger.info("Seeded %d demo courses", len(created))
    return created


def seed(store: EntityStore, settings: Settings) -> None:
    seed_admin(store, settings)
    if settings.seed_demo_data:
        seed_demo_courses(store)

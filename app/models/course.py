from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime

from app.models.user import UNSAVED_ID


@dataclass(frozen=True, slots=True)
class Lesson:
    title: str
    duration: str  # "mm:ss"
    content: str


@dataclass(frozen=True, slots=True)
class Section:
    title: str
    lessons: tuple[Lesson, ...] = ()


@dataclass(frozen=True, slots=True)
class CourseContent:
    sections: tuple[Section, ...] = ()

    @property
    def lesson_count(self) -> int:
        return sum(len(s.lessons) for s in self.sections)


@dataclass(frozen=True, slots=True)
class Course:
    id: int
    title: str
    description: str
    price: int  # minor currency units (cents)
    duration: str
    level: str
    image_url: str
    instructor: str
    category: str
    created_at: datetime
    updated_at: datetime
    tags: tuple[str, ...] = ()
    featured: bool = False
    # Live enrollment count; maintained incrementally by the store.
    enrollments: int = 0
    rating: int = 0
    reviews: int = 0
    content: CourseContent = field(default_factory=CourseContent)

    @staticmethod
    def new(
        *,
        title: str,
        description: str,
        price: int,
        duration: str,
        level: str,
        image_url: str,
        instructor: str,
        category: str,
        tags: tuple[str, ...] = (),
        featured: bool = False,
        content: CourseContent | None = None,
    ) -> Course:
        now = datetime.now(UTC)
        return Course(
            id=UNSAVED_ID,
            title=title,
            description=description,
            price=price,
            duration=duration,
            level=level,
            image_url=image_url,
            instructor=instructor,
            category=category,
            created_at=now,
            updated_at=now,
            tags=tags,
            featured=featured,
            content=content or CourseContent(),
        )

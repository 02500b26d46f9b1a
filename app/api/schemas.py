"""Response models and field patterns shared by more than one router.

Domain rows are frozen dataclasses, so every model here reads attributes
directly (`from_attributes`). Password hashes never leave the service:
UserOut simply has no field for them.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    first_name: str | None = None
    last_name: str | None = None
    is_admin: bool
    has_unread_messages: bool
    created_at: datetime


class LessonModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    title: str
    duration: str
    content: str


class SectionModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    title: str
    lessons: list[LessonModel] = []


class CourseContentModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    sections: list[SectionModel] = []


class CourseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str
    price: int
    duration: str
    level: str
    image_url: str
    instructor: str
    category: str
    tags: list[str]
    featured: bool
    enrollments: int
    rating: int
    reviews: int
    content: CourseContentModel
    created_at: datetime
    updated_at: datetime

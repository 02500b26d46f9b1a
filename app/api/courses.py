from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import BaseModel, Field

from app.api.dependencies import require_admin
from app.api.errors import http_error
from app.api.schemas import CourseContentModel, CourseOut
from app.core.errors import DomainError
from app.models.course import Course, CourseContent, Lesson, Section
from app.models.principal import Principal
from app.services.store import DEFAULT_FEATURED_LIMIT, store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/courses", tags=["courses"])


class CourseIn(BaseModel):
    title: str = Field(min_length=1)
    description: str
    price: int = Field(ge=0)
    duration: str
    level: str
    image_url: str
    instructor: str
    category: str = Field(min_length=1)
    tags: list[str] = []
    featured: bool = False
    content: CourseContentModel = CourseContentModel()


class CourseUpdateIn(BaseModel):
    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    price: int | None = Field(default=None, ge=0)
    duration: str | None = None
    level: str | None = None
    image_url: str | None = None
    instructor: str | None = None
    category: str | None = Field(default=None, min_length=1)
    tags: list[str] | None = None
    featured: bool | None = None
    content: CourseContentModel | None = None


def _content(model: CourseContentModel) -> CourseContent:
    return CourseContent(
        sections=tuple(
            Section(
                title=s.title,
                lessons=tuple(
                    Lesson(title=lesson.title, duration=lesson.duration, content=lesson.content)
                    for lesson in s.lessons
                ),
            )
            for s in model.sections
        )
    )


def _require_course(course_id: int) -> Course:
    course = store.get_course(course_id)
    if course is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Course not found",
        )
    return course


@router.get("", response_model=list[CourseOut])
def list_courses() -> list[CourseOut]:
    return [CourseOut.model_validate(c) for c in store.list_courses()]


@router.get("/featured", response_model=list[CourseOut])
def list_featured(
    limit: Annotated[int, Query(ge=0)] = DEFAULT_FEATURED_LIMIT,
) -> list[CourseOut]:
    return [CourseOut.model_validate(c) for c in store.list_featured_courses(limit)]


@router.get("/category/{category}", response_model=list[CourseOut])
def list_by_category(category: str) -> list[CourseOut]:
    return [CourseOut.model_validate(c) for c in store.list_courses_by_category(category)]


@router.get("/{course_id}", response_model=CourseOut)
def get_course(course_id: int) -> CourseOut:
    return CourseOut.model_validate(_require_course(course_id))


@router.post("", response_model=CourseOut, status_code=status.HTTP_201_CREATED)
def create_course(
    payload: CourseIn,
    _admin: Annotated[Principal, Depends(require_admin)],
) -> CourseOut:
    course = store.create_course(
        Course.new(
            title=payload.title,
            description=payload.description,
            price=payload.price,
            duration=payload.duration,
            level=payload.level,
            image_url=payload.image_url,
            instructor=payload.instructor,
            category=payload.category,
            tags=tuple(payload.tags),
            featured=payload.featured,
            content=_content(payload.content),
        )
    )
    return CourseOut.model_validate(course)


@router.put("/{course_id}", response_model=CourseOut)
def update_course(
    course_id: int,
    payload: CourseUpdateIn,
    _admin: Annotated[Principal, Depends(require_admin)],
) -> CourseOut:
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "tags" in changes:
        changes["tags"] = tuple(changes["tags"])
    if payload.content is not None:
        changes["content"] = _content(payload.content)
    try:
        course = store.update_course(course_id, **changes)
    except DomainError as e:
        raise http_error(e) from None
    logger.info("Updated course id=%d fields=%s", course_id, sorted(changes))
    return CourseOut.model_validate(course)


@router.delete("/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_course(
    course_id: int,
    _admin: Annotated[Principal, Depends(require_admin)],
) -> Response:
    if not store.delete_course(course_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Course not found",
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)

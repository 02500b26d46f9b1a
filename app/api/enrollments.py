from __future__ import annotations

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, StrictInt

from app.api.dependencies import require_user
from app.api.errors import http_error
from app.api.schemas import CourseOut
from app.core.errors import DomainError
from app.models.course import Course
from app.models.enrollment import Enrollment
from app.models.principal import Principal
from app.services import enrollment_service
from app.services.store import store

router = APIRouter(prefix="/api/enrollments", tags=["enrollments"])


class EnrollIn(BaseModel):
    course_id: int


class ProgressIn(BaseModel):
    progress: StrictInt


class EnrollmentOut(BaseModel):
    id: int
    user_id: int
    course_id: int
    enrolled_at: datetime
    progress: int
    completed: bool
    status: str
    course: CourseOut | None = None


def _out(enrollment: Enrollment, course: Course | None = None) -> EnrollmentOut:
    return EnrollmentOut(
        id=enrollment.id,
        user_id=enrollment.user_id,
        course_id=enrollment.course_id,
        enrolled_at=enrollment.enrolled_at,
        progress=enrollment.progress,
        completed=enrollment.completed,
        status=enrollment.status,
        course=CourseOut.model_validate(course) if course is not None else None,
    )


@router.get("", response_model=list[EnrollmentOut])
def my_enrollments(
    principal: Annotated[Principal, Depends(require_user)],
) -> list[EnrollmentOut]:
    """The caller's enrollments, each with its course embedded."""
    return [
        _out(enrollment, course)
        for enrollment, course in enrollment_service.list_for_user(store, principal.user_id)
    ]


@router.post("", response_model=EnrollmentOut, status_code=status.HTTP_201_CREATED)
def enroll(
    payload: EnrollIn,
    principal: Annotated[Principal, Depends(require_user)],
) -> EnrollmentOut:
    try:
        enrollment = enrollment_service.enroll(store, principal, payload.course_id)
    except DomainError as e:
        raise http_error(e) from None
    return _out(enrollment, store.get_course(enrollment.course_id))


@router.put("/{enrollment_id}/progress", response_model=EnrollmentOut)
def update_progress(
    enrollment_id: int,
    payload: ProgressIn,
    principal: Annotated[Principal, Depends(require_user)],
) -> EnrollmentOut:
    try:
        enrollment = enrollment_service.set_progress(
            store, principal, enrollment_id, payload.progress
        )
    except DomainError as e:
        raise http_error(e) from None
    return _out(enrollment, store.get_course(enrollment.course_id))


@router.put("/{enrollment_id}/complete", response_model=EnrollmentOut)
def complete(
    enrollment_id: int,
    principal: Annotated[Principal, Depends(require_user)],
) -> EnrollmentOut:
    try:
        enrollment = enrollment_service.complete(store, principal, enrollment_id)
    except DomainError as e:
        raise http_error(e) from None
    return _out(enrollment, store.get_course(enrollment.course_id))

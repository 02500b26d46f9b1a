"""Enrollment operations on behalf of a signed-in learner.

The state machine itself lives on the Enrollment model; the store applies
it atomically. This layer adds the ownership rule: a learner may only move
their own enrollments.
"""

from __future__ import annotations

import logging

from app.core.errors import NotFoundError
from app.core.metrics import ENROLLMENTS_COMPLETED, ENROLLMENTS_CREATED
from app.models.course import Course
from app.models.enrollment import Enrollment
from app.models.principal import Principal
from app.services import access_policy
from app.services.store import EntityStore

logger = logging.getLogger(__name__)


def enroll(store: EntityStore, principal: Principal, course_id: int) -> Enrollment:
    enrollment = store.enroll(principal.user_id, course_id)
    ENROLLMENTS_CREATED.inc()
    return enrollment


def list_for_user(
    store: EntityStore, user_id: int
) -> list[tuple[Enrollment, Course | None]]:
    """The user's enrollments paired with their course (None if it vanished)."""
    return [
        (e, store.get_course(e.course_id)) for e in store.list_enrollments_by_user(user_id)
    ]


def _owned(store: EntityStore, principal: Principal, enrollment_id: int) -> Enrollment:
    enrollment = store.get_enrollment(enrollment_id)
    if enrollment is None:
        raise NotFoundError("Enrollment not found")
    access_policy.require_owner(principal, enrollment.user_id)
    return enrollment


def set_progress(
    store: EntityStore, principal: Principal, enrollment_id: int, progress: int
) -> Enrollment:
    before = _owned(store, principal, enrollment_id)
    updated = store.set_enrollment_progress(enrollment_id, progress)
    if updated.completed and not before.completed:
        ENROLLMENTS_COMPLETED.inc()
    logger.info(
        "Progress enrollment=%d user=%d %d%% -> %d%%",
        enrollment_id,
        principal.user_id,
        before.progress,
        updated.progress,
    )
    return updated


def complete(store: EntityStore, principal: Principal, enrollment_id: int) -> Enrollment:
    before = _owned(store, principal, enrollment_id)
    updated = store.complete_enrollment(enrollment_id)
    if not before.completed:
        ENROLLMENTS_COMPLETED.inc()
    logger.info("Completed enrollment=%d user=%d", enrollment_id, principal.user_id)
    return updated

"""Entity store: the single owner of every domain row.

Composes the per-entity repositories and serializes every operation behind
one re-entrant lock, so a create/update is visible to the very next read
and no caller ever observes a half-applied change. FastAPI runs sync
endpoints on a thread pool, so concurrent calls are the normal case.

Cross-entity invariants enforced here:

  - Course.enrollments equals the number of live Enrollment rows for that
    course. Every enroll bumps it and every cascade delete decrements it,
    inside the same critical section as the row change.
  - Username and email are unique, compared case-insensitively.
  - The protected admin can be neither deleted nor demoted.
  - Deleting a user removes their enrollments and detaches their messages.
  - Deleting a course removes its enrollments.
  - Deleting a message removes its replies.
  - An admin reply on someone else's message marks it "replied" and flags
    the owning user as having unread messages.

Every operation validates before it writes, so a failed call leaves the
store exactly as it found it.
"""

from __future__ import annotations

import logging
import threading
from collections import Counter
from dataclasses import replace
from datetime import UTC, datetime
from typing import Any

from app.core.errors import (
    ConflictError,
    NotFoundError,
    ProtectedResourceError,
    ValidationError,
)
from app.models.course import Course
from app.models.enrollment import Enrollment
from app.models.message import MESSAGE_STATUSES, Message, MessageReply
from app.models.user import User
from app.repos.course_repo import CourseRepo, InMemoryCourseRepo
from app.repos.enrollment_repo import EnrollmentRepo, InMemoryEnrollmentRepo
from app.repos.message_repo import (
    InMemoryMessageRepo,
    InMemoryReplyRepo,
    MessageRepo,
    ReplyRepo,
)
from app.repos.user_repo import InMemoryUserRepo, UserRepo

logger = logging.getLogger(__name__)

DEFAULT_FEATURED_LIMIT = 6

_USER_UPDATABLE = frozenset(
    {
        "username",
        "email",
        "password_hash",
        "first_name",
        "last_name",
        "is_admin",
        "has_unread_messages",
    }
)
_COURSE_UPDATABLE = frozenset(
    {
        "title",
        "description",
        "price",
        "duration",
        "level",
        "image_url",
        "instructor",
        "category",
        "tags",
        "featured",
        "content",
        "rating",
        "reviews",
    }
)


def _check_fields(changes: dict[str, Any], allowed: frozenset[str]) -> None:
    unknown = set(changes) - allowed
    if unknown:
        raise ValidationError(f"unknown or read-only fields: {sorted(unknown)}")


class EntityStore:
    def __init__(
        self,
        *,
        users: UserRepo | None = None,
        courses: CourseRepo | None = None,
        enrollments: EnrollmentRepo | None = None,
        messages: MessageRepo | None = None,
        replies: ReplyRepo | None = None,
    ) -> None:
        self._users = users or InMemoryUserRepo()
        self._courses = courses or InMemoryCourseRepo()
        self._enrollments = enrollments or InMemoryEnrollmentRepo()
        self._messages = messages or InMemoryMessageRepo()
        self._replies = replies or InMemoryReplyRepo()
        self._lock = threading.RLock()

    def clear(self) -> None:
        """Drop every row and restart id sequences."""
        with self._lock:
            self._users.clear()
            self._courses.clear()
            self._enrollments.clear()
            self._messages.clear()
            self._replies.clear()

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def get_user(self, user_id: int) -> User | None:
        with self._lock:
            return self._users.get_by_id(user_id)

    def get_user_by_username(self, username: str) -> User | None:
        with self._lock:
            return self._users.get_by_username(username)

    def get_user_by_email(self, email: str) -> User | None:
        with self._lock:
            return self._users.get_by_email(email)

    def list_users(self) -> list[User]:
        with self._lock:
            return self._users.list_all()

    def count_users(self) -> int:
        with self._lock:
            return self._users.count()

    def create_user(self, user: User) -> User:
        with self._lock:
            self._check_unique(user.username, user.email)
            stored = self._users.add(user)
        logger.info("Created user id=%d username=%s", stored.id, stored.username)
        return stored

    def update_user(self, user_id: int, **changes: Any) -> User:
        _check_fields(changes, _USER_UPDATABLE)
        with self._lock:
            user = self._require_user(user_id)
            if user.is_protected and changes.get("is_admin") is False:
                raise ProtectedResourceError(
                    "Cannot remove admin rights from the protected admin user"
                )
            if "email" in changes:
                changes["email"] = str(changes["email"]).strip().lower()
            if "username" in changes:
                changes["username"] = str(changes["username"]).strip()
            self._check_unique(
                changes.get("username"), changes.get("email"), exclude_id=user_id
            )
            updated = replace(user, **changes)
            self._users.save(updated)
        return updated

    def delete_user(self, user_id: int) -> bool:
        with self._lock:
            user = self._users.get_by_id(user_id)
            if user is None:
                return False
            if user.is_protected:
                raise ProtectedResourceError("Cannot delete the protected admin user")

            for enrollment in self._enrollments.list_by_user(user_id):
                self._drop_enrollment(enrollment)
            for message in self._messages.list_by_user(user_id):
                self._messages.save(replace(message, user_id=None))
            self._users.remove(user_id)
        logger.info("Deleted user id=%d", user_id)
        return True

    # ------------------------------------------------------------------
    # Courses
    # ------------------------------------------------------------------

    def get_course(self, course_id: int) -> Course | None:
        with self._lock:
            return self._courses.get_by_id(course_id)

    def list_courses(self) -> list[Course]:
        with self._lock:
            return self._courses.list_all()

    def count_courses(self) -> int:
        with self._lock:
            return self._courses.count()

    def list_featured_courses(self, limit: int = DEFAULT_FEATURED_LIMIT) -> list[Course]:
        """Featured courses in insertion order, truncated to `limit`."""
        if limit < 0:
            raise ValidationError("limit must be non-negative")
        with self._lock:
            featured = [c for c in self._courses.list_all() if c.featured]
        return featured[:limit]

    def list_courses_by_category(self, category: str) -> list[Course]:
        with self._lock:
            return [c for c in self._courses.list_all() if c.category == category]

    def course_count_by_category(self) -> dict[str, int]:
        with self._lock:
            return dict(Counter(c.category for c in self._courses.list_all()))

    def create_course(self, course: Course) -> Course:
        # Counters always start at zero regardless of what the caller passed.
        course = replace(course, enrollments=0, rating=0, reviews=0)
        with self._lock:
            stored = self._courses.add(course)
        logger.info("Created course id=%d title=%r", stored.id, stored.title)
        return stored

    def update_course(self, course_id: int, **changes: Any) -> Course:
        _check_fields(changes, _COURSE_UPDATABLE)
        with self._lock:
            course = self._require_course(course_id)
            updated = replace(course, **changes, updated_at=datetime.now(UTC))
            self._courses.save(updated)
        return updated

    def delete_course(self, course_id: int) -> bool:
        """Hard delete; the course's enrollments go with it."""
        with self._lock:
            if self._courses.get_by_id(course_id) is None:
                return False
            dropped = self._enrollments.list_by_course(course_id)
            for enrollment in dropped:
                self._enrollments.remove(enrollment.id)
            self._courses.remove(course_id)
        logger.info(
            "Deleted course id=%d (cascaded %d enrollments)", course_id, len(dropped)
        )
        return True

    # ------------------------------------------------------------------
    # Enrollments
    # ------------------------------------------------------------------

    def get_enrollment(self, enrollment_id: int) -> Enrollment | None:
        with self._lock:
            return self._enrollments.get_by_id(enrollment_id)

    def list_enrollments(self) -> list[Enrollment]:
        with self._lock:
            return self._enrollments.list_all()

    def list_enrollments_by_user(self, user_id: int) -> list[Enrollment]:
        with self._lock:
            return self._enrollments.list_by_user(user_id)

    def list_enrollments_by_course(self, course_id: int) -> list[Enrollment]:
        with self._lock:
            return self._enrollments.list_by_course(course_id)

    def enroll(self, user_id: int, course_id: int) -> Enrollment:
        """Create an Active(0) enrollment and bump the course counter atomically."""
        with self._lock:
            course = self._require_course(course_id)
            self._require_user(user_id)
            if self._enrollments.get_for(user_id, course_id) is not None:
                raise ConflictError("Already enrolled in this course")

            enrollment = self._enrollments.add(
                Enrollment.new(user_id=user_id, course_id=course_id)
            )
            self._courses.save(replace(course, enrollments=course.enrollments + 1))
        logger.info(
            "Enrolled user=%d in course=%d enrollment=%d",
            user_id,
            course_id,
            enrollment.id,
        )
        return enrollment

    def set_enrollment_progress(self, enrollment_id: int, progress: int) -> Enrollment:
        with self._lock:
            enrollment = self._require_enrollment(enrollment_id)
            updated = enrollment.with_progress(progress)
            self._enrollments.save(updated)
        return updated

    def complete_enrollment(self, enrollment_id: int) -> Enrollment:
        with self._lock:
            enrollment = self._require_enrollment(enrollment_id)
            updated = enrollment.mark_complete()
            self._enrollments.save(updated)
        return updated

    # ------------------------------------------------------------------
    # Messages and replies
    # ------------------------------------------------------------------

    def get_message(self, message_id: int) -> Message | None:
        with self._lock:
            return self._messages.get_by_id(message_id)

    def list_messages(self) -> list[Message]:
        with self._lock:
            return self._messages.list_all()

    def list_unread_messages(self) -> list[Message]:
        with self._lock:
            return self._messages.list_by_status("unread")

    def list_messages_by_user(self, user_id: int) -> list[Message]:
        with self._lock:
            return self._messages.list_by_user(user_id)

    def create_message(self, message: Message) -> Message:
        message = replace(message, status="unread")
        with self._lock:
            if message.user_id is not None:
                self._set_unread_flag(message.user_id, True)
            stored = self._messages.add(message)
        return stored

    def set_message_status(self, message_id: int, status: str) -> Message:
        if status not in MESSAGE_STATUSES:
            raise ValidationError(
                f"status must be one of {'|'.join(MESSAGE_STATUSES)} (got {status!r})"
            )
        with self._lock:
            message = self._require_message(message_id)
            updated = replace(message, status=status)
            self._messages.save(updated)
        return updated

    def delete_message(self, message_id: int) -> bool:
        with self._lock:
            if self._messages.get_by_id(message_id) is None:
                return False
            removed = self._replies.remove_by_message(message_id)
            self._messages.remove(message_id)
        logger.info("Deleted message id=%d (cascaded %d replies)", message_id, removed)
        return True

    def get_reply(self, reply_id: int) -> MessageReply | None:
        with self._lock:
            return self._replies.get_by_id(reply_id)

    def list_replies(self, message_id: int) -> list[MessageReply]:
        with self._lock:
            return self._replies.list_by_message(message_id)

    def add_reply(
        self, message_id: int, author_id: int, content: str, *, is_admin: bool
    ) -> MessageReply:
        with self._lock:
            message = self._require_message(message_id)
            reply = self._replies.add(
                MessageReply.new(
                    message_id=message_id,
                    author_id=author_id,
                    content=content,
                    is_admin=is_admin,
                )
            )
            if is_admin and message.user_id != author_id:
                self._messages.save(replace(message, status="replied"))
                if message.user_id is not None:
                    self._set_unread_flag(message.user_id, True)
        return reply

    def mark_reply_read(self, reply_id: int) -> MessageReply:
        """Idempotent. Clears the owner's unread flag once nothing is left unread."""
        with self._lock:
            reply = self._replies.get_by_id(reply_id)
            if reply is None:
                raise NotFoundError("Reply not found")
            if not reply.read:
                reply = replace(reply, read=True)
                self._replies.save(reply)

            message = self._messages.get_by_id(reply.message_id)
            if message is not None and message.user_id is not None:
                if not self._has_unread_admin_replies(message.user_id):
                    self._set_unread_flag(message.user_id, False)
        return reply

    def acknowledge_replies(self, user_id: int) -> int:
        """Mark every admin reply in the user's threads read; returns how many flipped."""
        with self._lock:
            flipped = 0
            for message in self._messages.list_by_user(user_id):
                for reply in self._replies.list_by_message(message.id):
                    if reply.is_admin and reply.author_id != user_id and not reply.read:
                        self._replies.save(replace(reply, read=True))
                        flipped += 1
            self._set_unread_flag(user_id, False)
        return flipped

    # ------------------------------------------------------------------
    # Internals (call with the lock held)
    # ------------------------------------------------------------------

    def _require_user(self, user_id: int) -> User:
        user = self._users.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def _require_course(self, course_id: int) -> Course:
        course = self._courses.get_by_id(course_id)
        if course is None:
            raise NotFoundError("Course not found")
        return course

    def _require_enrollment(self, enrollment_id: int) -> Enrollment:
        enrollment = self._enrollments.get_by_id(enrollment_id)
        if enrollment is None:
            raise NotFoundError("Enrollment not found")
        return enrollment

    def _require_message(self, message_id: int) -> Message:
        message = self._messages.get_by_id(message_id)
        if message is None:
            raise NotFoundError("Message not found")
        return message

    def _check_unique(
        self,
        username: str | None,
        email: str | None,
        *,
        exclude_id: int | None = None,
    ) -> None:
        if username is not None:
            found = self._users.get_by_username(username)
            if found is not None and found.id != exclude_id:
                raise ConflictError("Username already exists")
        if email is not None:
            found = self._users.get_by_email(email)
            if found is not None and found.id != exclude_id:
                raise ConflictError("Email already exists")

    def _drop_enrollment(self, enrollment: Enrollment) -> None:
        self._enrollments.remove(enrollment.id)
        course = self._courses.get_by_id(enrollment.course_id)
        if course is not None:
            self._courses.save(
                replace(course, enrollments=max(0, course.enrollments - 1))
            )

    def _set_unread_flag(self, user_id: int, value: bool) -> None:
        user = self._users.get_by_id(user_id)
        if user is not None and user.has_unread_messages != value:
            self._users.save(replace(user, has_unread_messages=value))

    def _has_unread_admin_replies(self, user_id: int) -> bool:
        for message in self._messages.list_by_user(user_id):
            for reply in self._replies.list_by_message(message.id):
                if reply.is_admin and reply.author_id != user_id and not reply.read:
                    return True
        return False


# Module-level singleton (same pattern as the repo singletons in the routers).
store = EntityStore()

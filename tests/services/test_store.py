"""EntityStore invariants, exercised on a private store instance."""

from __future__ import annotations

import threading

import pytest

from app.core.errors import (
    ConflictError,
    NotFoundError,
    ProtectedResourceError,
    ValidationError,
)
from app.models.message import Message
from app.models.user import User
from app.services.store import EntityStore
from tests.conftest import new_course


@pytest.fixture
def s() -> EntityStore:
    return EntityStore()


def _user(s: EntityStore, username: str = "alice", **kwargs) -> User:
    return s.create_user(
        User.new(
            username=username,
            email=f"{username}@example.com",
            password_hash="x",
            **kwargs,
        )
    )


def _message(s: EntityStore, user_id: int | None = None) -> Message:
    return s.create_message(
        Message.new(
            name="Sender",
            email="sender@example.com",
            subject="Question",
            message="How do I start the course?",
            user_id=user_id,
        )
    )


# ---- Users ----


def test_ids_are_sequential_per_entity(s: EntityStore) -> None:
    assert _user(s, "alice").id == 1
    assert _user(s, "bob").id == 2
    assert s.create_course(new_course()).id == 1


def test_clear_restarts_ids(s: EntityStore) -> None:
    _user(s, "alice")
    _user(s, "bob")
    s.clear()
    assert s.count_users() == 0
    assert _user(s, "carol").id == 1


def test_username_lookup_is_case_insensitive(s: EntityStore) -> None:
    created = _user(s, "Alice")
    assert s.get_user_by_username("alice") == created
    assert s.get_user_by_username("ALICE") == created
    assert s.get_user_by_username("alice").username == "Alice"


def test_duplicate_username_rejected_case_insensitively(s: EntityStore) -> None:
    _user(s, "alice")
    with pytest.raises(ConflictError, match="Username"):
        s.create_user(User.new(username="ALICE", email="other@example.com", password_hash="x"))


def test_duplicate_email_rejected(s: EntityStore) -> None:
    _user(s, "alice")
    with pytest.raises(ConflictError, match="Email"):
        s.create_user(
            User.new(username="alice2", email="Alice@Example.com", password_hash="x")
        )


def test_update_user_rejects_taken_username(s: EntityStore) -> None:
    _user(s, "alice")
    bob = _user(s, "bob")
    with pytest.raises(ConflictError):
        s.update_user(bob.id, username="alice")
    assert s.get_user(bob.id).username == "bob"


def test_update_user_rejects_unknown_field(s: EntityStore) -> None:
    alice = _user(s)
    with pytest.raises(ValidationError):
        s.update_user(alice.id, is_protected=True)


def test_update_missing_user_is_not_found(s: EntityStore) -> None:
    with pytest.raises(NotFoundError):
        s.update_user(99, first_name="Ghost")


def test_protected_admin_cannot_be_demoted_or_deleted(s: EntityStore) -> None:
    admin = _user(s, "admin", is_admin=True, is_protected=True)
    with pytest.raises(ProtectedResourceError):
        s.update_user(admin.id, is_admin=False)
    with pytest.raises(ProtectedResourceError):
        s.delete_user(admin.id)
    assert s.get_user(admin.id).is_admin
    # Other fields stay editable.
    assert s.update_user(admin.id, first_name="Root").first_name == "Root"


def test_delete_missing_user_returns_false(s: EntityStore) -> None:
    assert s.delete_user(42) is False


def test_delete_user_cascades_enrollments_and_detaches_messages(s: EntityStore) -> None:
    alice = _user(s)
    course = s.create_course(new_course())
    s.enroll(alice.id, course.id)
    message = _message(s, alice.id)

    assert s.delete_user(alice.id) is True
    assert s.list_enrollments() == []
    assert s.get_course(course.id).enrollments == 0
    assert s.get_message(message.id).user_id is None


# ---- Courses ----


def test_create_course_zeroes_counters(s: EntityStore) -> None:
    from dataclasses import replace

    course = s.create_course(replace(new_course(), enrollments=7, rating=5, reviews=3))
    assert (course.enrollments, course.rating, course.reviews) == (0, 0, 0)


def test_update_course_refreshes_updated_at(s: EntityStore) -> None:
    course = s.create_course(new_course())
    updated = s.update_course(course.id, title="Renamed")
    assert updated.title == "Renamed"
    assert updated.updated_at >= course.updated_at
    assert updated.created_at == course.created_at


def test_update_course_rejects_counter_writes(s: EntityStore) -> None:
    course = s.create_course(new_course())
    with pytest.raises(ValidationError):
        s.update_course(course.id, enrollments=10)


def test_featured_respects_limit_and_order(s: EntityStore) -> None:
    for i in range(8):
        s.create_course(new_course(f"Course {i}", featured=i % 2 == 0))
    featured = s.list_featured_courses()
    assert [c.title for c in featured] == ["Course 0", "Course 2", "Course 4", "Course 6"]
    assert len(s.list_featured_courses(limit=2)) == 2
    assert s.list_featured_courses(limit=0) == []
    with pytest.raises(ValidationError):
        s.list_featured_courses(limit=-1)


def test_category_queries(s: EntityStore) -> None:
    s.create_course(new_course("A", category="Design"))
    s.create_course(new_course("B", category="Design"))
    s.create_course(new_course("C", category="Data Science"))
    assert [c.title for c in s.list_courses_by_category("Design")] == ["A", "B"]
    assert s.course_count_by_category() == {"Design": 2, "Data Science": 1}


def test_delete_course_cascades_enrollments(s: EntityStore) -> None:
    alice = _user(s)
    course = s.create_course(new_course())
    s.enroll(alice.id, course.id)
    assert s.delete_course(course.id) is True
    assert s.list_enrollments_by_user(alice.id) == []
    assert s.delete_course(course.id) is False


# ---- Enrollments ----


def test_enroll_bumps_counter_once_per_pair(s: EntityStore) -> None:
    alice = _user(s)
    course = s.create_course(new_course())
    enrollment = s.enroll(alice.id, course.id)
    assert (enrollment.progress, enrollment.completed) == (0, False)
    assert s.get_course(course.id).enrollments == 1

    with pytest.raises(ConflictError, match="Already enrolled"):
        s.enroll(alice.id, course.id)
    assert s.get_course(course.id).enrollments == 1


def test_enroll_unknown_course_or_user(s: EntityStore) -> None:
    alice = _user(s)
    course = s.create_course(new_course())
    with pytest.raises(NotFoundError, match="Course"):
        s.enroll(alice.id, 99)
    with pytest.raises(NotFoundError, match="User"):
        s.enroll(99, course.id)
    assert s.get_course(course.id).enrollments == 0


@pytest.mark.parametrize(
    "progress,completed",
    [(0, False), (1, False), (99, False), (100, True)],
    ids=["zero", "one", "ninety-nine", "hundred"],
)
def test_progress_drives_completion(s: EntityStore, progress: int, completed: bool) -> None:
    alice = _user(s)
    course = s.create_course(new_course())
    enrollment = s.enroll(alice.id, course.id)
    updated = s.set_enrollment_progress(enrollment.id, progress)
    assert updated.completed is completed
    assert updated.status == ("completed" if completed else "active")


@pytest.mark.parametrize("bad", [-1, 101, 50.5, True], ids=["neg", "over", "float", "bool"])
def test_invalid_progress_leaves_row_untouched(s: EntityStore, bad) -> None:
    alice = _user(s)
    course = s.create_course(new_course())
    enrollment = s.enroll(alice.id, course.id)
    s.set_enrollment_progress(enrollment.id, 40)
    with pytest.raises(ValidationError):
        s.set_enrollment_progress(enrollment.id, bad)
    assert s.get_enrollment(enrollment.id).progress == 40


def test_completed_enrollment_reopens_below_hundred(s: EntityStore) -> None:
    alice = _user(s)
    course = s.create_course(new_course())
    enrollment = s.enroll(alice.id, course.id)
    assert s.complete_enrollment(enrollment.id).progress == 100
    reopened = s.set_enrollment_progress(enrollment.id, 80)
    assert (reopened.progress, reopened.completed) == (80, False)


def test_concurrent_enrollments_keep_counter_consistent(s: EntityStore) -> None:
    course = s.create_course(new_course())
    users = [_user(s, f"user{i}") for i in range(20)]

    def _go(user_id: int) -> None:
        s.enroll(user_id, course.id)

    threads = [threading.Thread(target=_go, args=(u.id,)) for u in users]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert s.get_course(course.id).enrollments == len(s.list_enrollments_by_course(course.id))
    assert s.get_course(course.id).enrollments == 20


# ---- Messages ----


def test_create_message_starts_unread_and_flags_owner(s: EntityStore) -> None:
    alice = _user(s)
    message = _message(s, alice.id)
    assert message.status == "unread"
    assert s.get_user(alice.id).has_unread_messages is True
    assert s.list_unread_messages() == [message]


def test_anonymous_message_not_listed_for_any_user(s: EntityStore) -> None:
    alice = _user(s)
    _message(s)
    assert s.list_messages_by_user(alice.id) == []
    assert len(s.list_messages()) == 1


def test_admin_reply_marks_replied_and_flags_owner(s: EntityStore) -> None:
    admin = _user(s, "admin", is_admin=True)
    alice = _user(s)
    message = _message(s, alice.id)
    s.update_user(alice.id, has_unread_messages=False)

    reply = s.add_reply(message.id, admin.id, "Hello!", is_admin=True)
    assert reply.read is False
    assert s.get_message(message.id).status == "replied"
    assert s.get_user(alice.id).has_unread_messages is True


def test_owner_reply_does_not_change_status(s: EntityStore) -> None:
    alice = _user(s)
    message = _message(s, alice.id)
    s.add_reply(message.id, alice.id, "More detail", is_admin=False)
    assert s.get_message(message.id).status == "unread"


def test_replies_ordered_by_creation(s: EntityStore) -> None:
    admin = _user(s, "admin", is_admin=True)
    alice = _user(s)
    message = _message(s, alice.id)
    for text in ("one", "two", "three"):
        s.add_reply(message.id, admin.id, text, is_admin=True)
    assert [r.content for r in s.list_replies(message.id)] == ["one", "two", "three"]


def test_mark_reply_read_is_idempotent_and_clears_flag(s: EntityStore) -> None:
    admin = _user(s, "admin", is_admin=True)
    alice = _user(s)
    message = _message(s, alice.id)
    first = s.add_reply(message.id, admin.id, "first", is_admin=True)
    second = s.add_reply(message.id, admin.id, "second", is_admin=True)

    s.mark_reply_read(first.id)
    assert s.get_user(alice.id).has_unread_messages is True

    once = s.mark_reply_read(second.id)
    twice = s.mark_reply_read(second.id)
    assert once == twice
    assert s.get_user(alice.id).has_unread_messages is False


def test_mark_missing_reply_is_not_found(s: EntityStore) -> None:
    with pytest.raises(NotFoundError, match="Reply not found"):
        s.mark_reply_read(7)


def test_acknowledge_replies_counts_flipped(s: EntityStore) -> None:
    admin = _user(s, "admin", is_admin=True)
    alice = _user(s)
    message = _message(s, alice.id)
    s.add_reply(message.id, admin.id, "a", is_admin=True)
    s.add_reply(message.id, admin.id, "b", is_admin=True)
    assert s.acknowledge_replies(alice.id) == 2
    assert s.acknowledge_replies(alice.id) == 0
    assert s.get_user(alice.id).has_unread_messages is False


def test_set_message_status_validates(s: EntityStore) -> None:
    message = _message(s)
    assert s.set_message_status(message.id, "pending").status == "pending"
    with pytest.raises(ValidationError):
        s.set_message_status(message.id, "archived")
    with pytest.raises(NotFoundError):
        s.set_message_status(99, "read")


def test_delete_message_cascades_replies(s: EntityStore) -> None:
    admin = _user(s, "admin", is_admin=True)
    message = _message(s)
    reply = s.add_reply(message.id, admin.id, "hi", is_admin=True)
    assert s.delete_message(message.id) is True
    assert s.get_reply(reply.id) is None
    assert s.delete_message(message.id) is False

from __future__ import annotations

import itertools
from dataclasses import replace
from typing import Protocol

from app.models.enrollment import Enrollment


class EnrollmentRepo(Protocol):
    def get_by_id(self, enrollment_id: int) -> Enrollment | None: ...
    def get_for(self, user_id: int, course_id: int) -> Enrollment | None: ...
    def list_all(self) -> list[Enrollment]: ...
    def list_by_user(self, user_id: int) -> list[Enrollment]: ...
    def list_by_course(self, course_id: int) -> list[Enrollment]: ...
    def add(self, enrollment: Enrollment) -> Enrollment: ...
    def save(self, enrollment: Enrollment) -> None: ...
    def remove(self, enrollment_id: int) -> bool: ...
    def clear(self) -> None: ...


class InMemoryEnrollmentRepo:
    def __init__(self) -> None:
        self._by_id: dict[int, Enrollment] = {}
        self._ids = itertools.count(1)

    def get_by_id(self, enrollment_id: int) -> Enrollment | None:
        return self._by_id.get(enrollment_id)

    def get_for(self, user_id: int, course_id: int) -> Enrollment | None:
        for e in self._by_id.values():
            if e.user_id == user_id and e.course_id == course_id:
                return e
        return None

    def list_all(self) -> list[Enrollment]:
        return list(self._by_id.values())

    def list_by_user(self, user_id: int) -> list[Enrollment]:
        return [e for e in self._by_id.values() if e.user_id == user_id]

    def list_by_course(self, course_id: int) -> list[Enrollment]:
        return [e for e in self._by_id.values() if e.course_id == course_id]

    def add(self, enrollment: Enrollment) -> Enrollment:
        stored = replace(enrollment, id=next(self._ids))
        self._by_id[stored.id] = stored
        return stored

    def save(self, enrollment: Enrollment) -> None:
        if enrollment.id not in self._by_id:
            raise KeyError("enrollment not found")
        self._by_id[enrollment.id] = enrollment

    def remove(self, enrollment_id: int) -> bool:
        return self._by_id.pop(enrollment_id, None) is not None

    def clear(self) -> None:
        self._by_id.clear()
        self._ids = itertools.count(1)

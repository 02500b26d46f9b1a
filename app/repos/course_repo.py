from __future__ import annotations

import itertools
from dataclasses import replace
from typing import Protocol

from app.models.course import Course


class CourseRepo(Protocol):
    def get_by_id(self, course_id: int) -> Course | None: ...
    def list_all(self) -> list[Course]: ...
    def count(self) -> int: ...
    def add(self, course: Course) -> Course: ...
    def save(self, course: Course) -> None: ...
    def remove(self, course_id: int) -> bool: ...
    def clear(self) -> None: ...


class InMemoryCourseRepo:
    # dicts preserve insertion order, which list_all (and featured) rely on
    def __init__(self) -> None:
        self._by_id: dict[int, Course] = {}
        self._ids = itertools.count(1)

    def get_by_id(self, course_id: int) -> Course | None:
        return self._by_id.get(course_id)

    def list_all(self) -> list[Course]:
        return list(self._by_id.values())

    def count(self) -> int:
        return len(self._by_id)

    def add(self, course: Course) -> Course:
        stored = replace(course, id=next(self._ids))
        self._by_id[stored.id] = stored
        return stored

    def save(self, course: Course) -> None:
        if course.id not in self._by_id:
            raise KeyError("course not found")
        self._by_id[course.id] = course

    def remove(self, course_id: int) -> bool:
        return self._by_id.pop(course_id, None) is not None

    def clear(self) -> None:
        self._by_id.clear()
        self._ids = itertools.count(1)

"""Enrollment row and its progress state machine.

    Active(progress 0..99) --with_progress(100) / mark_complete()--> Completed
    Completed --with_progress(p < 100)--> Active(p)

`progress == 100` holds exactly when `completed` is true; both transitions
below preserve that in either direction.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import UTC, datetime

from app.core.errors import ValidationError
from app.models.user import UNSAVED_ID

MIN_PROGRESS = 0
MAX_PROGRESS = 100


@dataclass(frozen=True, slots=True)
class Enrollment:
    id: int
    user_id: int
    course_id: int
    enrolled_at: datetime
    completed: bool = False
    progress: int = 0

    @staticmethod
    def new(*, user_id: int, course_id: int) -> Enrollment:
        return Enrollment(
            id=UNSAVED_ID,
            user_id=user_id,
            course_id=course_id,
            enrolled_at=datetime.now(UTC),
        )

    @property
    def status(self) -> str:
        return "completed" if self.completed else "active"

    def with_progress(self, progress: int) -> Enrollment:
        # bool is an int subclass; reject it explicitly
        if isinstance(progress, bool) or not isinstance(progress, int):
            raise ValidationError("Progress must be an integer between 0 and 100")
        if not MIN_PROGRESS <= progress <= MAX_PROGRESS:
            raise ValidationError("Progress must be a number between 0 and 100")
        return replace(self, progress=progress, completed=progress == MAX_PROGRESS)

    def mark_complete(self) -> Enrollment:
        return replace(self, progress=MAX_PROGRESS, completed=True)

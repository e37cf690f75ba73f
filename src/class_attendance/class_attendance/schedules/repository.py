from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import LessonFilter, LessonSlot


class LessonRepository(Protocol):
    def list_lessons(
        self,
        *,
        lesson_filter: LessonFilter,
        teacher_id: Optional[int] = None,
        group_id: Optional[int] = None,
    ) -> Sequence[LessonSlot]:
        """Lessons matching the filter; ``None`` leaves a column unconstrained.

        Ordered by day, start time and id.
        """

        raise NotImplementedError

    def get_by_id(self, lesson_id: int) -> Optional[LessonSlot]:
        raise NotImplementedError

from __future__ import annotations

from typing import Protocol, Sequence

from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def list_for_lesson(self, lesson_id: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def save_for_lesson(self, *, lesson_id: int, records: Sequence[AttendanceRecord]) -> bool:
        """Insert or overwrite records keyed by (student, lesson, date).

        Returns False when nothing could be written.
        """

        raise NotImplementedError

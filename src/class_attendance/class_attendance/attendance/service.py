from __future__ import annotations

from datetime import date
from typing import Optional

from ..common.datetime_utils import today_local
from ..core.exceptions import NotFoundError
from ..groups.repository import GroupRepository
from ..schedules.repository import LessonRepository
from .model import AttendanceRecord, AttendanceSession
from .repository import AttendanceRepository
from .session import AttendanceSessionManager


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        lessons: LessonRepository,
        groups: GroupRepository,
        *,
        manager: AttendanceSessionManager | None = None,
    ):
        self._attendance = attendance
        self._lessons = lessons
        self._groups = groups
        self.manager = manager or AttendanceSessionManager()

    def open_session(self, lesson_id: int) -> AttendanceSession:
        """Load roster and prior attendance of a lesson into a clean session.

        Roster and attendance lookup errors propagate to the caller.
        """

        lesson = self._lessons.get_by_id(int(lesson_id))
        if lesson is None:
            raise NotFoundError(f"Lesson {lesson_id} not found")

        roster = self._groups.list_student_ids(lesson.group_id)
        prior = self._attendance.list_for_lesson(lesson.lesson_id)
        return self.manager.initialize(lesson.lesson_id, roster, prior)

    def save_session(self, session: AttendanceSession, *, today: Optional[date] = None) -> list[AttendanceRecord]:
        return self.manager.save(session, self._persist, today or today_local())

    def _persist(self, lesson_id: int, records) -> bool:
        return self._attendance.save_for_lesson(lesson_id=lesson_id, records=records)

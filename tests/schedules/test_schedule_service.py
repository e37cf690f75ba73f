from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, time
from typing import Optional

from src.class_attendance.class_attendance.core.enums import LessonType, Role, WeekParity
from src.class_attendance.class_attendance.core.exceptions import SourceUnavailable
from src.class_attendance.class_attendance.groups.model import Group
from src.class_attendance.class_attendance.schedules.model import LessonSlot, Requester, ScheduleQuery
from src.class_attendance.class_attendance.schedules.service import ScheduleService

NOW = datetime(2024, 9, 2, 9, 0)


def make_lesson(lesson_id: int, group_id: int, teacher_id: Optional[int], subject: str) -> LessonSlot:
    return LessonSlot(
        lesson_id=lesson_id,
        subject_id=lesson_id,
        subject_name=subject,
        group_id=group_id,
        teacher_id=teacher_id,
        day_of_week=2,
        time_start=time(12, 0),
        time_end=time(13, 30),
        room="204",
        week_parity=WeekParity.EVERY,
        lesson_type=LessonType.LAB,
    )


class InMemoryLessons:
    def __init__(self, lessons):
        self.lessons = lessons

    def list_lessons(self, *, lesson_filter, teacher_id=None, group_id=None):
        return [
            lesson
            for lesson in self.lessons
            if lesson_filter.matches(lesson)
            and (teacher_id is None or lesson.teacher_id == teacher_id)
            and (group_id is None or lesson.group_id == group_id)
        ]

    def get_by_id(self, lesson_id):
        return None


@dataclass
class InMemoryGroups:
    curated: dict[int, list[Group]] = field(default_factory=dict)
    broken: bool = False

    def list_curated_by(self, teacher_id: int):
        if self.broken:
            raise ConnectionError("groups service down")
        return self.curated.get(teacher_id, [])

    def list_student_ids(self, group_id: int):
        return []


LESSONS = [
    make_lesson(1, 10, 1, "Networks"),
    make_lesson(2, 20, 3, "Physics"),
    make_lesson(3, 20, 1, "Networks"),
]


def test_teacher_schedule_includes_curated_groups_and_subjects():
    groups = InMemoryGroups({1: [Group(group_id=20, name="PI-401", curator_id=1)]})
    svc = ScheduleService(InMemoryLessons(LESSONS), groups)

    result = asyncio.run(svc.get_schedule(Requester(1, Role.TEACHER), ScheduleQuery(), now=NOW))

    assert [lesson.lesson_id for lesson in result.lessons] == [1, 3, 2]
    assert result.subjects == ["Networks", "Physics"]
    assert result.warnings == ()


def test_subject_filter_keeps_full_subject_list():
    groups = InMemoryGroups({1: [Group(group_id=20, name="PI-401", curator_id=1)]})
    svc = ScheduleService(InMemoryLessons(LESSONS), groups)

    result = asyncio.run(
        svc.get_schedule(Requester(1, Role.TEACHER), ScheduleQuery(), subject_filter="Physics", now=NOW)
    )

    assert [lesson.lesson_id for lesson in result.lessons] == [2]
    assert result.subjects == ["Networks", "Physics"]


def test_curated_groups_lookup_failure_still_returns_own_lessons():
    svc = ScheduleService(InMemoryLessons(LESSONS), InMemoryGroups(broken=True))

    result = asyncio.run(svc.get_schedule(Requester(1, Role.TEACHER), ScheduleQuery(), now=NOW))

    assert [lesson.lesson_id for lesson in result.lessons] == [1, 3]
    assert len(result.warnings) == 1
    assert isinstance(result.warnings[0], SourceUnavailable)
    assert result.warnings[0].source == "curated_groups"


def test_admin_does_not_look_up_curated_groups():
    svc = ScheduleService(InMemoryLessons(LESSONS), InMemoryGroups(broken=True))

    result = asyncio.run(svc.get_schedule(Requester(9, Role.ADMIN), ScheduleQuery(), now=NOW))

    assert [lesson.lesson_id for lesson in result.lessons] == [1, 2, 3]
    assert result.warnings == ()

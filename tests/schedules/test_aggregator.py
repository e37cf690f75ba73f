from __future__ import annotations

import asyncio
import threading
import time as time_mod
from datetime import datetime, time
from typing import Optional

import pytest

from src.class_attendance.class_attendance.core.enums import LessonType, Role, ViewMode, WeekParity
from src.class_attendance.class_attendance.core.exceptions import AuthorizationError, SourceUnavailable
from src.class_attendance.class_attendance.groups.model import Group
from src.class_attendance.class_attendance.schedules.aggregator import ScheduleAggregator, merge_unique
from src.class_attendance.class_attendance.schedules.model import LessonSlot, Requester, ScheduleQuery

TEACHER_ID = 1
NOW = datetime(2024, 9, 2, 9, 0)  # odd week


def make_lesson(lesson_id: int, *, group_id: int, teacher_id: Optional[int], parity=WeekParity.EVERY, subject="Math"):
    return LessonSlot(
        lesson_id=lesson_id,
        subject_id=lesson_id * 10,
        subject_name=subject,
        group_id=group_id,
        teacher_id=teacher_id,
        day_of_week=1 + lesson_id % 5,
        time_start=time(9, 0),
        time_end=time(10, 30),
        room=f"R{lesson_id}",
        week_parity=parity,
        lesson_type=LessonType.PRACTICE,
    )


class InMemoryLessons:
    def __init__(self, lessons, *, failing_groups=(), fail_own=False, delays=None, barrier=None):
        self.lessons = list(lessons)
        self.failing_groups = set(failing_groups)
        self.fail_own = fail_own
        self.delays = delays or {}
        self.barrier = barrier
        self.calls: list[dict] = []
        self._lock = threading.Lock()

    def list_lessons(self, *, lesson_filter, teacher_id=None, group_id=None):
        with self._lock:
            self.calls.append({"filter": lesson_filter, "teacher_id": teacher_id, "group_id": group_id})
        if teacher_id is not None and self.fail_own:
            raise RuntimeError("database is down")
        if teacher_id is None and group_id is not None:
            if self.barrier is not None:
                self.barrier.wait()
            if group_id in self.failing_groups:
                raise ConnectionError(f"group {group_id} unavailable")
            time_mod.sleep(self.delays.get(group_id, 0))
        return [
            lesson
            for lesson in self.lessons
            if lesson_filter.matches(lesson)
            and (teacher_id is None or lesson.teacher_id == teacher_id)
            and (group_id is None or lesson.group_id == group_id)
        ]

    def get_by_id(self, lesson_id):
        return next((lesson for lesson in self.lessons if lesson.lesson_id == lesson_id), None)


def _schedule():
    return [
        make_lesson(5, group_id=10, teacher_id=TEACHER_ID),  # co-taught in a curated group
        make_lesson(1, group_id=30, teacher_id=TEACHER_ID),
        make_lesson(8, group_id=10, teacher_id=2),
        make_lesson(7, group_id=20, teacher_id=3),
        make_lesson(9, group_id=40, teacher_id=4),
    ]


CURATED = [Group(group_id=20, name="IS-302", curator_id=TEACHER_ID), Group(group_id=10, name="IS-301", curator_id=TEACHER_ID)]
TEACHER = Requester(user_id=TEACHER_ID, role=Role.TEACHER)


def _aggregate(repo, requester=TEACHER, **kwargs):
    return asyncio.run(ScheduleAggregator(repo).aggregate(requester, ScheduleQuery(), now=NOW, **kwargs))


def test_merge_unique_keeps_first_occurrence():
    a = make_lesson(1, group_id=1, teacher_id=1)
    b = make_lesson(2, group_id=1, teacher_id=1)
    assert [x.lesson_id for x in merge_unique([a, b], [b, a], [b])] == [1, 2]


def test_teacher_schedule_merges_own_then_curated_in_group_id_order():
    result = _aggregate(InMemoryLessons(_schedule()), curated_groups=CURATED)

    assert result.lesson_ids == [5, 1, 8, 7]
    assert result.warnings == ()


def test_co_taught_lesson_appears_once_from_own_position():
    result = _aggregate(InMemoryLessons(_schedule()), curated_groups=CURATED)

    ids = result.lesson_ids
    assert ids.count(5) == 1
    assert ids.index(5) == 0


def test_merge_order_ignores_fetch_completion_order():
    # group 10 finishes last but still comes before group 20
    repo = InMemoryLessons(_schedule(), delays={10: 0.1, 20: 0.0})
    result = _aggregate(repo, curated_groups=CURATED)
    assert result.lesson_ids == [5, 1, 8, 7]


def test_curated_group_fetches_run_concurrently():
    # Both fetches must be in flight at the same time to pass the barrier.
    barrier = threading.Barrier(2, timeout=5)
    repo = InMemoryLessons(_schedule(), barrier=barrier)
    result = _aggregate(repo, curated_groups=CURATED)
    assert result.warnings == ()
    assert result.lesson_ids == [5, 1, 8, 7]


def test_all_fetches_share_one_resolved_filter():
    repo = InMemoryLessons(_schedule())
    _aggregate(repo, curated_groups=CURATED)

    assert len(repo.calls) == 3
    assert len({c["filter"] for c in repo.calls}) == 1
    assert repo.calls[0]["teacher_id"] == TEACHER_ID
    assert sorted(c["group_id"] for c in repo.calls[1:]) == [10, 20]
    assert all(c["teacher_id"] is None for c in repo.calls[1:])


def test_failed_curated_group_degrades_to_empty_with_warning(caplog):
    repo = InMemoryLessons(_schedule(), failing_groups={20})
    with caplog.at_level("WARNING"):
        result = _aggregate(repo, curated_groups=CURATED)

    assert result.lesson_ids == [5, 1, 8]
    assert len(result.warnings) == 1
    warning = result.warnings[0]
    assert isinstance(warning, SourceUnavailable)
    assert warning.group_id == 20
    assert isinstance(warning.__cause__, ConnectionError)
    assert "Curated group 20" in caplog.text


def test_own_lessons_failure_propagates_unchanged():
    repo = InMemoryLessons(_schedule(), fail_own=True)
    with pytest.raises(RuntimeError, match="database is down"):
        _aggregate(repo, curated_groups=CURATED)


def test_group_filter_skips_curated_fan_out():
    repo = InMemoryLessons(_schedule())
    result = _aggregate(repo, group_filter=10, curated_groups=CURATED)

    assert result.lesson_ids == [5]
    assert len(repo.calls) == 1
    assert repo.calls[0]["group_id"] == 10


def test_teacher_without_curated_groups_gets_own_lessons_only():
    result = _aggregate(InMemoryLessons(_schedule()))
    assert result.lesson_ids == [5, 1]


def test_parity_filter_applies_to_every_source():
    lessons = [
        make_lesson(1, group_id=30, teacher_id=TEACHER_ID, parity=WeekParity.ODD),
        make_lesson(2, group_id=30, teacher_id=TEACHER_ID, parity=WeekParity.EVEN),
        make_lesson(3, group_id=10, teacher_id=2, parity=WeekParity.EVEN),
        make_lesson(4, group_id=10, teacher_id=2, parity=WeekParity.EVERY),
    ]
    result = _aggregate(InMemoryLessons(lessons), curated_groups=CURATED)
    assert result.lesson_ids == [1, 4]


def test_admin_gets_single_fetch():
    repo = InMemoryLessons(_schedule())
    admin = Requester(user_id=99, role=Role.ADMIN)
    result = _aggregate(repo, requester=admin, group_filter=10, curated_groups=CURATED)

    assert result.lesson_ids == [5, 8]
    assert len(repo.calls) == 1
    assert repo.calls[0]["teacher_id"] is None


def test_admin_month_view_returns_everything():
    repo = InMemoryLessons(_schedule())
    admin = Requester(user_id=99, role=Role.ADMIN)
    query = ScheduleQuery(view_mode=ViewMode.MONTH, month=9, year=2024)
    result = asyncio.run(ScheduleAggregator(repo).aggregate(admin, query, now=NOW))
    assert result.lesson_ids == [5, 1, 8, 7, 9]


def test_students_cannot_aggregate():
    with pytest.raises(AuthorizationError):
        _aggregate(InMemoryLessons(_schedule()), requester=Requester(user_id=7, role=Role.STUDENT))

from __future__ import annotations

from enum import Enum, IntEnum


class Role(str, Enum):
    """User roles used for access decisions."""

    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"


class WeekParity(IntEnum):
    """Alternating-week tag stored in ``lessons.week_type``."""

    EVERY = 0
    ODD = 1
    EVEN = 2


class LessonType(str, Enum):
    LECTURE = "lecture"
    PRACTICE = "practice"
    LAB = "lab"


class ViewMode(str, Enum):
    WEEK = "week"
    MONTH = "month"


class AttendanceStatus(str, Enum):
    """Attendance status persisted per student, lesson and date."""

    PRESENT = "present"
    ABSENT = "absent"


class SessionStatus(str, Enum):
    CLEAN = "clean"
    DIRTY = "dirty"
    SAVING = "saving"

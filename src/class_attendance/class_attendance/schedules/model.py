from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time
from typing import Optional, Sequence

from ..core.enums import LessonType, Role, ViewMode, WeekParity
from ..core.exceptions import SourceUnavailable, ValidationError
from .parity import resolve_parity


@dataclass(frozen=True)
class LessonSlot:
    """One recurring lesson of the timetable (read-only here)."""

    lesson_id: int
    subject_id: int
    subject_name: str
    group_id: int
    teacher_id: Optional[int]
    day_of_week: int
    time_start: time
    time_end: time
    room: str
    week_parity: WeekParity
    lesson_type: LessonType
    group_name: str = ""

    def is_active_in(self, parity: WeekParity) -> bool:
        """EVERY lessons run in both weeks, ODD/EVEN ones only in their own."""

        return self.week_parity == WeekParity.EVERY or self.week_parity == parity


@dataclass(frozen=True)
class Requester:
    user_id: int
    role: Role


@dataclass(frozen=True)
class LessonFilter:
    """Effective predicate of a schedule query, resolved once per request."""

    view_mode: ViewMode
    parities: tuple[WeekParity, ...]
    parity: Optional[WeekParity] = None
    month: Optional[int] = None
    year: Optional[int] = None

    def matches(self, lesson: LessonSlot) -> bool:
        return lesson.week_parity in self.parities


@dataclass(frozen=True)
class ScheduleQuery:
    """What the user asked to see.

    WEEK mode uses ``parity`` (explicit override) or ``week_offset``; MONTH
    mode uses ``month`` (0-11) and ``year``. Hashable, so it can serve as the
    identity of a request.
    """

    view_mode: ViewMode = ViewMode.WEEK
    parity: Optional[WeekParity] = None
    week_offset: int = 0
    month: Optional[int] = None
    year: Optional[int] = None

    def resolve(self, now: datetime) -> LessonFilter:
        if self.view_mode == ViewMode.MONTH:
            if self.month is None or self.year is None:
                raise ValidationError("Month view needs both month and year")
            if not 0 <= int(self.month) <= 11:
                raise ValidationError("Month must be between 0 and 11")
            # A month spans weeks of both parities.
            return LessonFilter(
                view_mode=ViewMode.MONTH,
                parities=(WeekParity.EVERY, WeekParity.ODD, WeekParity.EVEN),
                month=int(self.month),
                year=int(self.year),
            )

        if self.parity is not None:
            if self.parity == WeekParity.EVERY:
                raise ValidationError("Week parity override must be odd or even")
            parity = WeekParity(self.parity)
        else:
            parity = resolve_parity(now, self.week_offset)
        return LessonFilter(view_mode=ViewMode.WEEK, parities=(WeekParity.EVERY, parity), parity=parity)


@dataclass(frozen=True)
class AggregatedSchedule:
    """Merged lessons, unique by id, plus the sources that degraded to empty."""

    lessons: tuple[LessonSlot, ...] = ()
    warnings: tuple[SourceUnavailable, ...] = ()

    @property
    def lesson_ids(self) -> Sequence[int]:
        return [lesson.lesson_id for lesson in self.lessons]

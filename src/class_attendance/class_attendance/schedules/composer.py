from __future__ import annotations

import logging
from typing import Awaitable, Callable, Hashable, Optional, Sequence

from .model import AggregatedSchedule, LessonSlot

logger = logging.getLogger(__name__)


def compose(lessons: Sequence[LessonSlot], subject_filter: Optional[str] = None) -> list[LessonSlot]:
    """Lessons whose subject name equals ``subject_filter`` exactly (case-sensitive).

    Without a filter the lessons are returned unchanged.
    """

    if subject_filter is None:
        return list(lessons)
    return [lesson for lesson in lessons if lesson.subject_name == subject_filter]


def list_distinct_subjects(lessons: Sequence[LessonSlot]) -> list[str]:
    """Subject names in order of first appearance, without duplicates."""

    return list(dict.fromkeys(lesson.subject_name for lesson in lessons))


class ScheduleView:
    """UI-facing schedule state for one screen.

    Holds the last applied aggregated schedule and the subject filter. Results
    of a load are applied only if no newer load has started in the meantime.
    """

    def __init__(self) -> None:
        self._schedule = AggregatedSchedule()
        self._subject_filter: Optional[str] = None
        self._current_query: Optional[Hashable] = None
        self._generation = 0

    @property
    def schedule(self) -> AggregatedSchedule:
        return self._schedule

    @property
    def current_query(self) -> Optional[Hashable]:
        return self._current_query

    @property
    def subject_filter(self) -> Optional[str]:
        return self._subject_filter

    def set_subject_filter(self, subject: Optional[str]) -> None:
        self._subject_filter = subject or None

    @property
    def lessons(self) -> list[LessonSlot]:
        return compose(self._schedule.lessons, self._subject_filter)

    @property
    def subjects(self) -> list[str]:
        return list_distinct_subjects(self._schedule.lessons)

    async def load(self, query: Hashable, fetch: Callable[[], Awaitable[AggregatedSchedule]]) -> bool:
        """Run ``fetch`` for ``query`` and apply its result if still wanted.

        Returns ``False`` when a newer load superseded this one; the stale result
        is dropped, and so is a stale error. Errors of the current load propagate.
        """

        self._generation += 1
        generation = self._generation
        self._current_query = query

        try:
            schedule = await fetch()
        except Exception as e:
            if generation != self._generation:
                logger.debug("Dropping stale schedule error for %r: %s", query, e)
                return False
            raise

        if generation != self._generation:
            logger.debug("Dropping stale schedule for %r (current %r)", query, self._current_query)
            return False
        self._schedule = schedule
        return True

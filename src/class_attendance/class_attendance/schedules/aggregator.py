from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Iterable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, SourceUnavailable
from ..groups.model import Group
from .model import AggregatedSchedule, LessonFilter, LessonSlot, Requester, ScheduleQuery
from .repository import LessonRepository

logger = logging.getLogger(__name__)


def merge_unique(*sources: Iterable[LessonSlot]) -> list[LessonSlot]:
    """Concatenate sources in the given order, keeping the first copy of each lesson id."""

    seen: set[int] = set()
    merged: list[LessonSlot] = []
    for source in sources:
        for lesson in source:
            if lesson.lesson_id in seen:
                continue
            seen.add(lesson.lesson_id)
            merged.append(lesson)
    return merged


class ScheduleAggregator:
    """Builds one schedule out of a teacher's own lessons and their curated groups.

    Repository calls are blocking, so each fetch runs in a worker thread; the
    curated-group fetches run concurrently and are joined before merging.
    """

    def __init__(self, lessons: LessonRepository):
        self._lessons = lessons

    async def aggregate(
        self,
        requester: Requester,
        query: ScheduleQuery,
        *,
        group_filter: Optional[int] = None,
        curated_groups: Sequence[Group] = (),
        now: datetime | None = None,
    ) -> AggregatedSchedule:
        lesson_filter = query.resolve(now or now_local())

        if requester.role == Role.ADMIN:
            lessons = await asyncio.to_thread(
                self._lessons.list_lessons, lesson_filter=lesson_filter, group_id=group_filter
            )
            return AggregatedSchedule(lessons=tuple(lessons))

        if requester.role != Role.TEACHER:
            raise AuthorizationError("Only teachers and admins can view schedules")

        # Mandatory source: errors propagate as-is.
        own = await asyncio.to_thread(
            self._lessons.list_lessons,
            lesson_filter=lesson_filter,
            teacher_id=requester.user_id,
            group_id=group_filter,
        )

        curated: list[Sequence[LessonSlot]] = []
        warnings: list[SourceUnavailable] = []
        if group_filter is None and curated_groups:
            curated, warnings = await self._fetch_curated(lesson_filter, curated_groups)

        merged = merge_unique(own, *curated)
        logger.info(
            "Schedule for teacher %s: own=%d curated_groups=%d total=%d",
            requester.user_id,
            len(own),
            len(curated_groups) if group_filter is None else 0,
            len(merged),
        )
        return AggregatedSchedule(lessons=tuple(merged), warnings=tuple(warnings))

    async def _fetch_curated(
        self, lesson_filter: LessonFilter, groups: Sequence[Group]
    ) -> tuple[list[Sequence[LessonSlot]], list[SourceUnavailable]]:
        ordered = sorted(groups, key=lambda g: g.group_id)
        tasks = [
            asyncio.to_thread(self._lessons.list_lessons, lesson_filter=lesson_filter, group_id=g.group_id)
            for g in ordered
        ]
        # gather keeps argument order, so results line up with ``ordered``
        # whatever order the fetches finish in.
        results = await asyncio.gather(*tasks, return_exceptions=True)

        lessons: list[Sequence[LessonSlot]] = []
        warnings: list[SourceUnavailable] = []
        for group, result in zip(ordered, results):
            if isinstance(result, BaseException) and not isinstance(result, Exception):
                raise result
            if isinstance(result, Exception):
                logger.warning("Curated group %s schedule unavailable: %s", group.group_id, result)
                warning = SourceUnavailable("curated_group", group.group_id)
                warning.__cause__ = result
                warnings.append(warning)
                lessons.append([])
            else:
                lessons.append(result)
        return lessons, warnings

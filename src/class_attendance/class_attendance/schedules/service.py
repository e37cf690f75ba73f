from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import Role
from ..core.exceptions import SourceUnavailable
from ..groups.model import Group
from ..groups.repository import GroupRepository
from .aggregator import ScheduleAggregator
from .composer import compose, list_distinct_subjects
from .model import LessonSlot, Requester, ScheduleQuery
from .repository import LessonRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScheduleResult:
    lessons: list[LessonSlot]
    subjects: list[str]
    warnings: tuple[SourceUnavailable, ...] = ()


class ScheduleService:
    def __init__(
        self,
        lessons: LessonRepository,
        groups: GroupRepository,
        *,
        aggregator: ScheduleAggregator | None = None,
    ):
        self._lessons = lessons
        self._groups = groups
        self._aggregator = aggregator or ScheduleAggregator(lessons)

    async def curated_groups(self, requester: Requester) -> tuple[Sequence[Group], Optional[SourceUnavailable]]:
        """Groups curated by a teacher; a failed lookup means no curated groups."""

        if requester.role != Role.TEACHER:
            return [], None
        try:
            groups = await asyncio.to_thread(self._groups.list_curated_by, requester.user_id)
        except Exception as e:
            logger.warning("Curated groups of teacher %s unavailable: %s", requester.user_id, e)
            warning = SourceUnavailable("curated_groups")
            warning.__cause__ = e
            return [], warning
        return groups, None

    async def get_schedule(
        self,
        requester: Requester,
        query: ScheduleQuery,
        *,
        group_filter: Optional[int] = None,
        subject_filter: Optional[str] = None,
        now: datetime | None = None,
    ) -> ScheduleResult:
        groups, groups_warning = await self.curated_groups(requester)
        aggregated = await self._aggregator.aggregate(
            requester,
            query,
            group_filter=group_filter,
            curated_groups=groups,
            now=now,
        )
        warnings = aggregated.warnings if groups_warning is None else (groups_warning, *aggregated.warnings)
        return ScheduleResult(
            lessons=compose(aggregated.lessons, subject_filter),
            subjects=list_distinct_subjects(aggregated.lessons),
            warnings=warnings,
        )

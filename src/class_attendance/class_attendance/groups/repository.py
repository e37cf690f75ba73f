from __future__ import annotations

from typing import Protocol, Sequence

from .model import Group


class GroupRepository(Protocol):
    def list_curated_by(self, teacher_id: int) -> Sequence[Group]:
        """Groups whose curator is ``teacher_id``."""

        raise NotImplementedError

    def list_student_ids(self, group_id: int) -> Sequence[int]:
        """Students currently enrolled in the group, in roster order."""

        raise NotImplementedError

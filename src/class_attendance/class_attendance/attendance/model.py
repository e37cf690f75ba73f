from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from ..core.enums import AttendanceStatus, SessionStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Persisted attendance of one student at one lesson on one date."""

    student_id: int
    lesson_id: int
    date: date
    status: AttendanceStatus


@dataclass
class RosterEntry:
    student_id: int
    present: bool = False


@dataclass
class AttendanceSession:
    """Editable attendance of one lesson.

    ``roster`` has exactly one entry per enrolled student. The session is owned
    by a single caller; nothing here is synchronized.
    """

    lesson_id: int
    roster: list[RosterEntry] = field(default_factory=list)
    status: SessionStatus = SessionStatus.CLEAN

    @property
    def dirty(self) -> bool:
        return self.status != SessionStatus.CLEAN

    @property
    def present_count(self) -> int:
        return sum(1 for e in self.roster if e.present)

    @property
    def absent_count(self) -> int:
        return len(self.roster) - self.present_count

    def entry(self, student_id: int) -> Optional[RosterEntry]:
        for e in self.roster:
            if e.student_id == student_id:
                return e
        return None

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..core.enums import LessonType, WeekParity
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, normalize_mysql_time
from .model import LessonFilter, LessonSlot
from .repository import LessonRepository

_SELECT = """
    SELECT
        l.id, l.subject_id, s.name AS subject_name,
        l.group_id, g.name AS group_name, l.teacher_id,
        l.day_of_week, l.time_start, l.time_end, l.room,
        l.week_type, l.lesson_type
    FROM lessons l
    JOIN subjects s ON s.id = l.subject_id
    JOIN `groups` g ON g.id = l.group_id
"""


def _to_lesson(r: Dict[str, Any]) -> LessonSlot:
    return LessonSlot(
        lesson_id=int(r["id"]),
        subject_id=int(r["subject_id"]),
        subject_name=r["subject_name"],
        group_id=int(r["group_id"]),
        group_name=r.get("group_name") or "",
        teacher_id=int(r["teacher_id"]) if r.get("teacher_id") is not None else None,
        day_of_week=int(r["day_of_week"]),
        time_start=normalize_mysql_time(r["time_start"]),
        time_end=normalize_mysql_time(r["time_end"]),
        room=r.get("room") or "",
        week_parity=WeekParity(int(r.get("week_type") or 0)),
        lesson_type=LessonType(r["lesson_type"]),
    )


class MySQLLessonRepository(LessonRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_lessons(
        self,
        *,
        lesson_filter: LessonFilter,
        teacher_id: Optional[int] = None,
        group_id: Optional[int] = None,
    ) -> Sequence[LessonSlot]:
        parities = [int(p) for p in lesson_filter.parities]
        clauses = [f"l.week_type IN {in_clause(parities)}"]
        params: list[object] = list(parities)
        if teacher_id is not None:
            clauses.append("l.teacher_id=%s")
            params.append(int(teacher_id))
        if group_id is not None:
            clauses.append("l.group_id=%s")
            params.append(int(group_id))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                {_SELECT}
                WHERE {where}
                ORDER BY l.day_of_week ASC, l.time_start ASC, l.id ASC
                """,
                tuple(params),
            )
            return [_to_lesson(r) for r in fetchall(cur)]

    def get_by_id(self, lesson_id: int) -> Optional[LessonSlot]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE l.id=%s", (int(lesson_id),))
            r = fetchone(cur)
            return _to_lesson(r) if r else None

from __future__ import annotations

from typing import Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import AttendanceRecord
from .repository import AttendanceRepository


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_lesson(self, lesson_id: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT student_id, lesson_id, date, status
                FROM attendance
                WHERE lesson_id=%s
                ORDER BY date ASC, student_id ASC
                """,
                (int(lesson_id),),
            )
            return [
                AttendanceRecord(
                    student_id=int(r["student_id"]),
                    lesson_id=int(r["lesson_id"]),
                    date=r["date"],
                    status=AttendanceStatus(r["status"]),
                )
                for r in fetchall(cur)
            ]

    def save_for_lesson(self, *, lesson_id: int, records: Sequence[AttendanceRecord]) -> bool:
        if not records:
            return True

        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(
                """
                INSERT INTO attendance(student_id, lesson_id, date, status)
                VALUES(%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE status=VALUES(status)
                """,
                [(int(r.student_id), int(lesson_id), r.date, r.status.value) for r in records],
            )
            # Unchanged duplicate rows report 0 affected rows, so only a
            # negative count means failure.
            return cur.rowcount >= 0

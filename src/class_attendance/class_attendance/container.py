from __future__ import annotations

from dataclasses import dataclass

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .database.connection import DBConfig, DatabaseConnection
from .groups.mysql_group_repository import MySQLGroupRepository
from .schedules.aggregator import ScheduleAggregator
from .schedules.mysql_lesson_repository import MySQLLessonRepository
from .schedules.service import ScheduleService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    lessons_repo: MySQLLessonRepository
    groups_repo: MySQLGroupRepository
    attendance_repo: MySQLAttendanceRepository

    schedule_service: ScheduleService
    attendance_service: AttendanceService


def build_container(*, db_config: dict) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    lessons_repo = MySQLLessonRepository(conn)
    groups_repo = MySQLGroupRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)

    schedule_service = ScheduleService(lessons_repo, groups_repo, aggregator=ScheduleAggregator(lessons_repo))
    attendance_service = AttendanceService(attendance_repo, lessons_repo, groups_repo)

    return Container(
        conn=conn,
        lessons_repo=lessons_repo,
        groups_repo=groups_repo,
        attendance_repo=attendance_repo,
        schedule_service=schedule_service,
        attendance_service=attendance_service,
    )

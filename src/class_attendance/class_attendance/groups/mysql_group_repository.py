from __future__ import annotations

from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import Group
from .repository import GroupRepository


class MySQLGroupRepository(GroupRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_curated_by(self, teacher_id: int) -> Sequence[Group]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, name, curator_id
                FROM `groups`
                WHERE curator_id=%s
                ORDER BY id ASC
                """,
                (int(teacher_id),),
            )
            return [
                Group(
                    group_id=int(r["id"]),
                    name=r["name"],
                    curator_id=int(r["curator_id"]) if r.get("curator_id") is not None else None,
                )
                for r in fetchall(cur)
            ]

    def list_student_ids(self, group_id: int) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT u.id
                FROM users u
                WHERE u.group_id=%s AND u.role='student'
                ORDER BY u.full_name ASC, u.id ASC
                """,
                (int(group_id),),
            )
            return [int(r["id"]) for r in fetchall(cur)]

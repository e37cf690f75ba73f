from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Iterable, Optional, Sequence

from ..core.enums import AttendanceStatus, SessionStatus
from ..core.exceptions import NotFoundError, PersistenceError
from .model import AttendanceRecord, AttendanceSession, RosterEntry

logger = logging.getLogger(__name__)

PersistFn = Callable[[int, Sequence[AttendanceRecord]], Optional[bool]]


def latest_by_student(records: Iterable[AttendanceRecord]) -> dict[int, AttendanceRecord]:
    """Most recent record per student (later dates win, ties keep the last seen)."""

    latest: dict[int, AttendanceRecord] = {}
    for r in records:
        current = latest.get(r.student_id)
        if current is None or r.date >= current.date:
            latest[r.student_id] = r
    return latest


class AttendanceSessionManager:
    """Operations on an :class:`AttendanceSession`.

    Lifecycle per lesson: clean -> dirty (any mutation) -> saving -> clean on
    success, or back to dirty when the save fails. Edits are never discarded
    by a failed save.
    """

    def initialize(
        self,
        lesson_id: int,
        roster: Sequence[int],
        prior_records: Iterable[AttendanceRecord],
    ) -> AttendanceSession:
        # Students without a prior record start as absent.
        prior = latest_by_student(prior_records)
        entries = []
        for student_id in roster:
            matched = prior.get(student_id)
            entries.append(
                RosterEntry(
                    student_id=student_id,
                    present=matched is not None and matched.status == AttendanceStatus.PRESENT,
                )
            )
        return AttendanceSession(lesson_id=lesson_id, roster=entries)

    def toggle(self, session: AttendanceSession, student_id: int) -> None:
        entry = session.entry(student_id)
        if entry is None:
            raise NotFoundError(f"Student {student_id} is not on the roster of lesson {session.lesson_id}")
        entry.present = not entry.present
        session.status = SessionStatus.DIRTY

    def set_present(self, session: AttendanceSession, student_id: int, present: bool) -> None:
        """Toggle only when the current value differs from ``present``."""

        entry = session.entry(student_id)
        if entry is None:
            raise NotFoundError(f"Student {student_id} is not on the roster of lesson {session.lesson_id}")
        if entry.present != bool(present):
            self.toggle(session, student_id)

    def mark_all(self, session: AttendanceSession) -> None:
        self._set_all(session, True)

    def clear_all(self, session: AttendanceSession) -> None:
        self._set_all(session, False)

    def _set_all(self, session: AttendanceSession, present: bool) -> None:
        for e in session.roster:
            e.present = present
        # Dirty even when nothing changed.
        session.status = SessionStatus.DIRTY

    def to_save_payload(self, session: AttendanceSession, today: date) -> list[AttendanceRecord]:
        """One record per roster entry; absence is saved explicitly."""

        return [
            AttendanceRecord(
                student_id=e.student_id,
                lesson_id=session.lesson_id,
                date=today,
                status=AttendanceStatus.PRESENT if e.present else AttendanceStatus.ABSENT,
            )
            for e in session.roster
        ]

    def save(self, session: AttendanceSession, persist: PersistFn, today: date) -> list[AttendanceRecord]:
        """Persist the session through ``persist(lesson_id, records)``.

        Exceptions from ``persist`` are re-raised unchanged; an explicit
        ``False`` result raises :class:`PersistenceError`. Either way the
        session stays dirty. No retry.
        """

        payload = self.to_save_payload(session, today)
        session.status = SessionStatus.SAVING
        try:
            ok = persist(session.lesson_id, payload)
        except Exception:
            session.status = SessionStatus.DIRTY
            logger.exception("Saving attendance of lesson %s failed", session.lesson_id)
            raise
        if ok is False:
            session.status = SessionStatus.DIRTY
            logger.error("Saving attendance of lesson %s was rejected", session.lesson_id)
            raise PersistenceError(f"Attendance of lesson {session.lesson_id} was not saved")

        session.status = SessionStatus.CLEAN
        return payload

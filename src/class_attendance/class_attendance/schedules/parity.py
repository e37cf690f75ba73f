from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Union

from ..core.constants import ACADEMIC_YEAR_START_DAY, ACADEMIC_YEAR_START_MONTH, DAYS_PER_WEEK
from ..core.enums import WeekParity

DateLike = Union[date, datetime]


def academic_year_start(day: DateLike) -> DateLike:
    """September 1 of the academic year ``day`` belongs to.

    Returns a value of the same kind as ``day`` (a midnight ``datetime`` for
    datetimes, keeping tzinfo) so the two can be subtracted.
    """

    year = day.year if day.month >= ACADEMIC_YEAR_START_MONTH else day.year - 1
    if isinstance(day, datetime):
        return datetime(year, ACADEMIC_YEAR_START_MONTH, ACADEMIC_YEAR_START_DAY, tzinfo=day.tzinfo)
    return date(year, ACADEMIC_YEAR_START_MONTH, ACADEMIC_YEAR_START_DAY)


def weeks_since_academic_year_start(day: DateLike) -> int:
    return (day - academic_year_start(day)) // timedelta(days=DAYS_PER_WEEK)


def resolve_parity(now: DateLike, week_offset: int = 0) -> WeekParity:
    """Week parity active ``week_offset`` weeks away from ``now``.

    Week 0 of the academic year (the week starting September 1) is ODD, the
    next one EVEN and so on. Pure function of its arguments.
    """

    target = now + timedelta(days=int(week_offset) * DAYS_PER_WEEK)
    diff_weeks = weeks_since_academic_year_start(target)
    return WeekParity.ODD if diff_weeks % 2 == 0 else WeekParity.EVEN

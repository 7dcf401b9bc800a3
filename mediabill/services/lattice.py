from __future__ import annotations

import calendar
import logging
from datetime import date

from mediabill.constants import format_month
from mediabill.models.schedule import MonthBucket

logger = logging.getLogger(__name__)


def month_bounds(year: int, month: int) -> tuple[date, date]:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def month_key(day: date) -> str:
    return format_month(day.year, day.month)


def build_month_lattice(start: date | None, end: date | None) -> list[MonthBucket]:
    """Build one bucket per calendar month from start's month through end's month.

    Missing dates give an empty lattice.
    """
    if start is None or end is None:
        logger.debug("Lattice requested without campaign dates, start=%s end=%s", start, end)
        return []
    if end < start:
        logger.warning("Campaign end %s is before start %s, no months built", end, start)
        return []

    buckets: list[MonthBucket] = []
    year, month = start.year, start.month
    while (year, month) <= (end.year, end.month):
        first, last = month_bounds(year, month)
        buckets.append(MonthBucket(key=format_month(year, month), start=first, end=last))
        if month == 12:
            year, month = year + 1, 1
        else:
            month += 1

    logger.debug("Built %d month buckets for %s..%s", len(buckets), start, end)
    return buckets

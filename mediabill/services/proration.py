from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from fractions import Fraction

from mediabill.models.burst import Burst
from mediabill.models.schedule import MonthBucket

logger = logging.getLogger(__name__)


def days_inclusive(start: date, end: date) -> int:
    return (end - start).days + 1


def prorate(amount: Decimal, fraction: Fraction) -> Decimal:
    """Split an amount by an exact fraction, multiplying before dividing."""
    if fraction == 1:
        return amount
    return amount * fraction.numerator / fraction.denominator


def distribute(burst: Burst, buckets: list[MonthBucket]) -> dict[str, Fraction]:
    """Return the share of the burst falling in each overlapping month bucket.

    Shares are exact; over the months a burst overlaps they add up to 1.
    Bursts with missing or inverted dates are skipped with a warning.
    """
    if not burst.has_valid_dates:
        logger.warning(
            "Skipping burst of line item %r (%s): invalid dates start=%s end=%s",
            burst.line_item_id,
            burst.channel.value,
            burst.start_date,
            burst.end_date,
        )
        return {}

    start, end = burst.start_date, burst.end_date
    total_days = days_inclusive(start, end)
    if total_days <= 0:  # pragma: no cover - guarded by has_valid_dates
        return {}

    fractions: dict[str, Fraction] = {}
    covered = 0
    for bucket in buckets:
        slice_start = max(start, bucket.start)
        slice_end = min(end, bucket.end)
        if slice_start > slice_end:
            continue
        days = days_inclusive(slice_start, slice_end)
        fractions[bucket.key] = Fraction(days, total_days)
        covered += days

    if covered < total_days:
        logger.warning(
            "Burst of line item %r (%s) runs %d of %d days outside the campaign months",
            burst.line_item_id,
            burst.channel.value,
            total_days - covered,
            total_days,
        )
    return fractions

"""Period partitioning of shift records.

Every comparison here is made on calendar days in UTC (``datetime.date``),
never on instants. A shift logged at 23:30 local time belongs to whatever
UTC day its stored date carries; the reference instant is normalized the
same way before any bucket is built.

Buckets relative to a reference day:
- today: same day
- this_week: on or after the Monday of the reference week (Monday start).
  There is no upper bound, so shifts dated after the reference day count.
- this_month: same (year, month)
- this_year: same year
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Dict, Iterable, List, Tuple

from .schemas import ShiftRecord, to_utc_day

logger = logging.getLogger(__name__)


def day_key(value=None) -> date:
    """Calendar day (UTC) for a date, datetime or ISO string; now if None."""
    if value is None:
        value = datetime.now(timezone.utc)
    return to_utc_day(value)


def week_start(day: date) -> date:
    """Monday on or before ``day`` (a Sunday maps to 6 days earlier)."""
    return day - timedelta(days=day.weekday())


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """Half-open [first day, first day of next month) for a (year, month).

    Raises:
        ValueError: If year is not four digits or month is outside 1-12
    """
    if not isinstance(year, int) or not 1000 <= year <= 9999:
        raise ValueError(f"Invalid year '{year}'. Must be 4 digits.")
    if not isinstance(month, int) or not 1 <= month <= 12:
        raise ValueError(f"Invalid month '{month}'. Must be 1-12.")

    start = date(year, month, 1)
    if month == 12:
        end = date(year + 1, 1, 1)
    else:
        end = date(year, month + 1, 1)
    return start, end


@dataclass
class PeriodBuckets:
    """Shifts partitioned around a reference day."""

    reference_day: date
    today: List[ShiftRecord] = field(default_factory=list)
    this_week: List[ShiftRecord] = field(default_factory=list)
    this_month: List[ShiftRecord] = field(default_factory=list)
    this_year: List[ShiftRecord] = field(default_factory=list)

    @property
    def week_start(self) -> date:
        return week_start(self.reference_day)


def partition(records: Iterable[ShiftRecord], reference=None) -> PeriodBuckets:
    """Partition shifts into today / this week / this month / this year.

    Args:
        records: Shift snapshot (order irrelevant, not modified)
        reference: Reference instant; defaults to now (UTC)

    Returns:
        PeriodBuckets for the reference day
    """
    ref_day = day_key(reference)
    monday = week_start(ref_day)
    buckets = PeriodBuckets(reference_day=ref_day)

    for record in records:
        day = record.date
        if day == ref_day:
            buckets.today.append(record)
        if day >= monday:
            buckets.this_week.append(record)
        if day.year == ref_day.year and day.month == ref_day.month:
            buckets.this_month.append(record)
        if day.year == ref_day.year:
            buckets.this_year.append(record)

    logger.debug(
        f"partition {ref_day} (week of {monday}): today={len(buckets.today)} "
        f"week={len(buckets.this_week)} month={len(buckets.this_month)} year={len(buckets.this_year)}"
    )
    return buckets


def query_month(records: Iterable[ShiftRecord], year: int, month: int) -> List[ShiftRecord]:
    """Shifts whose day falls in [year-month-01, next month's first day).

    Raises:
        ValueError: If year/month are out of range (month 13 is not rolled over)
    """
    start, end = month_bounds(year, month)
    return [r for r in records if start <= r.date < end]


def shifts_on_day(records: Iterable[ShiftRecord], day) -> List[ShiftRecord]:
    """Shifts logged on a single calendar day."""
    target = day_key(day)
    return [r for r in records if r.date == target]


def group_by_month(records: Iterable[ShiftRecord], year: int) -> Dict[int, List[ShiftRecord]]:
    """Group one year's shifts by month number (1-12); empty months omitted."""
    grouped = defaultdict(list)
    for record in records:
        if record.date.year == year:
            grouped[record.date.month].append(record)
    return dict(grouped)


def available_years(records: Iterable[ShiftRecord]) -> List[int]:
    """Years that have at least one shift, most recent first."""
    return sorted({r.date.year for r in records}, reverse=True)


def sum_field(records: Iterable[ShiftRecord], field_name: str) -> float:
    """Sum a numeric ShiftRecord attribute (e.g. "total_tips") over records."""
    return sum((getattr(r, field_name) or 0) for r in records)

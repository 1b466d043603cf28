"""Summary assembly for shift records.

Pure functions that combine period buckets and tax allocation into the
flat result structures returned by the CLI and MCP server. Nothing here
reads storage; callers pass a complete, already-loaded shift snapshot.

Two withholding concepts coexist and are intentionally not reconciled:
- per-shift ``tax_withholding`` (claimed x rate, written with the shift,
  unaware of the threshold), summed by month_stats() and monthly_breakdown()
- threshold-aware period tax, computed by build_summary() via the allocator
"""

import calendar
import logging
from typing import Iterable, Optional

from .periods import (
    day_key,
    group_by_month,
    partition,
    query_month,
    shifts_on_day,
    sum_field,
)
from .schemas import (
    DayDetails,
    MonthRow,
    MonthStats,
    ShiftRecord,
    SummaryStats,
    TaxSettings,
    ThresholdProgress,
    YearBreakdown,
)
from .taxes import allocate_tax, tax_for_period, threshold_progress

logger = logging.getLogger(__name__)

NO_SHIFTS_MESSAGE = "No shifts found for this month"


def build_summary(
    records: Iterable[ShiftRecord],
    reference=None,
    settings: Optional[TaxSettings] = None,
) -> SummaryStats:
    """Dashboard summary for today, this week, this month and the year.

    Args:
        records: Every shift for the user (snapshot)
        reference: Reference instant, defaults to now (UTC)
        settings: Tax threshold/default rate

    Returns:
        SummaryStats. Averages divide by the count of ALL shifts supplied,
        not one bucket; with no shifts every sum is 0 and the average tax
        rate is the configured default.
    """
    shifts = list(records)
    buckets = partition(shifts, reference)
    state = allocate_tax(buckets.this_year, settings)

    today_claimed = sum_field(buckets.today, "claimed_tips")
    week_claimed = sum_field(buckets.this_week, "claimed_tips")
    month_claimed = sum_field(buckets.this_month, "claimed_tips")

    count = len(shifts)
    total_income = sum_field(shifts, "total_tips")
    total_claimed = sum_field(shifts, "claimed_tips")

    return SummaryStats(
        today=sum_field(buckets.today, "total_tips"),
        week=sum_field(buckets.this_week, "total_tips"),
        month=sum_field(buckets.this_month, "total_tips"),
        total_income=total_income,
        average=total_income / count if count else 0,
        today_claimed=today_claimed,
        week_claimed=week_claimed,
        month_claimed=month_claimed,
        average_claimed=total_claimed / count if count else 0,
        today_tax=tax_for_period(today_claimed, state),
        week_tax=tax_for_period(week_claimed, state),
        month_tax=tax_for_period(month_claimed, state),
        year_to_date_claimed=state.year_to_date_claimed,
        average_tax_rate=state.average_tax_rate,
        total_shifts=count,
    )


def tax_free_progress(
    records: Iterable[ShiftRecord],
    reference=None,
    settings: Optional[TaxSettings] = None,
) -> ThresholdProgress:
    """Year-to-date progress toward the tax-free threshold."""
    buckets = partition(records, reference)
    state = allocate_tax(buckets.this_year, settings)
    return threshold_progress(state, settings)


def month_stats(records: Iterable[ShiftRecord], year: int, month: int) -> MonthStats:
    """Totals for any (year, month).

    An empty month is not an error: sums are 0, ``has_data`` is False and
    ``message`` says so.

    Raises:
        ValueError: If year is not four digits or month is outside 1-12
    """
    shifts = query_month(records, year, month)

    if not shifts:
        logger.debug(f"month_stats {year}-{month:02d}: no shifts")
        return MonthStats(month=month, year=year, message=NO_SHIFTS_MESSAGE)

    return MonthStats(
        month=month,
        year=year,
        total_tips=sum_field(shifts, "total_tips"),
        claimed_tips=sum_field(shifts, "claimed_tips"),
        tax_withholding=sum_field(shifts, "tax_withholding"),
        shift_count=len(shifts),
        has_data=True,
    )


def monthly_breakdown(
    records: Iterable[ShiftRecord],
    year: int,
    settings: Optional[TaxSettings] = None,
) -> YearBreakdown:
    """Month-by-month totals for a year, most recent month first.

    Withholding per month is the raw per-shift sum, shown as 0 for every
    month while the year's claimed total is within the tax-free threshold.
    """
    if settings is None:
        settings = TaxSettings()

    by_month = group_by_month(records, year)
    year_claimed = sum(sum_field(shifts, "claimed_tips") for shifts in by_month.values())
    tax_free_zone = year_claimed <= settings.tax_free_threshold

    rows = []
    for month in sorted(by_month, reverse=True):
        shifts = by_month[month]
        withholding = 0.0 if tax_free_zone else sum_field(shifts, "tax_withholding")
        rows.append(MonthRow(
            month=month,
            name=calendar.month_name[month],
            shift_count=len(shifts),
            total_tips=sum_field(shifts, "total_tips"),
            claimed_tips=sum_field(shifts, "claimed_tips"),
            tax_withholding=withholding,
        ))

    return YearBreakdown(
        year=year,
        months=rows,
        shift_count=sum(r.shift_count for r in rows),
        total_tips=sum(r.total_tips for r in rows),
        claimed_tips=sum(r.claimed_tips for r in rows),
        tax_withholding=sum(r.tax_withholding for r in rows),
        year_to_date_claimed=year_claimed,
        tax_free_zone=tax_free_zone,
    )


def day_details(records: Iterable[ShiftRecord], day) -> DayDetails:
    """Every shift on one calendar day with the day's totals."""
    target = day_key(day)
    shifts = shifts_on_day(records, target)

    return DayDetails(
        date=target,
        shifts=shifts,
        shift_count=len(shifts),
        hours_worked=sum_field(shifts, "hours_worked"),
        total_tips=sum_field(shifts, "total_tips"),
        claimed_tips=sum_field(shifts, "claimed_tips"),
        tax_withholding=sum_field(shifts, "tax_withholding"),
    )

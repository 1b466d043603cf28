"""Threshold-aware tax allocation for claimed tips.

The first ``tax_free_threshold`` of claimed tips in a calendar year carries no
tax. Once the year-to-date claimed total crosses it, only the excess
(``taxable_amount``) is taxed, at the mean of the year's per-shift rates.

Period tax is clamped, not apportioned: each period taxes
``min(period_claimed, taxable_amount)``. Every period clamps against the same
year-level taxable amount, so today_tax + week_tax + month_tax is NOT a year
total. Use ``TaxThresholdState.year_tax`` for that.

Example, threshold 25,000 and 20% on every shift:
    YTD claimed 18,500 -> taxable 0      -> every period tax 0
    YTD claimed 28,000 -> taxable 3,000  -> month claimed 5,000 -> 3,000 x 20% = 600
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from ..schemas import ShiftRecord, TaxSettings, ThresholdProgress

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TaxThresholdState:
    """Year-level inputs to period tax, computed once per summary."""

    threshold_amount: float
    year_to_date_claimed: float
    taxable_amount: float
    average_tax_rate: float
    rate_is_default: bool = False

    @property
    def over_threshold(self) -> bool:
        return self.year_to_date_claimed > self.threshold_amount

    @property
    def year_tax(self) -> float:
        """Tax on the whole taxable excess for the year."""
        return self.taxable_amount * self.average_tax_rate / 100


def allocate_tax(
    year_bucket: Iterable[ShiftRecord],
    settings: Optional[TaxSettings] = None,
) -> TaxThresholdState:
    """Compute the year's threshold state from its shifts.

    Args:
        year_bucket: Shifts in the reference year
        settings: Threshold and default rate (defaults: 25000 / 20%)

    Returns:
        TaxThresholdState. When the bucket is empty the average rate is the
        configured default and ``rate_is_default`` is True.
    """
    if settings is None:
        settings = TaxSettings()

    shifts = list(year_bucket)
    ytd_claimed = sum(s.claimed_tips for s in shifts)

    if shifts:
        average_rate = sum(s.tax_rate for s in shifts) / len(shifts)
        rate_is_default = False
    else:
        average_rate = settings.default_tax_rate
        rate_is_default = True

    taxable = max(ytd_claimed - settings.tax_free_threshold, 0)

    state = TaxThresholdState(
        threshold_amount=settings.tax_free_threshold,
        year_to_date_claimed=ytd_claimed,
        taxable_amount=taxable,
        average_tax_rate=average_rate,
        rate_is_default=rate_is_default,
    )
    logger.debug(
        f"allocate_tax: ytd={ytd_claimed:.2f} threshold={settings.tax_free_threshold:.2f} "
        f"taxable={taxable:.2f} rate={average_rate:.2f}%{' (default)' if rate_is_default else ''}"
    )
    return state


def tax_for_period(period_claimed: float, state: TaxThresholdState) -> float:
    """Threshold-aware tax for one period's claimed tips.

    Zero while the year is within the tax-free band, regardless of the
    period's own claimed amount. Otherwise the period's claimed tips are
    clamped to the year's taxable amount before the average rate applies.
    """
    if state.year_to_date_claimed <= state.threshold_amount:
        return 0.0

    taxable_portion = min(period_claimed, state.taxable_amount)
    return taxable_portion * state.average_tax_rate / 100


def threshold_progress(
    state: TaxThresholdState,
    settings: Optional[TaxSettings] = None,
) -> ThresholdProgress:
    """Progress toward the tax-free threshold for the tracker view.

    Status:
        tax_free: under the threshold and below the warning ratio
        near_threshold: under the threshold, at or above the warning ratio
        over_threshold: at or past the threshold
    """
    if settings is None:
        settings = TaxSettings()

    threshold = state.threshold_amount
    ytd = state.year_to_date_claimed

    if threshold > 0:
        percent_used = min(ytd / threshold * 100, 100.0)
    else:
        percent_used = 100.0

    if ytd >= threshold:
        status = "over_threshold"
    elif ytd >= threshold * settings.near_threshold_ratio:
        status = "near_threshold"
    else:
        status = "tax_free"

    return ThresholdProgress(
        threshold_amount=threshold,
        year_to_date_claimed=ytd,
        percent_used=percent_used,
        remaining=max(threshold - ytd, 0),
        taxable_amount=state.taxable_amount,
        average_tax_rate=state.average_tax_rate,
        year_tax=state.year_tax,
        status=status,
    )

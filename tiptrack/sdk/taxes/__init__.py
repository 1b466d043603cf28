"""taxes - Tax-free threshold allocation.

Scope:
- Year-to-date claimed tips against an annual tax-free threshold
- Average effective rate over the year's shifts
- Threshold-aware tax for a reporting period (today, week, month)
- Progress toward the threshold (tax-free tracker)

Constraints:
- Pure calculation - no storage access, receives shifts, returns results
- Threshold and default rate come from TaxSettings (profile.yaml), never
  from literals at call sites

Usage:
    from tiptrack.sdk.taxes import allocate_tax, tax_for_period

    state = allocate_tax(buckets.this_year, settings)
    month_tax = tax_for_period(month_claimed, state)
"""

from .allocator import (
    TaxThresholdState,
    allocate_tax,
    tax_for_period,
    threshold_progress,
)

__all__ = [
    "TaxThresholdState",
    "allocate_tax",
    "tax_for_period",
    "threshold_progress",
]

"""Pydantic schemas for TipTrack data validation.

Input schemas (ShiftRecord, TaxSettings) use extra='forbid' so that typos in
stored records or profile.yaml cause clear errors rather than silent ignoring.

Output schemas serialize with camelCase aliases (``totalIncome``,
``todayClaimed``, ...) to keep the JSON contract the dashboard consumes.
Python callers use the snake_case attribute names.
"""

import datetime as dt
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


# Policy defaults. Callers must treat DEFAULT_TAX_RATE as a policy value,
# not a measurement: it is used when there are no shifts to average over.
DEFAULT_TAX_FREE_THRESHOLD = 25000.0
DEFAULT_TAX_RATE = 20.0
DEFAULT_NEAR_THRESHOLD_RATIO = 0.9


def to_utc_day(value) -> dt.date:
    """Normalize a date-like value to a calendar day in UTC.

    Accepts ``date``, ``datetime`` (aware values are converted to UTC, naive
    values are taken as UTC) or an ISO string such as ``2025-11-04`` or
    ``2025-11-04T00:00:00.000Z``.

    Raises:
        ValueError: If the value is empty, unparseable or not date-like
    """
    if isinstance(value, dt.datetime):
        if value.tzinfo is not None:
            value = value.astimezone(dt.timezone.utc)
        return value.date()
    if isinstance(value, dt.date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("date is empty")
        if len(text) == 10:
            return dt.datetime.strptime(text, "%Y-%m-%d").date()
        # fromisoformat() only accepts a trailing Z from 3.11 on
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = dt.datetime.fromisoformat(text)
        except ValueError:
            raise ValueError(f"date not in ISO format: {value}") from None
        return to_utc_day(parsed)
    raise ValueError(f"expected date, datetime or ISO string, got {type(value).__name__}")


# =============================================================================
# Input Schemas
# =============================================================================


class TaxSettings(BaseModel):
    """Tax parameters from the ``tax`` section of profile.yaml."""

    model_config = ConfigDict(extra="forbid")

    tax_free_threshold: float = Field(
        default=DEFAULT_TAX_FREE_THRESHOLD, ge=0,
        description="Annual claimed tips below which no tax is allocated",
    )
    default_tax_rate: float = Field(
        default=DEFAULT_TAX_RATE, ge=0, le=100,
        description="Rate (percent) used when there are no shifts to average",
    )
    near_threshold_ratio: float = Field(
        default=DEFAULT_NEAR_THRESHOLD_RATIO, gt=0, le=1,
        description="Fraction of the threshold at which the tracker warns",
    )


class ShiftRecord(BaseModel):
    """A single logged shift.

    ``tax_withholding`` is derived here, at write time, as
    ``claimed_tips * tax_rate / 100``. It knows nothing about the annual
    tax-free threshold; period tax is computed separately by the allocator.

    When ``cash_tips`` or ``credit_tips`` is positive, ``total_tips`` is
    replaced by their sum.
    """

    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    date: dt.date = Field(..., description="Calendar day of the shift (UTC)")
    hours_worked: float = Field(..., ge=0)
    cash_tips: float = Field(default=0, ge=0)
    credit_tips: float = Field(default=0, ge=0)
    total_tips: float = Field(..., ge=0, description="Actual tips earned")
    claimed_tips: float = Field(..., ge=0, description="Tips reported for taxes")
    tax_rate: float = Field(default=DEFAULT_TAX_RATE, ge=0, le=100, description="Withholding percent")
    tax_withholding: float = Field(default=0, ge=0)
    notes: str = ""

    @field_validator("date", mode="before")
    @classmethod
    def normalize_date(cls, value):
        if value is None:
            raise ValueError("date is required")
        return to_utc_day(value)

    @model_validator(mode="after")
    def derive_amounts(self) -> "ShiftRecord":
        if self.cash_tips > 0 or self.credit_tips > 0:
            self.total_tips = self.cash_tips + self.credit_tips
        self.tax_withholding = self.claimed_tips * self.tax_rate / 100
        return self


# =============================================================================
# Output Schemas
# =============================================================================


class _Output(BaseModel):
    """Base for result structures: camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_dict(self) -> dict:
        """JSON-ready dict using the camelCase contract names."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class SummaryStats(_Output):
    """Dashboard summary: period totals, claimed amounts and period tax."""

    today: float = 0
    week: float = 0
    month: float = 0
    total_income: float = 0
    average: float = Field(default=0, description="Average total tips per shift")

    today_claimed: float = 0
    week_claimed: float = 0
    month_claimed: float = 0
    average_claimed: float = 0

    today_tax: float = 0
    week_tax: float = 0
    month_tax: float = 0

    year_to_date_claimed: float = 0
    average_tax_rate: float = DEFAULT_TAX_RATE
    total_shifts: int = 0


class MonthStats(_Output):
    """Totals for an arbitrary (year, month).

    ``tax_withholding`` is the sum of the per-shift raw withholding, not the
    threshold-aware period tax.
    """

    month: int
    year: int
    total_tips: float = 0
    claimed_tips: float = 0
    tax_withholding: float = 0
    shift_count: int = 0
    has_data: bool = False
    message: Optional[str] = None


class MonthRow(_Output):
    """One month in a yearly breakdown."""

    month: int
    name: str
    shift_count: int
    total_tips: float
    claimed_tips: float
    tax_withholding: float


class YearBreakdown(_Output):
    """Month-by-month totals for one year, most recent month first."""

    year: int
    months: List[MonthRow] = Field(default_factory=list)
    shift_count: int = 0
    total_tips: float = 0
    claimed_tips: float = 0
    tax_withholding: float = 0
    year_to_date_claimed: float = 0
    tax_free_zone: bool = True


ThresholdStatus = Literal["tax_free", "near_threshold", "over_threshold"]


class ThresholdProgress(_Output):
    """Progress toward the annual tax-free threshold."""

    threshold_amount: float
    year_to_date_claimed: float
    percent_used: float
    remaining: float
    taxable_amount: float
    average_tax_rate: float
    year_tax: float
    status: ThresholdStatus


class DayDetails(_Output):
    """All shifts logged on a single calendar day."""

    date: dt.date
    shifts: List[ShiftRecord] = Field(default_factory=list)
    shift_count: int = 0
    hours_worked: float = 0
    total_tips: float = 0
    claimed_tips: float = 0
    tax_withholding: float = 0

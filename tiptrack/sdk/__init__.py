"""TipTrack SDK - Core functionality for tip aggregation and tax estimates."""

from .config import (
    get_config_dir,
    get_settings_path,
    load_settings,
    save_settings,
    get_setting,
    set_setting,
    get_profile_path,
    load_profile,
    save_profile,
    get_profile_value,
    set_profile_value,
    validate_profile_key,
    load_tax_settings,
    get_data_path,
    ConfigError,
    ProfileNotFoundError,
    DEFAULT_PROFILE,
)

from .schemas import (
    ShiftRecord,
    TaxSettings,
    SummaryStats,
    MonthStats,
    MonthRow,
    YearBreakdown,
    ThresholdProgress,
    DayDetails,
    DEFAULT_TAX_FREE_THRESHOLD,
    DEFAULT_TAX_RATE,
)

from .periods import (
    PeriodBuckets,
    partition,
    query_month,
    shifts_on_day,
    group_by_month,
    available_years,
    day_key,
    week_start,
    month_bounds,
)

from .taxes import (
    TaxThresholdState,
    allocate_tax,
    tax_for_period,
    threshold_progress,
)

from .summary import (
    build_summary,
    tax_free_progress,
    month_stats,
    monthly_breakdown,
    day_details,
)

from . import shifts

__all__ = [
    # Config
    "get_config_dir",
    "get_settings_path",
    "load_settings",
    "save_settings",
    "get_setting",
    "set_setting",
    "get_profile_path",
    "load_profile",
    "save_profile",
    "get_profile_value",
    "set_profile_value",
    "validate_profile_key",
    "load_tax_settings",
    "get_data_path",
    "ConfigError",
    "ProfileNotFoundError",
    "DEFAULT_PROFILE",
    # Schemas
    "ShiftRecord",
    "TaxSettings",
    "SummaryStats",
    "MonthStats",
    "MonthRow",
    "YearBreakdown",
    "ThresholdProgress",
    "DayDetails",
    "DEFAULT_TAX_FREE_THRESHOLD",
    "DEFAULT_TAX_RATE",
    # Period partitioning
    "PeriodBuckets",
    "partition",
    "query_month",
    "shifts_on_day",
    "group_by_month",
    "available_years",
    "day_key",
    "week_start",
    "month_bounds",
    # Tax allocation
    "TaxThresholdState",
    "allocate_tax",
    "tax_for_period",
    "threshold_progress",
    # Summaries
    "build_summary",
    "tax_free_progress",
    "month_stats",
    "monthly_breakdown",
    "day_details",
    # Shift storage
    "shifts",
]

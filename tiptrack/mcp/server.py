"""TipTrack MCP Server - FastMCP implementation for tip summary tools."""

import json
import logging
from typing import Any

from mcp.server.fastmcp import FastMCP
from pydantic import Field

from tiptrack.sdk import (
    available_years,
    build_summary,
    load_tax_settings,
    month_stats,
    monthly_breakdown,
    shifts as sdk_shifts,
    tax_free_progress,
)

logger = logging.getLogger(__name__)

# Initialize FastMCP server
mcp = FastMCP("tiptrack")


def _snapshot(year: str | None = None):
    return sdk_shifts.load_shifts(year=year), load_tax_settings()


def _reference(as_of: str | None) -> str | None:
    """Blank or missing as_of means today (UTC)."""
    if as_of is None or not as_of.strip():
        return None
    return as_of.strip()


# --- Tools ---

@mcp.tool()
async def get_summary(
    as_of: str | None = Field(default=None, description="Reference day (YYYY-MM-DD). Defaults to today in UTC."),
) -> dict[str, Any]:
    """Get tip totals for today, this week and this month, with claimed tips and threshold-aware tax.

    Tax is 0 until the year's claimed tips pass the tax-free threshold (default $25,000).
    Period taxes are clamped to the year's taxable amount and don't sum to a year total.
    """
    try:
        records, tax_settings = _snapshot()
        return build_summary(records, _reference(as_of), tax_settings).to_dict()

    except Exception as e:
        logger.error(f"Error building summary: {e}")
        return {"error": str(e)}


@mcp.tool()
async def get_month_stats(
    year: int = Field(description="Year (4 digits, e.g., 2025)"),
    month: int = Field(description="Month number (1-12)"),
) -> dict[str, Any]:
    """Get total tips, claimed tips and per-shift withholding for one month.

    An empty month returns zeros with hasData=false.
    """
    try:
        records, _ = _snapshot()
        return month_stats(records, year, month).to_dict()

    except Exception as e:
        logger.error(f"Error getting month stats for {year}-{month}: {e}")
        return {"error": str(e)}


@mcp.tool()
async def get_monthly_breakdown(
    year: int | None = Field(default=None, description="Year (4 digits). Defaults to the most recent year with shifts."),
) -> dict[str, Any]:
    """Get a month-by-month breakdown for a year, most recent month first."""
    try:
        records, tax_settings = _snapshot()
        if year is None:
            years = available_years(records)
            if not years:
                return {"error": "No shifts recorded", "months": []}
            year = years[0]
        return monthly_breakdown(records, year, tax_settings).to_dict()

    except Exception as e:
        logger.error(f"Error building breakdown for {year}: {e}")
        return {"error": str(e), "months": []}


@mcp.tool()
async def get_tax_free_progress(
    as_of: str | None = Field(default=None, description="Reference day (YYYY-MM-DD). Defaults to today in UTC."),
) -> dict[str, Any]:
    """Get year-to-date progress toward the tax-free tip threshold.

    Status is one of tax_free, near_threshold or over_threshold.
    """
    try:
        records, tax_settings = _snapshot()
        return tax_free_progress(records, _reference(as_of), tax_settings).to_dict()

    except Exception as e:
        logger.error(f"Error getting tax-free progress: {e}")
        return {"error": str(e)}


@mcp.tool()
async def list_shifts(
    year: str | None = Field(default=None, description="Filter by year (e.g., '2025')"),
    month: int | None = Field(default=None, description="Filter by month number (1-12)"),
    limit: int = Field(default=50, description="Maximum number of shifts to return (default 50)"),
) -> dict[str, Any]:
    """List logged shifts, newest first. Returns shift IDs, dates and amounts."""
    try:
        all_records = sdk_shifts.list_shifts(year=year, month=month)

        total_count = len(all_records)
        formatted = []
        for rec in all_records[:limit]:
            data = rec.get("data", {})
            formatted.append({
                "id": rec.get("id"),
                "date": data.get("date"),
                "hours_worked": data.get("hours_worked"),
                "total_tips": data.get("total_tips"),
                "claimed_tips": data.get("claimed_tips"),
                "tax_rate": data.get("tax_rate"),
                "tax_withholding": data.get("tax_withholding"),
            })

        return {
            "shifts": formatted,
            "count": len(formatted),
            "total_available": total_count,
            "filters_applied": {"year": year, "month": month},
        }

    except Exception as e:
        logger.error(f"Error listing shifts: {e}")
        return {"error": str(e), "shifts": [], "count": 0}


@mcp.tool()
async def get_shift(
    shift_id: str = Field(description="The 8-character shift ID (from list_shifts)"),
) -> dict[str, Any]:
    """Get full details of a single shift by ID."""
    try:
        record = sdk_shifts.get_shift(shift_id)

        if record is None:
            return {"error": f"Shift not found: {shift_id}", "shift": None}

        record.pop("_path", None)
        return {
            "id": record.get("id"),
            "meta": record.get("meta", {}),
            "data": record.get("data", {}),
        }

    except Exception as e:
        logger.error(f"Error getting shift {shift_id}: {e}")
        return {"error": str(e), "shift": None}


# --- Resources (optional, for browsing) ---

@mcp.resource("tiptrack://shifts/years")
async def list_years_resource() -> str:
    """List available years with shift counts."""
    try:
        shifts_dir = sdk_shifts.get_shifts_dir()
        years = {
            year: sum(1 for _ in (shifts_dir / year).glob("*.json"))
            for year in sdk_shifts.list_years()
        }
        return json.dumps({"years": years}, indent=2)
    except Exception as e:
        return json.dumps({"error": str(e)})


# --- Server Entry Point ---

def run_server():
    """Run the MCP server in stdio mode."""
    mcp.run(transport="stdio")


if __name__ == "__main__":
    run_server()

"""Rich renderers for summaries, month stats and the tax-free tracker.

Transforms SDK result models into formatted Rich tables. Currency and date
formatting live here only; the SDK returns plain numbers.
"""

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from tiptrack.sdk import DayDetails, MonthStats, SummaryStats, ThresholdProgress, YearBreakdown


def render_summary(console: Console, summary: SummaryStats, reference_day) -> None:
    """Render the dashboard summary as a period table."""
    table = Table(title=f"Tips as of {reference_day}", box=box.ROUNDED)
    table.add_column("", style="bold", min_width=14)
    table.add_column("Total Tips", justify="right", min_width=12)
    table.add_column("Claimed", justify="right", min_width=12)
    table.add_column("Tax", justify="right", min_width=10)

    table.add_row("Today", _fmt(summary.today), _fmt(summary.today_claimed), _fmt(summary.today_tax))
    table.add_row("This Week", _fmt(summary.week), _fmt(summary.week_claimed), _fmt(summary.week_tax))
    table.add_row("This Month", _fmt(summary.month), _fmt(summary.month_claimed), _fmt(summary.month_tax))
    table.add_row("", "", "", "")
    table.add_row(
        "[dim]Per Shift[/dim]",
        f"[dim]{_fmt(summary.average)}[/dim]",
        f"[dim]{_fmt(summary.average_claimed)}[/dim]",
        "",
    )
    table.add_row("[bold]All Time[/bold]", _fmt(summary.total_income), "", "")

    console.print(table)
    console.print(
        f"Year to date claimed: {_fmt(summary.year_to_date_claimed)}  "
        f"(average rate {summary.average_tax_rate:.1f}%, {summary.total_shifts} shift(s) total)"
    )
    console.print("[dim]Period taxes are each clamped to the year's taxable amount; they don't add up to a year total.[/dim]")


def render_month_stats(console: Console, stats: MonthStats) -> None:
    """Render totals for a single month."""
    title = f"{stats.year}-{stats.month:02d}"
    if not stats.has_data:
        console.print(Panel(f"[yellow]{stats.message}[/yellow]", title=title, border_style="yellow"))
        return

    table = Table(title=title, show_header=False, box=box.ROUNDED)
    table.add_column("", style="bold")
    table.add_column("", justify="right")
    table.add_row("Shifts", str(stats.shift_count))
    table.add_row("Total Tips", _fmt(stats.total_tips))
    table.add_row("Claimed", _fmt(stats.claimed_tips))
    table.add_row("Withholding", _fmt(stats.tax_withholding))
    console.print(table)
    console.print("[dim]Withholding is the per-shift set-aside (claimed x rate), before the tax-free threshold.[/dim]")


def render_breakdown(console: Console, breakdown: YearBreakdown) -> None:
    """Render a month-by-month table for one year."""
    if not breakdown.months:
        console.print(f"No shift data for {breakdown.year}.")
        return

    table = Table(title=f"Monthly Breakdown {breakdown.year}", box=box.ROUNDED)
    table.add_column("Month", style="bold")
    table.add_column("Shifts", justify="right")
    table.add_column("Total Tips", justify="right")
    table.add_column("Claimed", justify="right")
    table.add_column("Tax Withheld", justify="right")

    for row in breakdown.months:
        tax = "[yellow]Tax-Free Zone[/yellow]" if breakdown.tax_free_zone else _fmt(row.tax_withholding)
        table.add_row(
            row.name,
            str(row.shift_count),
            _fmt(row.total_tips),
            _fmt(row.claimed_tips),
            tax,
        )

    table.add_row(
        "[bold]Year Total[/bold]",
        f"[bold]{breakdown.shift_count}[/bold]",
        f"[bold]{_fmt(breakdown.total_tips)}[/bold]",
        f"[bold]{_fmt(breakdown.claimed_tips)}[/bold]",
        "" if breakdown.tax_free_zone else f"[bold]{_fmt(breakdown.tax_withholding)}[/bold]",
    )
    console.print(table)


def render_progress(console: Console, progress: ThresholdProgress) -> None:
    """Render the tax-free threshold tracker."""
    bar_width = 30
    filled = int(round(progress.percent_used / 100 * bar_width))
    color = {"tax_free": "green", "near_threshold": "yellow", "over_threshold": "red"}[progress.status]
    bar = f"[{color}]{'█' * filled}[/{color}]{'░' * (bar_width - filled)}"

    lines = [
        f"{bar} {progress.percent_used:.0f}%",
        f"{_fmt(progress.year_to_date_claimed)} / {_fmt(progress.threshold_amount)}",
        "",
    ]

    if progress.status == "tax_free":
        lines.append(f"[green]Still in the tax-free zone: {_fmt(progress.remaining)} remaining[/green]")
        lines.append(f"Tax owed (year to date): {_fmt(0)}")
    elif progress.status == "near_threshold":
        lines.append(f"[yellow]Close to the threshold: {_fmt(progress.remaining)} left before taxes apply[/yellow]")
        lines.append(f"Tax owed (year to date): {_fmt(0)}")
    else:
        lines.append(f"[red]Claimed {_fmt(progress.year_to_date_claimed)} this year[/red]")
        lines.append(f"  Tax-free:        {_fmt(progress.threshold_amount)}")
        lines.append(f"  Taxable amount:  {_fmt(progress.taxable_amount)}")
        lines.append(
            f"  [bold]Total tax owed ({progress.average_tax_rate:.1f}%): {_fmt(progress.year_tax)}[/bold]"
        )

    console.print(Panel("\n".join(lines), title="Tax-Free Tip Tracker", border_style=color))


def render_day(console: Console, details: DayDetails) -> None:
    """Render every shift logged on one day."""
    if not details.shifts:
        console.print(f"No shifts on {details.date}.")
        return

    table = Table(title=f"Shifts on {details.date}", box=box.ROUNDED)
    table.add_column("Hours", justify="right")
    table.add_column("Cash", justify="right")
    table.add_column("Credit", justify="right")
    table.add_column("Total", justify="right")
    table.add_column("Claimed", justify="right")
    table.add_column("Rate", justify="right")
    table.add_column("Withholding", justify="right")
    table.add_column("Notes")

    for shift in details.shifts:
        table.add_row(
            f"{shift.hours_worked:g}",
            _fmt(shift.cash_tips),
            _fmt(shift.credit_tips),
            _fmt(shift.total_tips),
            _fmt(shift.claimed_tips),
            f"{shift.tax_rate:g}%",
            _fmt(shift.tax_withholding),
            shift.notes,
        )

    table.add_row(
        f"[bold]{details.hours_worked:g}[/bold]", "", "",
        f"[bold]{_fmt(details.total_tips)}[/bold]",
        f"[bold]{_fmt(details.claimed_tips)}[/bold]",
        "",
        f"[bold]{_fmt(details.tax_withholding)}[/bold]",
        "",
    )
    console.print(table)


def _fmt(amount: float | None) -> str:
    """Format currency amount."""
    if amount is None:
        return "-"
    return f"${amount:,.2f}"

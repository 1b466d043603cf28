"""TipTrack CLI - Command-line interface for tip totals and tax estimates."""

import json

import click
from rich.console import Console

from tiptrack import __version__
from tiptrack.sdk import (
    ConfigError,
    available_years,
    build_summary,
    day_details,
    day_key,
    get_config_dir,
    get_data_path,
    load_tax_settings,
    month_stats,
    monthly_breakdown,
    shifts,
    tax_free_progress,
)

from .profile_commands import profile as profile_group
from .settings_commands import settings as settings_group
from .shifts_commands import shifts_cli as shifts_group
from .renderers.summary_renderer import (
    render_breakdown,
    render_day,
    render_month_stats,
    render_progress,
    render_summary,
)


FORMAT_OPTION = click.option(
    "--format", "output_format", type=click.Choice(["text", "json"]), default="text",
    help="Output format (default: text)",
)
AS_OF_OPTION = click.option(
    "--as-of", "as_of", type=click.DateTime(formats=["%Y-%m-%d"]), default=None,
    help="Reference day (YYYY-MM-DD, default: today in UTC).",
)


def _load_snapshot():
    """Load every stored shift and the profile's tax settings."""
    try:
        tax_settings = load_tax_settings()
    except ConfigError as e:
        raise click.ClickException(str(e))
    return shifts.load_shifts(), tax_settings


def _echo_json(result) -> None:
    click.echo(json.dumps(result.to_dict(), indent=2))


@click.group()
@click.version_option(version=__version__, prog_name="tiptrack")
def cli():
    """TipTrack - Personal tip income and tax-free threshold tracking.

    Log shifts with 'tiptrack shifts add', then see totals with
    'tiptrack summary' and threshold progress with 'tiptrack tracker'.

    Configuration is loaded from (in order):

    \b
    1. TIPTRACK_CONFIG_PATH environment variable
    2. settings.json 'profile' key (if set)
    3. ~/.config/tiptrack/profile.yaml (XDG default)
    """
    pass


cli.add_command(shifts_group, name="shifts")
cli.add_command(settings_group)
cli.add_command(profile_group)


@cli.command("summary")
@AS_OF_OPTION
@FORMAT_OPTION
def summary(as_of, output_format):
    """Show totals, claimed tips and tax for today, this week and this month.

    Tax is only estimated on claimed tips above the annual tax-free
    threshold (default $25,000), at the average rate of this year's shifts.
    """
    records, tax_settings = _load_snapshot()
    result = build_summary(records, as_of, tax_settings)

    if output_format == "json":
        _echo_json(result)
        return

    render_summary(Console(), result, day_key(as_of))


@cli.command("tracker")
@AS_OF_OPTION
@FORMAT_OPTION
def tracker(as_of, output_format):
    """Show progress toward the annual tax-free threshold."""
    records, tax_settings = _load_snapshot()
    result = tax_free_progress(records, as_of, tax_settings)

    if output_format == "json":
        _echo_json(result)
        return

    render_progress(Console(), result)


@cli.command("month")
@click.argument("year", type=int)
@click.argument("month", type=int)
@FORMAT_OPTION
def month(year, month, output_format):
    """Show totals for any month (YEAR as YYYY, MONTH as 1-12).

    Withholding here is the per-shift set-aside before the tax-free
    threshold is applied.
    """
    records, _ = _load_snapshot()
    try:
        result = month_stats(records, year, month)
    except ValueError as e:
        raise click.BadParameter(str(e))

    if output_format == "json":
        _echo_json(result)
        return

    render_month_stats(Console(), result)


@cli.command("breakdown")
@click.argument("year", type=int, required=False)
@FORMAT_OPTION
def breakdown(year, output_format):
    """Show a month-by-month breakdown for YEAR (default: most recent year with data)."""
    records, tax_settings = _load_snapshot()

    if year is None:
        years = available_years(records)
        year = years[0] if years else day_key().year
    elif not 1000 <= year <= 9999:
        raise click.BadParameter(f"Invalid year '{year}'. Must be 4 digits.")

    result = monthly_breakdown(records, year, tax_settings)

    if output_format == "json":
        _echo_json(result)
        return

    render_breakdown(Console(), result)


@cli.command("day")
@click.argument("date", type=click.DateTime(formats=["%Y-%m-%d"]))
@FORMAT_OPTION
def day(date, output_format):
    """Show every shift logged on DATE (YYYY-MM-DD)."""
    records, _ = _load_snapshot()
    result = day_details(records, date)

    if output_format == "json":
        _echo_json(result)
        return

    render_day(Console(), result)


@cli.command("reset")
@click.option("--force", is_flag=True, help="Skip confirmation prompt.")
def reset(force: bool):
    """Delete all stored shifts.

    This removes the shifts directory under the data directory
    (~/.local/share/tiptrack/ by default) but preserves configuration
    (settings.json and profile.yaml).
    """
    data_dir = get_data_path()
    shifts_dir = data_dir / "shifts"

    shift_count = sum(1 for _ in shifts_dir.rglob("*.json")) if shifts_dir.exists() else 0

    click.echo(f"Data directory: {data_dir}")
    click.echo(f"\nWill delete:")
    click.echo(f"  - {shift_count} shift file(s)")
    click.echo(f"\nConfiguration preserved: {get_config_dir()}")

    if not force:
        click.confirm("\nProceed with reset?", abort=True)

    deleted = shifts.clear_all_shifts()
    click.echo(f"Deleted {deleted} shift file(s)")

    click.echo(click.style("\nReset complete.", fg='green'))


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()

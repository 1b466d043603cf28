"""Shifts command group for logging and managing shift records."""

import json
from typing import Optional

import click

from tiptrack.sdk import shifts


def _shift_options(required: bool):
    """Shared options for `shifts add` and `shifts edit`.

    For edit every option is optional; only the ones given are changed.
    """
    def decorator(f):
        options = [
            click.option("--date", "date", type=click.DateTime(formats=["%Y-%m-%d"]), required=required,
                         help="Shift date (YYYY-MM-DD)."),
            click.option("--hours", "hours_worked", type=float, required=required, help="Hours worked."),
            click.option("--total", "total_tips", type=float, default=None,
                         help="Total tips earned (ignored when cash/credit given)."),
            click.option("--cash", "cash_tips", type=float, default=None, help="Cash tips."),
            click.option("--credit", "credit_tips", type=float, default=None, help="Credit card tips."),
            click.option("--claimed", "claimed_tips", type=float, required=required,
                         help="Tips claimed for tax purposes."),
            click.option("--tax-rate", "tax_rate", type=float, default=None,
                         help="Withholding rate in percent (default 20)."),
            click.option("--notes", "notes", type=str, default=None, help="Free-text notes."),
        ]
        for option in reversed(options):
            f = option(f)
        return f
    return decorator


def _collect_fields(**kwargs) -> dict:
    """Build a shift dict from CLI options, dropping unset values."""
    fields = {k: v for k, v in kwargs.items() if v is not None}
    if "date" in fields:
        fields["date"] = fields["date"].date().isoformat()
    return fields


def format_shift_row(record: dict) -> str:
    """Format a stored shift as a table row."""
    data = record.get("data") or {}
    meta = record.get("meta") or {}

    warnings = meta.get("warnings", [])
    warn_str = f" ⚠{len(warnings)}" if warnings else ""

    return (
        f"{record.get('id', '?'):<10} {data.get('date', 'unknown'):<12} "
        f"{data.get('hours_worked', 0):>6.2f} "
        f"${data.get('total_tips', 0):>10,.2f} ${data.get('claimed_tips', 0):>10,.2f} "
        f"{data.get('tax_rate', 0):>5.1f}% ${data.get('tax_withholding', 0):>9,.2f}{warn_str}"
    )


SHIFT_HEADER = (
    f"{'ID':<10} {'Date':<12} {'Hours':>6} {'Total':>11} {'Claimed':>11} {'Rate':>6} {'Withholding':>10}"
)


@click.group("shifts")
def shifts_cli():
    """Log, list and edit shifts."""
    pass


@shifts_cli.command("add")
@_shift_options(required=True)
def shifts_add(**kwargs):
    """Log a new shift.

    Give either --total, or --cash and/or --credit (total is then their sum).

    Example:
        tiptrack shifts add --date 2025-11-04 --hours 6.5 --total 240 --claimed 180
    """
    fields = _collect_fields(**kwargs)
    if "total_tips" not in fields:
        if "cash_tips" not in fields and "credit_tips" not in fields:
            raise click.UsageError("Provide --total, or --cash/--credit.")
        # Derived from cash + credit by the schema
        fields["total_tips"] = 0.0

    try:
        record, warnings = shifts.add_shift(fields)
    except shifts.ValidationError as e:
        raise click.ClickException(str(e))

    click.echo(f"Added shift {record['id']} for {record['data']['date']}")
    for w in warnings:
        click.echo(click.style(f"  Warning: {w}", fg="yellow"))


@shifts_cli.command("list")
@click.argument("year", required=False)
@click.option("--month", type=click.IntRange(1, 12), default=None, help="Filter by month (1-12).")
@click.option("--count", is_flag=True, help="Print only the number of matching shifts.")
@click.option("--format", "output_format", type=click.Choice(["text", "json"]), default="text",
              help="Output format (default: text)")
def shifts_list(year: Optional[str], month: Optional[int], count: bool, output_format: str):
    """List shifts, newest first. Optionally filter by YEAR and --month."""
    if year and (not year.isdigit() or len(year) != 4):
        raise click.BadParameter(f"Invalid year '{year}'. Must be 4 digits.")

    records = shifts.list_shifts(year=year, month=month)

    if count:
        click.echo(str(len(records)))
        return

    if output_format == "json":
        for r in records:
            r.pop("_path", None)
        click.echo(json.dumps(records, indent=2))
        return

    if not records:
        click.echo("No shifts found.")
        return

    click.echo(SHIFT_HEADER)
    click.echo("-" * len(SHIFT_HEADER))
    for r in records:
        click.echo(format_shift_row(r))
    click.echo(f"\n{len(records)} shift(s)")


@shifts_cli.command("show")
@click.argument("shift_id")
def shifts_show(shift_id: str):
    """Show the full stored record for SHIFT_ID."""
    record = shifts.get_shift(shift_id)
    if record is None:
        raise click.ClickException(f"Shift not found: {shift_id}")

    record.pop("_path", None)
    click.echo(json.dumps(record, indent=2))


@shifts_cli.command("edit")
@click.argument("shift_id")
@_shift_options(required=False)
def shifts_edit(shift_id: str, **kwargs):
    """Change fields of SHIFT_ID. Only the options given are updated."""
    changes = _collect_fields(**kwargs)
    if not changes:
        raise click.UsageError("Nothing to change. Pass at least one option.")

    try:
        result = shifts.update_shift(shift_id, changes)
    except shifts.ValidationError as e:
        raise click.ClickException(str(e))

    if result is None:
        raise click.ClickException(f"Shift not found: {shift_id}")

    record, warnings = result
    click.echo(f"Updated shift {shift_id}")
    click.echo(format_shift_row(record))
    for w in warnings:
        click.echo(click.style(f"  Warning: {w}", fg="yellow"))


@shifts_cli.command("remove")
@click.argument("shift_id")
@click.option("--force", is_flag=True, help="Skip confirmation prompt.")
def shifts_remove(shift_id: str, force: bool):
    """Delete SHIFT_ID."""
    record = shifts.get_shift(shift_id)
    if record is None:
        raise click.ClickException(f"Shift not found: {shift_id}")

    if not force:
        click.echo(format_shift_row(record))
        click.confirm("Delete this shift?", abort=True)

    shifts.remove_shift(shift_id)
    click.echo(f"Deleted shift {shift_id}")

"""Settings CLI commands for TipTrack.

Manages settings.json: where shift records live and which profile.yaml
supplies the tax settings.
"""

from pathlib import Path

import click

from tiptrack.sdk import (
    ConfigError,
    get_data_path,
    get_profile_path,
    get_setting,
    get_settings_path,
    load_settings,
    load_tax_settings,
    save_settings,
    set_setting,
)


def _shift_counts(data_dir: Path) -> dict:
    """Shift files per year directory under ``data_dir/shifts``."""
    shifts_dir = data_dir / "shifts"
    if not shifts_dir.is_dir():
        return {}
    counts = {}
    for year_dir in sorted(shifts_dir.iterdir()):
        if year_dir.is_dir() and year_dir.name.isdigit():
            counts[year_dir.name] = sum(1 for _ in year_dir.glob("*.json"))
    return counts


def _describe_store(data_dir: Path) -> str:
    counts = _shift_counts(data_dir)
    total = sum(counts.values())
    if not total:
        return "no shifts"
    years = ", ".join(f"{year}: {n}" for year, n in counts.items())
    return f"{total} shift(s) ({years})"


@click.group()
def settings():
    """Manage settings (settings.json).

    \b
    - data_dir: directory holding shifts/{year}/{id}.json
    - profile: path to a profile.yaml outside the config directory
    """
    pass


@settings.command("show")
def settings_show():
    """Show where shifts and tax settings are read from."""
    settings_path = get_settings_path()
    current = load_settings()

    click.echo(f"Settings file: {settings_path}" + ("" if settings_path.exists() else " (not created)"))

    data_dir = get_data_path()
    data_source = "custom" if current.get("data_dir") else "default"
    click.echo()
    click.echo(f"Data directory ({data_source}): {data_dir}")
    counts = _shift_counts(data_dir)
    for year, count in counts.items():
        click.echo(f"  {year}: {count} shift(s)")
    if not counts:
        click.echo("  no shifts logged yet")

    profile_path = get_profile_path(require_exists=False)
    profile_source = "custom" if current.get("profile") else "default"
    click.echo()
    click.echo(f"Profile ({profile_source}): {profile_path}" + ("" if profile_path.exists() else " (not created)"))
    try:
        tax = load_tax_settings()
    except ConfigError as e:
        click.echo(click.style(f"  {e}", fg="red"))
        return
    click.echo(f"  tax-free threshold: ${tax.tax_free_threshold:,.2f}")
    click.echo(f"  default tax rate: {tax.default_tax_rate:g}%")


@settings.command("data-dir")
@click.argument("path", required=False, type=click.Path(file_okay=False))
@click.option("--clear", is_flag=True, help="Go back to the XDG data directory")
def settings_data_dir(path, clear):
    """Point tiptrack at another directory of shift records.

    Existing shifts are not copied. If PATH already holds a shifts/ tree
    (for example a synced folder from another machine) it is used as is.

    Examples:
        tiptrack settings data-dir ~/Dropbox/tiptrack
        tiptrack settings data-dir --clear
    """
    if clear:
        current = load_settings()
        if current.pop("data_dir", None) is None:
            click.echo("data_dir was not set.")
            return
        save_settings(current)
        data_dir = get_data_path()
        click.echo(f"Using default data directory: {data_dir} ({_describe_store(data_dir)})")
        return

    if not path:
        data_dir = get_data_path()
        label = "custom" if get_setting("data_dir") else "default"
        click.echo(f"{data_dir} ({label}, {_describe_store(data_dir)})")
        return

    previous = get_data_path()
    target = Path(path).expanduser().resolve()
    if target == previous.resolve():
        click.echo(f"Already using {target}")
        return

    existing = _describe_store(target)
    try:
        (target / "shifts").mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise click.ClickException(f"Cannot create shifts directory under {target}\n{e}")

    set_setting("data_dir", str(target))
    click.echo(f"Set data_dir: {target} ({existing})")

    left_behind = sum(_shift_counts(previous).values())
    if left_behind:
        click.echo(click.style(
            f"  {left_behind} shift(s) remain in {previous} and will no longer be read.",
            fg="yellow",
        ))


@settings.command("profile-path")
@click.argument("path", required=False, type=click.Path(dir_okay=False))
@click.option("--clear", is_flag=True, help="Use the profile.yaml in the config directory")
def settings_profile_path(path, clear):
    """Point tiptrack at a profile.yaml outside the config directory."""
    if clear:
        current = load_settings()
        current.pop("profile", None)
        save_settings(current)
        click.echo("Cleared profile setting.")
        return

    if not path:
        click.echo(get_setting("profile") or "No custom profile path set.")
        return

    profile_path = Path(path).expanduser().resolve()
    if profile_path.suffix not in (".yaml", ".yml"):
        raise click.ClickException(f"Profile must be a YAML file: {profile_path}")

    set_setting("profile", str(profile_path))
    click.echo(f"Set profile: {profile_path}")

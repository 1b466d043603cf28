"""Profile CLI commands for TipTrack.

Manages user profile data (profile.yaml) - tax threshold and default rate.
"""

import click
import yaml

from tiptrack.sdk import (
    ConfigError,
    DEFAULT_PROFILE,
    get_profile_path,
    get_profile_value,
    load_profile,
    load_settings,
    load_tax_settings,
    save_profile,
    set_profile_value,
    validate_profile_key,
)


@click.group()
def profile():
    """Manage your profile configuration (profile.yaml).

    The profile's 'tax' section controls the estimates:

    \b
    - tax.tax_free_threshold: annual claimed tips that carry no tax (25000)
    - tax.default_tax_rate: percent used before any shift is logged (20)
    - tax.near_threshold_ratio: tracker warning point (0.9)
    """
    pass


@profile.command("init")
@click.option("--force", is_flag=True, help="Overwrite an existing profile")
def profile_init(force):
    """Create a profile with the default tax settings."""
    profile_path = get_profile_path(require_exists=False)
    if profile_path.exists() and not force:
        raise click.ClickException(
            f"Profile already exists: {profile_path}\n"
            f"Use --force to overwrite."
        )

    saved = save_profile(DEFAULT_PROFILE, profile_path)
    click.echo(f"Created profile: {saved}")


@profile.command("show")
def profile_show():
    """Show the active profile, its location and effective tax settings."""
    profile_path = get_profile_path(require_exists=False)

    if load_settings().get("profile"):
        location_label = "custom"
    elif profile_path.exists():
        location_label = "central (default)"
    else:
        location_label = "not created"

    click.echo(f"Profile: {profile_path}")
    click.echo(f"Location: {location_label}")

    try:
        tax_settings = load_tax_settings()
    except ConfigError as e:
        raise click.ClickException(str(e))

    click.echo()
    click.echo("Effective tax settings:")
    click.echo(f"  tax_free_threshold: {tax_settings.tax_free_threshold:,.2f}")
    click.echo(f"  default_tax_rate: {tax_settings.default_tax_rate:g}%")
    click.echo(f"  near_threshold_ratio: {tax_settings.near_threshold_ratio:g}")

    if not profile_path.exists():
        click.echo()
        click.echo("Profile does not exist yet (using defaults). Create with:")
        click.echo("  tiptrack profile init")
        return

    click.echo()
    click.echo("---")
    click.echo(yaml.dump(load_profile(require_exists=False), default_flow_style=False, sort_keys=False))


@profile.command("get")
@click.argument("key")
def profile_get(key):
    """Get a profile value by dot-notation KEY (e.g. tax.default_tax_rate)."""
    value = get_profile_value(key)
    if value is None:
        raise click.ClickException(f"Key '{key}' not found in profile")

    if isinstance(value, (dict, list)):
        raise click.ClickException(
            f"Key '{key}' is a complex value. Use 'tiptrack profile show' to view."
        )

    click.echo(value)


@profile.command("set")
@click.argument("key")
@click.argument("value")
def profile_set(key, value):
    """Set a profile value.

    Examples:
        tiptrack profile set tax.tax_free_threshold 25000
        tiptrack profile set tax.default_tax_rate 22
    """
    is_valid, error_msg, parsed_value = validate_profile_key(key, value)
    if not is_valid:
        raise click.ClickException(error_msg)

    profile_file = set_profile_value(key, parsed_value)
    click.echo(f"Set {key} = {parsed_value}")
    click.echo(f"Saved to: {profile_file}")

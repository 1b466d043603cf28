"""Configuration management for TipTrack.

Configuration is split into two files:

1. settings.json - Machine-specific, ephemeral settings
   - data_dir: custom location for shift records
   - profile: path to profile.yaml (optional, if not colocated)

2. profile.yaml - User's personal configuration
   - tax: tax_free_threshold, default_tax_rate, near_threshold_ratio

Config directory resolution:
1. TIPTRACK_CONFIG_PATH environment variable (if set)
2. ~/.config/tiptrack/ (XDG_CONFIG_HOME fallback)

Profile resolution:
1. settings.json "profile" key (if set via CLI)
2. profile.yaml in same config directory

Data path resolution:
1. settings.json "data_dir" key
2. XDG_DATA_HOME/tiptrack/ or ~/.local/share/tiptrack/
"""

import json
import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError as PydanticValidationError

from .schemas import TaxSettings


APP_NAME = "tiptrack"
SETTINGS_FILENAME = "settings.json"
PROFILE_FILENAME = "profile.yaml"

# Keys accepted by `tiptrack profile set`, mapped to their value type
PROFILE_KEYS = {
    "tax.tax_free_threshold": float,
    "tax.default_tax_rate": float,
    "tax.near_threshold_ratio": float,
}

DEFAULT_PROFILE = {
    "tax": TaxSettings().model_dump(),
}


class ConfigError(Exception):
    """Raised when configuration exists but is invalid."""
    pass


class ProfileNotFoundError(Exception):
    """Raised when no profile is found."""
    pass


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Resolution order:
    1. TIPTRACK_CONFIG_PATH environment variable
    2. ~/.config/tiptrack/ (XDG_CONFIG_HOME)

    Returns:
        Path to the configuration directory
    """
    env_path = os.environ.get("TIPTRACK_CONFIG_PATH")
    if env_path:
        return Path(env_path)

    xdg_config_home = os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
    return Path(xdg_config_home) / APP_NAME


def get_settings_path() -> Path:
    """Get the path to settings.json (may not exist yet)."""
    return get_config_dir() / SETTINGS_FILENAME


def load_settings() -> dict:
    """Load machine-specific settings from settings.json.

    Returns:
        Settings dictionary (empty dict if file doesn't exist)
    """
    settings_file = get_settings_path()

    if not settings_file.exists():
        return {}

    with open(settings_file, "r") as f:
        return json.load(f)


def save_settings(settings: dict) -> Path:
    """Save machine-specific settings to settings.json.

    Returns:
        Path to the saved settings file
    """
    config_dir = get_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)

    settings_file = config_dir / SETTINGS_FILENAME

    with open(settings_file, "w") as f:
        json.dump(settings, f, indent=2)

    return settings_file


def get_setting(key: str, default: Any = None) -> Any:
    """Get a setting value from settings.json."""
    return load_settings().get(key, default)


def set_setting(key: str, value: Any) -> Path:
    """Set a setting value in settings.json."""
    settings = load_settings()
    settings[key] = value
    return save_settings(settings)


def get_profile_path(require_exists: bool = False) -> Path:
    """Get the path to the profile.yaml file.

    Resolution order:
    1. settings.json "profile" key (if set)
    2. profile.yaml in config directory

    Args:
        require_exists: If True, raises ProfileNotFoundError if not found

    Raises:
        ProfileNotFoundError: If require_exists=True and no profile found
    """
    custom_profile = load_settings().get("profile")
    if custom_profile:
        profile_path = Path(custom_profile)
        if require_exists and not profile_path.exists():
            raise ProfileNotFoundError(
                f"Profile not found at configured path: {profile_path}\n\n"
                f"Create one with: tiptrack profile init"
            )
        return profile_path

    profile_path = get_config_dir() / PROFILE_FILENAME
    if require_exists and not profile_path.exists():
        raise ProfileNotFoundError(
            f"No profile found at {profile_path}\n\n"
            f"Create a profile with: tiptrack profile init"
        )

    return profile_path


def load_profile(require_exists: bool = True) -> dict:
    """Load user profile from profile.yaml.

    Args:
        require_exists: If True, raises ProfileNotFoundError if not found

    Returns:
        Profile dictionary (empty dict if not required and not found)
    """
    profile_path = get_profile_path(require_exists=require_exists)

    if not profile_path.exists():
        return {}

    with open(profile_path, "r") as f:
        return yaml.safe_load(f) or {}


def save_profile(profile: dict, path: Optional[Path] = None) -> Path:
    """Save user profile to profile.yaml.

    Returns:
        Path to the saved profile file
    """
    if path is None:
        path = get_profile_path(require_exists=False)

    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        yaml.dump(profile, f, default_flow_style=False, sort_keys=False)

    return path


def get_profile_value(key: str, default: Any = None) -> Any:
    """Get a profile value by dot-notation key (e.g., "tax.default_tax_rate")."""
    value = load_profile(require_exists=False)

    for part in key.split("."):
        if isinstance(value, dict) and part in value:
            value = value[part]
        else:
            return default

    return value


def set_profile_value(key: str, value: Any) -> Path:
    """Set a profile value by dot-notation key, creating sections as needed."""
    profile = load_profile(require_exists=False)

    parts = key.split(".")
    current = profile
    for part in parts[:-1]:
        if part not in current:
            current[part] = {}
        current = current[part]

    current[parts[-1]] = value

    return save_profile(profile)


def validate_profile_key(key: str, raw_value: str) -> tuple[bool, str, Any]:
    """Check a `profile set` key and coerce its value.

    Returns:
        (ok, message, value) - message explains the failure when ok is False
    """
    if key not in PROFILE_KEYS:
        valid = ", ".join(sorted(PROFILE_KEYS))
        return False, f"Unknown profile key '{key}'. Valid keys: {valid}", None

    try:
        value = PROFILE_KEYS[key](raw_value)
    except ValueError:
        return False, f"Invalid value for {key}: {raw_value!r} is not a number", None

    section, field = key.split(".", 1)
    candidate = dict(get_profile_value(section, {}) or {})
    candidate[field] = value
    try:
        TaxSettings(**candidate)
    except PydanticValidationError as e:
        messages = "; ".join(err["msg"] for err in e.errors())
        return False, f"Invalid value for {key}: {messages}", None

    return True, "", value


def load_tax_settings(profile: Optional[dict] = None) -> TaxSettings:
    """Load tax parameters from the profile's ``tax`` section.

    A missing profile or section yields the defaults (25000 threshold,
    20% rate).

    Raises:
        ConfigError: If the tax section is present but invalid
    """
    if profile is None:
        profile = load_profile(require_exists=False)

    section = profile.get("tax") or {}
    if not isinstance(section, dict):
        raise ConfigError(f"Profile 'tax' section must be a mapping, got {type(section).__name__}")

    try:
        return TaxSettings(**section)
    except PydanticValidationError as e:
        errors = "\n  ! ".join(
            f"tax.{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigError(
            f"Profile has validation errors:\n\n  ! {errors}\n\n"
            f"Profile: {get_profile_path()}\n"
            f"Fix with: tiptrack profile set <key> <value>"
        ) from e


# =============================================================================
# XDG path helpers
# =============================================================================

def get_data_path() -> Path:
    """Get the data directory path.

    Uses settings.json "data_dir" when set, else XDG_DATA_HOME/tiptrack/.

    Returns:
        Path to the data directory (created if doesn't exist)
    """
    custom = load_settings().get("data_dir")
    if custom:
        data_path = Path(custom).expanduser()
    else:
        xdg_data_home = os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share")
        data_path = Path(xdg_data_home) / APP_NAME
    data_path.mkdir(parents=True, exist_ok=True)
    return data_path

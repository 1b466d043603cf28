"""Tests for settings.json / profile.yaml handling and tax settings loading."""

import json

import pytest
import yaml

from tiptrack.sdk.config import (
    ConfigError,
    ProfileNotFoundError,
    get_data_path,
    get_profile_path,
    get_profile_value,
    load_tax_settings,
    set_profile_value,
    validate_profile_key,
)


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """Point the config directory at a temp folder."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    monkeypatch.setenv("TIPTRACK_CONFIG_PATH", str(config_dir))
    return config_dir


class TestLoadTaxSettings:
    """Tax section of profile.yaml."""

    def test_defaults_without_profile(self, isolated_config):
        settings = load_tax_settings()

        assert settings.tax_free_threshold == 25000
        assert settings.default_tax_rate == 20

    def test_reads_profile_section(self, isolated_config):
        (isolated_config / "profile.yaml").write_text(yaml.dump({
            "tax": {"tax_free_threshold": 30000, "default_tax_rate": 15},
        }))

        settings = load_tax_settings()

        assert settings.tax_free_threshold == 30000
        assert settings.default_tax_rate == 15
        assert settings.near_threshold_ratio == 0.9

    def test_invalid_section_raises_config_error(self, isolated_config):
        (isolated_config / "profile.yaml").write_text(yaml.dump({
            "tax": {"default_tax_rate": 250},
        }))

        with pytest.raises(ConfigError, match="tax.default_tax_rate"):
            load_tax_settings()

    def test_non_mapping_section(self):
        with pytest.raises(ConfigError, match="must be a mapping"):
            load_tax_settings({"tax": [1, 2]})


class TestProfileValues:
    """Dot-notation get/set and `profile set` validation."""

    def test_set_then_get(self, isolated_config):
        set_profile_value("tax.tax_free_threshold", 20000.0)

        assert get_profile_value("tax.tax_free_threshold") == 20000.0
        assert load_tax_settings().tax_free_threshold == 20000.0

    def test_validate_known_key(self, isolated_config):
        ok, msg, value = validate_profile_key("tax.default_tax_rate", "22.5")

        assert ok is True
        assert msg == ""
        assert value == 22.5

    def test_validate_unknown_key(self, isolated_config):
        ok, msg, _ = validate_profile_key("tax.rate", "22")

        assert ok is False
        assert "Unknown profile key" in msg

    def test_validate_non_numeric(self, isolated_config):
        ok, msg, _ = validate_profile_key("tax.default_tax_rate", "lots")

        assert ok is False
        assert "not a number" in msg

    def test_validate_out_of_range(self, isolated_config):
        ok, _, _ = validate_profile_key("tax.near_threshold_ratio", "1.5")

        assert ok is False


class TestPaths:
    """Profile and data directory resolution."""

    def test_require_exists_raises(self, isolated_config):
        with pytest.raises(ProfileNotFoundError):
            get_profile_path(require_exists=True)

    def test_custom_profile_path(self, isolated_config, tmp_path):
        custom = tmp_path / "elsewhere.yaml"
        (isolated_config / "settings.json").write_text(json.dumps({"profile": str(custom)}))

        assert get_profile_path() == custom

    def test_data_dir_from_settings(self, isolated_config, tmp_path):
        data_dir = tmp_path / "tips-data"
        (isolated_config / "settings.json").write_text(json.dumps({"data_dir": str(data_dir)}))

        assert get_data_path() == data_dir
        assert data_dir.is_dir()

    def test_data_dir_xdg_default(self, isolated_config, tmp_path, monkeypatch):
        monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "xdg"))

        assert get_data_path() == tmp_path / "xdg" / "tiptrack"

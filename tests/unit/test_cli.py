"""Tests for the tiptrack CLI commands.

Shift files are written straight into an isolated data directory so each
test controls exactly what the summary commands see.
"""

import json

import pytest
from click.testing import CliRunner

from tiptrack.cli.__main__ import cli
from tiptrack.cli.shifts_commands import shifts_cli


def make_shift_file(shifts_dir, shift_id, day, total, claimed, rate=20.0, hours=6.0):
    """Write a stored shift record for testing."""
    year_dir = shifts_dir / day[:4]
    year_dir.mkdir(parents=True, exist_ok=True)
    record = {
        "meta": {"created_at": f"{day}T12:00:00"},
        "data": {
            "date": day,
            "hours_worked": hours,
            "total_tips": total,
            "claimed_tips": claimed,
            "tax_rate": rate,
        },
    }
    (year_dir / f"{shift_id}.json").write_text(json.dumps(record))


@pytest.fixture
def isolated_shifts(tmp_path, monkeypatch):
    """Set up isolated shifts directory."""
    config_dir = tmp_path / "config"
    data_dir = tmp_path / "data"
    shifts_dir = data_dir / "shifts"

    config_dir.mkdir()
    shifts_dir.mkdir(parents=True)

    monkeypatch.setenv("TIPTRACK_CONFIG_PATH", str(config_dir))

    settings = {"data_dir": str(data_dir)}
    (config_dir / "settings.json").write_text(json.dumps(settings))

    return {
        "config_dir": config_dir,
        "data_dir": data_dir,
        "shifts_dir": shifts_dir,
    }


class TestSummaryCommand:
    """`tiptrack summary`."""

    def test_json_empty(self, isolated_shifts):
        runner = CliRunner()
        result = runner.invoke(cli, ["summary", "--as-of", "2025-11-04", "--format", "json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["totalIncome"] == 0
        assert data["averageTaxRate"] == 20

    def test_json_over_threshold(self, isolated_shifts):
        shifts_dir = isolated_shifts["shifts_dir"]
        make_shift_file(shifts_dir, "aaaa0001", "2025-03-15", 25000, 23000)
        make_shift_file(shifts_dir, "aaaa0002", "2025-11-04", 6000, 5000)

        runner = CliRunner()
        result = runner.invoke(cli, ["summary", "--as-of", "2025-11-04", "--format", "json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["monthClaimed"] == 5000
        assert data["monthTax"] == pytest.approx(600)
        assert data["yearToDateClaimed"] == 28000

    def test_text_output(self, isolated_shifts):
        make_shift_file(isolated_shifts["shifts_dir"], "aaaa0001", "2025-11-04", 240, 180)

        runner = CliRunner()
        result = runner.invoke(cli, ["summary", "--as-of", "2025-11-04"])

        assert result.exit_code == 0
        assert "$240.00" in result.output

    def test_invalid_profile_reported(self, isolated_shifts):
        (isolated_shifts["config_dir"] / "profile.yaml").write_text("tax:\n  default_tax_rate: 500\n")

        runner = CliRunner()
        result = runner.invoke(cli, ["summary"])

        assert result.exit_code != 0
        assert "validation errors" in result.output


class TestMonthCommand:
    """`tiptrack month YEAR MONTH`."""

    def test_empty_month(self, isolated_shifts):
        runner = CliRunner()
        result = runner.invoke(cli, ["month", "2025", "2", "--format", "json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["hasData"] is False
        assert data["message"] == "No shifts found for this month"

    def test_month_13_rejected(self, isolated_shifts):
        runner = CliRunner()
        result = runner.invoke(cli, ["month", "2025", "13"])

        assert result.exit_code == 2
        assert "Must be 1-12" in result.output

    def test_month_totals(self, isolated_shifts):
        shifts_dir = isolated_shifts["shifts_dir"]
        make_shift_file(shifts_dir, "aaaa0001", "2025-02-03", 200, 150)
        make_shift_file(shifts_dir, "aaaa0002", "2025-02-10", 100, 100)

        runner = CliRunner()
        result = runner.invoke(cli, ["month", "2025", "2", "--format", "json"])

        data = json.loads(result.output)
        assert data["shiftCount"] == 2
        assert data["totalTips"] == 300
        assert data["taxWithholding"] == pytest.approx(50)


class TestTrackerAndBreakdown:
    """`tiptrack tracker` and `tiptrack breakdown`."""

    def test_tracker_json(self, isolated_shifts):
        make_shift_file(isolated_shifts["shifts_dir"], "aaaa0001", "2025-06-01", 23000, 23000)

        runner = CliRunner()
        result = runner.invoke(cli, ["tracker", "--as-of", "2025-11-04", "--format", "json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["status"] == "near_threshold"
        assert data["remaining"] == 2000

    def test_breakdown_defaults_to_latest_year(self, isolated_shifts):
        shifts_dir = isolated_shifts["shifts_dir"]
        make_shift_file(shifts_dir, "aaaa0001", "2023-06-01", 100, 100)
        make_shift_file(shifts_dir, "aaaa0002", "2024-02-01", 100, 100)

        runner = CliRunner()
        result = runner.invoke(cli, ["breakdown", "--format", "json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["year"] == 2024
        assert data["months"][0]["name"] == "February"
        assert data["taxFreeZone"] is True


class TestShiftsCommands:
    """`tiptrack shifts ...`."""

    def test_add_then_count(self, isolated_shifts):
        runner = CliRunner()
        result = runner.invoke(shifts_cli, [
            "add", "--date", "2025-11-04", "--hours", "6.5", "--total", "240", "--claimed", "180",
        ])
        assert result.exit_code == 0, result.output
        assert "Added shift" in result.output

        result = runner.invoke(shifts_cli, ["list", "2025", "--count"])
        assert result.exit_code == 0
        assert result.output.strip() == "1"

    def test_add_from_cash_and_credit(self, isolated_shifts):
        runner = CliRunner()
        result = runner.invoke(shifts_cli, [
            "add", "--date", "2025-11-04", "--hours", "5", "--cash", "60", "--credit", "90", "--claimed", "100",
        ])
        assert result.exit_code == 0, result.output

        result = runner.invoke(shifts_cli, ["list", "--format", "json"])
        records = json.loads(result.output)
        assert records[0]["data"]["total_tips"] == 150

    def test_add_requires_tips(self, isolated_shifts):
        runner = CliRunner()
        result = runner.invoke(shifts_cli, [
            "add", "--date", "2025-11-04", "--hours", "5", "--claimed", "100",
        ])

        assert result.exit_code == 2
        assert "--total" in result.output

    def test_add_warns_when_claimed_exceeds_total(self, isolated_shifts):
        runner = CliRunner()
        result = runner.invoke(shifts_cli, [
            "add", "--date", "2025-11-04", "--hours", "5", "--total", "50", "--claimed", "100",
        ])

        assert result.exit_code == 0
        assert "Warning" in result.output

    def test_list_month_filter(self, isolated_shifts):
        shifts_dir = isolated_shifts["shifts_dir"]
        make_shift_file(shifts_dir, "aaaa0001", "2025-02-03", 200, 150)
        make_shift_file(shifts_dir, "aaaa0002", "2025-03-10", 100, 100)

        runner = CliRunner()
        result = runner.invoke(shifts_cli, ["list", "2025", "--month", "3", "--count"])

        assert result.output.strip() == "1"

    def test_edit_and_remove(self, isolated_shifts):
        make_shift_file(isolated_shifts["shifts_dir"], "aaaa0001", "2025-02-03", 200, 150)

        runner = CliRunner()
        result = runner.invoke(shifts_cli, ["edit", "aaaa0001", "--tax-rate", "10"])
        assert result.exit_code == 0, result.output

        result = runner.invoke(shifts_cli, ["show", "aaaa0001"])
        assert json.loads(result.output)["data"]["tax_withholding"] == pytest.approx(15)

        result = runner.invoke(shifts_cli, ["remove", "aaaa0001", "--force"])
        assert result.exit_code == 0

        result = runner.invoke(shifts_cli, ["show", "aaaa0001"])
        assert result.exit_code == 1
        assert "Shift not found" in result.output


class TestProfileCommands:
    """`tiptrack profile ...`."""

    def test_init_and_set(self, isolated_shifts):
        runner = CliRunner()

        result = runner.invoke(cli, ["profile", "init"])
        assert result.exit_code == 0
        assert (isolated_shifts["config_dir"] / "profile.yaml").exists()

        result = runner.invoke(cli, ["profile", "set", "tax.tax_free_threshold", "30000"])
        assert result.exit_code == 0

        result = runner.invoke(cli, ["profile", "get", "tax.tax_free_threshold"])
        assert result.output.strip() == "30000.0"

    def test_set_rejects_bad_value(self, isolated_shifts):
        runner = CliRunner()
        result = runner.invoke(cli, ["profile", "set", "tax.default_tax_rate", "150"])

        assert result.exit_code == 1
        assert "Invalid value" in result.output


class TestSettingsCommands:
    """`tiptrack settings ...`."""

    def test_show_reports_shifts_per_year_and_tax(self, isolated_shifts):
        shifts_dir = isolated_shifts["shifts_dir"]
        make_shift_file(shifts_dir, "aaaa0001", "2024-05-01", 100, 100)
        make_shift_file(shifts_dir, "aaaa0002", "2025-02-03", 200, 150)
        make_shift_file(shifts_dir, "aaaa0003", "2025-02-04", 200, 150)
        (isolated_shifts["config_dir"] / "profile.yaml").write_text("tax:\n  tax_free_threshold: 30000\n")

        runner = CliRunner()
        result = runner.invoke(cli, ["settings", "show"])

        assert result.exit_code == 0, result.output
        assert f"Data directory (custom): {isolated_shifts['data_dir']}" in result.output
        assert "2024: 1 shift(s)" in result.output
        assert "2025: 2 shift(s)" in result.output
        assert "tax-free threshold: $30,000.00" in result.output

    def test_show_with_invalid_profile(self, isolated_shifts):
        (isolated_shifts["config_dir"] / "profile.yaml").write_text("tax:\n  default_tax_rate: 500\n")

        runner = CliRunner()
        result = runner.invoke(cli, ["settings", "show"])

        assert result.exit_code == 0
        assert "validation errors" in result.output

    def test_data_dir_reports_existing_store(self, isolated_shifts, tmp_path):
        synced = tmp_path / "synced"
        make_shift_file(synced / "shifts", "bbbb0001", "2025-01-10", 80, 80)
        make_shift_file(isolated_shifts["shifts_dir"], "aaaa0001", "2025-02-03", 200, 150)

        runner = CliRunner()
        result = runner.invoke(cli, ["settings", "data-dir", str(synced)])

        assert result.exit_code == 0, result.output
        assert "1 shift(s) (2025: 1)" in result.output
        assert "1 shift(s) remain in" in result.output

        settings = json.loads((isolated_shifts["config_dir"] / "settings.json").read_text())
        assert settings["data_dir"] == str(synced.resolve())

        result = runner.invoke(shifts_cli, ["list", "--count"])
        assert result.output.strip() == "1"

    def test_data_dir_new_directory_and_clear(self, isolated_shifts, tmp_path, monkeypatch):
        monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "xdg"))
        new_dir = tmp_path / "fresh"
        runner = CliRunner()

        result = runner.invoke(cli, ["settings", "data-dir", str(new_dir)])
        assert result.exit_code == 0, result.output
        assert "(no shifts)" in result.output
        assert (new_dir / "shifts").is_dir()

        result = runner.invoke(cli, ["settings", "data-dir", "--clear"])
        assert result.exit_code == 0
        assert str(tmp_path / "xdg" / "tiptrack") in result.output

        result = runner.invoke(cli, ["settings", "data-dir", "--clear"])
        assert "data_dir was not set." in result.output

    def test_data_dir_rejects_file(self, isolated_shifts, tmp_path):
        not_a_dir = tmp_path / "notes.txt"
        not_a_dir.write_text("x")

        runner = CliRunner()
        result = runner.invoke(cli, ["settings", "data-dir", str(not_a_dir)])

        assert result.exit_code != 0
        assert json.loads((isolated_shifts["config_dir"] / "settings.json").read_text())["data_dir"] == str(
            isolated_shifts["data_dir"]
        )

    def test_profile_path_must_be_yaml(self, isolated_shifts, tmp_path):
        runner = CliRunner()
        result = runner.invoke(cli, ["settings", "profile-path", str(tmp_path / "profile.txt")])

        assert result.exit_code == 1
        assert "YAML" in result.output


class TestResetCommand:
    """`tiptrack reset`."""

    def test_reports_active_config_dir(self, isolated_shifts):
        make_shift_file(isolated_shifts["shifts_dir"], "aaaa0001", "2025-02-03", 200, 150)

        runner = CliRunner()
        result = runner.invoke(cli, ["reset", "--force"])

        assert result.exit_code == 0
        assert f"Configuration preserved: {isolated_shifts['config_dir']}" in result.output
        assert "~/.config" not in result.output
        assert "Deleted 1 shift file(s)" in result.output
        assert (isolated_shifts["config_dir"] / "settings.json").exists()

    def test_declined_confirmation_keeps_shifts(self, isolated_shifts):
        make_shift_file(isolated_shifts["shifts_dir"], "aaaa0001", "2025-02-03", 200, 150)

        runner = CliRunner()
        result = runner.invoke(cli, ["reset"], input="n\n")

        assert result.exit_code == 1
        assert (isolated_shifts["shifts_dir"] / "2025" / "aaaa0001.json").exists()


class TestShiftIdArguments:
    """Shift IDs given on the command line are matched exactly."""

    @pytest.mark.parametrize("command", [
        ["remove", "*", "--force"],
        ["show", "*"],
        ["edit", "????????", "--claimed", "1"],
    ])
    def test_wildcards_do_not_touch_stored_shift(self, isolated_shifts, command):
        make_shift_file(isolated_shifts["shifts_dir"], "aaaa0001", "2025-02-03", 200, 150)

        runner = CliRunner()
        result = runner.invoke(shifts_cli, command)

        assert result.exit_code == 1
        assert "Shift not found" in result.output
        year_dir = isolated_shifts["shifts_dir"] / "2025"
        assert [p.name for p in year_dir.iterdir()] == ["aaaa0001.json"]
        assert json.loads((year_dir / "aaaa0001.json").read_text())["data"]["claimed_tips"] == 150

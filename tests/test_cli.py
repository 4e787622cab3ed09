"""
Tests for the command-line interface.
"""

import json

import pytest
from click.testing import CliRunner

from cli import cli, console


@pytest.fixture
def runner(tmp_path, monkeypatch):
    for name in ("GROWTHLOG_CONFIG", "GROWTHLOG_STORAGE", "GROWTHLOG_TOKEN_SECRET", "GROWTHLOG_REQUIRE_BIRTH_DATE"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("GROWTHLOG_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("GROWTHLOG_LOG_LEVEL", "WARNING")
    monkeypatch.setattr(console, "width", 200)
    return CliRunner()


def stored(tmp_path) -> dict:
    return json.loads((tmp_path / "growthlog.json").read_text())


class TestChildren:
    """Test child commands."""

    def test_add_and_list(self, runner, tmp_path):
        result = runner.invoke(cli, ["children", "add", "Sam", "--birth-date", "2020-01-15"])
        assert result.exit_code == 0, result.output
        assert "Added Sam" in result.output

        result = runner.invoke(cli, ["children", "list"])
        assert result.exit_code == 0
        assert "Sam" in result.output

    def test_token_persisted_between_runs(self, runner, tmp_path):
        runner.invoke(cli, ["children", "add", "Sam"])

        assert (tmp_path / "token").exists()
        assert (tmp_path / "secret").exists()
        runner.invoke(cli, ["children", "add", "Ada"])
        assert len(stored(tmp_path)["guardians"]) == 1

    def test_empty_list(self, runner):
        result = runner.invoke(cli, ["children", "list"])
        assert result.exit_code == 0
        assert "No children yet" in result.output

    def test_invalid_birth_date(self, runner):
        result = runner.invoke(cli, ["children", "add", "Sam", "--birth-date", "2099-01-01"])
        assert result.exit_code == 1
        assert "future" in result.output

    def test_show_missing(self, runner):
        result = runner.invoke(cli, ["children", "show", "missing"])
        assert result.exit_code == 2
        assert "Child not found" in result.output

    def test_update_and_delete(self, runner, tmp_path):
        runner.invoke(cli, ["children", "add", "Sam", "--gender", "male"])
        child_id = stored(tmp_path)["children"][0]["id"]

        result = runner.invoke(cli, ["children", "update", child_id, "--name", "Samuel", "--gender", ""])
        assert result.exit_code == 0, result.output
        child = stored(tmp_path)["children"][0]
        assert child["name"] == "Samuel"
        assert child["gender"] is None

        result = runner.invoke(cli, ["children", "delete", child_id, "--yes"])
        assert result.exit_code == 0
        assert stored(tmp_path)["children"] == []

    def test_delete_asks_for_confirmation(self, runner, tmp_path):
        runner.invoke(cli, ["children", "add", "Sam"])
        child_id = stored(tmp_path)["children"][0]["id"]

        result = runner.invoke(cli, ["children", "delete", child_id], input="n\n")
        assert result.exit_code != 0
        assert len(stored(tmp_path)["children"]) == 1


class TestMeasure:
    """Test measurement commands."""

    @pytest.fixture
    def child_id(self, runner, tmp_path):
        runner.invoke(cli, ["children", "add", "Sam", "--birth-date", "2020-01-15"])
        return stored(tmp_path)["children"][0]["id"]

    def test_add_shows_bmi(self, runner, child_id):
        result = runner.invoke(cli, ["measure", "add", child_id, "--date", "2024-06-01", "-h", "110", "-w", "18.5"])
        assert result.exit_code == 0, result.output
        assert "BMI 15.3" in result.output

        result = runner.invoke(cli, ["children", "show", child_id])
        assert "2024-06-01" in result.output
        assert "15.3" in result.output

    def test_add_out_of_range(self, runner, child_id, tmp_path):
        result = runner.invoke(cli, ["measure", "add", child_id, "--date", "2024-01-01", "--height", "5"])
        assert result.exit_code == 1
        assert stored(tmp_path)["measurements"] == []

    def test_update_and_delete(self, runner, child_id, tmp_path):
        runner.invoke(cli, ["measure", "add", child_id, "--date", "2024-06-01", "-h", "110", "-w", "18.5"])
        measurement_id = stored(tmp_path)["measurements"][0]["id"]

        result = runner.invoke(cli, ["measure", "update", measurement_id, "--weight", "20", "--height", ""])
        assert result.exit_code == 0, result.output
        row = stored(tmp_path)["measurements"][0]
        assert row["weight_kg"] == 20
        assert row["height_cm"] is None
        assert row["bmi"] is None

        result = runner.invoke(cli, ["measure", "delete", measurement_id])
        assert result.exit_code == 0
        assert stored(tmp_path)["measurements"] == []

    def test_delete_missing(self, runner, child_id):
        result = runner.invoke(cli, ["measure", "delete", "missing"])
        assert result.exit_code == 2


def test_info(runner):
    result = runner.invoke(cli, ["info"])
    assert result.exit_code == 0
    assert "Growthlog" in result.output


def test_bad_storage_setting(runner, monkeypatch):
    monkeypatch.setenv("GROWTHLOG_STORAGE", "floppy")
    result = runner.invoke(cli, ["children", "list"])
    assert result.exit_code == 1
    assert "GROWTHLOG_STORAGE" in result.output


def test_unreadable_data_file(runner, tmp_path):
    (tmp_path / "growthlog.json").write_text("{not json")
    result = runner.invoke(cli, ["children", "list"])
    assert result.exit_code == 3
    assert "Could not read" in result.output


def test_data_file_not_an_object(runner, tmp_path):
    (tmp_path / "growthlog.json").write_text("[]")
    result = runner.invoke(cli, ["children", "list"])
    assert result.exit_code == 3
    assert "not a JSON object" in result.output

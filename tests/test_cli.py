"""Tests for the crater-report command line."""

import json

import pytest
from click.testing import CliRunner

from conftest import write_graph, write_results
from crater.cli import cli
from crater.utils.result import ExitCode


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def invoke(runner, config_dir, *args):
    return runner.invoke(cli, ["--config", str(config_dir), "--log-level", "error", *args])


class TestComparisonCommand:
    """Tests for `crater-report comparison`."""

    def test_json(self, runner, config_dir):
        result = invoke(runner, config_dir, "comparison", "stable-2016-01-21", "beta-2016-01-22", "--format", "json")

        assert result.exit_code == ExitCode.SUCCESS
        data = json.loads(result.output)
        assert data["kind"] == "comparison"
        assert data["crates_tested"] == 3
        assert data["summary"] == {"working": 1, "not_working": 0, "regressed": 2, "fixed": 0}
        assert [r["crate"] for r in data["root_regressions"]] == ["libB"]
        assert [r["crate"] for r in data["non_root_regressions"]] == ["libC"]
        assert "crate=libB&version=1.0.0" in data["root_regressions"][0]["inspector_link"]

    def test_markdown_is_default(self, runner, config_dir):
        result = invoke(runner, config_dir, "comparison", "stable-2016-01-21", "beta-2016-01-22")

        assert result.exit_code == ExitCode.SUCCESS
        assert result.output.startswith("# Comparison report")
        assert "* 3 crates tested: 1 working / 0 not working / 2 regressed / 0 fixed." in result.output

    def test_invalid_toolchain(self, runner, config_dir):
        result = invoke(runner, config_dir, "comparison", "!!bad", "beta-2016-01-22")

        assert result.exit_code == ExitCode.REQUEST_INVALID

    def test_missing_results(self, runner, config_dir):
        result = invoke(runner, config_dir, "comparison", "stable-2016-01-21", "nightly-2016-01-25")

        assert result.exit_code == ExitCode.DATA_UNAVAILABLE

    def test_missing_graph_aborts(self, runner, config_dir, data_root):
        (data_root / "graphs" / "beta-2016-01-22.json").unlink()

        result = invoke(runner, config_dir, "comparison", "stable-2016-01-21", "beta-2016-01-22", "--format", "json")

        assert result.exit_code == ExitCode.DATA_UNAVAILABLE
        assert "root_regressions" not in result.output


class TestCurrentCommand:
    """Tests for `crater-report current`."""

    def test_resolves_from_static_releases(self, runner, config_dir):
        result = invoke(runner, config_dir, "current", "2016-01-28", "--format", "json")

        assert result.exit_code == ExitCode.SUCCESS
        data = json.loads(result.output)
        assert data["stable"] == "stable-2016-01-21"
        assert data["nightly"] == "nightly-2016-01-25"

    def test_invalid_date(self, runner, config_dir):
        result = invoke(runner, config_dir, "current", "yesterday")

        assert result.exit_code == ExitCode.REQUEST_INVALID

    def test_before_any_release(self, runner, config_dir):
        result = invoke(runner, config_dir, "current", "2010-01-01")

        assert result.exit_code == ExitCode.DATA_UNAVAILABLE


class TestWeeklyCommand:
    """Tests for `crater-report weekly`."""

    def test_missing_nightly_aborts(self, runner, config_dir):
        result = invoke(runner, config_dir, "weekly", "2016-01-28")

        assert result.exit_code == ExitCode.DATA_UNAVAILABLE

    def test_weekly_markdown(self, runner, config_dir, data_root):
        write_results(data_root, "nightly-2016-01-25", [
            ("libA", "1.0.0", "test-failed"),
            ("libB", "1.0.0", "test-succeeded"),
            ("libC", "1.0.0", "test-failed"),
        ])
        write_graph(data_root, "nightly-2016-01-25", {
            ("libA", "1.0.0"): [],
            ("libB", "1.0.0"): [],
            ("libC", "1.0.0"): [("libB", "1.0.0")],
        })

        result = invoke(runner, config_dir, "weekly", "2016-01-28")

        assert result.exit_code == ExitCode.SUCCESS
        assert result.output.startswith("# Weekly Report")
        assert "Date: 2016-01-28" in result.output
        assert "* There are currently 2 regressions from stable to beta." in result.output
        assert "* There are currently 1 regressions from beta to nightly." in result.output


class TestConfiguration:
    """Tests for configuration handling in the CLI."""

    def test_invalid_config(self, runner, tmp_path):
        (tmp_path / "defaults.yaml").write_text("timeouts:\n  store_query: -1\n")

        result = invoke(runner, tmp_path, "comparison", "stable-2016-01-21", "beta-2016-01-22")

        assert result.exit_code == ExitCode.CONFIG_INVALID

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert "0.3.0" in result.output

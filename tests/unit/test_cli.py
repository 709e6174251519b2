"""
Unit tests for the command line interface.
"""

import json

import pytest
from click.testing import CliRunner

from slotbid.cli.main import cli
from slotbid.utils.logger import SlotbidLogger


@pytest.fixture
def runner():
    yield CliRunner()
    # Handlers created inside invoke() point at the runner's closed streams
    SlotbidLogger.reset()


class TestAllocateCommand:

    def test_json_output(self, runner):
        result = runner.invoke(cli, ["allocate", "x:3000", "y:2800", "--duration", "3600", "--as-json"])

        assert result.exit_code == 0, result.output
        segments = json.loads(result.output)
        assert sorted(s["end"] - s["start"] for s in segments) == [1737, 1862]
        assert segments[0]["start"] == 0
        assert segments[0]["end"] == segments[1]["start"]

    def test_max_winners_truncates(self, runner):
        result = runner.invoke(cli, ["allocate", "a:300", "b:250", "c:200", "--max-winners", "2", "--as-json"])

        assert result.exit_code == 0, result.output
        assert {s["bidder"] for s in json.loads(result.output)} == {"a", "b"}

    def test_human_output_reports_tail(self, runner):
        result = runner.invoke(cli, ["allocate", "x:3000", "y:2800"])

        assert result.exit_code == 0, result.output
        assert "unassigned tail: 1s" in result.output
        assert "51.7%" in result.output

    @pytest.mark.parametrize("args", [
        ["--max-winners", "0"],
        ["--max-winners", "-1"],
        ["--duration", "0"],
        ["--duration", "-5"],
    ])
    def test_out_of_range_options_rejected(self, runner, args):
        """Non-positive counts are usage errors, not silent fallbacks."""
        result = runner.invoke(cli, ["allocate", "a:300", "b:200", "--as-json"] + args)

        assert result.exit_code == 2, result.output
        assert result.exception is None or isinstance(result.exception, SystemExit)

    def test_bad_pair(self, runner):
        result = runner.invoke(cli, ["allocate", "nocolon"])
        assert result.exit_code != 0

    def test_duplicate_bidder(self, runner):
        result = runner.invoke(cli, ["allocate", "a:1", "a:2"])
        assert result.exit_code != 0

    def test_too_many_winners_for_duration(self, runner):
        result = runner.invoke(cli, ["allocate", "a:1", "b:1", "c:1", "--duration", "2"])

        assert result.exit_code == 1
        assert "cannot fit" in result.output

    def test_environment_default_duration(self, runner, monkeypatch):
        monkeypatch.setenv("SLOTBID_DEFAULT_TOTAL_DURATION", "60")

        result = runner.invoke(cli, ["allocate", "a:1", "--as-json"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == [{"bidder": "a", "start": 0, "end": 60}]


class TestLoggingOptions:

    def test_bad_log_level_is_usage_error(self, runner, monkeypatch):
        monkeypatch.setenv("SLOTBID_LOG_LEVEL", "chatty")

        result = runner.invoke(cli, ["allocate", "a:1"])

        assert result.exit_code == 2
        assert "unknown log level" in result.output

    def test_log_dir_receives_debug_output(self, runner, tmp_path):
        result = runner.invoke(cli, ["--debug", "--log-dir", str(tmp_path), "allocate", "a:3", "b:1"])

        assert result.exit_code == 0, result.output
        assert "slotbid.allocator" in (tmp_path / "slotbid.log").read_text(encoding="utf-8")


class TestDemoCommand:

    def test_demo_runs(self, runner):
        result = runner.invoke(cli, ["demo"])

        assert result.exit_code == 0, result.output
        assert "Winners: user-x, new-user" in result.output
        assert "user-b bids 2900: rejected (BELOW_FLOOR)" in result.output

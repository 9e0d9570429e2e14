#!/usr/bin/env python3
"""
Integration tests for the lorekeeper CLI.

Runs the commands end to end against a temporary SQLite database:
world and timeline setup, event placement, manual ordering and date checks.
"""
import json

import pytest
from click.testing import CliRunner

from lorekeeper.cli import cli
from lorekeeper.core.paths import ALEMBIC_DIR

pytestmark = pytest.mark.integration

EXACT_1960 = json.dumps({"type": "exact", "year": 1960})
EXACT_1963 = json.dumps({"type": "exact", "year": 1963})
EXACT_1965 = json.dumps({"type": "exact", "year": 1965})


class TestLorekeeperCLI:
    """Test CLI commands with a temporary database."""

    @pytest.fixture
    def runner(self):
        """Create Click test runner."""
        return CliRunner()

    @pytest.fixture
    def test_dirs(self, tmp_path):
        """Create temporary paths for testing."""
        dirs = {
            "db_path": tmp_path / "test.db",
            "log_dir": tmp_path / "logs",
            "eras_file": tmp_path / "eras.yaml",
        }
        dirs["log_dir"].mkdir()
        return dirs

    def invoke_cli(self, runner, test_dirs, args, **kwargs):
        """Helper to invoke CLI with test configuration."""
        base_args = [
            "--db-path", str(test_dirs["db_path"]),
            "--alembic-dir", str(ALEMBIC_DIR),
            "--log-dir", str(test_dirs["log_dir"]),
            "--eras-file", str(test_dirs["eras_file"]),
        ]
        return runner.invoke(cli, base_args + args, **kwargs)

    @pytest.fixture
    def world(self, runner, test_dirs):
        """World 'Velmora' with timeline 1 'Main'."""
        assert self.invoke_cli(runner, test_dirs, ["world", "add", "Velmora"]).exit_code == 0
        result = self.invoke_cli(runner, test_dirs, ["timeline", "add", "Velmora", "Main"])
        assert result.exit_code == 0
        return "Velmora"

    def add_event(self, runner, test_dirs, title, date_json, *timelines):
        args = ["event", "add", "Velmora", title, "--date", date_json]
        for timeline_id in timelines:
            args += ["--timeline", str(timeline_id)]
        return self.invoke_cli(runner, test_dirs, args)

    def test_cli_help(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "timeline" in result.output

    def test_init_command(self, runner, test_dirs):
        result = self.invoke_cli(runner, test_dirs, ["init"])

        assert result.exit_code == 0
        assert "Initializing Lorekeeper database" in result.output
        assert "Database ready" in result.output
        assert test_dirs["db_path"].exists()

    def test_status_after_init(self, runner, test_dirs):
        self.invoke_cli(runner, test_dirs, ["init"])
        result = self.invoke_cli(runner, test_dirs, ["status"])

        assert result.exit_code == 0
        assert "up_to_date" in result.output

    def test_world_add_and_list(self, runner, test_dirs):
        empty = self.invoke_cli(runner, test_dirs, ["world", "list"])
        assert "No worlds yet." in empty.output

        result = self.invoke_cli(
            runner, test_dirs,
            ["world", "add", "Arda", "--era", "First Age", "--era", "Second Age"],
        )
        assert result.exit_code == 0
        assert "Created world Arda" in result.output
        assert "First Age → Second Age" in result.output

        listing = self.invoke_cli(runner, test_dirs, ["world", "list"])
        assert "Arda (arda)" in listing.output

    def test_world_add_duplicate(self, runner, test_dirs, world):
        result = self.invoke_cli(runner, test_dirs, ["world", "add", "Velmora"])
        assert result.exit_code == 1
        assert "World already exists" in result.output

    def test_world_eras(self, runner, test_dirs, world):
        shown = self.invoke_cli(runner, test_dirs, ["world", "eras", "Velmora"])
        assert "(single era)" in shown.output

        result = self.invoke_cli(
            runner, test_dirs, ["world", "eras", "Velmora", "--set", "Dawn", "--set", "Dusk"]
        )
        assert result.exit_code == 0
        assert "Velmora: Dawn → Dusk" in result.output

    def test_event_add_places_chronologically(self, runner, test_dirs, world):
        self.add_event(runner, test_dirs, "Founding", EXACT_1960, 1)
        self.add_event(runner, test_dirs, "Treaty", EXACT_1965, 1)

        result = self.add_event(runner, test_dirs, "Siege", EXACT_1963, 1)

        assert result.exit_code == 0
        assert "Created event Siege (id 3) 1963" in result.output
        assert "timeline 1: position 1 (added)" in result.output

        shown = self.invoke_cli(runner, test_dirs, ["timeline", "show", "1"])
        lines = [line for line in shown.output.splitlines() if "[#" in line]
        assert [line.split()[-1] for line in lines] == ["Founding", "Siege", "Treaty"]

    def test_event_add_partial_failure(self, runner, test_dirs, world):
        result = self.add_event(runner, test_dirs, "Founding", EXACT_1960, 1, 99)

        assert result.exit_code == 2
        assert "timeline 1: position 0 (added)" in result.output
        assert "Timeline not found: 99" in result.output

        listing = self.invoke_cli(runner, test_dirs, ["event", "list", "Velmora"])
        assert "Founding" in listing.output

    def test_event_add_invalid_date(self, runner, test_dirs, world):
        bad = json.dumps({"type": "exact", "year": 1960, "day": 3})
        result = self.add_event(runner, test_dirs, "Broken", bad, 1)

        assert result.exit_code == 1
        assert "DateValidationError" in result.output

        listing = self.invoke_cli(runner, test_dirs, ["event", "list", "Velmora"])
        assert "No events." in listing.output

    def test_event_update_keeps_position(self, runner, test_dirs, world):
        self.add_event(runner, test_dirs, "Founding", EXACT_1960, 1)
        self.add_event(runner, test_dirs, "Treaty", EXACT_1965, 1)

        result = self.invoke_cli(
            runner, test_dirs,
            ["event", "update", "1", "--date", json.dumps({"type": "exact", "year": 2000}),
             "--timeline", "1"],
        )

        assert result.exit_code == 0
        assert "timeline 1: position 0 (kept)" in result.output

    def test_event_list_by_date_json(self, runner, test_dirs, world):
        self.add_event(runner, test_dirs, "Treaty", EXACT_1965)
        self.add_event(runner, test_dirs, "Founding", EXACT_1960)

        result = self.invoke_cli(
            runner, test_dirs, ["event", "list", "Velmora", "--by-date", "--json"]
        )

        lines = result.output.splitlines()
        assert "Founding" in lines[0]
        assert '"year": 1960' in lines[0]

    def test_event_delete(self, runner, test_dirs, world):
        self.add_event(runner, test_dirs, "Founding", EXACT_1960, 1)

        result = self.invoke_cli(runner, test_dirs, ["event", "delete", "1", "--yes"])
        assert result.exit_code == 0

        shown = self.invoke_cli(runner, test_dirs, ["timeline", "show", "1"])
        assert "(no events)" in shown.output

    def test_move_swap_remove_compact(self, runner, test_dirs, world):
        for title, date_json in [("A", EXACT_1960), ("B", EXACT_1963), ("C", EXACT_1965)]:
            self.add_event(runner, test_dirs, title, date_json, 1)

        moved = self.invoke_cli(runner, test_dirs, ["timeline", "move", "1", "3", "0"])
        assert moved.exit_code == 0
        assert "Moved event 3 to position 0" in moved.output

        swapped = self.invoke_cli(runner, test_dirs, ["timeline", "swap", "1", "1", "2"])
        assert swapped.exit_code == 0

        shown = self.invoke_cli(runner, test_dirs, ["timeline", "show", "1"])
        titles = [line.split()[-1] for line in shown.output.splitlines() if "[#" in line]
        assert titles == ["C", "B", "A"]

        removed = self.invoke_cli(runner, test_dirs, ["timeline", "remove", "1", "3"])
        assert removed.exit_code == 0

        compacted = self.invoke_cli(runner, test_dirs, ["timeline", "compact", "1"])
        assert "2 positions changed" in compacted.output

        by_date = self.invoke_cli(runner, test_dirs, ["timeline", "show", "1", "--by-date"])
        titles = [line.split()[-1] for line in by_date.output.splitlines() if "[#" in line]
        assert titles == ["A", "B"]

    def test_remove_non_member(self, runner, test_dirs, world):
        self.add_event(runner, test_dirs, "Loose", EXACT_1960)

        result = self.invoke_cli(runner, test_dirs, ["timeline", "remove", "1", "1"])

        assert result.exit_code == 1
        assert "Event 1 is not on timeline 1" in result.output

    def test_show_missing_timeline(self, runner, test_dirs, world):
        result = self.invoke_cli(runner, test_dirs, ["timeline", "show", "42"])
        assert result.exit_code == 1
        assert "Timeline not found: 42" in result.output

    def test_eras_file_orders_events(self, runner, test_dirs):
        test_dirs["eras_file"].write_text("worlds:\n  Velmora:\n    - Old\n    - New\n")
        self.invoke_cli(runner, test_dirs, ["world", "add", "Velmora"])
        self.invoke_cli(runner, test_dirs, ["timeline", "add", "Velmora", "Main"])

        self.add_event(runner, test_dirs, "Later", json.dumps({"type": "exact", "era": "New", "year": 1}), 1)
        self.add_event(runner, test_dirs, "Earlier", json.dumps({"type": "exact", "era": "Old", "year": 900}), 1)

        shown = self.invoke_cli(runner, test_dirs, ["timeline", "show", "1"])
        titles = [line.split()[-1] for line in shown.output.splitlines() if "[#" in line]
        assert titles == ["Earlier", "Later"]

    def test_date_check_valid(self, runner, test_dirs):
        value = json.dumps({"type": "approximate", "year": 1977, "period": "late"})
        result = self.invoke_cli(runner, test_dirs, ["date", "check", value])

        assert result.exit_code == 0
        assert "✅ Late 1977" in result.output
        assert '"period": "late"' in result.output

    def test_date_check_invalid(self, runner, test_dirs):
        value = json.dumps({"type": "range", "start": {"year": 1970}, "end": {"year": 1960}})
        result = self.invoke_cli(runner, test_dirs, ["date", "check", value])

        assert result.exit_code == 1
        assert "range start is after its end" in result.output

    def test_date_check_malformed_year_range(self, runner, test_dirs):
        value = json.dumps({"type": "approximate", "year_range": {"a": 1, "b": 2}})
        result = self.invoke_cli(runner, test_dirs, ["date", "check", value])

        assert result.exit_code == 1
        assert "year_range" in result.output
        assert not isinstance(result.exception, KeyError)

"""
Smoke Tests for CLI Commands.

These tests verify that CLI commands run without errors and produce output.
They don't validate correctness deeply - just that commands work.

Usage:
    pytest tests/smoke/test_cli_commands.py -v
    pytest tests/smoke/test_cli_commands.py -v -m smoke
"""

import json
import os
import subprocess
import sys
from pathlib import Path

import pytest

# Mark all tests in this module as smoke tests
pytestmark = pytest.mark.smoke

# Project root
PROJECT_ROOT = Path(__file__).parent.parent.parent


def run_cli_command(args: list[str], timeout: int = 30, **env: str) -> tuple[int, str, str]:
    """
    Run a CLI command and return exit code, stdout, stderr.

    Args:
        args: Arguments after 'python -m src.cli.main'
        timeout: Maximum time to wait
        env: Extra environment variables

    Returns:
        Tuple of (exit_code, stdout, stderr)
    """
    result = subprocess.run(
        [sys.executable, "-m", "src.cli.main", *args],
        cwd=PROJECT_ROOT,
        capture_output=True,
        text=True,
        encoding="utf-8",
        timeout=timeout,
        env={**os.environ, "PYTHONIOENCODING": "utf-8", "COLUMNS": "200", **env},
    )

    return result.returncode, result.stdout, result.stderr


@pytest.fixture
def results_dir(tmp_path, basic_record, concept_record):
    """Results directory with two saved sessions."""
    for record in (basic_record, concept_record):
        (tmp_path / record["filename"]).write_text(json.dumps(record), encoding="utf-8")
    return tmp_path


class TestCLIHelp:
    """Test that help commands work."""

    def test_main_help(self):
        """Main help should list every command."""
        code, stdout, stderr = run_cli_command(["--help"])

        assert code == 0, f"Help failed: {stderr}"
        for command in ("analyze", "concepts", "compare", "list"):
            assert command in stdout

    @pytest.mark.parametrize("command", ["analyze", "concepts", "compare", "list"])
    def test_command_help(self, command):
        """Each command's help should work."""
        code, stdout, stderr = run_cli_command([command, "--help"])

        assert code == 0, f"{command} help failed: {stderr}"


class TestCLIAnalyze:
    """Test analyze command."""

    def test_analyze_runs(self, results_dir, basic_record):
        """Analyze should render the question table."""
        code, stdout, stderr = run_cli_command(["analyze", str(results_dir / basic_record["filename"])])

        assert code == 0, f"Analyze failed: {stderr}"
        assert "Quiz Analytics" in stdout
        assert "Fractions Warm-up" in stdout
        assert "Q1" in stdout

    def test_analyze_json(self, results_dir, basic_record):
        """Analyze --json should print the report."""
        code, stdout, stderr = run_cli_command(
            ["analyze", str(results_dir / basic_record["filename"]), "--json"]
        )

        assert code == 0, f"Analyze --json failed: {stderr}"
        data = json.loads(stdout)
        assert data["questionAnalytics"][0]["successRate"] == 50
        assert data["summary"]["totalQuestions"] == 1

    def test_analyze_problems_only(self, results_dir, basic_record):
        """No high flags in the basic session."""
        code, stdout, stderr = run_cli_command(
            ["analyze", str(results_dir / basic_record["filename"]), "--problems-only"]
        )

        assert code == 0, f"Analyze -p failed: {stderr}"
        assert "No major issues detected" in stdout

    def test_analyze_saved_filename(self, results_dir, basic_record):
        """A bare saved filename is looked up in the results directory."""
        code, stdout, stderr = run_cli_command(
            ["analyze", basic_record["filename"], "--json"], RESULTS_DIR=str(results_dir)
        )

        assert code == 0, f"Analyze by filename failed: {stderr}"
        assert json.loads(stdout)["quizTitle"] == "Fractions Warm-up"

    def test_analyze_invalid_saved_filename(self, results_dir):
        """Bare names that are not saved result files are read as paths."""
        code, stdout, stderr = run_cli_command(["analyze", "notes.json"], RESULTS_DIR=str(results_dir))

        assert code == 1
        assert "not found" in stdout

    def test_analyze_missing_file(self, tmp_path):
        """Missing files exit with an error."""
        code, stdout, stderr = run_cli_command(["analyze", str(tmp_path / "results_1_1.json")])

        assert code == 1
        assert "not found" in stdout


class TestCLIConcepts:
    """Test concepts command."""

    def test_concepts_runs(self, results_dir, concept_record):
        code, stdout, stderr = run_cli_command(["concepts", str(results_dir / concept_record["filename"])])

        assert code == 0, f"Concepts failed: {stderr}"
        assert "Concept Mastery" in stdout
        assert "algebra" in stdout

    def test_concepts_json(self, results_dir, concept_record):
        code, stdout, stderr = run_cli_command(
            ["concepts", str(results_dir / concept_record["filename"]), "--json"]
        )

        assert code == 0, f"Concepts --json failed: {stderr}"
        data = json.loads(stdout)
        assert data["conceptDependencies"][0]["foundational"] == "algebra"

    def test_concepts_without_tags(self, results_dir, basic_record):
        code, stdout, stderr = run_cli_command(["concepts", str(results_dir / basic_record["filename"])])

        assert code == 0, f"Concepts failed: {stderr}"
        assert "No concept tags" in stdout


class TestCLICompare:
    """Test compare command."""

    def test_compare_runs(self, results_dir, basic_record, concept_record):
        files = [str(results_dir / r["filename"]) for r in (basic_record, concept_record)]
        code, stdout, stderr = run_cli_command(["compare", *files, "--json"])

        assert code == 0, f"Compare failed: {stderr}"
        data = json.loads(stdout)
        assert data["sessionCount"] == 2
        assert data["sessions"][0]["filename"] == basic_record["filename"]

    def test_compare_needs_two(self, results_dir, basic_record):
        code, stdout, stderr = run_cli_command(["compare", str(results_dir / basic_record["filename"])])

        assert code == 1
        assert "at least two sessions" in stdout


class TestCLIList:
    """Test list command."""

    def test_list_runs(self, results_dir):
        code, stdout, stderr = run_cli_command(["list", str(results_dir)])

        assert code == 0, f"List failed: {stderr}"
        assert "Saved Results" in stdout
        assert "Fractions Warm-up" in stdout
        assert "50%" in stdout

    def test_list_uses_configured_directory(self, results_dir):
        code, stdout, stderr = run_cli_command(["list", "--search", "222222"], RESULTS_DIR=str(results_dir))

        assert code == 0, f"List failed: {stderr}"
        assert "Shapes and Equations" in stdout
        assert "Fractions Warm-up" not in stdout

    def test_list_rejects_unknown_sort(self, results_dir):
        code, stdout, stderr = run_cli_command(["list", str(results_dir), "--sort", "bogus"])

        assert code == 1
        assert "unknown sort" in stdout

    def test_list_empty_directory(self, tmp_path):
        code, stdout, stderr = run_cli_command(["list", str(tmp_path)])

        assert code == 0, f"List failed: {stderr}"
        assert "No saved results found" in stdout

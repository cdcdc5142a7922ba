"""
Tests for the command-line interface.
"""

import json
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from gh_roast.cache import _get_cache_path
from gh_roast.cli import app
from gh_roast.config import get_max_concurrency
from gh_roast.core import InvalidUsernameError, build_report
from gh_roast.github_client import (
    GitHubAPIError,
    MissingTokenError,
    RateLimitError,
    UserNotFoundError,
)

runner = CliRunner()


@pytest.fixture
def report(make_user_metrics, now):
    return build_report(make_user_metrics(), now=now)


class TestRoastCommand:
    """Test the roast command."""

    def test_json_output(self, report):
        """Test --json prints the serialized report."""
        with patch("gh_roast.cli.analyze_user_sync", return_value=report):
            result = runner.invoke(app, ["roast", "octocat", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["username"] == "octocat"
        assert data["cache_hit"] is False
        assert data["overall_score"] == report.overall_score

    def test_table_output(self, report):
        """Test the default rich output."""
        with patch("gh_roast.cli.analyze_user_sync", return_value=report):
            result = runner.invoke(app, ["roast", "octocat"])

        assert result.exit_code == 0
        assert "Roast report for octocat" in result.output
        assert "Roast score:" in result.output

    def test_second_run_served_from_cache(self, report):
        """Test a repeated roast within the TTL skips the analysis."""
        with patch("gh_roast.cli.analyze_user_sync", return_value=report) as analyze:
            runner.invoke(app, ["roast", "octocat", "--json"])
            result = runner.invoke(app, ["roast", "OctoCat", "--json"])

        assert analyze.call_count == 1
        assert json.loads(result.stdout)["cache_hit"] is True

    def test_force_bypasses_cache(self, report):
        """Test --force analyzes again."""
        with patch("gh_roast.cli.analyze_user_sync", return_value=report) as analyze:
            runner.invoke(app, ["roast", "octocat", "--json"])
            runner.invoke(app, ["roast", "octocat", "--json", "--force"])

        assert analyze.call_count == 2

    def test_no_cache(self, report):
        """Test --no-cache neither reads nor writes the cache."""
        with patch("gh_roast.cli.analyze_user_sync", return_value=report):
            result = runner.invoke(app, ["roast", "octocat", "--json", "--no-cache"])

        assert result.exit_code == 0
        assert not _get_cache_path().exists()

    def test_cache_dir_option(self, report, tmp_path):
        """Test --cache-dir redirects the cache."""
        target = tmp_path / "elsewhere"
        with patch("gh_roast.cli.analyze_user_sync", return_value=report):
            runner.invoke(app, ["roast", "octocat", "--json", "--cache-dir", str(target)])

        assert (target / "reports.json.gz").exists()

    def test_max_concurrency_option(self, report):
        """Test --max-concurrency sets the fan-out limit."""
        with patch("gh_roast.cli.analyze_user_sync", return_value=report):
            runner.invoke(app, ["roast", "octocat", "--json", "--max-concurrency", "3"])

        assert get_max_concurrency() == 3

    @pytest.mark.parametrize(
        "error, exit_code",
        [
            (InvalidUsernameError("Invalid GitHub username: 'x y'"), 2),
            (UserNotFoundError("Failed to fetch user: ghost"), 3),
            (RateLimitError("GitHub API rate limit exceeded."), 4),
            (GitHubAPIError("GitHub API Errors: boom"), 1),
            (MissingTokenError("GITHUB_TOKEN is required to query GitHub."), 1),
        ],
    )
    def test_error_exit_codes(self, error, exit_code):
        """Test each failure maps to its exit code."""
        with patch("gh_roast.cli.analyze_user_sync", side_effect=error):
            result = runner.invoke(app, ["roast", "ghost", "--json"])

        assert result.exit_code == exit_code
        assert not _get_cache_path().exists()


    def test_unrelated_value_error_not_reported_as_token_problem(self):
        """Test only a missing token gets the token message."""
        error = ValueError("Invalid isoformat string: 'soon'")
        with patch("gh_roast.cli.analyze_user_sync", side_effect=error):
            result = runner.invoke(app, ["roast", "octocat", "--json"])

        assert isinstance(result.exception, ValueError)
        assert not isinstance(result.exception, MissingTokenError)
        assert "GITHUB_TOKEN" not in result.output


class TestCacheCommands:
    """Test cache-stats and clear-cache."""

    def test_cache_stats_empty(self):
        """Test stats without a cache file."""
        result = runner.invoke(app, ["cache-stats"])
        assert result.exit_code == 0
        assert "No report cache found" in result.output

    def test_cache_stats_and_clear(self, report):
        """Test stats after a roast, then clearing it."""
        with patch("gh_roast.cli.analyze_user_sync", return_value=report):
            runner.invoke(app, ["roast", "octocat", "--json"])

        stats = runner.invoke(app, ["cache-stats"])
        assert "Total entries: 1" in stats.output

        cleared = runner.invoke(app, ["clear-cache", "octocat"])
        assert cleared.exit_code == 0
        assert "Cleared 1 cached report(s)" in cleared.output

        again = runner.invoke(app, ["clear-cache"])
        assert "Nothing to clear" in again.output

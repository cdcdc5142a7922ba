"""
Tests for the roast analysis pipeline.
"""

import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from gh_roast import core
from gh_roast.core import (
    ANALYSIS_VERSION,
    InvalidUsernameError,
    analyze_user,
    analyze_user_sync,
    build_report,
    gather_repository_metrics,
)
from gh_roast.github_client import RateLimitError, UserNotFoundError
from gh_roast.models import ISSUE_TYPES, RepositoryRecord, UserProfile
from gh_roast.repository_metrics import fallback_repository_metrics


class FakeClient:
    """In-memory stand-in for GitHubClient."""

    def __init__(self, user, repos, failing=()):
        self.user = user
        self.repos = repos
        self.failing = set(failing)

    async def get_user(self, login):
        if self.user is None:
            raise UserNotFoundError(f"Failed to fetch user: {login}")
        return self.user

    async def get_user_repositories(self, login):
        return self.repos

    async def get_commit_history(self, owner, repo):
        if repo in self.failing:
            raise httpx.ReadTimeout("timed out")
        return [], 0

    async def get_readme(self, owner, repo):
        return None

    async def get_languages(self, owner, repo):
        return {}


@pytest.fixture
def user(now):
    return UserProfile(login="octocat", created_at=now - timedelta(days=3000))


def _record(name, now, **overrides):
    return RepositoryRecord(
        name=name, created_at=overrides.pop("created_at", now - timedelta(days=100)), **overrides
    )


@pytest.mark.slow
class TestAnalyzeUser:
    """Test analyze_user end to end against a fake client."""

    def test_single_abandoned_repository(self, user, now):
        """Test one old repository without commits or README."""
        client = FakeClient(user, [_record("relic", now, created_at=now - timedelta(days=1000))])

        report = asyncio.run(analyze_user("octocat", client=client, now=now))

        assert [(roast.type, roast.severity, roast.score) for roast in report.roasts] == [
            ("abandoned_repo", "critical", 15),
            ("no_documentation", "critical", 45),
            ("low_engagement", "info", 30),
        ]
        assert report.overall_score == 100
        assert report.final_verdict.startswith(
            "Your GitHub profile is a cautionary tale. 1 repos"
        )
        assert report.repositories_analyzed == 1
        assert all(roast.type in ISSUE_TYPES for roast in report.roasts)
        assert report.generated_at == now

    def test_single_reference_time(self, user, now):
        """Test one clock reading serves aggregation, rules and generated_at."""
        client = FakeClient(user, [_record("relic", now, created_at=now - timedelta(days=1000))])

        with patch.object(core, "utc_now", return_value=now) as clock:
            report = asyncio.run(analyze_user("octocat", client=client))

        clock.assert_called_once_with()
        assert report.generated_at == now
        assert report.roasts[0].evidence["days_inactive"] == 1000
        assert report.metrics.abandonment_score == 1.0

    def test_no_repositories(self, user, now):
        """Test a user without repositories still gets a report."""
        report = asyncio.run(analyze_user("octocat", client=FakeClient(user, []), now=now))

        assert report.metrics.total_repositories == 0
        assert [roast.type for roast in report.roasts] == []
        # Only the low-engagement bonus applies
        assert report.overall_score == 15
        assert report.final_verdict.startswith("GitHub legend status achieved")

    def test_user_not_found(self, now):
        """Test a missing user propagates without a report."""
        with pytest.raises(UserNotFoundError):
            asyncio.run(analyze_user("ghost", client=FakeClient(None, []), now=now))

    def test_invalid_username(self, user, now):
        """Test an invalid login is rejected before any request."""
        client = FakeClient(user, [])
        client.get_user = AsyncMock()
        with pytest.raises(InvalidUsernameError):
            asyncio.run(analyze_user("not a user!", client=client, now=now))
        client.get_user.assert_not_awaited()

    def test_rate_limit_propagates(self, user, now):
        """Test a rate limit on the repository listing aborts the analysis."""
        client = FakeClient(user, [])
        client.get_user_repositories = AsyncMock(side_effect=RateLimitError("limited"))
        with pytest.raises(RateLimitError):
            asyncio.run(analyze_user("octocat", client=client, now=now))

    def test_failing_repository_uses_fallback(self, user, now):
        """Test one failing repository does not affect the others."""
        repos = [_record(name, now) for name in ("a", "broken", "c")]
        client = FakeClient(user, repos, failing={"broken"})

        report = asyncio.run(analyze_user("octocat", client=client, now=now))

        names = [repo.name for repo in report.metrics.repositories]
        assert names == ["a", "broken", "c"]
        assert report.metrics.repositories[1] == fallback_repository_metrics(repos[1])

    def test_deterministic(self, user, now):
        """Test repeated runs with the same data produce the same report."""
        repos = [_record("a", now), _record("b", now, is_fork=True)]
        first = asyncio.run(analyze_user("octocat", client=FakeClient(user, repos), now=now))
        second = asyncio.run(analyze_user("octocat", client=FakeClient(user, repos), now=now))
        assert first.roasts == second.roasts
        assert first.overall_score == second.overall_score
        assert first.final_verdict == second.final_verdict


class TestGatherRepositoryMetrics:
    """Test gather_repository_metrics."""

    def test_exception_replaced_positionally(self, user, now):
        """Test a task that raises is replaced by its fallback in place."""
        repos = [_record(name, now) for name in ("a", "b", "c")]
        original = core.calculate_repository_metrics

        async def flaky(repo, username, client):
            if repo.name == "b":
                raise RuntimeError("boom")
            return await original(repo, username, client)

        with patch.object(core, "calculate_repository_metrics", flaky):
            metrics = asyncio.run(
                gather_repository_metrics(repos, "octocat", FakeClient(user, repos), 2)
            )

        assert [repo.name for repo in metrics] == ["a", "b", "c"]
        assert metrics[1] == fallback_repository_metrics(repos[1])

    def test_concurrency_is_bounded(self, user, now):
        """Test no more than max_concurrency repositories are in flight."""
        repos = [_record(f"r{i}", now) for i in range(6)]
        in_flight = 0
        peak = 0

        async def slow(repo, username, client):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return fallback_repository_metrics(repo)

        with patch.object(core, "calculate_repository_metrics", slow):
            asyncio.run(gather_repository_metrics(repos, "octocat", None, 2))

        assert peak == 2


class TestRoastReport:
    """Test report serialization."""

    def test_to_dict_shape(self, make_user_metrics, now):
        """Test the stable report shape."""
        report = build_report(make_user_metrics(), now=now)
        data = report.to_dict()

        assert set(data) == {
            "username",
            "overall_score",
            "metrics",
            "roasts",
            "final_verdict",
            "generated_at",
            "cache_hit",
        }
        assert set(data["metrics"]) == {
            "total_repos",
            "total_stars",
            "total_commits",
            "primary_languages",
            "fork_ratio",
            "abandonment_score",
            "code_quality_score",
            "engagement_score",
        }
        assert data["username"] == "octocat"
        assert data["generated_at"] == now.isoformat()
        assert data["cache_hit"] is False
        for roast in data["roasts"]:
            assert set(roast) == {"severity", "title", "message", "evidence"}

    def test_analysis_version(self):
        """Test the cache version stamp."""
        assert ANALYSIS_VERSION == "1.0"


def test_analyze_user_sync_closes_http_client(user, now):
    """Test the blocking wrapper closes the shared HTTP client."""
    client = FakeClient(user, [])
    with patch.object(core, "close_async_http_client", new=AsyncMock()) as close:
        report = analyze_user_sync("octocat", client=client, now=now)
    assert report.username == "octocat"
    close.assert_awaited_once()

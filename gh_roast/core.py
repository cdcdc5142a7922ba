"""
Roast analysis pipeline.

profile + repositories -> RepositoryMetrics (concurrently, per repository)
-> UserMetrics -> findings -> overall score + verdict.
"""

import asyncio
import time
from datetime import datetime
from typing import Any, NamedTuple

from rich.console import Console

from gh_roast.config import get_max_concurrency
from gh_roast.engine import calculate_overall_score, generate_roasts, verdict_for_score
from gh_roast.github_client import GitHubClient
from gh_roast.http_client import close_async_http_client
from gh_roast.models import AnalysisIssue, RepositoryMetrics, RepositoryRecord, UserMetrics
from gh_roast.repository_metrics import (
    calculate_repository_metrics,
    fallback_repository_metrics,
)
from gh_roast.user_metrics import calculate_user_metrics
from gh_roast.utils import is_valid_github_username, sanitize_username, utc_now

# Stamped into cached reports; bump when the report shape or scoring changes
ANALYSIS_VERSION = "1.0"

console = Console(stderr=True)


class InvalidUsernameError(ValueError):
    """Raised when a username cannot be a GitHub login."""


class RoastReport(NamedTuple):
    """Result of one roast analysis."""

    username: str
    overall_score: int
    metrics: UserMetrics
    roasts: list[AnalysisIssue]
    final_verdict: str
    generated_at: datetime
    analysis_time_ms: int = 0
    cache_hit: bool = False

    @property
    def repositories_analyzed(self) -> int:
        return self.metrics.total_repositories

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the stable report shape shared by every consumer."""
        metrics = self.metrics
        return {
            "username": self.username,
            "overall_score": self.overall_score,
            "metrics": {
                "total_repos": metrics.total_repositories,
                "total_stars": metrics.total_stars,
                "total_commits": metrics.total_commits,
                "primary_languages": list(metrics.primary_languages),
                "fork_ratio": metrics.fork_ratio,
                "abandonment_score": metrics.abandonment_score,
                "code_quality_score": metrics.code_quality_score,
                "engagement_score": metrics.overall_engagement_score,
            },
            "roasts": [
                {
                    "severity": roast.severity,
                    "title": roast.title,
                    "message": roast.description,
                    "evidence": roast.evidence,
                }
                for roast in self.roasts
            ],
            "final_verdict": self.final_verdict,
            "generated_at": self.generated_at.isoformat(),
            "cache_hit": self.cache_hit,
        }


def build_report(
    metrics: UserMetrics,
    now: datetime | None = None,
    analysis_time_ms: int = 0,
) -> RoastReport:
    """Run the rules, score and verdict over already-aggregated metrics."""
    now = now or utc_now()
    roasts = generate_roasts(metrics, now=now)
    overall_score = calculate_overall_score(metrics, roasts)
    return RoastReport(
        username=metrics.username,
        overall_score=overall_score,
        metrics=metrics,
        roasts=roasts,
        final_verdict=verdict_for_score(overall_score, metrics.total_repositories),
        generated_at=now,
        analysis_time_ms=analysis_time_ms,
    )


async def gather_repository_metrics(
    repos: list[RepositoryRecord],
    username: str,
    client: GitHubClient,
    max_concurrency: int | None = None,
) -> list[RepositoryMetrics]:
    """
    Build metrics for every repository concurrently.

    Results keep the order of ``repos``. A task that still raises is replaced
    by its fallback record; sibling tasks are never cancelled.
    """
    semaphore = asyncio.Semaphore(max_concurrency or get_max_concurrency())

    async def _bounded(repo: RepositoryRecord) -> RepositoryMetrics:
        async with semaphore:
            return await calculate_repository_metrics(repo, username, client)

    results = await asyncio.gather(
        *(_bounded(repo) for repo in repos), return_exceptions=True
    )

    repo_metrics = []
    for repo, result in zip(repos, results):
        if isinstance(result, Exception):
            console.print(
                f"  [yellow]⚠️  Metrics for {repo.name} failed, using repository summary: {result}[/yellow]"
            )
            repo_metrics.append(fallback_repository_metrics(repo))
        elif isinstance(result, BaseException):
            raise result
        else:
            repo_metrics.append(result)
    return repo_metrics


async def analyze_user(
    username: str,
    client: GitHubClient | None = None,
    now: datetime | None = None,
    verbose: bool = False,
) -> RoastReport:
    """
    Roast a GitHub user.

    Args:
        username: GitHub login
        client: GitHub client; a new one (token from GITHUB_TOKEN) when omitted
        now: Reference time for time-based heuristics
        verbose: Print progress to stderr

    Returns:
        RoastReport for the user

    Raises:
        InvalidUsernameError: If the username is not a valid GitHub login
        UserNotFoundError: If the user profile cannot be fetched
        RateLimitError: If the GitHub rate limit is exhausted
        GitHubAPIError: If the repository listing cannot be fetched
    """
    if not is_valid_github_username(username):
        raise InvalidUsernameError(
            f"Invalid GitHub username: {sanitize_username(username)!r}"
        )

    now = now or utc_now()
    started = time.perf_counter()
    client = client or GitHubClient()

    user = await client.get_user(username)
    repos = await client.get_user_repositories(username)
    if verbose:
        console.print(f"[dim]Fetched {len(repos)} repositories for {user.login}[/dim]")

    repo_metrics = await gather_repository_metrics(repos, username, client)
    metrics = calculate_user_metrics(user, repo_metrics, now)

    elapsed_ms = int((time.perf_counter() - started) * 1000)
    report = build_report(metrics, now=now, analysis_time_ms=elapsed_ms)
    if verbose:
        console.print(
            f"[dim]Roast for {user.login}: score {report.overall_score}, "
            f"{len(report.roasts)} roast(s), {elapsed_ms} ms[/dim]"
        )
    return report


def analyze_user_sync(
    username: str,
    client: GitHubClient | None = None,
    now: datetime | None = None,
    verbose: bool = False,
) -> RoastReport:
    """Blocking wrapper around analyze_user(); closes the shared HTTP client afterwards."""

    async def _run() -> RoastReport:
        try:
            return await analyze_user(
                username, client=client, now=now, verbose=verbose
            )
        finally:
            await close_async_http_client()

    return asyncio.run(_run())

"""User-level aggregation of repository metrics."""

from collections.abc import Sequence
from datetime import datetime

from gh_roast.detectors import detect_abandonment, detect_language_spread
from gh_roast.models import RepositoryMetrics, UserMetrics, UserProfile
from gh_roast.utils import days_between, round_half_up, utc_now


def _estimated_commit_intervals(repos: Sequence[RepositoryMetrics]) -> list[int]:
    """
    Average days between commits per repository (lifetime span / commit count).

    Repositories without an observed commit, a zero-day span, or fewer than two
    commits are left out rather than counted as zero.
    """
    intervals = []
    for repo in repos:
        if repo.last_commit_at is None:
            continue
        span = days_between(repo.created_at, repo.last_commit_at)
        if span > 0 and repo.commit_count > 1:
            intervals.append(round_half_up(span / repo.commit_count))
    return intervals


def calculate_user_metrics(
    user: UserProfile,
    repo_metrics: Sequence[RepositoryMetrics],
    now: datetime | None = None,
) -> UserMetrics:
    """
    Fold repository metrics into one UserMetrics value.

    Scoring:
    - abandonment_score: mean per-repository abandonment score / 100 (0-1)
    - code_quality_score: max(0, 100 - (avg complexity * 3 + abandonment_score * 20))
    - overall_engagement_score: min(100, (PRs*5 + stars*2 + 30 if any issues) / repos)
    """
    now = now or utc_now()
    repos = list(repo_metrics)

    total_repositories = len(repos)
    total_forks = sum(1 for repo in repos if repo.is_fork)
    total_commits = sum(repo.commit_count for repo in repos)
    total_issues = sum(repo.issue_count for repo in repos)
    total_prs = sum(repo.pr_count for repo in repos)
    total_stars = sum(repo.star_count for repo in repos)

    spread = detect_language_spread(repos)

    abandonment_score = (
        sum(detect_abandonment(repo, now).score for repo in repos)
        / total_repositories
        / 100
        if total_repositories > 0
        else 0
    )

    intervals = _estimated_commit_intervals(repos)
    max_activity_gap = max(intervals) if intervals else 0
    average_activity_gap = (
        round_half_up(sum(intervals) / len(intervals)) if intervals else 0
    )

    fork_ratio = total_forks / total_repositories if total_repositories > 0 else 0

    avg_complexity = (
        sum(repo.cyclomatic_complexity for repo in repos) / total_repositories
        if total_repositories > 0
        else 0
    )
    code_quality_score = max(0, 100 - (avg_complexity * 3 + abandonment_score * 20))

    engagement_score = min(
        100,
        (total_prs * 5 + total_stars * 2 + (30 if total_issues > 0 else 0))
        / max(1, total_repositories),
    )

    return UserMetrics(
        username=user.login,
        created_at=user.created_at,
        repositories=repos,
        total_repositories=total_repositories,
        total_forks=total_forks,
        total_original=total_repositories - total_forks,
        total_commits=total_commits,
        total_issues=total_issues,
        total_prs=total_prs,
        total_stars=total_stars,
        primary_languages=spread.primary_languages,
        language_count=spread.language_count,
        average_commits_per_repo=(
            round_half_up(total_commits / total_repositories)
            if total_repositories > 0
            else 0
        ),
        abandonment_score=abandonment_score,
        activity_gaps=[],
        max_activity_gap=max_activity_gap,
        average_activity_gap=average_activity_gap,
        fork_ratio=fork_ratio,
        code_quality_score=code_quality_score,
        overall_engagement_score=engagement_score,
    )

"""
Data model for roast analysis.

Raw records arrive from the GitHub client; metrics and findings are derived
from them. Everything here is an immutable NamedTuple.
"""

from datetime import datetime
from typing import Any, NamedTuple

# Severity order used for sorting findings (critical first)
SEVERITY_ORDER = {"critical": 0, "warning": 1, "info": 2}

ISSUE_TYPES = (
    "abandoned_repo",
    "activity_gap",
    "cyclomatic_complexity",
    "god_file",
    "duplicate_code",
    "language_spread",
    "no_documentation",
    "low_engagement",
    "fork_heavy",
    "slow_repo",
)


class UserProfile(NamedTuple):
    """GitHub user profile as returned by the fetch layer."""

    login: str
    created_at: datetime
    name: str | None = None
    public_repos: int = 0


class RepositoryRecord(NamedTuple):
    """Repository descriptor as returned by the fetch layer."""

    name: str
    created_at: datetime
    pushed_at: datetime | None = None
    is_fork: bool = False
    is_archived: bool = False
    size_kb: int = 0
    language: str | None = None  # Declared primary language
    issue_count: int = 0
    pull_request_count: int = 0
    star_count: int = 0
    fork_count: int = 0
    description: str | None = None


class Commit(NamedTuple):
    """A single commit, reduced to what the detectors need."""

    date: datetime  # Author timestamp
    author: str | None = None
    message: str = ""


class RepositoryMetrics(NamedTuple):
    """Normalized metrics for one repository."""

    name: str
    is_fork: bool
    is_archived: bool
    created_at: datetime
    last_commit_at: datetime | None  # None: no commit observed
    commit_count: int
    language: str | None
    languages: dict[str, int]
    file_count: int
    average_file_size: int
    longest_file_size: int
    cyclomatic_complexity: int
    duplicate_percentage: int
    readme_present: bool
    readme_quality: str  # "missing", "poor", "good", "excellent"
    pr_count: int
    issue_count: int
    star_count: int
    fork_count: int


class UserMetrics(NamedTuple):
    """Per-user aggregate of repository metrics."""

    username: str
    created_at: datetime
    repositories: list[RepositoryMetrics]
    total_repositories: int
    total_forks: int
    total_original: int
    total_commits: int
    total_issues: int
    total_prs: int
    total_stars: int
    primary_languages: list[str]
    language_count: int
    average_commits_per_repo: int
    abandonment_score: float  # 0-1, higher = more abandoned
    activity_gaps: list[int]  # Reserved, always empty
    max_activity_gap: int  # Days
    average_activity_gap: int  # Days
    fork_ratio: float  # 0-1
    code_quality_score: float  # 0-100
    overall_engagement_score: float  # 0-100


class AnalysisIssue(NamedTuple):
    """A single finding produced by a roast rule."""

    type: str  # One of ISSUE_TYPES
    severity: str  # "critical", "warning", "info"
    title: str
    description: str
    score: int  # 0-100
    evidence: dict[str, Any]
    repository: str | None = None

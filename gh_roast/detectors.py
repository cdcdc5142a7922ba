"""
Stateless heuristic detectors.

Each detector takes a narrow slice of data (one repository's metrics, a commit
list, a repository set) and returns a small verdict. Detectors never perform
I/O and never depend on the aggregator or the rule engine.
"""

from collections.abc import Sequence
from datetime import datetime
from typing import NamedTuple

from gh_roast.models import Commit, RepositoryMetrics
from gh_roast.utils import days_between, percentage, round_half_up, utc_now


class AbandonmentResult(NamedTuple):
    is_abandoned: bool
    score: int  # 0-100
    days_inactive: int
    reason: str


class ActivityGapResult(NamedTuple):
    gaps: list[int]  # Days between consecutive commits
    max_gap: int
    average_gap: int
    suspicious_patterns: bool


class ForkHeavyResult(NamedTuple):
    fork_ratio: float
    is_fork_heavy: bool
    explanation: str


class LanguageSpreadResult(NamedTuple):
    language_count: int
    primary_languages: list[str]
    is_too_spread: bool
    avg_files_per_language: float
    explanation: str


class ComplexityEstimate(NamedTuple):
    estimated: int
    risk: str  # "low", "medium", "high"


class CollaborationResult(NamedTuple):
    collaboration_score: int  # 0-100
    level: str  # "solo", "light", "active", "highly-collaborative"
    explanation: str


def detect_abandonment(
    repo: RepositoryMetrics, now: datetime | None = None
) -> AbandonmentResult:
    """
    Identify repositories that have not been updated for most of their life.

    The inactivity ratio is days since the last commit divided by days since
    creation. A repository without observed commits counts as inactive since
    creation.

    Scoring:
    - score = min(100, ratio * 120)
    - abandoned when ratio > 0.7
    """
    now = now or utc_now()
    last_commit_at = repo.last_commit_at or repo.created_at

    days_inactive = days_between(last_commit_at, now)
    total_days = days_between(repo.created_at, now)

    inactivity_ratio = days_inactive / total_days if total_days > 0 else 0
    score = min(100, round_half_up(inactivity_ratio * 120))

    if days_inactive > 730:
        reason = f"No commits for {days_inactive // 365} years"
    elif days_inactive > 180:
        reason = f"No commits for {days_inactive // 30} months"
    elif days_inactive > 30:
        reason = f"No commits for {days_inactive} days"
    else:
        reason = ""

    return AbandonmentResult(
        is_abandoned=inactivity_ratio > 0.7,
        score=score,
        days_inactive=days_inactive,
        reason=reason,
    )


def detect_activity_gaps(commits: Sequence[Commit]) -> ActivityGapResult:
    """
    Measure the gaps between consecutive commits.

    Zero-day gaps are ignored. A history where most gaps are exactly seven
    days is flagged as suspicious (scheduled or bot commits).
    """
    if len(commits) < 2:
        return ActivityGapResult(
            gaps=[], max_gap=0, average_gap=0, suspicious_patterns=False
        )

    ordered = sorted(commits, key=lambda commit: commit.date, reverse=True)

    gaps = []
    for current, following in zip(ordered, ordered[1:]):
        gap = days_between(current.date, following.date)
        if gap > 0:
            gaps.append(gap)

    max_gap = max(gaps) if gaps else 0
    average_gap = round_half_up(sum(gaps) / len(gaps)) if gaps else 0

    suspicious_patterns = False
    if len(gaps) > 5:
        weekly_gaps = sum(1 for gap in gaps if gap == 7)
        suspicious_patterns = weekly_gaps > len(gaps) * 0.5

    return ActivityGapResult(
        gaps=gaps,
        max_gap=max_gap,
        average_gap=average_gap,
        suspicious_patterns=suspicious_patterns,
    )


def detect_fork_heavy_user(repos: Sequence[RepositoryMetrics]) -> ForkHeavyResult:
    """Compare forked repositories against original ones."""
    total = len(repos)
    forks = sum(1 for repo in repos if repo.is_fork)
    originals = total - forks

    fork_ratio = forks / total if total > 0 else 0

    if fork_ratio > 0.8:
        explanation = f"{percentage(forks, total):g}% of repositories are forks"
    elif fork_ratio > 0.5:
        explanation = f"More forks ({forks}) than originals ({originals})"
    elif fork_ratio > 0.3:
        explanation = f"Significant fork activity ({percentage(forks, total):g}%)"
    else:
        explanation = ""

    return ForkHeavyResult(
        fork_ratio=fork_ratio,
        is_fork_heavy=fork_ratio > 0.7,
        explanation=explanation,
    )


def detect_language_spread(
    repos: Sequence[RepositoryMetrics],
) -> LanguageSpreadResult:
    """
    Detect users spread thin across many primary languages.

    Primary languages are the top three by repository count; ties keep the
    order in which languages were first seen.
    """
    language_counts: dict[str, int] = {}
    for repo in repos:
        # Upstream data sometimes carries the literal string "null"
        if repo.language and repo.language != "null":
            language_counts[repo.language] = language_counts.get(repo.language, 0) + 1

    language_count = len(language_counts)
    ranked = sorted(language_counts.items(), key=lambda item: item[1], reverse=True)
    primary_languages = [language for language, _count in ranked[:3]]

    avg_files_per_language = (
        len(repos) / max(1, language_count) if len(repos) > 0 else 0
    )

    if language_count > 10:
        explanation = f"Dabbling in {language_count} languages"
    elif language_count > 5:
        explanation = f"Working across {language_count} different languages"
    else:
        explanation = ""

    return LanguageSpreadResult(
        language_count=language_count,
        primary_languages=primary_languages,
        is_too_spread=language_count > 8 and avg_files_per_language < 2,
        avg_files_per_language=avg_files_per_language,
        explanation=explanation,
    )


def estimate_cyclomatic_complexity(file_count: float) -> ComplexityEstimate:
    """Rough complexity estimate from a file-count proxy (not AST based)."""
    estimated = max(1, round_half_up(file_count * 0.8))

    if estimated > 15:
        risk = "high"
    elif estimated > 8:
        risk = "medium"
    else:
        risk = "low"

    return ComplexityEstimate(estimated=estimated, risk=risk)


def estimate_duplication(content: Sequence[str]) -> int:
    """
    Token-based duplication estimate over a set of content samples.

    Only tokens longer than five characters are counted as duplicates; the
    ratio is taken over all tokens. Needs at least two samples.

    Returns:
        Percentage (0-100) of duplicated tokens.
    """
    if len(content) < 2:
        return 0

    tokens = [token for sample in content for token in sample.split()]
    token_counts: dict[str, int] = {}
    for token in tokens:
        if len(token) > 5:
            token_counts[token] = token_counts.get(token, 0) + 1

    duplicated = sum(count - 1 for count in token_counts.values() if count > 1)
    ratio = duplicated / len(tokens) if tokens else 0
    return min(100, round_half_up(ratio * 100))


README_SECTIONS = {
    "installation": 20,
    "usage": 20,
    "features": 15,
    "contributing": 15,
    "license": 10,
}


def detect_readme_quality(readme_content: str | None) -> str:
    """
    Classify README text as "missing", "poor", "good" or "excellent".

    Scoring:
    - Section headers (## or ###): installation 20, usage 20, features 15,
      contributing 15, license 10
    - Code fences: 10
    - More than 500 characters: 10

    80+ is excellent, 50+ good; any other non-empty README is poor.
    """
    if not readme_content:
        return "missing"

    content = readme_content.lower()
    score = 0

    for section, weight in README_SECTIONS.items():
        if f"## {section}" in content or f"### {section}" in content:
            score += weight

    if "```" in content:
        score += 10

    if len(content) > 500:
        score += 10

    if score >= 80:
        return "excellent"
    if score >= 50:
        return "good"
    return "poor"


def detect_collaboration_level(
    pr_count: int, issue_count: int, commit_count: int
) -> CollaborationResult:
    """
    Rate PR and issue engagement relative to commit volume.

    Scoring:
    - PR ratio > 0.1: +30, > 0.05: +15
    - Issue ratio > 0.1: +30, > 0.05: +15
    - PRs + issues > 100: +25, > 20: +10

    Levels: 75+ highly-collaborative, 50+ active, 20+ light, else solo.
    """
    pr_ratio = pr_count / commit_count if commit_count > 0 else 0
    issue_ratio = issue_count / commit_count if commit_count > 0 else 0

    score = 0

    if pr_ratio > 0.1:
        score += 30
    elif pr_ratio > 0.05:
        score += 15

    if issue_ratio > 0.1:
        score += 30
    elif issue_ratio > 0.05:
        score += 15

    volume = pr_count + issue_count
    if volume > 100:
        score += 25
    elif volume > 20:
        score += 10

    if score >= 75:
        level = "highly-collaborative"
        explanation = "Strong PR and issue engagement"
    elif score >= 50:
        level = "active"
        explanation = "Moderate community engagement"
    elif score >= 20:
        level = "light"
        explanation = "Some PR and issue activity"
    else:
        level = "solo"
        explanation = "Primarily solo work"

    return CollaborationResult(
        collaboration_score=score, level=level, explanation=explanation
    )

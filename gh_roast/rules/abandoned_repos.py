"""Abandoned repositories rule."""

from datetime import datetime

from gh_roast.detectors import detect_abandonment
from gh_roast.models import AnalysisIssue, UserMetrics
from gh_roast.rules.base import RoastRule, RuleContext
from gh_roast.utils import utc_now


def check_abandoned_repos(
    metrics: UserMetrics, now: datetime | None = None
) -> AnalysisIssue | None:
    """
    Roast repositories that have not seen a commit for most of their life.

    Uses the abandonment detector per repository and reports the repository
    that has been inactive the longest.

    Scoring:
    - 15 per abandoned repository, capped at 100
    - Critical when the longest-inactive repository passed two years (730 days)
    """
    now = now or utc_now()
    abandoned = []
    for repo in metrics.repositories:
        result = detect_abandonment(repo, now)
        if result.is_abandoned:
            abandoned.append((repo, result.days_inactive))

    if not abandoned:
        return None

    # max() keeps the first repository on ties
    oldest_repo, days_inactive = max(abandoned, key=lambda item: item[1])
    years = days_inactive // 365
    months = (days_inactive % 365) // 30

    message = f"You maintain {metrics.total_repositories} repositories but "
    if len(abandoned) == metrics.total_repositories:
        message += f"haven't touched ANY of them in over {years} years"
    else:
        message += f"{len(abandoned)} are collecting dust for {years}y {months}m"

    return AnalysisIssue(
        type="abandoned_repo",
        severity="critical" if days_inactive > 730 else "warning",
        title="Repository Graveyard",
        description=message,
        score=min(100, len(abandoned) * 15),
        evidence={
            "total_repos": metrics.total_repositories,
            "abandoned_count": len(abandoned),
            "oldest_inactive_repo": oldest_repo.name,
            "days_inactive": days_inactive,
        },
        repository=oldest_repo.name,
    )


def _condition(metrics: UserMetrics, _context: RuleContext) -> bool:
    return metrics.abandonment_score > 0.5


def _generate(metrics: UserMetrics, context: RuleContext) -> AnalysisIssue | None:
    return check_abandoned_repos(metrics, context.now)


RULE = RoastRule(id="abandoned_repos", condition=_condition, generate=_generate)

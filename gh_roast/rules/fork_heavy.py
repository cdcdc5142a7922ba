"""Fork-heavy user rule."""

from gh_roast.detectors import detect_fork_heavy_user
from gh_roast.models import AnalysisIssue, UserMetrics
from gh_roast.rules.base import RoastRule, RuleContext
from gh_roast.utils import round_half_up


def check_fork_heavy(metrics: UserMetrics) -> AnalysisIssue | None:
    """
    Roast users who fork far more than they create.

    Only reported when the fork detector agrees (ratio > 0.7); critical above 0.85.
    """
    result = detect_fork_heavy_user(metrics.repositories)
    if not result.is_fork_heavy:
        return None

    fork_pct = round_half_up(result.fork_ratio * 100)
    original_count = metrics.total_original

    if original_count == 0:
        description = (
            f"{fork_pct}% of your repos are forks. You're a collector, not a creator."
        )
    else:
        plural = "" if original_count == 1 else "s"
        description = (
            f"{fork_pct}% of your repos are forks. "
            f"Only {original_count} original project{plural}."
        )

    return AnalysisIssue(
        type="fork_heavy",
        severity="critical" if result.fork_ratio > 0.85 else "warning",
        title="Master of Copy-Paste",
        description=description,
        score=60,
        evidence={
            "fork_ratio": result.fork_ratio,
            "fork_count": metrics.total_forks,
            "original_count": original_count,
            "total_repos": metrics.total_repositories,
            "explanation": result.explanation,
        },
    )


def _condition(metrics: UserMetrics, _context: RuleContext) -> bool:
    return metrics.fork_ratio > 0.6


def _generate(metrics: UserMetrics, _context: RuleContext) -> AnalysisIssue | None:
    return check_fork_heavy(metrics)


RULE = RoastRule(id="fork_heavy", condition=_condition, generate=_generate)

"""Overall inactivity rule."""

from gh_roast.models import AnalysisIssue, UserMetrics
from gh_roast.rules.base import RoastRule, RuleContext
from gh_roast.utils import round_half_up


def check_slow_repo(metrics: UserMetrics) -> AnalysisIssue:
    """Roast a long average gap between commits; critical above 200 days."""
    avg_gap = metrics.average_activity_gap
    months = round_half_up(avg_gap / 30)

    return AnalysisIssue(
        type="slow_repo",
        severity="critical" if avg_gap > 200 else "warning",
        title="Molasses Development",
        description=(
            f"Average commit gap: {months} months. "
            "That's slower than enterprise waterfall."
        ),
        score=40,
        evidence={
            "average_gap_days": avg_gap,
            "max_gap_days": metrics.max_activity_gap,
        },
    )


def _condition(metrics: UserMetrics, _context: RuleContext) -> bool:
    return metrics.average_activity_gap > 90


def _generate(metrics: UserMetrics, _context: RuleContext) -> AnalysisIssue:
    return check_slow_repo(metrics)


RULE = RoastRule(id="slow_repo", condition=_condition, generate=_generate)

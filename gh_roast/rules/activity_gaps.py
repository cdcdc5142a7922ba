"""Activity gaps rule."""

from gh_roast.models import AnalysisIssue, UserMetrics
from gh_roast.rules.base import RoastRule, RuleContext


def check_activity_gaps(metrics: UserMetrics) -> AnalysisIssue | None:
    """
    Roast long stretches between commits.

    Scoring:
    - Longest gap > 730 days: critical "Legendary Ghost Mode", 80
    - Longest gap > 180 days: warning "Inconsistent Contributor", 50
    - Anything shorter produces no finding
    """
    gap = metrics.max_activity_gap
    evidence = {
        "max_gap_days": gap,
        "avg_gap_days": metrics.average_activity_gap,
    }

    if gap > 730:
        return AnalysisIssue(
            type="activity_gap",
            severity="critical",
            title="Legendary Ghost Mode",
            description=(
                f"{gap // 365} year gap between commits. "
                "That's not persistence, that's abandonment."
            ),
            score=80,
            evidence=evidence,
        )
    if gap > 180:
        return AnalysisIssue(
            type="activity_gap",
            severity="warning",
            title="Inconsistent Contributor",
            description=(
                f"{gap // 30} month gaps between commits. "
                "Your repos get periodic bursts, then silence."
            ),
            score=50,
            evidence=evidence,
        )
    return None


def _condition(metrics: UserMetrics, _context: RuleContext) -> bool:
    return metrics.max_activity_gap > 60


def _generate(metrics: UserMetrics, _context: RuleContext) -> AnalysisIssue | None:
    return check_activity_gaps(metrics)


RULE = RoastRule(id="activity_gaps", condition=_condition, generate=_generate)

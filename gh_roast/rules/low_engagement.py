"""Low collaboration rule."""

from gh_roast.detectors import detect_collaboration_level
from gh_roast.models import AnalysisIssue, UserMetrics
from gh_roast.rules.base import RoastRule, RuleContext


def check_low_engagement(metrics: UserMetrics) -> AnalysisIssue | None:
    """
    Roast solo work with little PR or issue activity.

    Only reported for the "solo" collaboration level. Warning when more than
    five repositories have no PRs at all, info otherwise.
    """
    result = detect_collaboration_level(
        metrics.total_prs, metrics.total_issues, metrics.total_commits
    )
    if result.level != "solo":
        return None

    no_prs_anywhere = metrics.total_repositories > 5 and metrics.total_prs == 0

    return AnalysisIssue(
        type="low_engagement",
        severity="warning" if no_prs_anywhere else "info",
        title="Lone Wolf Developer",
        description=(
            "No PRs, minimal issues. You code in isolation. "
            "Even open-source heroes need communities."
        ),
        score=30,
        evidence={
            "pr_count": metrics.total_prs,
            "issue_count": metrics.total_issues,
            "total_repos": metrics.total_repositories,
            "collaboration_explanation": result.explanation,
        },
    )


def _condition(metrics: UserMetrics, _context: RuleContext) -> bool:
    return metrics.total_prs < metrics.total_repositories * 0.1


def _generate(metrics: UserMetrics, _context: RuleContext) -> AnalysisIssue | None:
    return check_low_engagement(metrics)


RULE = RoastRule(id="low_engagement", condition=_condition, generate=_generate)

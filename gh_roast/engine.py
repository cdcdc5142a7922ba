"""
Roast engine: rule evaluation, overall score and final verdict.
"""

from collections.abc import Sequence
from datetime import datetime

from rich.console import Console

from gh_roast.models import SEVERITY_ORDER, AnalysisIssue, UserMetrics
from gh_roast.rules import RoastRule, RuleContext, load_rules
from gh_roast.utils import round_half_up, utc_now

console = Console(stderr=True)

SEVERITY_MULTIPLIERS = {"critical": 1.5, "warning": 1.0, "info": 0.5}

VERDICTS = {
    80: (
        "Your GitHub profile is a cautionary tale. {total_repos} repos, minimal "
        "activity, and scattered focus. Time for a Git purge and a coding renaissance."
    ),
    60: (
        "Decent effort, but you're spreading yourself too thin. Focus on your "
        "strongest projects and actually maintain them."
    ),
    40: (
        "You've got the basics down. Some cleanup and better documentation "
        "would go a long way."
    ),
    20: (
        "Solid contributor. Keep up the momentum and consider mentoring newcomers."
    ),
    0: (
        "GitHub legend status achieved. Your code quality, consistency, and "
        "community impact are exemplary."
    ),
}


def sort_by_severity(roasts: Sequence[AnalysisIssue]) -> list[AnalysisIssue]:
    """Critical first, then warning, then info; order within a severity is kept."""
    return sorted(roasts, key=lambda roast: SEVERITY_ORDER[roast.severity])


def generate_roasts(
    metrics: UserMetrics,
    rules: Sequence[RoastRule] | None = None,
    now: datetime | None = None,
) -> list[AnalysisIssue]:
    """
    Evaluate every rule against the user's metrics.

    A rule whose condition holds may still produce no finding. A rule that
    raises is reported and skipped; the remaining rules still run.

    Args:
        metrics: Aggregated user metrics
        rules: Rules to evaluate, defaults to load_rules()
        now: Reference time for time-based rules

    Returns:
        Findings sorted by severity
    """
    rules = load_rules() if rules is None else rules
    context = RuleContext(now=now or utc_now())

    roasts = []
    for rule in rules:
        try:
            if rule.condition(metrics, context):
                roast = rule.generate(metrics, context)
                if roast is not None:
                    roasts.append(roast)
        except Exception as e:
            console.print(f"  [yellow]⚠️  Roast rule '{rule.id}' skipped: {e}[/yellow]")

    return sort_by_severity(roasts)


def calculate_overall_score(
    metrics: UserMetrics, roasts: Sequence[AnalysisIssue]
) -> int:
    """
    Combine findings and user metrics into a 0-100 roast score.

    Scoring:
    - Each finding adds score * severity multiplier (critical 1.5, warning 1, info 0.5)
    - Fork ratio > 0.8: +20
    - Abandonment score > 0.7: +15
    - More than 10 languages: +10
    - Engagement score < 20: +15
    """
    score = 0.0
    for roast in roasts:
        score += roast.score * SEVERITY_MULTIPLIERS[roast.severity]

    if metrics.fork_ratio > 0.8:
        score += 20
    if metrics.abandonment_score > 0.7:
        score += 15
    if metrics.language_count > 10:
        score += 10
    if metrics.overall_engagement_score < 20:
        score += 15

    return max(0, min(100, round_half_up(score)))


def verdict_for_score(overall_score: int, total_repositories: int) -> str:
    """Pick the verdict template for a score (thresholds 80/60/40/20)."""
    for threshold, template in VERDICTS.items():
        if overall_score >= threshold:
            return template.format(total_repos=total_repositories)
    return VERDICTS[0].format(total_repos=total_repositories)


def generate_final_verdict(
    metrics: UserMetrics, roasts: Sequence[AnalysisIssue]
) -> str:
    """Verdict sentence for the overall score of these findings."""
    overall_score = calculate_overall_score(metrics, roasts)
    return verdict_for_score(overall_score, metrics.total_repositories)

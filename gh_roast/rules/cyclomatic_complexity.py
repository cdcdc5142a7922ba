"""Code complexity rule."""

from gh_roast.models import AnalysisIssue, UserMetrics
from gh_roast.rules.base import RoastRule, RuleContext


def _average_complexity(metrics: UserMetrics) -> float:
    if metrics.total_repositories == 0:
        return 0
    total = sum(repo.cyclomatic_complexity for repo in metrics.repositories)
    return total / metrics.total_repositories


def check_cyclomatic_complexity(metrics: UserMetrics) -> AnalysisIssue | None:
    """
    Roast high estimated cyclomatic complexity.

    Needs at least one repository above 15; critical when the average is above 18.
    """
    average = _average_complexity(metrics)
    complex_repos = [
        repo.name for repo in metrics.repositories if repo.cyclomatic_complexity > 15
    ]
    if not complex_repos:
        return None

    return AnalysisIssue(
        type="cyclomatic_complexity",
        severity="critical" if average > 18 else "warning",
        title="Spaghetti Code Central",
        description=(
            f"Your code averages {average:.1f} cyclomatic complexity. "
            "Good luck debugging that."
        ),
        score=55,
        evidence={
            "avg_complexity": average,
            "high_complexity_repos": complex_repos,
            "highest_complexity_repo": complex_repos[0],
        },
        repository=complex_repos[0],
    )


def _condition(metrics: UserMetrics, _context: RuleContext) -> bool:
    return _average_complexity(metrics) > 12


def _generate(metrics: UserMetrics, _context: RuleContext) -> AnalysisIssue | None:
    return check_cyclomatic_complexity(metrics)


RULE = RoastRule(id="cyclomatic_complexity", condition=_condition, generate=_generate)

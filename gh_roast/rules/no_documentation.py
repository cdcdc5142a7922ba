"""Missing documentation rule."""

from gh_roast.models import AnalysisIssue, RepositoryMetrics, UserMetrics
from gh_roast.rules.base import RoastRule, RuleContext
from gh_roast.utils import round_half_up


def _without_readme(metrics: UserMetrics) -> list[RepositoryMetrics]:
    return [repo for repo in metrics.repositories if not repo.readme_present]


def check_no_documentation(metrics: UserMetrics) -> AnalysisIssue | None:
    """
    Roast repositories without a README.

    Critical when more than 70% of repositories lack one. Up to three example
    repositories are listed in the evidence.
    """
    if metrics.total_repositories == 0:
        return None

    missing = _without_readme(metrics)
    pct = round_half_up(len(missing) / metrics.total_repositories * 100)

    return AnalysisIssue(
        type="no_documentation",
        severity="critical" if pct > 70 else "warning",
        title="README? Never Heard of Her",
        description=(
            f"{pct}% of your repos lack proper documentation. "
            "Future you will hate current you."
        ),
        score=45,
        evidence={
            "total_repos": metrics.total_repositories,
            "without_readme": len(missing),
            "percentage": pct,
            "examples": [repo.name for repo in missing[:3]],
        },
    )


def _condition(metrics: UserMetrics, _context: RuleContext) -> bool:
    return len(_without_readme(metrics)) > metrics.total_repositories * 0.3


def _generate(metrics: UserMetrics, _context: RuleContext) -> AnalysisIssue | None:
    return check_no_documentation(metrics)


RULE = RoastRule(id="no_documentation", condition=_condition, generate=_generate)

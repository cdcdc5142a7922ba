"""Language spread rule."""

from gh_roast.detectors import detect_language_spread
from gh_roast.models import AnalysisIssue, UserMetrics
from gh_roast.rules.base import RoastRule, RuleContext


def check_language_spread(metrics: UserMetrics) -> AnalysisIssue | None:
    """
    Roast the "jack of all trades" pattern: many languages, few projects in each.

    Reported when more than 8 languages average under 2 repositories each;
    critical above 12 languages.
    """
    result = detect_language_spread(metrics.repositories)
    if not result.is_too_spread:
        return None

    return AnalysisIssue(
        type="language_spread",
        severity="critical" if result.language_count > 12 else "warning",
        title="Jack of All Trades",
        description=(
            f"You've spread yourself across {result.language_count} languages "
            f"({result.avg_files_per_language:.1f} projects per language). Pick a lane."
        ),
        score=50,
        evidence={
            "language_count": result.language_count,
            "primary_languages": result.primary_languages,
            "avg_files_per_language": result.avg_files_per_language,
        },
    )


def _condition(metrics: UserMetrics, _context: RuleContext) -> bool:
    return metrics.language_count > 7


def _generate(metrics: UserMetrics, _context: RuleContext) -> AnalysisIssue | None:
    return check_language_spread(metrics)


RULE = RoastRule(id="language_spread", condition=_condition, generate=_generate)

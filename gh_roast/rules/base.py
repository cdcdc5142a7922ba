"""
Shared roast rule types.
"""

from datetime import datetime
from typing import Callable, NamedTuple

from gh_roast.models import AnalysisIssue, UserMetrics


class RuleContext(NamedTuple):
    """Context provided to rule checks."""

    now: datetime


class RoastRule(NamedTuple):
    """A roast rule: a cheap trigger condition plus a finding generator.

    The generator may still return None when a stricter check inside it fails.
    """

    id: str
    condition: Callable[[UserMetrics, RuleContext], bool]
    generate: Callable[[UserMetrics, RuleContext], AnalysisIssue | None]

"""
Roast rule registry.

Built-in rules live one per module and expose a module-level ``RULE``.
Additional rules can be registered by other packages through the
``gh_roast.rules`` entry-point group, either as a RoastRule or as a factory
returning one. Built-ins always run first and in the order listed below.
"""

from importlib import import_module
from importlib.metadata import entry_points

from gh_roast.rules.base import RoastRule, RuleContext

ENTRY_POINT_GROUP = "gh_roast.rules"

_BUILTIN_MODULES = [
    "gh_roast.rules.abandoned_repos",
    "gh_roast.rules.activity_gaps",
    "gh_roast.rules.fork_heavy",
    "gh_roast.rules.language_spread",
    "gh_roast.rules.low_engagement",
    "gh_roast.rules.no_documentation",
    "gh_roast.rules.cyclomatic_complexity",
    "gh_roast.rules.slow_repo",
]


def _load_builtin_rules() -> list[RoastRule]:
    rules = []
    for module_path in _BUILTIN_MODULES:
        module = import_module(module_path)
        rule = getattr(module, "RULE", None)
        if isinstance(rule, RoastRule):
            rules.append(rule)
    return rules


def _load_entrypoint_rules() -> list[RoastRule]:
    rules = []
    for entry_point in entry_points(group=ENTRY_POINT_GROUP):
        loaded = entry_point.load()
        if isinstance(loaded, RoastRule):
            rules.append(loaded)
        elif callable(loaded):
            produced = loaded()
            if isinstance(produced, RoastRule):
                rules.append(produced)
    return rules


def load_rules() -> list[RoastRule]:
    """Built-in rules followed by plugin rules; a plugin cannot reuse a built-in id."""
    rules = _load_builtin_rules()
    seen = {rule.id for rule in rules}
    for rule in _load_entrypoint_rules():
        if rule.id in seen:
            continue
        rules.append(rule)
        seen.add(rule.id)
    return rules


__all__ = ["RoastRule", "RuleContext", "load_rules"]

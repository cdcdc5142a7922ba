"""
Small numeric, date and string helpers shared by detectors, metrics and rules.
"""

import math
import re
from datetime import datetime, timezone

SECONDS_PER_DAY = 24 * 60 * 60

_USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9](?:[a-zA-Z0-9\-]{0,37}[a-zA-Z0-9])?$")


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with halves going up (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def days_between(first: datetime, second: datetime) -> int:
    """
    Whole days between two instants, ignoring direction.

    Args:
        first: First instant.
        second: Second instant.

    Returns:
        Floor of the absolute difference in days.
    """
    delta = abs((second - first).total_seconds())
    return int(delta // SECONDS_PER_DAY)


def percentage(part: float, total: float) -> float:
    """Percentage of ``part`` in ``total`` with two decimal places (0 if total is 0)."""
    if total == 0:
        return 0
    return round_half_up(part / total * 10000) / 100


def parse_datetime(value: str | datetime | None) -> datetime | None:
    """
    Parse an ISO-8601 timestamp into a timezone-aware UTC datetime.

    Accepts GitHub's trailing ``Z`` notation. Naive values are assumed to be UTC.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def sanitize_username(username: str) -> str:
    """Strip everything but letters, digits and dashes (for console output)."""
    return re.sub(r"[^a-zA-Z0-9\-]", "", username)


def is_valid_github_username(username: str) -> bool:
    """Check a login against GitHub's username rules (1-39 chars, inner dashes only)."""
    return bool(_USERNAME_PATTERN.match(username))

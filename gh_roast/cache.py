"""
Cache management for gh-roast.

Keeps finished roast reports in a gzip JSON file so repeated runs for the same
user within the TTL skip the GitHub round-trips.
"""

import gzip
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from gh_roast.config import get_cache_dir, get_cache_ttl

CACHE_FILE_NAME = "reports.json.gz"


def _get_cache_path() -> Path:
    return get_cache_dir() / CACHE_FILE_NAME


def _cache_key(username: str) -> str:
    return username.lower()


def _read_cache_file() -> dict[str, Any]:
    """Read all entries; a missing or corrupted file reads as empty."""
    cache_path = _get_cache_path()
    if not cache_path.exists():
        return {}
    try:
        with gzip.open(cache_path, "rt", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError, EOFError):
        return {}
    return data if isinstance(data, dict) else {}


def _write_cache_file(data: dict[str, Any]) -> None:
    cache_dir = get_cache_dir()
    cache_dir.mkdir(parents=True, exist_ok=True)
    with gzip.open(_get_cache_path(), "wt", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False, sort_keys=True)


def is_cache_valid(entry: dict[str, Any], expected_version: str) -> bool:
    """
    Check if a cache entry is still valid based on TTL and analysis version.

    Args:
        entry: Cache entry dict with cache_metadata and analysis_version.
        expected_version: Expected analysis_version string.

    Returns:
        True if cache is valid (within TTL and version matches), False otherwise.
    """
    if entry.get("analysis_version") != expected_version:
        return False

    metadata = entry.get("cache_metadata")
    if not metadata or "fetched_at" not in metadata:
        return False

    try:
        fetched_at = datetime.fromisoformat(metadata["fetched_at"])
        ttl_seconds = metadata.get("ttl_seconds", get_cache_ttl())

        # Make fetched_at timezone-aware if it isn't
        if fetched_at.tzinfo is None:
            fetched_at = fetched_at.replace(tzinfo=timezone.utc)

        now = datetime.now(timezone.utc)
        age_seconds = (now - fetched_at).total_seconds()

        return age_seconds < ttl_seconds
    except (ValueError, TypeError):
        # Invalid datetime format
        return False


def load_cached_report(
    username: str, expected_version: str
) -> dict[str, Any] | None:
    """
    Load a cached report for a user.

    Returns:
        The cached report dict (without cache bookkeeping), or None if absent or expired.
    """
    entry = _read_cache_file().get(_cache_key(username))
    if not entry or not is_cache_valid(entry, expected_version):
        return None
    return entry.get("report")


def save_cached_report(
    username: str, report: dict[str, Any], analysis_version: str
) -> None:
    """
    Save a report for a user, replacing any previous entry.

    Args:
        username: GitHub login (case-insensitive key).
        report: Report dict as produced by RoastReport.to_dict().
        analysis_version: Version stamp checked on load.
    """
    data = _read_cache_file()
    data[_cache_key(username)] = {
        "analysis_version": analysis_version,
        "cache_metadata": {
            "fetched_at": datetime.now(timezone.utc).isoformat(),
            "ttl_seconds": get_cache_ttl(),
            "source": "github",
        },
        "report": report,
    }
    _write_cache_file(data)


def clear_cache(username: str | None = None) -> int:
    """
    Clear one user's cached report, or the whole cache.

    Returns:
        Number of entries removed.
    """
    cache_path = _get_cache_path()
    if not cache_path.exists():
        return 0

    data = _read_cache_file()
    if username is None:
        cache_path.unlink()
        return len(data)

    if data.pop(_cache_key(username), None) is None:
        return 0
    _write_cache_file(data)
    return 1


def get_cache_stats(expected_version: str | None = None) -> dict[str, Any]:
    """
    Get cache statistics.

    Args:
        expected_version: Expected analysis_version to check validity.
            If None, only the TTL is checked.

    Returns:
        Dictionary with cache statistics.
    """
    cache_dir = get_cache_dir()
    if not _get_cache_path().exists():
        return {
            "cache_dir": str(cache_dir),
            "exists": False,
            "total_entries": 0,
            "valid_entries": 0,
            "expired_entries": 0,
        }

    data = _read_cache_file()
    valid_entries = sum(
        1
        for entry in data.values()
        if is_cache_valid(
            entry,
            entry.get("analysis_version")
            if expected_version is None
            else expected_version,
        )
    )
    return {
        "cache_dir": str(cache_dir),
        "exists": True,
        "total_entries": len(data),
        "valid_entries": valid_entries,
        "expired_entries": len(data) - valid_entries,
    }

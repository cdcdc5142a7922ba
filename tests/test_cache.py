"""
Tests for the report cache.
"""

import gzip
import json
from datetime import datetime, timedelta, timezone

import pytest

from gh_roast.cache import (
    _get_cache_path,
    clear_cache,
    get_cache_stats,
    is_cache_valid,
    load_cached_report,
    save_cached_report,
)
from gh_roast.config import set_cache_ttl
from gh_roast.core import ANALYSIS_VERSION

REPORT = {"username": "octocat", "overall_score": 42, "roasts": []}


def _entry(age_seconds: int, ttl: int = 3600, version: str = ANALYSIS_VERSION) -> dict:
    fetched_at = datetime.now(timezone.utc) - timedelta(seconds=age_seconds)
    return {
        "analysis_version": version,
        "cache_metadata": {"fetched_at": fetched_at.isoformat(), "ttl_seconds": ttl},
        "report": REPORT,
    }


class TestIsCacheValid:
    """Test is_cache_valid."""

    def test_fresh_entry(self):
        """Test an entry within its TTL."""
        assert is_cache_valid(_entry(10), ANALYSIS_VERSION) is True

    def test_expired_entry(self):
        """Test an entry past its TTL."""
        assert is_cache_valid(_entry(4000), ANALYSIS_VERSION) is False

    def test_version_mismatch(self):
        """Test an entry from another analysis version."""
        assert is_cache_valid(_entry(10, version="0.9"), ANALYSIS_VERSION) is False

    def test_missing_metadata(self):
        """Test entries without metadata or with a broken timestamp."""
        assert is_cache_valid({"analysis_version": ANALYSIS_VERSION}, ANALYSIS_VERSION) is False
        broken = _entry(10)
        broken["cache_metadata"]["fetched_at"] = "yesterday"
        assert is_cache_valid(broken, ANALYSIS_VERSION) is False


class TestReportCache:
    """Test saving, loading and clearing cached reports."""

    def test_round_trip_case_insensitive(self):
        """Test a saved report loads back under any username case."""
        save_cached_report("OctoCat", REPORT, ANALYSIS_VERSION)
        assert load_cached_report("octocat", ANALYSIS_VERSION) == REPORT
        assert load_cached_report("OCTOCAT", ANALYSIS_VERSION) == REPORT

    def test_version_is_required(self):
        """Test callers must state which analysis version they expect."""
        with pytest.raises(TypeError):
            load_cached_report("octocat")
        with pytest.raises(TypeError):
            save_cached_report("octocat", REPORT)

    def test_missing_user(self):
        """Test an unknown user is a cache miss."""
        assert load_cached_report("nobody", ANALYSIS_VERSION) is None

    def test_expired_report(self):
        """Test a report saved with a zero TTL is never served."""
        set_cache_ttl(0)
        save_cached_report("octocat", REPORT, ANALYSIS_VERSION)
        assert load_cached_report("octocat", ANALYSIS_VERSION) is None

    def test_version_mismatch(self):
        """Test reports from another analysis version are ignored."""
        save_cached_report("octocat", REPORT, analysis_version="0.9")
        assert load_cached_report("octocat", ANALYSIS_VERSION) is None

    def test_corrupted_file(self):
        """Test a corrupted cache file reads as empty."""
        path = _get_cache_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"not gzip")
        assert load_cached_report("octocat", ANALYSIS_VERSION) is None

    def test_file_format(self):
        """Test the cache file is gzip JSON keyed by lowercase username."""
        save_cached_report("OctoCat", REPORT, ANALYSIS_VERSION)
        with gzip.open(_get_cache_path(), "rt", encoding="utf-8") as f:
            data = json.load(f)
        assert list(data) == ["octocat"]
        assert data["octocat"]["analysis_version"] == ANALYSIS_VERSION
        assert data["octocat"]["cache_metadata"]["source"] == "github"

    def test_clear_single_user(self):
        """Test clearing one user keeps the others."""
        save_cached_report("alice", REPORT, ANALYSIS_VERSION)
        save_cached_report("bob", REPORT, ANALYSIS_VERSION)
        assert clear_cache("Alice") == 1
        assert load_cached_report("alice", ANALYSIS_VERSION) is None
        assert load_cached_report("bob", ANALYSIS_VERSION) == REPORT
        assert clear_cache("alice") == 0

    def test_clear_everything(self):
        """Test clearing the whole cache."""
        save_cached_report("alice", REPORT, ANALYSIS_VERSION)
        save_cached_report("bob", REPORT, ANALYSIS_VERSION)
        assert clear_cache() == 2
        assert not _get_cache_path().exists()
        assert clear_cache() == 0


class TestCacheStats:
    """Test get_cache_stats."""

    def test_no_cache(self):
        """Test stats before anything is cached."""
        stats = get_cache_stats(ANALYSIS_VERSION)
        assert stats["exists"] is False
        assert stats["total_entries"] == 0

    def test_valid_and_expired(self):
        """Test entries are split into valid and expired."""
        save_cached_report("alice", REPORT, ANALYSIS_VERSION)
        save_cached_report("bob", REPORT, analysis_version="0.9")
        stats = get_cache_stats(ANALYSIS_VERSION)
        assert stats["exists"] is True
        assert stats["total_entries"] == 2
        assert stats["valid_entries"] == 1
        assert stats["expired_entries"] == 1

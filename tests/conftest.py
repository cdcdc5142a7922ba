"""Shared fixtures for gh-roast tests."""

from datetime import datetime, timedelta, timezone

import pytest

from gh_roast import config
from gh_roast.models import RepositoryMetrics, UserProfile
from gh_roast.user_metrics import calculate_user_metrics

NOW = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


def _repo(name: str = "repo", **overrides) -> RepositoryMetrics:
    """Active, documented, simple repository unless overridden."""
    fields = {
        "name": name,
        "is_fork": False,
        "is_archived": False,
        "created_at": NOW - timedelta(days=100),
        "last_commit_at": NOW - timedelta(days=1),
        "commit_count": 10,
        "language": "Python",
        "languages": {"Python": 1000},
        "file_count": 1,
        "average_file_size": 0,
        "longest_file_size": 0,
        "cyclomatic_complexity": 1,
        "duplicate_percentage": 0,
        "readme_present": True,
        "readme_quality": "good",
        "pr_count": 0,
        "issue_count": 0,
        "star_count": 0,
        "fork_count": 0,
    }
    fields.update(overrides)
    return RepositoryMetrics(**fields)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def profile():
    return UserProfile(login="octocat", created_at=NOW - timedelta(days=3000))


@pytest.fixture
def make_repo():
    """Factory for RepositoryMetrics with sensible defaults."""
    return _repo


@pytest.fixture
def make_user_metrics(profile):
    """Factory aggregating repositories, then overriding selected fields."""

    def _make(repositories=None, **overrides):
        repos = repositories if repositories is not None else [_repo()]
        metrics = calculate_user_metrics(profile, repos, now=NOW)
        return metrics._replace(**overrides) if overrides else metrics

    return _make


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Keep runtime overrides and the cache directory local to each test."""
    monkeypatch.setattr(config, "_CACHE_DIR", tmp_path / "cache")
    monkeypatch.setattr(config, "_CACHE_TTL", None)
    monkeypatch.setattr(config, "_MAX_CONCURRENCY", None)
    monkeypatch.setattr(config, "VERIFY_SSL", True)
    monkeypatch.delenv("GH_ROAST_CACHE_DIR", raising=False)
    monkeypatch.delenv("GH_ROAST_CACHE_TTL", raising=False)
    monkeypatch.delenv("GH_ROAST_MAX_CONCURRENCY", raising=False)
    monkeypatch.delenv("GH_ROAST_TIMEOUT", raising=False)

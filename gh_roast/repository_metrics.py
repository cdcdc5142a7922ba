"""
Per-repository metrics.

Turns a repository record plus its commit history, README text and language
breakdown into a RepositoryMetrics entry. A failed fetch never aborts the
analysis: the repository degrades to a minimal record built from the fields
the repository listing already provided.
"""

from collections.abc import Sequence

from rich.console import Console

from gh_roast.detectors import (
    detect_readme_quality,
    estimate_cyclomatic_complexity,
    estimate_duplication,
)
from gh_roast.github_client import GitHubClient
from gh_roast.models import Commit, RepositoryMetrics, RepositoryRecord
from gh_roast.utils import round_half_up

console = Console(stderr=True)


def _primary_language(languages: dict[str, int], declared: str | None) -> str | None:
    """Language with the most bytes; the declared language when the breakdown is empty."""
    if not languages:
        return declared
    ranked = sorted(languages.items(), key=lambda item: item[1], reverse=True)
    return ranked[0][0]


def build_repository_metrics(
    repo: RepositoryRecord,
    commits: Sequence[Commit],
    total_commits: int,
    readme: str | None,
    languages: dict[str, int],
) -> RepositoryMetrics:
    """
    Derive metrics from already-fetched repository data.

    Args:
        repo: Repository record from the listing
        commits: Commit history, newest first
        total_commits: Total commit count reported by GitHub
        readme: README text, or None when there is none
        languages: Language -> bytes breakdown

    Returns:
        RepositoryMetrics for the repository
    """
    last_commit_at = commits[0].date if commits else None

    # Size-based proxies: roughly one "file" per 10 KB
    size = repo.size_kb
    complexity = estimate_cyclomatic_complexity(size / 10 or 1)
    file_count = max(1, round_half_up(size / 10))
    average_file_size = round_half_up(size / max(1, size / 10)) if size > 0 else 0

    return RepositoryMetrics(
        name=repo.name,
        is_fork=repo.is_fork,
        is_archived=repo.is_archived,
        created_at=repo.created_at,
        last_commit_at=last_commit_at,
        commit_count=total_commits,
        language=_primary_language(languages, repo.language),
        languages=dict(languages),
        file_count=file_count,
        average_file_size=average_file_size,
        longest_file_size=size,
        cyclomatic_complexity=complexity.estimated,
        duplicate_percentage=estimate_duplication([readme] if readme else []),
        readme_present=bool(readme),
        readme_quality=detect_readme_quality(readme),
        pr_count=repo.pull_request_count,
        issue_count=repo.issue_count,
        star_count=repo.star_count,
        fork_count=repo.fork_count,
    )


def fallback_repository_metrics(repo: RepositoryRecord) -> RepositoryMetrics:
    """Minimal metrics from listing fields only; everything fetched separately is zeroed."""
    return RepositoryMetrics(
        name=repo.name,
        is_fork=repo.is_fork,
        is_archived=repo.is_archived,
        created_at=repo.created_at,
        last_commit_at=repo.pushed_at,
        commit_count=0,
        language=repo.language,
        languages={},
        file_count=1,
        average_file_size=repo.size_kb,
        longest_file_size=repo.size_kb,
        cyclomatic_complexity=0,
        duplicate_percentage=0,
        readme_present=False,
        readme_quality="missing",
        pr_count=repo.pull_request_count,
        issue_count=repo.issue_count,
        star_count=repo.star_count,
        fork_count=repo.fork_count,
    )


async def calculate_repository_metrics(
    repo: RepositoryRecord, username: str, client: GitHubClient
) -> RepositoryMetrics:
    """
    Fetch commit history, README and languages for one repository and derive its metrics.

    Any failure falls back to fallback_repository_metrics() so one repository
    cannot abort the analysis of the others.
    """
    try:
        commits, total_commits = await client.get_commit_history(username, repo.name)
        readme = await client.get_readme(username, repo.name)
        languages = await client.get_languages(username, repo.name)
        return build_repository_metrics(repo, commits, total_commits, readme, languages)
    except Exception as e:
        console.print(
            f"  [yellow]⚠️  Metrics for {repo.name} incomplete, using repository summary: {e}[/yellow]"
        )
        return fallback_repository_metrics(repo)

"""
GitHub client for gh-roast.

Fetches a user's profile, owned repositories, commit history, README text and
language breakdown using the GitHub GraphQL and REST APIs, and normalizes the
responses into the records consumed by the analysis pipeline.
"""

import base64
from typing import Any, NamedTuple

import httpx
from dotenv import load_dotenv

from gh_roast.config import get_github_token
from gh_roast.http_client import _get_async_http_client
from gh_roast.models import Commit, RepositoryRecord, UserProfile
from gh_roast.utils import parse_datetime

# Load environment variables
load_dotenv()

# GitHub API endpoints
GITHUB_API = "https://api.github.com"
GITHUB_GRAPHQL_API = "https://api.github.com/graphql"

# Commit history pages (100 commits each) fetched per repository
MAX_COMMIT_PAGES = 10

USER_REPOSITORIES_QUERY = """
query GetUserRepositories($login: String!, $after: String) {
  user(login: $login) {
    repositories(first: 100, after: $after, affiliations: OWNER) {
      nodes {
        name
        description
        createdAt
        pushedAt
        isFork
        isArchived
        diskUsage
        forkCount
        stargazerCount
        primaryLanguage {
          name
        }
        issues(states: [OPEN, CLOSED]) {
          totalCount
        }
        pullRequests(states: [OPEN, CLOSED, MERGED]) {
          totalCount
        }
      }
      pageInfo {
        hasNextPage
        endCursor
      }
      totalCount
    }
  }
}
"""

COMMIT_HISTORY_QUERY = """
query GetCommitHistory($owner: String!, $name: String!, $after: String) {
  repository(owner: $owner, name: $name) {
    defaultBranchRef {
      target {
        ... on Commit {
          history(first: 100, after: $after) {
            edges {
              node {
                committedDate
                author {
                  name
                }
                messageHeadline
              }
            }
            pageInfo {
              hasNextPage
              endCursor
            }
            totalCount
          }
        }
      }
    }
  }
}
"""


class GitHubAPIError(Exception):
    """Raised when the GitHub API returns an error the client cannot recover from."""


class UserNotFoundError(GitHubAPIError, ValueError):
    """Raised when a user profile does not exist or cannot be fetched."""


class RateLimitError(GitHubAPIError):
    """Raised when the GitHub API rate limit has been exhausted."""


class MissingTokenError(ValueError):
    """Raised when no GitHub token is configured."""


class RateLimitStatus(NamedTuple):
    remaining: int
    limit: int
    reset: int  # Epoch seconds


def _is_rate_limited(response: httpx.Response) -> bool:
    if response.status_code not in (403, 429):
        return False
    if response.headers.get("x-ratelimit-remaining") == "0":
        return True
    return "rate limit" in response.text.lower()


class GitHubClient:
    """GitHub API client used by the roast pipeline."""

    def __init__(self, token: str | None = None):
        """
        Initialize the GitHub client.

        Args:
            token: GitHub Personal Access Token. If not provided, reads from
                   GITHUB_TOKEN environment variable.

        Raises:
            MissingTokenError: If token is not provided and GITHUB_TOKEN env var is not set
        """
        self.token = token or get_github_token()
        if not self.token:
            raise MissingTokenError(
                "GITHUB_TOKEN is required to query GitHub.\n"
                "\n"
                "To get started:\n"
                "1. Create a GitHub Personal Access Token (classic):\n"
                "   -> https://github.com/settings/tokens/new\n"
                "2. No scopes are needed for public data\n"
                "3. Set the token:\n"
                "   export GITHUB_TOKEN='your_token_here'  # Linux/macOS\n"
                "   or add to your .env file: GITHUB_TOKEN=your_token_here\n"
            )

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"bearer {self.token}",
            "Accept": "application/vnd.github+json",
        }

    async def _rest_get(self, path: str) -> httpx.Response:
        """
        GET a REST endpoint.

        Raises:
            RateLimitError: If the rate limit is exhausted
            httpx.HTTPError: On transport errors
        """
        client = await _get_async_http_client()
        response = await client.get(f"{GITHUB_API}{path}", headers=self._headers())
        if _is_rate_limited(response):
            raise RateLimitError("GitHub API rate limit exceeded.")
        return response

    async def _query_graphql(
        self, query: str, variables: dict[str, Any]
    ) -> dict[str, Any]:
        """
        Execute GraphQL query against GitHub API.

        Args:
            query: GraphQL query string
            variables: Query variables

        Returns:
            Response data dictionary

        Raises:
            RateLimitError: If the rate limit is exhausted
            GitHubAPIError: If the API reports errors
            httpx.HTTPStatusError: If the API returns an error status
        """
        client = await _get_async_http_client()
        response = await client.post(
            GITHUB_GRAPHQL_API,
            json={"query": query, "variables": variables},
            headers=self._headers(),
        )
        if _is_rate_limited(response):
            raise RateLimitError("GitHub API rate limit exceeded.")
        response.raise_for_status()
        data = response.json()

        errors = data.get("errors")
        if errors:
            if any(error.get("type") == "RATE_LIMITED" for error in errors):
                raise RateLimitError("GitHub API rate limit exceeded.")
            # A missing user is reported as NOT_FOUND with null data
            if any(error.get("type") == "NOT_FOUND" for error in errors):
                return data.get("data") or {}
            raise GitHubAPIError(f"GitHub API Errors: {errors[0].get('message')}")

        return data.get("data") or {}

    async def get_user(self, login: str) -> UserProfile:
        """
        Fetch a user profile.

        Raises:
            UserNotFoundError: If the user does not exist or the profile cannot be fetched
            RateLimitError: If the rate limit is exhausted
        """
        try:
            response = await self._rest_get(f"/users/{login}")
        except httpx.HTTPError as e:
            raise UserNotFoundError(f"Failed to fetch user: {login}") from e

        if response.status_code != 200:
            raise UserNotFoundError(f"Failed to fetch user: {login}")

        try:
            data = response.json()
            return UserProfile(
                login=data["login"],
                created_at=parse_datetime(data["created_at"]),
                name=data.get("name"),
                public_repos=data.get("public_repos", 0),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise UserNotFoundError(f"Failed to fetch user: {login}") from e

    async def get_user_repositories(self, login: str) -> list[RepositoryRecord]:
        """
        Fetch all repositories owned by a user, following pagination.

        Raises:
            UserNotFoundError: If GitHub reports no such user
            GitHubAPIError: If a page cannot be fetched
        """
        repositories: list[RepositoryRecord] = []
        after: str | None = None

        while True:
            try:
                data = await self._query_graphql(
                    USER_REPOSITORIES_QUERY, {"login": login, "after": after}
                )
            except httpx.HTTPError as e:
                raise GitHubAPIError(
                    f"Failed to fetch repositories for {login}: {e}"
                ) from e

            user = data.get("user")
            if user is None:
                raise UserNotFoundError(f"Failed to fetch user: {login}")

            page = user.get("repositories") or {}
            repositories.extend(
                self._normalize_repository(node) for node in page.get("nodes", [])
            )

            page_info = page.get("pageInfo") or {}
            if not page_info.get("hasNextPage"):
                break
            after = page_info.get("endCursor")

        return repositories

    async def get_commit_history(
        self, owner: str, repo: str
    ) -> tuple[list[Commit], int]:
        """
        Fetch the default-branch commit history, newest first.

        Best effort: a failing page stops pagination and whatever was gathered
        so far is returned. At most MAX_COMMIT_PAGES pages are fetched.

        Returns:
            Tuple of (commits, total commit count reported by GitHub)
        """
        commits: list[Commit] = []
        total_count = 0
        after: str | None = None

        for _page in range(MAX_COMMIT_PAGES):
            try:
                data = await self._query_graphql(
                    COMMIT_HISTORY_QUERY, {"owner": owner, "name": repo, "after": after}
                )
            except RateLimitError:
                raise
            except (GitHubAPIError, httpx.HTTPError):
                break

            repository = data.get("repository") or {}
            branch = repository.get("defaultBranchRef") or {}
            history = (branch.get("target") or {}).get("history")
            if not history:
                break

            total_count = history.get("totalCount", 0)
            for edge in history.get("edges", []):
                node = edge.get("node") or {}
                date = parse_datetime(node.get("committedDate"))
                if date is None:
                    continue
                author = node.get("author") or {}
                commits.append(
                    Commit(
                        date=date,
                        author=author.get("name"),
                        message=node.get("messageHeadline") or "",
                    )
                )

            page_info = history.get("pageInfo") or {}
            if not page_info.get("hasNextPage"):
                break
            after = page_info.get("endCursor")

        return commits, total_count

    async def get_readme(self, owner: str, repo: str) -> str | None:
        """Fetch README.md text, or None if it is missing or unreadable."""
        try:
            response = await self._rest_get(f"/repos/{owner}/{repo}/contents/README.md")
        except (RateLimitError, httpx.HTTPError):
            return None
        if response.status_code != 200:
            return None

        try:
            data = response.json()
            if not isinstance(data, dict) or data.get("type") != "file":
                return None
            content = data.get("content")
            if not content:
                return None
            return base64.b64decode(content).decode("utf-8", errors="replace")
        except ValueError:
            return None

    async def get_languages(self, owner: str, repo: str) -> dict[str, int]:
        """Fetch the language -> bytes breakdown, or {} on any error."""
        try:
            response = await self._rest_get(f"/repos/{owner}/{repo}/languages")
        except (RateLimitError, httpx.HTTPError):
            return {}
        if response.status_code != 200:
            return {}

        try:
            data = response.json()
        except ValueError:
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(name): int(size) for name, size in data.items()}

    async def get_rate_limit(self) -> RateLimitStatus:
        """Fetch the core REST rate limit, or zeros if it cannot be read."""
        try:
            response = await self._rest_get("/rate_limit")
            response.raise_for_status()
            core = response.json()["resources"]["core"]
            return RateLimitStatus(
                remaining=core["remaining"], limit=core["limit"], reset=core["reset"]
            )
        except (GitHubAPIError, httpx.HTTPError, KeyError, ValueError):
            return RateLimitStatus(remaining=0, limit=0, reset=0)

    @staticmethod
    def _normalize_repository(node: dict[str, Any]) -> RepositoryRecord:
        """
        Normalize a GraphQL repository node into a RepositoryRecord.

        Args:
            node: Repository node from the GraphQL response

        Returns:
            RepositoryRecord with counts defaulting to 0
        """
        primary_language = node.get("primaryLanguage")
        created_at = parse_datetime(node.get("createdAt"))
        return RepositoryRecord(
            name=node["name"],
            created_at=created_at,
            pushed_at=parse_datetime(node.get("pushedAt")),
            is_fork=node.get("isFork", False),
            is_archived=node.get("isArchived", False),
            size_kb=node.get("diskUsage") or 0,
            language=primary_language.get("name") if primary_language else None,
            issue_count=(node.get("issues") or {}).get("totalCount", 0),
            pull_request_count=(node.get("pullRequests") or {}).get("totalCount", 0),
            star_count=node.get("stargazerCount", 0),
            fork_count=node.get("forkCount", 0),
            description=node.get("description"),
        )

"""
Configuration management for gh-roast.

Settings are resolved in this order:
1. Explicit values set at runtime (CLI flags)
2. Environment variables (GH_ROAST_*)
3. .gh-roast.toml (local config)
4. pyproject.toml (project-level config)
5. Built-in defaults
"""

import os
import tomllib
from pathlib import Path
from typing import Any

# project_root is the parent directory of gh_roast/
PROJECT_ROOT = Path(__file__).resolve().parent.parent

# Global configuration for SSL verification
# Default: True (verify SSL certificates)
# Can be set to False by CLI --insecure flag
VERIFY_SSL = True

# Cache configuration
# Default cache directory: ~/.cache/gh-roast
DEFAULT_CACHE_DIR = Path.home() / ".cache" / "gh-roast"
# Default TTL: 1 hour (in seconds)
DEFAULT_CACHE_TTL = 60 * 60

# Per-repository fetch tasks running at once
DEFAULT_MAX_CONCURRENCY = 10
# HTTP request timeout (seconds)
DEFAULT_TIMEOUT = 30.0

# Global settings (can be overridden)
_CACHE_DIR: Path | None = None
_CACHE_TTL: int | None = None
_MAX_CONCURRENCY: int | None = None


def load_config_file(config_path: Path) -> dict:
    """Load a TOML configuration file."""
    if not config_path.exists():
        return {}
    try:
        with open(config_path, "rb") as f:
            return tomllib.load(f)
    except Exception as e:
        raise ValueError(f"Failed to load config from {config_path}: {e}") from e


def get_tool_config() -> dict[str, Any]:
    """
    Return the [tool.gh-roast] table.

    .gh-roast.toml takes priority; pyproject.toml is only read when the local
    config file does not exist.
    """
    local_config_path = PROJECT_ROOT / ".gh-roast.toml"
    if local_config_path.exists():
        config = load_config_file(local_config_path)
        return config.get("tool", {}).get("gh-roast", {})

    pyproject_path = PROJECT_ROOT / "pyproject.toml"
    if pyproject_path.exists():
        config = load_config_file(pyproject_path)
        return config.get("tool", {}).get("gh-roast", {})

    return {}


def _get_cache_config() -> dict[str, Any]:
    return get_tool_config().get("cache", {})


def set_verify_ssl(verify: bool) -> None:
    """
    Set the SSL verification setting globally.

    Args:
        verify: Whether to verify SSL certificates.
    """
    global VERIFY_SSL
    VERIFY_SSL = verify


def get_verify_ssl() -> bool:
    """Get the current SSL verification setting."""
    return VERIFY_SSL


def get_github_token() -> str | None:
    """Return the GitHub token from the environment (``.env`` is loaded by the client)."""
    token = os.getenv("GITHUB_TOKEN")
    return token or None


def get_cache_dir() -> Path:
    """
    Get the cache directory path.

    Priority:
    1. Explicitly set value via set_cache_dir()
    2. GH_ROAST_CACHE_DIR environment variable
    3. [tool.gh-roast.cache] directory
    4. Default: ~/.cache/gh-roast

    Returns:
        Path to the cache directory.
    """
    if _CACHE_DIR is not None:
        return _CACHE_DIR

    env_cache_dir = os.getenv("GH_ROAST_CACHE_DIR")
    if env_cache_dir:
        return Path(env_cache_dir).expanduser()

    cache_config = _get_cache_config()
    if "directory" in cache_config:
        return Path(cache_config["directory"]).expanduser()

    return DEFAULT_CACHE_DIR


def set_cache_dir(path: Path | str) -> None:
    """
    Set the cache directory path explicitly.

    Args:
        path: Path to the cache directory.
    """
    global _CACHE_DIR
    _CACHE_DIR = Path(path).expanduser()


def get_cache_ttl() -> int:
    """
    Get the cache TTL (Time To Live) in seconds.

    Priority:
    1. Explicitly set value via set_cache_ttl()
    2. GH_ROAST_CACHE_TTL environment variable
    3. [tool.gh-roast.cache] ttl_seconds
    4. Default: 3600 (1 hour)

    Returns:
        TTL in seconds.
    """
    if _CACHE_TTL is not None:
        return _CACHE_TTL

    env_cache_ttl = os.getenv("GH_ROAST_CACHE_TTL")
    if env_cache_ttl:
        try:
            return int(env_cache_ttl)
        except ValueError:
            pass

    cache_config = _get_cache_config()
    if "ttl_seconds" in cache_config:
        return int(cache_config["ttl_seconds"])

    return DEFAULT_CACHE_TTL


def set_cache_ttl(seconds: int) -> None:
    """
    Set the cache TTL (Time To Live) explicitly.

    Args:
        seconds: TTL in seconds.
    """
    global _CACHE_TTL
    _CACHE_TTL = seconds


def is_cache_enabled() -> bool:
    """
    Check if the report cache is enabled.

    Priority:
    1. [tool.gh-roast.cache] enabled
    2. Default: True
    """
    cache_config = _get_cache_config()
    if "enabled" in cache_config:
        return bool(cache_config["enabled"])
    return True


def get_max_concurrency() -> int:
    """
    Get the number of repositories analyzed concurrently.

    Priority:
    1. Explicitly set value via set_max_concurrency()
    2. GH_ROAST_MAX_CONCURRENCY environment variable
    3. [tool.gh-roast] max_concurrency
    4. Default: 10
    """
    if _MAX_CONCURRENCY is not None:
        return _MAX_CONCURRENCY

    env_value = os.getenv("GH_ROAST_MAX_CONCURRENCY")
    if env_value:
        try:
            return max(1, int(env_value))
        except ValueError:
            pass

    tool_config = get_tool_config()
    if "max_concurrency" in tool_config:
        return max(1, int(tool_config["max_concurrency"]))

    return DEFAULT_MAX_CONCURRENCY


def set_max_concurrency(value: int) -> None:
    """Set the number of concurrent repository tasks explicitly (minimum 1)."""
    global _MAX_CONCURRENCY
    _MAX_CONCURRENCY = max(1, value)


def get_request_timeout() -> float:
    """
    Get the HTTP request timeout in seconds.

    Priority:
    1. GH_ROAST_TIMEOUT environment variable
    2. [tool.gh-roast] timeout
    3. Default: 30
    """
    env_value = os.getenv("GH_ROAST_TIMEOUT")
    if env_value:
        try:
            return float(env_value)
        except ValueError:
            pass

    tool_config = get_tool_config()
    if "timeout" in tool_config:
        return float(tool_config["timeout"])

    return DEFAULT_TIMEOUT

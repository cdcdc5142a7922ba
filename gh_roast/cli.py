"""
Command-line interface for gh-roast.
"""

import json
from pathlib import Path
from typing import Any

import httpx
import typer
from rich.console import Console
from rich.table import Table

from gh_roast.cache import clear_cache, get_cache_stats, load_cached_report, save_cached_report
from gh_roast.config import (
    is_cache_enabled,
    set_cache_dir,
    set_cache_ttl,
    set_max_concurrency,
    set_verify_ssl,
)
from gh_roast.core import ANALYSIS_VERSION, InvalidUsernameError, analyze_user_sync
from gh_roast.github_client import (
    GitHubAPIError,
    MissingTokenError,
    RateLimitError,
    UserNotFoundError,
)

# --- Typer App ---
app = typer.Typer(help="Roast a GitHub user's public repositories.")
console = Console()

SEVERITY_STYLES = {"critical": "bold red", "warning": "yellow", "info": "cyan"}

EXIT_API_ERROR = 1
EXIT_INVALID_USERNAME = 2
EXIT_USER_NOT_FOUND = 3
EXIT_RATE_LIMITED = 4

# --- Helper Functions ---


def _score_color(score: int) -> str:
    if score >= 60:
        return "red"
    if score >= 30:
        return "yellow"
    return "green"


def display_report(report: dict[str, Any], verbose: bool = False) -> None:
    """Display a roast report with rich tables."""
    metrics = report["metrics"]
    cache_note = " [dim](cached)[/dim]" if report.get("cache_hit") else ""
    console.print(f"\n🔥 [bold]Roast report for {report['username']}[/bold]{cache_note}")

    metrics_table = Table(title="Profile Metrics", show_header=True)
    metrics_table.add_column("Metric", style="cyan", no_wrap=True)
    metrics_table.add_column("Value", justify="right")
    metrics_table.add_row("Repositories", str(metrics["total_repos"]))
    metrics_table.add_row("Stars", str(metrics["total_stars"]))
    metrics_table.add_row("Commits", str(metrics["total_commits"]))
    metrics_table.add_row(
        "Primary languages", ", ".join(metrics["primary_languages"]) or "-"
    )
    metrics_table.add_row("Fork ratio", f"{metrics['fork_ratio']:.0%}")
    metrics_table.add_row("Abandonment", f"{metrics['abandonment_score']:.0%}")
    metrics_table.add_row("Code quality", f"{metrics['code_quality_score']:.0f}/100")
    metrics_table.add_row("Engagement", f"{metrics['engagement_score']:.0f}/100")
    console.print(metrics_table)

    if report["roasts"]:
        roast_table = Table(title="Roasts", show_header=True, header_style="bold magenta")
        roast_table.add_column("Severity", no_wrap=True)
        roast_table.add_column("Title", style="bold")
        roast_table.add_column("Message")
        if verbose:
            roast_table.add_column("Evidence", style="dim")

        for roast in report["roasts"]:
            style = SEVERITY_STYLES.get(roast["severity"], "white")
            row = [
                f"[{style}]{roast['severity'].upper()}[/{style}]",
                roast["title"],
                roast["message"],
            ]
            if verbose:
                row.append(
                    "\n".join(f"{key}: {value}" for key, value in roast["evidence"].items())
                )
            roast_table.add_row(*row)
        console.print(roast_table)
    else:
        console.print("[green]Nothing to roast. Impressive.[/green]")

    color = _score_color(report["overall_score"])
    console.print(
        f"\n[bold]Roast score:[/bold] [{color}]{report['overall_score']}/100[/{color}]"
    )
    console.print(f"[italic]{report['final_verdict']}[/italic]")


# --- Commands ---


@app.command()
def roast(
    username: str = typer.Argument(..., help="GitHub username to roast."),
    output_json: bool = typer.Option(
        False,
        "--json",
        help="Print the report as JSON instead of tables.",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Ignore any cached report and analyze again.",
    ),
    no_cache: bool = typer.Option(
        False,
        "--no-cache",
        help="Neither read nor write the report cache.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show progress and roast evidence.",
    ),
    insecure: bool = typer.Option(
        False,
        "--insecure",
        help="Disable SSL certificate verification for HTTPS requests.",
    ),
    cache_dir: Path | None = typer.Option(
        None,
        "--cache-dir",
        help="Cache directory (default: ~/.cache/gh-roast).",
    ),
    cache_ttl: int | None = typer.Option(
        None,
        "--cache-ttl",
        help="Cache TTL in seconds (default: 3600).",
    ),
    max_concurrency: int | None = typer.Option(
        None,
        "--max-concurrency",
        help="Repositories analyzed at once (default: 10).",
    ),
):
    """Analyze a GitHub user's repositories and print the roast."""
    set_verify_ssl(not insecure)
    if cache_dir is not None:
        set_cache_dir(cache_dir)
    if cache_ttl is not None:
        set_cache_ttl(cache_ttl)
    if max_concurrency is not None:
        set_max_concurrency(max_concurrency)

    use_cache = is_cache_enabled() and not no_cache

    report_data = None
    if use_cache and not force:
        cached = load_cached_report(username, ANALYSIS_VERSION)
        if cached is not None:
            report_data = {**cached, "cache_hit": True}
            if verbose:
                console.print(f"  -> Found [bold green]{username}[/bold green] in cache.")

    if report_data is None:
        try:
            report = analyze_user_sync(username, verbose=verbose)
        except InvalidUsernameError as e:
            console.print(f"[red]❌ {e}[/red]")
            raise typer.Exit(code=EXIT_INVALID_USERNAME)
        except UserNotFoundError:
            console.print(
                f"[red]❌ User not found: {username} does not exist or has a private profile.[/red]"
            )
            raise typer.Exit(code=EXIT_USER_NOT_FOUND)
        except RateLimitError:
            console.print(
                "[red]❌ GitHub API rate limit exceeded. Try again in a few minutes.[/red]"
            )
            raise typer.Exit(code=EXIT_RATE_LIMITED)
        except (GitHubAPIError, httpx.HTTPError) as e:
            console.print(f"[red]❌ GitHub API error: {e}[/red]")
            raise typer.Exit(code=EXIT_API_ERROR)
        except MissingTokenError as e:
            console.print(f"[red]❌ {e}[/red]")
            raise typer.Exit(code=EXIT_API_ERROR)

        report_data = report.to_dict()
        if use_cache:
            save_cached_report(username, report_data, ANALYSIS_VERSION)

    if output_json:
        typer.echo(json.dumps(report_data, indent=2, ensure_ascii=False, default=str))
    else:
        display_report(report_data, verbose=verbose)


@app.command()
def cache_stats():
    """Display cache statistics."""
    stats = get_cache_stats(ANALYSIS_VERSION)

    if not stats["exists"]:
        console.print(f"[yellow]No report cache found in: {stats['cache_dir']}[/yellow]")
        return

    console.print("[bold cyan]Cache Statistics[/bold cyan]")
    console.print(f"  Directory: {stats['cache_dir']}")
    console.print(f"  Total entries: {stats['total_entries']}")
    console.print(f"  Valid entries: [green]{stats['valid_entries']}[/green]")
    console.print(f"  Expired entries: [yellow]{stats['expired_entries']}[/yellow]")


@app.command(name="clear-cache")
def clear_cache_command(
    username: str | None = typer.Argument(
        None,
        help="Only clear this user's report, or omit to clear everything.",
    ),
):
    """Clear cached roast reports."""
    cleared = clear_cache(username)
    if cleared == 0:
        console.print("[dim]Nothing to clear.[/dim]")
    else:
        console.print(f"[green]✨ Cleared {cleared} cached report(s).[/green]")


if __name__ == "__main__":
    app()

"""CLI interface using Typer."""

import asyncio
import logging
import os
import traceback
from datetime import datetime, timezone
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from diffcritic import __version__
from diffcritic.cache import get_cache
from diffcritic.config import ConfigError, Settings, load_config
from diffcritic.diff import GitError, extract_branch_diff, extract_staged_diff
from diffcritic.models import Project, ReviewResult
from diffcritic.output import get_formatter
from diffcritic.progress import query_progress
from diffcritic.providers import (
  ProviderNotFoundError,
  ProviderRegistry,
  ProviderUnavailableError,
  ReviewProvider,
  get_provider,
)
from diffcritic.review import ReviewJobRunner, review_local_changes
from diffcritic.vcs import AdapterNotFoundError, VCSError
from diffcritic.vcs.base import split_remote

app = typer.Typer(
  name="diffcritic",
  help="LLM review of recent repository changes",
  no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)

TOKEN_ENV_VARS = {"github": "GITHUB_TOKEN", "gitlab": "GITLAB_TOKEN"}

KNOWN_ERRORS = (
  AdapterNotFoundError,
  ConfigError,
  GitError,
  ProviderNotFoundError,
  ProviderUnavailableError,
  VCSError,
)


def _is_debug() -> bool:
  return os.environ.get("DIFFCRITIC_DEBUG", "").lower() in ("1", "true", "yes")


def _setup_logging(verbose: bool, debug: bool) -> None:
  level = logging.DEBUG if debug else logging.INFO if verbose else logging.WARNING
  logging.basicConfig(
    level=level,
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(console=err_console, rich_tracebacks=debug, show_path=debug)],
    force=True,
  )
  # SDK request logs drown out our own at INFO
  for noisy in ("httpx", "httpcore", "openai", "anthropic"):
    logging.getLogger(noisy).setLevel(max(level, logging.WARNING))


def version_callback(value: bool) -> None:
  if value:
    console.print(f"diffcritic {__version__}")
    raise typer.Exit()


@app.callback()
def main(
  version: bool = typer.Option(
    None, "--version", "-V", callback=version_callback, is_eager=True,
    help="Show the version and exit",
  ),
) -> None:
  """Review recent code changes with an LLM."""


def _as_utc(value: datetime | None) -> datetime | None:
  if value is None or value.tzinfo is not None:
    return value
  return value.replace(tzinfo=timezone.utc)


def _load_provider(settings: Settings, provider: str | None, model: str | None) -> ReviewProvider:
  ProviderRegistry.load_all()
  return get_provider(provider or settings.provider, model or settings.model)


def _project_from_url(
  repo_url: str,
  repo_type: str,
  token: str | None,
  api_base_url: str | None,
  settings: Settings,
) -> Project:
  _, segments = split_remote(repo_url)
  return Project(
    id=repo_url,
    name="/".join(segments),
    repo_url=repo_url,
    repo_type=repo_type,
    token=token or os.environ.get(TOKEN_ENV_VARS.get(repo_type, "")),
    api_base_url=api_base_url,
    style_guide=settings.style_guide,
  )


async def _run_with_status(runner: ReviewJobRunner, project: Project, since, until) -> ReviewResult:
  """Run a job while a spinner mirrors its progress record."""
  with err_console.status("Preparing review") as status:
    task = asyncio.create_task(runner.run(project, since, until))
    while not task.done():
      view = query_progress(runner.progress, project.id)
      status.update(f"[{view['progress']}%] {view['message']}")
      await asyncio.wait({task}, timeout=0.2)
    return task.result()


def _emit(result: ReviewResult, format_type: str, exit_code: bool) -> None:
  formatter = get_formatter(format_type)
  output = formatter.format(result)
  if output:
    console.print(output, markup=False, highlight=False, soft_wrap=True)
  if exit_code and result.has_severe_issues:
    raise typer.Exit(1)


def _fail(e: Exception, show_traceback: bool) -> None:
  console.print(f"[red]Error:[/red] {escape(str(e))}")
  if show_traceback and not isinstance(e, KNOWN_ERRORS):
    console.print("\n[dim]Traceback:[/dim]")
    console.print(escape(traceback.format_exc()))
  raise typer.Exit(1) from None


@app.command()
def review(
  repo_url: str = typer.Argument(..., help="Repository URL (HTTPS or SSH form)"),
  repo_type: str = typer.Option("github", "--repo-type", "-t", help="Repository host: github, gitlab"),
  token: str = typer.Option(None, "--token", help="API token (default: GITHUB_TOKEN/GITLAB_TOKEN)"),
  api_url: str = typer.Option(None, "--api-url", help="API base URL for self-hosted instances"),
  since: datetime = typer.Option(None, "--since", help="Start of the review window"),
  until: datetime = typer.Option(None, "--until", help="End of the review window (default: now)"),
  provider: str = typer.Option(
    None, "--provider", "-p", help="LLM provider (deepseek, openai, anthropic, gemini, ollama, auto)"
  ),
  model: str = typer.Option(None, "--model", "-m", help="Model to use"),
  format_type: str = typer.Option(
    "terminal", "--format", help="Output format: terminal, json, markdown, github"
  ),
  config: Path = typer.Option(None, "--config", "-c", help="Config file path"),
  exit_code: bool = typer.Option(
    False, "--exit-code", help="Exit with code 1 when high or error severity issues are found"
  ),
  verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable INFO logging"),
  debug: bool = typer.Option(False, "--debug", "-d", help="Enable DEBUG logging and tracebacks"),
) -> None:
  """Review changes pushed to a hosted repository within a time window."""
  show_traceback = debug or _is_debug()
  _setup_logging(verbose, show_traceback)

  try:
    settings = load_config(config)
    review_provider = _load_provider(settings, provider, model)
    project = _project_from_url(repo_url, repo_type, token, api_url, settings)
    cache = get_cache(settings)
    try:
      runner = ReviewJobRunner(review_provider, settings=settings, cache=cache)
      result = asyncio.run(_run_with_status(runner, project, _as_utc(since), _as_utc(until)))
    finally:
      cache.close()
  except Exception as e:
    _fail(e, show_traceback)

  _emit(result, format_type, exit_code)


@app.command()
def diff(
  staged: bool = typer.Option(False, "--staged", help="Review staged changes (default)"),
  branch: str = typer.Option(None, "--branch", "-b", help="Branch to review against base"),
  base: str = typer.Option("main", "--base", help="Base branch for comparison"),
  provider: str = typer.Option(None, "--provider", "-p", help="LLM provider"),
  model: str = typer.Option(None, "--model", "-m", help="Model to use"),
  format_type: str = typer.Option(
    "terminal", "--format", help="Output format: terminal, json, markdown, github"
  ),
  config: Path = typer.Option(None, "--config", "-c", help="Config file path"),
  exit_code: bool = typer.Option(
    False, "--exit-code", help="Exit with code 1 when high or error severity issues are found"
  ),
  verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable INFO logging"),
  debug: bool = typer.Option(False, "--debug", "-d", help="Enable DEBUG logging and tracebacks"),
) -> None:
  """Review a local git diff: staged changes, or a branch against its base."""
  show_traceback = debug or _is_debug()
  _setup_logging(verbose, show_traceback)

  if staged and branch:
    console.print("[red]Error:[/red] --staged and --branch are mutually exclusive")
    raise typer.Exit(1)

  try:
    settings = load_config(config)
    files = extract_branch_diff(branch, base) if branch else extract_staged_diff()
    if not files:
      console.print("[green]No changes to review.[/green]")
      return
    review_provider = _load_provider(settings, provider, model)
    cache = get_cache(settings)
    try:
      result = asyncio.run(review_local_changes(
        files, review_provider, settings=settings, cache=cache, name=branch or "staged",
      ))
    finally:
      cache.close()
  except Exception as e:
    _fail(e, show_traceback)

  _emit(result, format_type, exit_code)


if __name__ == "__main__":
  app()

"""Data collection orchestration."""

import asyncio
from collections.abc import Sequence
from datetime import UTC, date, datetime

import httpx
from rich.console import Console
from rich.markup import escape

from ghtraffic.cell import Cell, ZERO_CELL
from ghtraffic.config import Settings
from ghtraffic.dates import select_dates
from ghtraffic.github_client import GitHubAPIError, GitHubTrafficClient
from ghtraffic.merge import merge
from ghtraffic.models import RunResult, TrafficPoint
from ghtraffic.storage import DatasetStorage

console = Console()


def count_for_date(points: Sequence[TrafficPoint], day: str) -> int:
    """Count reported for one calendar date, or 0 when the series lacks it."""
    for point in points:
        if point.day == day:
            return point.count
    return 0


async def fetch_daily_counts(
    client: GitHubTrafficClient,
    owner: str,
    repo: str,
    dates: Sequence[str],
) -> dict[str, Cell]:
    """Fetch views and clones of one repository for the given dates.

    Both series cover the whole retention window, so they are requested once
    and every target date is picked from them.

    Args:
        client: Initialized GitHub client.
        owner: Repository owner.
        repo: Repository name.
        dates: ISO dates to extract.

    Returns:
        ISO date -> Cell; dates outside the returned window are zero.

    Raises:
        GitHubAPIError: If either query fails.
    """
    views = await client.get_views(owner, repo)
    clones = await client.get_clones(owner, repo)
    return {
        day: Cell(count_for_date(views.items, day), count_for_date(clones.items, day))
        for day in dates
    }


async def collect_cells(
    client: GitHubTrafficClient,
    owner: str,
    repos: Sequence[str],
    dates: Sequence[str],
    delay: float = 0.1,
    failed: list[str] | None = None,
    verbose: bool = False,
) -> dict[str, dict[str, Cell]]:
    """Collect cells for every repository, one repository at a time.

    A failing repository is reported and zero-filled; the others are still
    collected. ``delay`` seconds pass after each repository.

    Args:
        client: Initialized GitHub client.
        owner: Account owning the repositories.
        repos: Repository names.
        dates: ISO dates to collect.
        delay: Pause after each repository, in seconds.
        failed: Receives the names of repositories that failed.
        verbose: Print every collected cell instead of a count.

    Returns:
        ISO date -> repository -> Cell.
    """
    cells: dict[str, dict[str, Cell]] = {day: {} for day in dates}

    for repo in repos:
        console.print(f"[cyan]{owner}/{repo}[/cyan]")
        try:
            counts = await fetch_daily_counts(client, owner, repo, dates)
        except (GitHubAPIError, httpx.HTTPError, ValueError) as e:
            console.print(f"  [yellow]Warning: {escape(str(e))}; recording 0(0)[/yellow]")
            counts = {day: ZERO_CELL for day in dates}
            if failed is not None:
                failed.append(repo)
        else:
            if verbose:
                summary = ", ".join(f"{day}={cell.encode()}" for day, cell in counts.items())
            else:
                summary = f"Collected {len(counts)} days"
            console.print(f"  [green]{summary}[/green]")

        for day, cell in counts.items():
            cells[day][repo] = cell

        await asyncio.sleep(delay)

    return cells


async def run_collection(
    settings: Settings,
    now: date | None = None,
    force: bool = False,
    dry_run: bool = False,
    client: GitHubTrafficClient | None = None,
    storage: DatasetStorage | None = None,
    verbose: bool = False,
) -> RunResult:
    """Collect traffic for all repositories of the account and persist it.

    Args:
        settings: Application settings.
        now: Current date (default: today in UTC).
        force: Re-collect the target date even when already stored.
        dry_run: If True, show what would be collected without storing.
        client: GitHub client to use (default: one built from settings).
        storage: Dataset storage (default: settings.data_path).
        verbose: Print every collected cell.

    Returns:
        Summary of the run.

    Raises:
        ConfigurationError: If token or account is missing.
        StorageError: If the dataset cannot be read or written.
    """
    settings.validate_for_collection()

    now = now or datetime.now(UTC).date()
    storage = storage or DatasetStorage(settings.data_path)
    client = client or GitHubTrafficClient(settings.github_token, timeout=settings.timeout)
    result = RunResult()

    prior = storage.read()
    dates = select_dates(
        None if prior is None else prior.dates,
        now,
        settings.effective_offset(),
        backfill=settings.backfill_on_first_run(),
        force=force,
    )
    result.dates = dates

    if not dates:
        console.print("[yellow]Dataset already up to date[/yellow]")
        return result

    async with client:
        repos = settings.load_filter().apply(await client.list_repositories(settings.account))
        result.repositories = repos

        console.print(
            f"\n[bold]Collecting {', '.join(dates)} for {len(repos)} repositories[/bold]\n"
        )

        if dry_run:
            for repo in repos:
                console.print(f"  Would collect: {settings.account}/{repo}")
            return result

        cells = await collect_cells(
            client,
            settings.account,
            repos,
            dates,
            delay=settings.request_delay,
            failed=result.failed,
            verbose=verbose,
        )

    dataset = merge(prior, cells, repos, dates)
    storage.write(dataset)
    result.written = True

    if result.failed:
        console.print(
            f"\n[yellow]{len(result.failed)} repositories recorded as 0(0)[/yellow]"
        )
    console.print(f"\n[green]Stored {len(dataset.dates)} days to {storage.data_path}[/green]")
    return result

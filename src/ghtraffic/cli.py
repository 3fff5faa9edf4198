"""Command-line interface for ghtraffic."""

import asyncio
import sys
from datetime import UTC, datetime
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ghtraffic.collector import run_collection
from ghtraffic.config import ConfigurationError, Settings, get_settings
from ghtraffic.dates import select_dates
from ghtraffic.github_client import GitHubAPIError, GitHubTrafficClient
from ghtraffic.storage import DatasetStorage, StorageError, dataset_to_frame

console = Console()


def _apply_overrides(settings: Settings, **overrides) -> Settings:
    update = {k: v for k, v in overrides.items() if v is not None}
    return settings.model_copy(update=update) if update else settings


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Print every collected cell")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """GitHub traffic collector keeping daily views and clones beyond 14 days."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


@main.command()
@click.option("--account", "-a", help="Account whose repositories are collected")
@click.option("--output", "-o", type=click.Path(path_type=Path), help="Dataset CSV path")
@click.option("--mode", type=click.Choice(["local", "scheduled"]), help="Date offset profile")
@click.option("--force", is_flag=True, help="Re-collect the target date if already stored")
@click.option("--dry-run", is_flag=True, help="Show what would be collected")
@click.pass_context
def collect(
    ctx: click.Context,
    account: str | None,
    output: Path | None,
    mode: str | None,
    force: bool,
    dry_run: bool,
) -> None:
    """Collect traffic from GitHub and merge it into the dataset.

    Examples:
        ghtraffic collect                       # Account from settings
        ghtraffic collect -a octocat            # Other account
        ghtraffic collect --mode scheduled      # Yesterday only
        ghtraffic collect --dry-run             # Preview only
    """
    settings = _apply_overrides(get_settings(), account=account, data_path=output, mode=mode)

    try:
        asyncio.run(
            run_collection(
                settings, force=force, dry_run=dry_run, verbose=ctx.obj.get("verbose", False)
            )
        )
    except (ConfigurationError, StorageError, GitHubAPIError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        sys.exit(1)


@main.command()
@click.option("--output", "-o", type=click.Path(path_type=Path), help="Dataset CSV path")
@click.option("--last", "-l", "last", default=14, help="Number of date columns to show")
@click.pass_context
def show(ctx: click.Context, output: Path | None, last: int) -> None:
    """Display the dataset in terminal.

    Examples:
        ghtraffic show                    # Last 14 days
        ghtraffic show -l 7               # Last 7 days
    """
    settings = _apply_overrides(get_settings(), data_path=output)
    try:
        dataset = DatasetStorage(settings.data_path).read()
    except StorageError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        sys.exit(1)

    if dataset is None:
        console.print("[yellow]No data found. Run 'ghtraffic collect' first.[/yellow]")
        return

    df = dataset_to_frame(dataset)
    dates = dataset.dates[-last:] if last > 0 else []

    table = Table(title=f"Views(clones), last {len(dates)} days")
    table.add_column("Repository", style="cyan")
    for day in dates:
        table.add_column(day[5:], justify="right")
    table.add_column("Total", justify="right", style="bold")

    for row in df.select(["Repository", *dates, "Total"]).iter_rows():
        table.add_row(*row)

    console.print(table)


@main.command()
@click.option("--output", "-o", type=click.Path(path_type=Path), help="Dataset CSV path")
@click.option("--mode", type=click.Choice(["local", "scheduled"]), help="Date offset profile")
@click.pass_context
def dates(ctx: click.Context, output: Path | None, mode: str | None) -> None:
    """Show the dates the next collection would fetch."""
    settings = _apply_overrides(get_settings(), data_path=output, mode=mode)
    try:
        prior = DatasetStorage(settings.data_path).read()
    except StorageError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        sys.exit(1)

    selected = select_dates(
        None if prior is None else prior.dates,
        datetime.now(UTC).date(),
        settings.effective_offset(),
        backfill=settings.backfill_on_first_run(),
    )

    if not selected:
        console.print("[yellow]Dataset already up to date[/yellow]")
        return

    for day in selected:
        console.print(day)


@main.command("list")
@click.option("--account", "-a", help="Account whose repositories are listed")
@click.pass_context
def list_repos(ctx: click.Context, account: str | None) -> None:
    """List repositories that would be collected."""
    settings = _apply_overrides(get_settings(), account=account)

    try:
        settings.validate_for_collection()
        repos = asyncio.run(_list_repositories(settings))
    except (ConfigurationError, GitHubAPIError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        sys.exit(1)

    if not repos:
        console.print(f"[yellow]No public repositories for {settings.account}[/yellow]")
        return

    table = Table(title=f"Repositories of {settings.account}")
    table.add_column("Repository", style="green")
    for repo in repos:
        table.add_row(repo)

    console.print(table)


async def _list_repositories(settings: Settings) -> list[str]:
    async with GitHubTrafficClient(settings.github_token, timeout=settings.timeout) as client:
        names = await client.list_repositories(settings.account)
    return settings.load_filter().apply(names)


if __name__ == "__main__":
    main()

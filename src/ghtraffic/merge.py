"""Merging of freshly fetched cells into the persisted dataset."""

from collections.abc import Iterable, Mapping, Sequence

from ghtraffic.cell import Cell, ZERO_CELL, sum_cells
from ghtraffic.models import Dataset


def merge(
    prior: Dataset | None,
    new_cells: Mapping[str, Mapping[str, Cell]],
    repositories: Sequence[str],
    target_dates: Iterable[str],
) -> Dataset:
    """Build the complete dataset for this run.

    Cells are resolved per (repository, date) in order of precedence: the
    newly fetched value, then the prior value, then zero. Re-fetching a
    stored date therefore replaces it. The aggregate row is always summed
    from the repository rows; any aggregate in ``prior`` is ignored.

    Args:
        prior: Previously persisted dataset, or None on a first run.
        new_cells: ISO date -> repository -> fetched Cell.
        repositories: Repositories to include, in output order.
        target_dates: Dates collected by this run.

    Returns:
        New Dataset covering every prior and target date for every repository.
    """
    prior = prior or Dataset()

    dates = sorted(set(prior.dates) | set(target_dates))

    entries: dict[str, dict[str, Cell]] = {}
    for repo in dict.fromkeys(repositories):
        prior_row = prior.entries.get(repo, {})
        row: dict[str, Cell] = {}
        for day in dates:
            fetched = new_cells.get(day, {})
            if repo in fetched:
                row[day] = fetched[repo]
            else:
                row[day] = prior_row.get(day, ZERO_CELL)
        entries[repo] = row

    aggregate = {day: sum_cells(row[day] for row in entries.values()) for day in dates}

    return Dataset(entries=entries, aggregate=aggregate)

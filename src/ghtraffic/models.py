"""Data models for ghtraffic."""

from dataclasses import dataclass, field

from ghtraffic.cell import Cell, ZERO_CELL, sum_cells

REPOSITORY_COLUMN = "Repository"
TOTAL_COLUMN = "Total"
AGGREGATE_ROW = "TOTAL"


@dataclass
class Dataset:
    """Per-repository daily traffic plus the aggregate row.

    Repository rows and the aggregate row are kept apart so the reserved
    ``TOTAL`` name never collides with a repository called that. Every row
    carries a Cell for every date in ``aggregate``.

    Attributes:
        entries: Repository name -> ISO date -> Cell, in enumeration order.
        aggregate: ISO date -> Cell summed over all repositories.
    """

    entries: dict[str, dict[str, Cell]] = field(default_factory=dict)
    aggregate: dict[str, Cell] = field(default_factory=dict)

    @property
    def dates(self) -> list[str]:
        """All date columns, ascending."""
        known = set(self.aggregate)
        for cells in self.entries.values():
            known.update(cells)
        return sorted(known)

    @property
    def repositories(self) -> list[str]:
        return list(self.entries)

    def row_total(self, repository: str) -> Cell:
        """Sum of one repository's cells across all dates."""
        return sum_cells(self.entries.get(repository, {}).values())

    def aggregate_total(self) -> Cell:
        return sum_cells(self.aggregate.values())

    def rows(self) -> list[tuple[str, list[Cell], Cell]]:
        """Rows in output order: repositories, then the aggregate row.

        Returns:
            List of (row name, cells in date order, row total).
        """
        dates = self.dates
        result = []
        for name, cells in self.entries.items():
            result.append(
                (name, [cells.get(d, ZERO_CELL) for d in dates], self.row_total(name))
            )
        result.append(
            (
                AGGREGATE_ROW,
                [self.aggregate.get(d, ZERO_CELL) for d in dates],
                self.aggregate_total(),
            )
        )
        return result


@dataclass
class TrafficPoint:
    """One entry of a views or clones series.

    Attributes:
        timestamp: ISO timestamp as reported by the API.
        count: Total count for that day.
        uniques: Unique visitors/cloners for that day.
    """

    timestamp: str
    count: int = 0
    uniques: int = 0

    @property
    def day(self) -> str:
        """Calendar date portion of the timestamp (offset ignored)."""
        return self.timestamp[:10]


@dataclass
class TrafficData:
    """Traffic data from GitHub API for the retention window.

    Attributes:
        count: Total count over the period.
        uniques: Unique visitors/cloners over the period.
        items: Daily breakdown of traffic.
    """

    count: int
    uniques: int
    items: list[TrafficPoint]


@dataclass
class RunResult:
    """Outcome of one collection run.

    Attributes:
        dates: Dates that were collected.
        repositories: Repositories that were queried.
        failed: Repositories whose fetch failed and were zero-filled.
        written: Whether the dataset was persisted.
    """

    dates: list[str] = field(default_factory=list)
    repositories: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    written: bool = False

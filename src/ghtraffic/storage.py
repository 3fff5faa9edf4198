"""File-based dataset storage using CSV format."""

import os
import tempfile
from pathlib import Path

import polars as pl

from ghtraffic.cell import decode_cell
from ghtraffic.merge import merge
from ghtraffic.models import AGGREGATE_ROW, REPOSITORY_COLUMN, TOTAL_COLUMN, Dataset


class StorageError(Exception):
    """Raised when the dataset cannot be read or persisted."""


def dataset_to_frame(dataset: Dataset) -> pl.DataFrame:
    """Render a dataset as a table of encoded cells.

    Args:
        dataset: Dataset to render.

    Returns:
        DataFrame with ``Repository``, one column per date and ``Total``;
        repository rows followed by the ``TOTAL`` row.
    """
    dates = dataset.dates
    columns: dict[str, list[str]] = {REPOSITORY_COLUMN: []}
    for day in dates:
        columns[day] = []
    columns[TOTAL_COLUMN] = []

    for name, cells, total in dataset.rows():
        columns[REPOSITORY_COLUMN].append(name)
        for day, cell in zip(dates, cells):
            columns[day].append(cell.encode())
        columns[TOTAL_COLUMN].append(total.encode())

    return pl.DataFrame(columns, schema={name: pl.Utf8 for name in columns})


def frame_to_dataset(df: pl.DataFrame) -> Dataset:
    """Rebuild a dataset from a table of encoded cells.

    The ``Total`` column and the trailing ``TOTAL`` row are derived data and
    are recomputed rather than loaded. The aggregate row is always written
    last, so an earlier row named ``TOTAL`` is a repository. Missing or
    malformed cells become zero.

    Args:
        df: DataFrame as produced by dataset_to_frame.

    Returns:
        Dataset with repositories in file order.
    """
    if REPOSITORY_COLUMN not in df.columns:
        return Dataset()

    dates = sorted(c for c in df.columns if c not in (REPOSITORY_COLUMN, TOTAL_COLUMN))
    rows = list(df.iter_rows(named=True))
    if rows and rows[-1][REPOSITORY_COLUMN] == AGGREGATE_ROW:
        rows.pop()

    entries = {}
    for row in rows:
        name = row[REPOSITORY_COLUMN]
        if not name:
            continue
        entries[name] = {day: decode_cell(row[day]) for day in dates}

    # Recompute the aggregate so a hand-edited TOTAL row never survives a load
    return merge(Dataset(entries=entries), {}, list(entries), dates)


class DatasetStorage:
    """CSV storage for the traffic dataset.

    Writes go to a temporary file beside the target which then replaces it,
    so readers see either the old or the new file, never a partial one.

    Attributes:
        data_path: Path to the CSV file.
    """

    def __init__(self, data_path: Path):
        """Initialize storage with path to data file.

        Args:
            data_path: Path to the CSV file for storing the dataset.
        """
        self.data_path = Path(data_path)

    def exists(self) -> bool:
        return self.data_path.exists()

    def read(self) -> Dataset | None:
        """Load the persisted dataset.

        Rows with extra fields are truncated; their cells decode like any
        other malformed cell.

        Returns:
            Dataset, or None when nothing has been persisted yet.

        Raises:
            StorageError: If the file cannot be parsed as CSV.
        """
        if not self.exists():
            return None

        try:
            df = pl.read_csv(
                self.data_path, infer_schema_length=0, truncate_ragged_lines=True
            )
        except pl.exceptions.NoDataError:
            return Dataset()
        except (pl.exceptions.PolarsError, OSError) as e:
            raise StorageError(f"Could not read {self.data_path}: {e}") from e
        return frame_to_dataset(df)

    def write(self, dataset: Dataset) -> None:
        """Replace the persisted dataset.

        Args:
            dataset: Dataset to write.

        Raises:
            StorageError: If the file cannot be written.
        """
        df = dataset_to_frame(dataset)
        try:
            self.data_path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.data_path.parent, prefix=f".{self.data_path.name}.", suffix=".tmp"
            )
            os.close(fd)
            try:
                df.write_csv(tmp_name)
                os.replace(tmp_name, self.data_path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(f"Could not write {self.data_path}: {e}") from e

"""Tests for the merge engine."""

from ghtraffic.cell import Cell, ZERO_CELL
from ghtraffic.merge import merge
from ghtraffic.models import AGGREGATE_ROW, Dataset


def assert_aggregate_consistent(dataset: Dataset) -> None:
    for day in dataset.dates:
        views = sum(cells[day].views for cells in dataset.entries.values())
        clones = sum(cells[day].clones for cells in dataset.entries.values())
        assert dataset.aggregate[day] == Cell(views, clones)


class TestMerge:
    """Tests for merge."""

    def test_build_from_scratch(self) -> None:
        """Test first run without a prior dataset."""
        dataset = merge(
            None,
            {"2025-06-01": {"repoA": Cell(5, 2), "repoB": Cell(0, 0)}},
            ["repoA", "repoB"],
            ["2025-06-01"],
        )

        assert dataset.dates == ["2025-06-01"]
        assert [(name, total) for name, _, total in dataset.rows()] == [
            ("repoA", Cell(5, 2)),
            ("repoB", Cell(0, 0)),
            (AGGREGATE_ROW, Cell(5, 2)),
        ]
        assert dataset.aggregate["2025-06-01"] == Cell(5, 2)

    def test_append_new_date(self) -> None:
        """Test adding a date to an existing dataset."""
        prior = Dataset(
            entries={"repoA": {"2025-06-01": Cell(5, 2)}},
            aggregate={"2025-06-01": Cell(5, 2)},
        )

        dataset = merge(prior, {"2025-06-02": {"repoA": Cell(1, 1)}}, ["repoA"], ["2025-06-02"])

        assert dataset.dates == ["2025-06-01", "2025-06-02"]
        assert dataset.row_total("repoA") == Cell(6, 3)
        assert dataset.aggregate["2025-06-02"] == Cell(1, 1)
        assert dataset.entries["repoA"]["2025-06-01"] == Cell(5, 2)

    def test_new_value_overrides_prior(self) -> None:
        """Test re-fetched values replace stored ones instead of adding."""
        prior = Dataset(
            entries={"repoA": {"2025-01-01": Cell(3, 0)}},
            aggregate={"2025-01-01": Cell(3, 0)},
        )

        dataset = merge(prior, {"2025-01-01": {"repoA": Cell(5, 1)}}, ["repoA"], ["2025-01-01"])

        assert dataset.entries["repoA"]["2025-01-01"] == Cell(5, 1)
        assert dataset.dates == ["2025-01-01"]

    def test_aggregate_recomputed_not_copied(self) -> None:
        """Test a stale aggregate in the prior dataset is ignored."""
        prior = Dataset(
            entries={"repoA": {"2025-06-01": Cell(2, 1)}},
            aggregate={"2025-06-01": Cell(999, 999)},
        )

        dataset = merge(prior, {}, ["repoA"], [])

        assert dataset.aggregate["2025-06-01"] == Cell(2, 1)

    def test_new_repository_zero_filled(self, prior_dataset: Dataset) -> None:
        """Test a repository without history gets zero cells for old dates."""
        dataset = merge(
            prior_dataset,
            {"2025-06-03": {"newrepo": Cell(4, 4)}},
            ["floris", "flasc", "newrepo"],
            ["2025-06-03"],
        )

        assert dataset.entries["newrepo"] == {
            "2025-06-01": ZERO_CELL,
            "2025-06-02": ZERO_CELL,
            "2025-06-03": Cell(4, 4),
        }
        # Missing fetched value for a known repository falls back to zero
        assert dataset.entries["floris"]["2025-06-03"] == ZERO_CELL
        assert_aggregate_consistent(dataset)

    def test_column_completeness(self, prior_dataset: Dataset) -> None:
        """Test every row carries every date column."""
        dataset = merge(
            prior_dataset,
            {"2025-05-30": {"flasc": Cell(1, 0)}},
            ["floris", "flasc"],
            ["2025-05-30"],
        )

        expected = ["2025-05-30", "2025-06-01", "2025-06-02"]
        assert dataset.dates == expected
        for cells in dataset.entries.values():
            assert sorted(cells) == expected
        assert sorted(dataset.aggregate) == expected

    def test_repository_order_follows_enumeration(self, prior_dataset: Dataset) -> None:
        """Test rows follow the given repository order with TOTAL last."""
        dataset = merge(prior_dataset, {}, ["flasc", "floris"], [])

        assert [name for name, _, _ in dataset.rows()] == ["flasc", "floris", AGGREGATE_ROW]

    def test_empty_repository_list(self, prior_dataset: Dataset) -> None:
        """Test only the aggregate row remains, zero-filled."""
        dataset = merge(prior_dataset, {}, [], ["2025-06-03"])

        assert dataset.entries == {}
        assert dataset.aggregate == {
            "2025-06-01": ZERO_CELL,
            "2025-06-02": ZERO_CELL,
            "2025-06-03": ZERO_CELL,
        }

    def test_idempotent(self, prior_dataset: Dataset) -> None:
        """Test merging the same inputs twice gives the same dataset."""
        new_cells = {"2025-06-03": {"floris": Cell(2, 1), "flasc": Cell(0, 1)}}
        args = (prior_dataset, new_cells, ["floris", "flasc"], ["2025-06-03"])

        first = merge(*args)
        second = merge(*args)

        assert first == second
        assert merge(first, new_cells, ["floris", "flasc"], ["2025-06-03"]) == first

    def test_prior_not_mutated(self, prior_dataset: Dataset) -> None:
        """Test merge leaves its input untouched."""
        before = Dataset(
            entries={k: dict(v) for k, v in prior_dataset.entries.items()},
            aggregate=dict(prior_dataset.aggregate),
        )

        merge(prior_dataset, {"2025-06-01": {"floris": Cell(9, 9)}}, ["floris"], ["2025-06-01"])

        assert prior_dataset == before

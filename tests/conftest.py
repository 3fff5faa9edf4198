"""Shared test fixtures."""

from pathlib import Path

import pytest

from ghtraffic.cell import Cell
from ghtraffic.config import Settings
from ghtraffic.models import Dataset


@pytest.fixture
def prior_dataset() -> Dataset:
    """Two repositories over two stored days."""
    return Dataset(
        entries={
            "floris": {"2025-06-01": Cell(5, 2), "2025-06-02": Cell(3, 0)},
            "flasc": {"2025-06-01": Cell(1, 1), "2025-06-02": Cell(0, 0)},
        },
        aggregate={"2025-06-01": Cell(6, 3), "2025-06-02": Cell(3, 0)},
    )


@pytest.fixture
def temp_data_dir(tmp_path: Path) -> Path:
    """Temporary directory for test data files."""
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    return data_dir


@pytest.fixture
def settings(tmp_path: Path, temp_data_dir: Path) -> Settings:
    """Settings pointing at temporary paths, without throttling."""
    return Settings(
        github_token="test_token",
        account="NatLabRockies",
        data_path=temp_data_dir / "traffic.csv",
        config_dir=tmp_path / "config",
        request_delay=0,
        _env_file=None,
    )


@pytest.fixture
def sample_csv() -> str:
    """Persisted dataset as written by a previous run."""
    return (
        "Repository,2025-06-01,2025-06-02,Total\n"
        "floris,5(2),3(0),8(2)\n"
        "flasc,1(1),0(0),1(1)\n"
        "TOTAL,6(3),3(0),9(3)\n"
    )

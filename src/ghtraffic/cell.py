"""Encoding of (views, clones) pairs as compact text cells."""

import re
from collections.abc import Iterable
from dataclasses import dataclass

CELL_PATTERN = re.compile(r"^\s*(\d+)\((\d+)\)\s*$")


@dataclass(frozen=True)
class Cell:
    """Views and clones for one repository on one date.

    Attributes:
        views: Page views.
        clones: Clone count.
    """

    views: int = 0
    clones: int = 0

    def __add__(self, other: "Cell") -> "Cell":
        return Cell(self.views + other.views, self.clones + other.clones)

    def encode(self) -> str:
        """Render as ``views(clones)``."""
        return f"{self.views}({self.clones})"


ZERO_CELL = Cell(0, 0)


def encode_cell(views: int, clones: int) -> str:
    return Cell(views, clones).encode()


def decode_cell(text: str | None) -> Cell:
    """Parse a ``views(clones)`` cell.

    Anything that does not match the pattern decodes to the zero cell, so
    hand-edited or damaged history never stops a run.

    Args:
        text: Cell text as stored in the dataset.

    Returns:
        Decoded Cell, or ZERO_CELL for malformed input.
    """
    if not isinstance(text, str):
        return ZERO_CELL

    match = CELL_PATTERN.match(text)
    if match is None:
        return ZERO_CELL

    return Cell(int(match.group(1)), int(match.group(2)))


def sum_cells(cells: Iterable[Cell]) -> Cell:
    total = ZERO_CELL
    for cell in cells:
        total = total + cell
    return total

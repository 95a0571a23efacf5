"""
One-hot encoding of a finished Grid.

Every (column, value) pair past the first ``skip_count`` columns becomes its
own ``column:value`` indicator column holding "1" or "0". The skipped
columns are passed through under their original name.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from .grid import Grid, Table
from .rules import BINARY_NAME_SEPARATOR, BINARY_OFF, BINARY_ON, NA_CATEGORY
from .writer import format_cell

logger = logging.getLogger(__name__)


class BinaryGrid(Table):
    def __init__(self):
        super().__init__()
        self._positions: Dict[str, int] = {}

    def clear(self) -> None:
        super().clear()
        self._positions.clear()

    def next_row(self) -> None:
        self.rows.append([BINARY_OFF] * len(self.header))

    def place(self, name: str, value: Any, binarized: bool = True) -> int:
        text = format_cell(value)
        if binarized:
            category = NA_CATEGORY if value is None else text
            name = f"{name}{BINARY_NAME_SEPARATOR}{category}"
            text = BINARY_ON

        index = self._positions.get(name)
        if index is None:
            self.header.append(name)
            for row in self.rows:
                row.append(BINARY_OFF)
            index = self._positions[name] = len(self.header) - 1

        self.rows[-1][index] = text
        return index


def binarize(grid: Grid, skip_count: int = 0) -> BinaryGrid:
    """Encode ``grid`` as indicator columns, passing the first ``skip_count`` through."""
    if skip_count < 0:
        raise ValueError("skip_count must be >= 0")

    binary = BinaryGrid()
    for source in grid.rows:
        binary.next_row()
        for j, value in enumerate(source):
            binary.place(grid.header[j], value, binarized=j >= skip_count)

    logger.debug(
        "binarized %d rows: %d source columns -> %d indicator columns",
        len(grid.rows), grid.width, binary.width,
    )
    return binary

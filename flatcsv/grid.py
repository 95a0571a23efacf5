"""
The table under construction.

Invariants held by every mutation:
- header names are unique (padding columns are named "")
- every row is index-aligned with the header: creating a column inserts a
  blank cell at the same index in every existing row
- blank cells are ``None``
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from .writer import DelimitedWriter

logger = logging.getLogger(__name__)


def _is_blank(cell: Any) -> bool:
    return cell is None or cell == ""


class Table:
    """Header plus row buffer, and the two ways of emitting them."""

    def __init__(self):
        self.header: List[str] = []
        self.rows: List[List[Any]] = []
        self.header_written = False

    @property
    def width(self) -> int:
        return len(self.header)

    def write_header_once(self, writer: DelimitedWriter) -> bool:
        if self.header_written:
            return False
        writer.write_line(self.header)
        self.header_written = True
        return True

    def write_rows(self, writer: DelimitedWriter) -> int:
        """Write the buffered rows, then drop them. Returns how many were written."""
        written = len(self.rows)
        for row in self.rows:
            writer.write_line(row)
        self.rows.clear()
        return written

    def clear(self) -> None:
        self.header.clear()
        self.rows.clear()
        self.header_written = False


class Grid(Table):
    def __init__(self):
        super().__init__()
        self.rows_per_object = 0
        self._positions: Dict[str, int] = {}

    def clear(self) -> None:
        super().clear()
        self._positions.clear()
        self.rows_per_object = 0

    def start_object(self) -> None:
        """Begin the row group of a new top-level object."""
        self.rows_per_object = 0
        if self.rows:
            self.next_row()

    def next_row(self, copy_previous: bool = False) -> None:
        """
        Start a new row.

        With ``copy_previous`` the new row is a copy of the last one, so
        values already placed for the current object carry over to the
        fan-out row. Nothing is copied from an empty buffer.
        """
        if copy_previous:
            if self.rows and self.rows[-1]:
                self.rows.append(list(self.rows[-1]))
                self.rows_per_object += 1
        else:
            self.rows.append([None] * len(self.header))
            self.rows_per_object += 1

    def _reindex(self) -> None:
        self._positions = {name: i for i, name in enumerate(self.header) if name}

    def _append_column(self, name: str) -> int:
        self.header.append(name)
        for row in self.rows:
            row.append(None)
        if name:
            self._positions[name] = len(self.header) - 1
        return len(self.header) - 1

    def column_index(self, name: str, global_position: Optional[int] = None) -> int:
        """Index of column ``name``, creating it on first use."""
        index = self._positions.get(name)
        if index is not None:
            return index

        if global_position is not None and global_position >= 0:
            while len(self.header) < global_position:
                self._append_column("")
            self.header.insert(global_position, name)
            for row in self.rows:
                row.insert(global_position, None)
            self._reindex()
            index = global_position
        else:
            index = self._append_column(name)

        if self.header_written:
            logger.warning("column %r appeared after the header was written", name)
        logger.debug("created column %r at %d", name, index)
        return index

    def place(self, name: str, value: Any, global_position: Optional[int] = None) -> int:
        """
        Write ``value`` under column ``name`` in the last row.

        The same value is back-filled into the earlier rows of the current
        object that have nothing in that column yet, so a field discovered
        after a fan-out still reaches every row the fan-out produced.
        """
        if not self.rows:
            self.next_row()

        index = self.column_index(name, global_position)
        self.rows[-1][index] = value

        first = max(len(self.rows) - self.rows_per_object, 0)
        for row in self.rows[first:-1]:
            while len(row) <= index:
                row.append(None)
            if _is_blank(row[index]):
                row[index] = value
        return index

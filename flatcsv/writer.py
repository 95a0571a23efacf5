"""
Delimited text output.
"""

from __future__ import annotations

import csv
import datetime
import enum
from typing import Any, Iterable, TextIO

from .rules import DEFAULT_SEPARATOR


def format_cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, enum.Enum):
        return value.name
    if isinstance(value, (datetime.date, datetime.time)):
        return value.isoformat()
    return str(value)


class DelimitedWriter:
    """One line per call: header or row, same separator for both."""

    def __init__(self, stream: TextIO, separator: str = DEFAULT_SEPARATOR):
        self.stream = stream
        self.separator = separator
        self._writer = csv.writer(stream, delimiter=separator, lineterminator="\n")

    def write_line(self, cells: Iterable[Any]) -> None:
        self._writer.writerow([format_cell(c) for c in cells])

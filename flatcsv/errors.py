"""
Exceptions raised by the export pipeline.

Column-name collisions have no exception: when two fields resolve to the
same column, the later write wins.
"""

from __future__ import annotations

from typing import Optional


class FlatCsvError(Exception):
    """Base class for every error raised by flatcsv."""


class IntrospectionError(FlatCsvError):
    """A field's declared shape or value could not be read."""

    def __init__(self, owner: str, field: str, cause: Exception):
        self.owner = owner
        self.field = field
        self.cause = cause
        super().__init__(f"cannot read field {field!r} of {owner}: {cause}")


class ExportIOError(FlatCsvError):
    """The output stream could not be opened or written."""


class InputDecodeError(FlatCsvError):
    """Uploaded or command-line input is not valid JSON / JSONL."""

    def __init__(self, message: str, line: Optional[int] = None):
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)

"""
Export entry points.

An Exporter owns one Grid and, for the duration of one export call, one
output stream. Targets are either a filesystem path (opened and closed by
the exporter) or an already open text stream (written to, flushed, and
left open for the caller).

Typical use::

    with Exporter(ExportOptions(treat_enumerables_as_columns=False)) as exporter:
        exporter.generate_csv(people, "people.csv")
"""

from __future__ import annotations

import io
import logging
import os
from typing import Any, Optional, TextIO, Union

from .binarizer import binarize
from .errors import ExportIOError
from .grid import Grid, Table
from .mapper import Mapper
from .models import ExportOptions
from .policy import FieldPolicyProvider
from .primitives import SEQUENCE_TYPES
from .writer import DelimitedWriter

logger = logging.getLogger(__name__)

Target = Union[str, "os.PathLike[str]", TextIO]


class Exporter:
    def __init__(self, options: Optional[ExportOptions] = None, policy: Optional[FieldPolicyProvider] = None):
        self.options = options or ExportOptions()
        self.policy = policy
        self.grid = Grid()

        self._stream: Optional[TextIO] = None
        self._owns_stream = False
        self._writer: Optional[DelimitedWriter] = None

        # figures of the most recent export, read by the service report
        self.objects = 0
        self.rows_written = 0
        self.columns = 0

    def __enter__(self) -> "Exporter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # -- stream lifetime ---------------------------------------------------

    def open(self, target: Target) -> None:
        """Attach the output for the next export; a path is opened here."""
        self.close()
        if isinstance(target, (str, os.PathLike)):
            try:
                self._stream = open(target, "w", encoding=self.options.encoding, newline="")
            except OSError as exc:
                raise ExportIOError(f"cannot open {os.fspath(target)!r} for writing: {exc}") from exc
            self._owns_stream = True
        else:
            self._stream = target
            self._owns_stream = False
        self._writer = DelimitedWriter(self._stream, self.options.separator)

    def close(self) -> None:
        """Release the output stream. Safe to call any number of times."""
        stream, owns = self._stream, self._owns_stream
        self._stream = None
        self._writer = None
        self._owns_stream = False
        if stream is None:
            return
        try:
            try:
                stream.flush()
            finally:
                if owns:
                    stream.close()
        except OSError as exc:
            raise ExportIOError(f"closing the output failed: {exc}") from exc

    def _require_writer(self) -> DelimitedWriter:
        if self._writer is None:
            raise ExportIOError("no output stream is open")
        return self._writer

    def _emit(self, table: Table) -> None:
        writer = self._require_writer()
        try:
            if table.width:
                table.write_header_once(writer)
            self.rows_written += table.write_rows(writer)
        except OSError as exc:
            raise ExportIOError(f"write failed: {exc}") from exc

    # -- flushing ----------------------------------------------------------

    def flush_object(self) -> None:
        """Write the rows of the current object and drop them; the header stays."""
        self._emit(self.grid)
        self.grid.rows_per_object = 0

    def flush(self) -> None:
        """Write what is left, release the stream and reset the grid for reuse."""
        try:
            self._emit(self.grid)
            self.columns = self.grid.width
        finally:
            self.close()
            self.grid.clear()

    # -- exports -----------------------------------------------------------

    def _mapper(self) -> Mapper:
        return Mapper(self.grid, self.policy, self.options.treat_enumerables_as_columns)

    def _reset_figures(self) -> None:
        self.objects = 0
        self.rows_written = 0
        self.columns = 0

    def _generate(self, entity: Any, target: Target, auto: bool) -> None:
        self._reset_figures()
        mapper = self._mapper()
        map_one = mapper.auto_map if auto else mapper.map

        self.open(target)
        try:
            if isinstance(entity, SEQUENCE_TYPES):
                for obj in entity:
                    self.grid.start_object()
                    map_one(obj)
                    self.objects += 1
                    if self.options.flush_each_object:
                        self.flush_object()
            else:
                self.grid.start_object()
                map_one(entity)
                self.objects = 1
            self.flush()
        finally:
            self.close()
            self.grid.clear()

        logger.info(
            "exported %d object(s): %d row(s), %d column(s)",
            self.objects, self.rows_written, self.columns,
        )

    def generate_csv(self, entity: Any, target: Target) -> None:
        """Export ``entity`` (one object or a list of them) using the field policy."""
        self._generate(entity, target, auto=False)

    def generate_csv_auto_map(self, entity: Any, target: Target) -> None:
        """Export ``entity`` without a field policy: every field, rows fan-out."""
        self._generate(entity, target, auto=True)

    def generate_binary_format(
        self,
        entity: Any,
        target: Target,
        first_columns_to_skip: Optional[int] = None,
    ) -> None:
        """
        Export ``entity`` as one-hot indicator columns.

        All objects are kept in memory until the grid is complete, since an
        indicator column can be discovered by any later object.
        """
        skip = self.options.first_columns_to_skip if first_columns_to_skip is None else first_columns_to_skip
        self._reset_figures()
        mapper = self._mapper()
        map_one = mapper.auto_map if self.options.auto_map else mapper.map

        try:
            objects = entity if isinstance(entity, SEQUENCE_TYPES) else [entity]
            for obj in objects:
                self.grid.start_object()
                map_one(obj)
                self.objects += 1

            binary = binarize(self.grid, skip)
            self.open(target)
            try:
                self._emit(binary)
                self.columns = binary.width
            finally:
                self.close()
        finally:
            self.grid.clear()

        logger.info(
            "exported %d object(s) as binary: %d row(s), %d indicator column(s), %d skipped",
            self.objects, self.rows_written, self.columns, skip,
        )

    def write_entity(self, entity: Any) -> None:
        """Auto-map one more entity into the grid; nothing is written until ``flush``."""
        if entity is None:
            return
        self.grid.start_object()
        self._mapper().auto_map(entity)
        self.objects += 1


def export_csv(entity: Any, options: Optional[ExportOptions] = None,
               policy: Optional[FieldPolicyProvider] = None) -> str:
    """
    Export to a string; ``options.auto_map`` selects the traversal.

    The whole grid is built before anything is written, so the header
    holds every column of every object.
    """
    options = (options or ExportOptions()).model_copy(update={"flush_each_object": False})
    buffer = io.StringIO(newline="")
    with Exporter(options, policy) as exporter:
        if options.auto_map:
            exporter.generate_csv_auto_map(entity, buffer)
        else:
            exporter.generate_csv(entity, buffer)
    return buffer.getvalue()


def export_binary(entity: Any, options: Optional[ExportOptions] = None,
                  policy: Optional[FieldPolicyProvider] = None) -> str:
    options = options or ExportOptions()
    buffer = io.StringIO(newline="")
    with Exporter(options, policy) as exporter:
        exporter.generate_binary_format(entity, buffer)
    return buffer.getvalue()

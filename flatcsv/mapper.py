"""
Recursive traversal of an object graph into a Grid.

Two traversals share one walk:
- ``map``: policy driven. Fields are filtered, ordered and named by the
  FieldPolicyProvider; collections become indexed columns or extra rows
  depending on ``treat_enumerables_as_columns``.
- ``auto_map``: no policy at all. Every field is visited under its
  ``Owner.field`` name and collections always fan out into rows.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional, Sequence, Set

from .grid import Grid
from .policy import AnnotationPolicy, FieldDescriptor, FieldPolicyProvider, describe_fields, read_value
from .primitives import Kind, classify

logger = logging.getLogger(__name__)


class Mapper:
    def __init__(
        self,
        grid: Grid,
        policy: Optional[FieldPolicyProvider] = None,
        treat_enumerables_as_columns: bool = True,
    ):
        self.grid = grid
        self.policy = policy if policy is not None else AnnotationPolicy()
        self.treat_enumerables_as_columns = treat_enumerables_as_columns
        self._path: Set[int] = set()

    def map(self, value: Any, enumerable_suffix: str = "", owner: Optional[str] = None) -> None:
        """
        Policy-driven traversal of ``value``.

        ``enumerable_suffix`` is appended to every column produced beneath
        ``value``; it carries the element index in columns mode.
        """
        if value is None or self.policy.is_excluded(type(value)):
            return
        self._walk(value, self.policy.ordered_fields(value, owner), enumerable_suffix, auto=False)

    def auto_map(self, value: Any, owner: Optional[str] = None) -> None:
        if value is None:
            return
        self._walk(value, describe_fields(value, owner), "", auto=True)

    def _walk(self, value: Any, fields: Iterable[FieldDescriptor], suffix: str, auto: bool) -> None:
        marker = id(value)
        if marker in self._path:
            logger.debug("skipping %s already on the traversal path", type(value).__name__)
            return

        self._path.add(marker)
        try:
            for field in fields:
                self._visit(field, read_value(value, field), suffix, auto)
        finally:
            self._path.discard(marker)

    def _visit(self, field: FieldDescriptor, value: Any, suffix: str, auto: bool) -> None:
        kind = classify(value, field.annotation)
        if kind is Kind.SEQUENCE:
            self._fan_out(field, value, suffix, auto)
        elif kind is Kind.SCALAR:
            self._place(field, value, suffix, auto)
        else:
            self._descend(value, suffix, field.name, auto)

    def _descend(self, value: Any, suffix: str, owner: str, auto: bool) -> None:
        if auto:
            self.auto_map(value, owner)
        else:
            self.map(value, suffix, owner)

    def _place(self, field: FieldDescriptor, value: Any, suffix: str, auto: bool) -> None:
        if auto:
            self.grid.place(field.qualified_name, value)
        else:
            self.grid.place(
                self.policy.display_name(field) + suffix,
                value,
                self.policy.global_column_position(field),
            )

    def _fan_out(self, field: FieldDescriptor, items: Sequence[Any], suffix: str, auto: bool) -> None:
        as_columns = self.treat_enumerables_as_columns and not auto

        for i, item in enumerate(items):
            if as_columns:
                # nesting levels are joined with "_": m0_1, m1_0
                item_suffix = f"{suffix}_{i}" if suffix else str(i)
            else:
                # every element after the first gets its own copy of the row
                if i > 0:
                    self.grid.next_row(copy_previous=True)
                item_suffix = suffix

            kind = classify(item)
            if kind is Kind.SEQUENCE:
                self._fan_out(field, item, item_suffix, auto)
            elif kind is Kind.SCALAR:
                if item is not None:
                    self._place(field, item, item_suffix, auto)
            else:
                self._descend(item, item_suffix, field.name, auto)

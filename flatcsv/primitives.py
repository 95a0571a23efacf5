"""
Scalar / composite classification.

A scalar is exported as exactly one cell. Everything else is traversed:
lists and tuples fan out (as rows or as indexed columns), any other object
is walked field by field.
"""

from __future__ import annotations

import datetime
import decimal
import enum
import types
import typing
import uuid
from typing import Any, Optional, Tuple


class Kind(enum.Enum):
    SCALAR = "scalar"
    COMPOSITE = "composite"
    SEQUENCE = "sequence"


SCALAR_TYPES: Tuple[type, ...] = (
    str,
    bool,
    int,
    float,
    decimal.Decimal,
    uuid.UUID,
    datetime.date,
    datetime.datetime,
    datetime.time,
    datetime.timedelta,
    enum.Enum,
)

SEQUENCE_TYPES: Tuple[type, ...] = (list, tuple)

_UNION_ORIGINS = {typing.Union}
if hasattr(types, "UnionType"):
    _UNION_ORIGINS.add(types.UnionType)


def _unwrap_optional(tp: Any) -> Any:
    """Strip ``Optional[...]`` / ``X | None`` down to ``X``."""
    if typing.get_origin(tp) in _UNION_ORIGINS:
        args = [a for a in typing.get_args(tp) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return tp


def is_scalar_type(tp: Any) -> bool:
    tp = _unwrap_optional(tp)
    origin = typing.get_origin(tp)
    if origin is not None:
        return origin is typing.Literal
    return isinstance(tp, type) and issubclass(tp, SCALAR_TYPES)


def classify(value: Any, declared: Optional[Any] = None) -> Kind:
    """
    Classify a runtime value.

    The runtime value wins when it is present. ``None`` is classified through
    the declared type when there is one: a scalar declaration gives an empty
    cell, anything else contributes nothing. Undeclared ``None`` (a JSON
    ``null`` leaf, say) is a scalar.
    """
    if value is None:
        if declared is None or is_scalar_type(declared):
            return Kind.SCALAR
        return Kind.COMPOSITE

    if isinstance(value, SCALAR_TYPES):
        return Kind.SCALAR
    if isinstance(value, SEQUENCE_TYPES):
        return Kind.SEQUENCE
    return Kind.COMPOSITE

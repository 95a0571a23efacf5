"""
Field discovery and export policy.

Responsibilities:
- enumerate the fields of a composite value (dataclass, pydantic model,
  mapping, or plain object) in declaration order
- attach the export policy declared on each field
- answer the questions the mapper asks: is this type / field excluded,
  what is the column called, where does it go

Policies are declared either through dataclass field metadata::

    @dataclass
    class Person:
        name: str = exportable(name="Name", order=0)
        secret: str = non_exportable_field(default="")

or through ``typing.Annotated`` (works for dataclasses and pydantic models)::

    class Person(BaseModel):
        name: Annotated[str, Exportable(name="Name", order=0)]
        secret: Annotated[str, NonExportable()] = ""

Pydantic fields may also carry the marker in ``json_schema_extra``::

    label: str = Field(json_schema_extra={"flatcsv": Exportable(name="Label")})
"""

from __future__ import annotations

import dataclasses
import functools
import inspect
import sys
import typing
from collections.abc import Mapping
from typing import Any, List, Optional, Protocol, Tuple

from pydantic import BaseModel

from .errors import IntrospectionError

METADATA_KEY = "flatcsv"
EXCLUDE_ATTR = "__flatcsv_exclude__"


@dataclasses.dataclass(frozen=True)
class Exportable:
    """
    Export policy of a single field.

    name: column header to use instead of ``Owner.field``
    order: sort key among the fields of the same class; equal keys keep
        declaration order
    global_order: absolute column index requested when the column is created
    """

    name: Optional[str] = None
    order: int = sys.maxsize
    global_order: Optional[int] = None

    def __post_init__(self):
        if self.global_order is not None and self.global_order < 0:
            raise ValueError("global_order must be >= 0")


@dataclasses.dataclass(frozen=True)
class NonExportable:
    """Marks a field that is never exported."""


@dataclasses.dataclass(frozen=True)
class FieldDescriptor:
    name: str
    owner: Optional[str]
    annotation: Any = None
    policy: Optional[Exportable] = None
    excluded: bool = False
    key: Any = dataclasses.field(default=None, compare=False)

    @property
    def qualified_name(self) -> str:
        return f"{self.owner}.{self.name}" if self.owner else self.name


def exportable(
    name: Optional[str] = None,
    order: int = sys.maxsize,
    global_order: Optional[int] = None,
    **field_kwargs: Any,
) -> Any:
    """Dataclass ``field()`` carrying an :class:`Exportable` policy."""
    metadata = dict(field_kwargs.pop("metadata", None) or {})
    metadata[METADATA_KEY] = Exportable(name=name, order=order, global_order=global_order)
    return dataclasses.field(metadata=metadata, **field_kwargs)


def non_exportable_field(**field_kwargs: Any) -> Any:
    """Dataclass ``field()`` excluded from export."""
    metadata = dict(field_kwargs.pop("metadata", None) or {})
    metadata[METADATA_KEY] = NonExportable()
    return dataclasses.field(metadata=metadata, **field_kwargs)


def non_exportable(cls: type) -> type:
    """Class decorator: instances of ``cls`` contribute nothing to an export."""
    setattr(cls, EXCLUDE_ATTR, True)
    return cls


def _declaring_class(cls: type, field_name: str) -> type:
    for klass in cls.__mro__:
        if field_name in inspect.get_annotations(klass):
            return klass
    return cls


def _type_hints(cls: type) -> dict:
    """Resolved annotations of ``cls``; unresolvable ones are an introspection failure."""
    try:
        return typing.get_type_hints(cls, include_extras=True)
    except Exception as exc:
        raise IntrospectionError(cls.__name__, "<annotations>", exc) from exc


def _policy_from(markers: typing.Iterable[Any]) -> Tuple[Optional[Exportable], bool]:
    policy = None
    excluded = False
    for marker in markers:
        if isinstance(marker, NonExportable):
            excluded = True
        elif isinstance(marker, Exportable):
            policy = marker
    return policy, excluded


def _split_annotated(tp: Any) -> Tuple[Any, tuple]:
    if typing.get_origin(tp) is typing.Annotated:
        base, *extras = typing.get_args(tp)
        return base, tuple(extras)
    return tp, ()


@functools.lru_cache(maxsize=None)
def _class_fields(cls: type) -> Tuple[FieldDescriptor, ...]:
    """Fields declared by a dataclass, pydantic model or annotated class."""
    described = []

    if dataclasses.is_dataclass(cls):
        hints = _type_hints(cls)
        for f in dataclasses.fields(cls):
            annotation, extras = _split_annotated(hints.get(f.name))
            markers = list(extras)
            if METADATA_KEY in f.metadata:
                markers.append(f.metadata[METADATA_KEY])
            policy, excluded = _policy_from(markers)
            described.append(FieldDescriptor(
                f.name, _declaring_class(cls, f.name).__name__, annotation, policy, excluded,
            ))
    elif issubclass(cls, BaseModel):
        for name, info in cls.model_fields.items():
            markers = list(info.metadata)
            extra = info.json_schema_extra
            if isinstance(extra, dict) and METADATA_KEY in extra:
                markers.append(extra[METADATA_KEY])
            policy, excluded = _policy_from(markers)
            described.append(FieldDescriptor(
                name, _declaring_class(cls, name).__name__, info.annotation, policy, excluded,
            ))
    else:
        for name, tp in _type_hints(cls).items():
            if name.startswith("_") or typing.get_origin(tp) is typing.ClassVar:
                continue
            annotation, extras = _split_annotated(tp)
            policy, excluded = _policy_from(extras)
            described.append(FieldDescriptor(
                name, _declaring_class(cls, name).__name__, annotation, policy, excluded,
            ))

    return tuple(described)


def describe_fields(value: Any, owner: Optional[str] = None) -> List[FieldDescriptor]:
    """
    Enumerate the fields of ``value`` in discovery order.

    Mappings are described per instance: every key becomes a field and
    ``owner`` (the key the mapping was reached through) prefixes the
    default column name. Classes are described once and cached; plain
    objects additionally expose instance attributes their class does not
    annotate.
    """
    if isinstance(value, Mapping):
        return [FieldDescriptor(str(key), owner, key=key) for key in value.keys()]

    cls = type(value)
    described = list(_class_fields(cls))
    if dataclasses.is_dataclass(cls) or isinstance(value, BaseModel):
        return described

    known = {f.name for f in described}
    for name in getattr(value, "__dict__", {}):
        if name.startswith("_") or name in known:
            continue
        described.append(FieldDescriptor(name, cls.__name__))
    return described


def read_value(instance: Any, field: FieldDescriptor) -> Any:
    try:
        if isinstance(instance, Mapping):
            return instance[field.name if field.key is None else field.key]
        return getattr(instance, field.name)
    except Exception as exc:
        raise IntrospectionError(type(instance).__name__, field.name, exc) from exc


class FieldPolicyProvider(Protocol):
    """What the policy-driven mapper needs to know about a composite."""

    def is_excluded(self, tp: type) -> bool: ...

    def is_field_excluded(self, field: FieldDescriptor) -> bool: ...

    def field_order_key(self, field: FieldDescriptor) -> Optional[int]: ...

    def display_name(self, field: FieldDescriptor) -> str: ...

    def global_column_position(self, field: FieldDescriptor) -> Optional[int]: ...

    def ordered_fields(self, value: Any, owner: Optional[str] = None) -> List[FieldDescriptor]: ...


class AnnotationPolicy:
    """Policy read from ``Exportable`` / ``NonExportable`` declarations."""

    def is_excluded(self, tp: type) -> bool:
        return bool(getattr(tp, EXCLUDE_ATTR, False))

    def is_field_excluded(self, field: FieldDescriptor) -> bool:
        return field.excluded

    def field_order_key(self, field: FieldDescriptor) -> Optional[int]:
        return field.policy.order if field.policy is not None else None

    def display_name(self, field: FieldDescriptor) -> str:
        if field.policy is not None and field.policy.name:
            return field.policy.name
        return field.qualified_name

    def global_column_position(self, field: FieldDescriptor) -> Optional[int]:
        return field.policy.global_order if field.policy is not None else None

    def ordered_fields(self, value: Any, owner: Optional[str] = None) -> List[FieldDescriptor]:
        visible = [f for f in describe_fields(value, owner) if not self.is_field_excluded(f)]

        def sort_key(f: FieldDescriptor):
            order = self.field_order_key(f)
            return (f.policy is None, sys.maxsize if order is None else order)

        # sorted() is stable, so ties keep discovery order
        return sorted(visible, key=sort_key)

"""
Record field descriptors.

Introspects a dataclass once and caches a table of ``FieldDescriptor``
entries, in declaration order. The binder only ever consults this table; it
never inspects annotations itself.

Field shapes form the closed set ``FieldKind``. Anything outside the set is
``UNSUPPORTED`` and fails at coercion time if a matching key exists.
"""

from __future__ import annotations

import dataclasses
import sys
import types
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from functools import lru_cache
from typing import Any, Union, get_args, get_origin, get_type_hints

from iniconf_kernel.logging_config import get_logger
from iniconf_kernel.naming import EXCLUDE_TAG

logger = get_logger("mapping.descriptors")

TAG_KEY = "ini"


class FieldKind(str, Enum):
    """Supported field shapes."""

    TEXT = "text"
    BOOLEAN = "boolean"
    INTEGER = "integer"  # Any width; range-checked to 64-bit signed
    FLOAT = "float"
    TIMESTAMP = "timestamp"  # datetime.datetime
    TEXT_LIST = "text_list"  # list[str]
    TIMESTAMP_LIST = "timestamp_list"  # list[datetime]
    RECORD = "record"  # Nested dataclass
    OPTIONAL_RECORD = "optional_record"  # Nested dataclass | None
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class FieldDescriptor:
    """How one dataclass field is bound."""

    name: str
    tag: str
    kind: FieldKind
    annotation: Any
    record_type: type | None = None
    writable: bool = True

    @property
    def excluded(self) -> bool:
        return self.tag == EXCLUDE_TAG

    @property
    def type_name(self) -> str:
        return type_name(self.annotation)


def ini_field(name: str = "", **kwargs: Any) -> Any:
    """
    ``dataclasses.field`` with an ``ini`` tag.

        port: int = ini_field("http_port", default=8080)
        secret: str = ini_field("-", default="")
    """
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[TAG_KEY] = name
    return dataclasses.field(metadata=metadata, **kwargs)


def type_name(annotation: Any) -> str:
    if isinstance(annotation, str):
        return annotation
    if isinstance(annotation, type) and get_origin(annotation) is None:
        return annotation.__name__
    return repr(annotation).replace("typing.", "")


def _is_record_type(annotation: Any) -> bool:
    return isinstance(annotation, type) and dataclasses.is_dataclass(annotation)


def classify(annotation: Any) -> tuple[FieldKind, type | None]:
    """Map a type annotation to its field shape and, for records, the record type."""
    # bool before int: bool is an int subclass
    if annotation is bool:
        return FieldKind.BOOLEAN, None
    if annotation is str:
        return FieldKind.TEXT, None
    if annotation is int:
        return FieldKind.INTEGER, None
    if annotation is float:
        return FieldKind.FLOAT, None
    if annotation is datetime:
        return FieldKind.TIMESTAMP, None
    if _is_record_type(annotation):
        return FieldKind.RECORD, annotation

    origin = get_origin(annotation)
    args = get_args(annotation)
    if origin is list and len(args) == 1:
        if args[0] is str:
            return FieldKind.TEXT_LIST, None
        if args[0] is datetime:
            return FieldKind.TIMESTAMP_LIST, None
    if origin in (Union, types.UnionType) and len(args) == 2 and type(None) in args:
        (inner,) = [a for a in args if a is not type(None)]
        if _is_record_type(inner):
            return FieldKind.OPTIONAL_RECORD, inner
    return FieldKind.UNSUPPORTED, None


def _owner_namespace(record_type: type, field_name: str) -> dict[str, Any]:
    """Globals of the class in the MRO that declared ``field_name``."""
    for klass in record_type.__mro__:
        if field_name in klass.__dict__.get("__annotations__", {}):
            module = sys.modules.get(klass.__module__)
            namespace = dict(vars(module)) if module is not None else {}
            namespace[klass.__name__] = klass
            return namespace
    return {}


def _resolve_hints(record_type: type) -> dict[str, Any]:
    """
    Field name -> resolved annotation.

    Falls back to resolving field by field when the record as a whole has
    an unresolvable forward reference (e.g. a record declared inside a
    function). Fields that still fail are left out and classify as
    ``UNSUPPORTED``.
    """
    try:
        return get_type_hints(record_type)
    except (NameError, TypeError):
        pass

    hints: dict[str, Any] = {}
    for f in dataclasses.fields(record_type):
        if not isinstance(f.type, str):
            hints[f.name] = f.type
            continue
        try:
            hints[f.name] = eval(f.type, _owner_namespace(record_type, f.name))
        except (NameError, TypeError, AttributeError, SyntaxError) as exc:
            logger.warning(
                "type_hint_unresolved",
                extra={
                    "record_type": record_type.__qualname__,
                    "field": f.name,
                    "error": str(exc),
                },
            )
    return hints


@lru_cache(maxsize=None)
def describe_record(record_type: type) -> tuple[FieldDescriptor, ...]:
    """
    Build the descriptor table for a dataclass type.

    Preconditions:
        - ``record_type`` is a dataclass type.
    Postconditions:
        - One descriptor per dataclass field, in declaration order.
        - Cached per type; the same tuple is returned on every call.
    Raises:
        TypeError: if ``record_type`` is not a dataclass.
    """
    if not _is_record_type(record_type):
        raise TypeError(f"{record_type!r} is not a dataclass type")

    hints = _resolve_hints(record_type)

    descriptors = []
    for f in dataclasses.fields(record_type):
        annotation = hints.get(f.name, f.type)
        kind, nested = classify(annotation)
        descriptors.append(
            FieldDescriptor(
                name=f.name,
                tag=str(f.metadata.get(TAG_KEY, "") or ""),
                kind=kind,
                annotation=annotation,
                record_type=nested,
                writable=f.init and not f.name.startswith("_"),
            )
        )

    logger.debug(
        "record_described",
        extra={
            "record_type": record_type.__qualname__,
            "field_count": len(descriptors),
        },
    )
    return tuple(descriptors)


def _zero_value(descriptor: FieldDescriptor) -> Any:
    if descriptor.kind is FieldKind.TEXT:
        return ""
    if descriptor.kind is FieldKind.BOOLEAN:
        return False
    if descriptor.kind is FieldKind.INTEGER:
        return 0
    if descriptor.kind is FieldKind.FLOAT:
        return 0.0
    if descriptor.kind is FieldKind.TIMESTAMP:
        return datetime.min
    if descriptor.kind in (FieldKind.TEXT_LIST, FieldKind.TIMESTAMP_LIST):
        return []
    if descriptor.kind is FieldKind.RECORD:
        return zero_record(descriptor.record_type)
    return None


def zero_record(record_type: type) -> Any:
    """
    Allocate a record without calling ``__init__`` or ``__post_init__``.

    Each field gets its dataclass default, else its ``default_factory()``,
    else the zero value of its kind.
    """
    instance = record_type.__new__(record_type)
    table = {d.name: d for d in describe_record(record_type)}
    for f in dataclasses.fields(record_type):
        if f.default is not dataclasses.MISSING:
            value = f.default
        elif f.default_factory is not dataclasses.MISSING:
            value = f.default_factory()
        else:
            value = _zero_value(table[f.name])
        object.__setattr__(instance, f.name, value)
    return instance

"""
Coercion engine: one configuration key -> one typed field value.

Dispatches on ``FieldKind``. Scalars delegate to the Key's own coercion
methods; collections split the raw text on ``LIST_DELIMITER`` first. An empty
collection is not an error: the field is left untouched. ZERO I/O.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from iniconf_document.model import Key
from iniconf_kernel.exceptions import UnsupportedTypeError

from iniconf_mapping.descriptors import FieldDescriptor, FieldKind

LIST_DELIMITER = ","


# -----------------------------------------------------------------------------
# Result type
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class CoercionResult:
    """Outcome of coercing a key. ``assign`` is False for empty collections."""

    assign: bool
    value: Any = None


# -----------------------------------------------------------------------------
# Per-kind coercers
# -----------------------------------------------------------------------------


_SCALAR_COERCERS: dict[FieldKind, Callable[[Key], Any]] = {
    FieldKind.TEXT: lambda key: key.value,
    FieldKind.BOOLEAN: Key.as_bool,
    FieldKind.INTEGER: Key.as_int64,
    FieldKind.FLOAT: Key.as_float64,
    FieldKind.TIMESTAMP: Key.as_timestamp,
}

_LIST_COERCERS: dict[FieldKind, Callable[[Key], list[Any]]] = {
    FieldKind.TEXT_LIST: lambda key: key.as_string_list(LIST_DELIMITER),
    FieldKind.TIMESTAMP_LIST: lambda key: key.as_timestamp_list(LIST_DELIMITER),
}


def coerce_key(descriptor: FieldDescriptor, key: Key) -> CoercionResult:
    """
    Coerce ``key`` to the shape described by ``descriptor``. Pure function.

    Raises:
        CoercionError: the key's text is not a valid literal of the type.
        UnsupportedTypeError: the field's type has no coercion rule.
    """
    scalar = _SCALAR_COERCERS.get(descriptor.kind)
    if scalar is not None:
        return CoercionResult(assign=True, value=scalar(key))

    collection = _LIST_COERCERS.get(descriptor.kind)
    if collection is not None:
        values = collection(key)
        if not values:
            return CoercionResult(assign=False)
        return CoercionResult(assign=True, value=values)

    raise UnsupportedTypeError(descriptor.type_name)


def apply_key(target: Any, descriptor: FieldDescriptor, key: Key) -> bool:
    """Coerce ``key`` and store it on ``target``. Returns whether the field was set."""
    result = coerce_key(descriptor, key)
    if result.assign:
        setattr(target, descriptor.name, result.value)
    return result.assign

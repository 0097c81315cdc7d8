"""
iniconf_mapping -- public entrypoint for binding configuration onto records.

Responsibility:
    Populates dataclass instances from configuration documents. Callers
    either bind an already-loaded ``Document`` / ``Section``, or hand raw
    sources to ``map_to`` / ``map_to_with_mapper`` which load and bind in one
    step.

Architecture position:
    Mapping layer -- sits above ``iniconf_document`` and ``iniconf_kernel``.
    Neither lower package may import from here.

Invariants enforced:
    - Tag > naming convention > declared field name.
    - Missing keys and sections are skipped, never errors.
    - First failure wins; it is reported as one ``FieldBindingError``
      carrying the field path.

Failure modes:
    - ``SourceLoadError`` -- a raw source could not be loaded.
    - ``NonMutableTargetError`` -- target is not a mutable dataclass instance.
    - ``FieldBindingError`` -- a present key could not be bound.
"""

from __future__ import annotations

from typing import Any

from iniconf_document import LoadOptions, describe_source, load
from iniconf_kernel.logging_config import LogContext
from iniconf_kernel.naming import NameMapper, all_caps_underscore, title_underscore

from iniconf_mapping.binder import bind_document, bind_section, ensure_mutable_record
from iniconf_mapping.coercion import LIST_DELIMITER, CoercionResult, apply_key, coerce_key
from iniconf_mapping.descriptors import (
    FieldDescriptor,
    FieldKind,
    classify,
    describe_record,
    ini_field,
    zero_record,
)


def map_to_with_mapper(
    target: Any,
    mapper: NameMapper | None,
    source: Any,
    *others: Any,
    options: LoadOptions | None = None,
) -> None:
    """
    Load ``source`` (and ``others``), attach ``mapper``, and bind onto ``target``.

    The target is checked before any source is read, so a non-mutable
    target fails without I/O.
    """
    ensure_mutable_record(target)
    document = load(source, *others, options=options)
    document.name_mapper = mapper
    with LogContext.bind(source=_source_label(source, others)):
        bind_document(document, target)


def map_to(
    target: Any,
    source: Any,
    *others: Any,
    options: LoadOptions | None = None,
) -> None:
    """Load sources and bind onto ``target`` with no naming convention."""
    map_to_with_mapper(target, None, source, *others, options=options)


def _source_label(source: Any, others: tuple[Any, ...]) -> str:
    label = describe_source(source)
    if others:
        label = f"{label} (+{len(others)})"
    return label


__all__ = [
    "LIST_DELIMITER",
    "CoercionResult",
    "FieldDescriptor",
    "FieldKind",
    "NameMapper",
    "all_caps_underscore",
    "apply_key",
    "bind_document",
    "bind_section",
    "classify",
    "coerce_key",
    "describe_record",
    "ensure_mutable_record",
    "ini_field",
    "map_to",
    "map_to_with_mapper",
    "title_underscore",
    "zero_record",
]

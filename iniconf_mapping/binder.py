"""
Record Binder (``iniconf_mapping.binder``).

Responsibility
--------------
Populates a dataclass instance from a configuration Section: walks the
record's descriptor table in declaration order, resolves each field's
configuration name, and either recurses into a child section (nested
records) or coerces a key (scalars and collections).

Invariants enforced
-------------------
* A field tagged ``"-"`` is never looked up or modified.
* Tag > naming convention > declared name when resolving names.
* The naming convention is read from the Document once per bind call and
  passed down explicitly; recursive calls never re-read it.
* A missing key or section leaves the field untouched. Only a present key
  that fails coercion, or a field type with no coercion rule, is fatal.
* A section already on the current binding path is never entered again,
  so self-referential records terminate after each section is bound once.

Failure modes
-------------
* ``NonMutableTargetError`` -- target is a class, not a dataclass instance,
  or frozen. Raised before any field is visited.
* ``FieldBindingError`` -- first field that failed, wrapping the cause.
  Nested records add one layer per level. Fields bound before the failure
  keep their values.
"""

from __future__ import annotations

import dataclasses
from typing import Any

from iniconf_document.model import Document, Section
from iniconf_kernel.exceptions import (
    BindingError,
    FieldBindingError,
    KeyNotFoundError,
    NonMutableTargetError,
    SectionNotFoundError,
)
from iniconf_kernel.logging_config import LogContext, get_logger
from iniconf_kernel.naming import NameMapper, resolve_field_name

from iniconf_mapping.coercion import apply_key
from iniconf_mapping.descriptors import FieldDescriptor, FieldKind, describe_record, zero_record

logger = get_logger("mapping.binder")


def bind_section(
    section: Section,
    target: Any,
    *,
    name_mapper: NameMapper | None = None,
) -> None:
    """
    Bind ``section`` onto ``target`` in place.

    ``name_mapper`` overrides the document's naming convention for this call
    only; when omitted, ``section.document.name_mapper`` is used.
    """
    ensure_mutable_record(target)
    if name_mapper is None:
        name_mapper = section.document.name_mapper
    with LogContext.bind(section=section.name, target=type(target).__qualname__):
        _bind_record(section, target, name_mapper, (section.name,))
        logger.info("record_bound")


def bind_document(
    document: Document,
    target: Any,
    *,
    name_mapper: NameMapper | None = None,
) -> None:
    """Bind the document's default section onto ``target`` in place."""
    bind_section(document.default_section, target, name_mapper=name_mapper)


def ensure_mutable_record(target: Any) -> None:
    """
    Raise ``NonMutableTargetError`` unless ``target`` is a writable record.

    Accepted: instances of non-frozen dataclasses.
    """
    if isinstance(target, type):
        raise NonMutableTargetError(
            target.__qualname__, "expected a record instance, got the class itself"
        )
    if not dataclasses.is_dataclass(target):
        raise NonMutableTargetError(type(target).__qualname__, "not a dataclass instance")
    if type(target).__dataclass_params__.frozen:
        raise NonMutableTargetError(type(target).__qualname__, "record is frozen")


# -----------------------------------------------------------------------------
# Traversal
# -----------------------------------------------------------------------------


def _bind_record(
    section: Section,
    target: Any,
    name_mapper: NameMapper | None,
    path: tuple[str, ...],
) -> None:
    """``path`` lists the sections already being bound, outermost first."""
    ensure_mutable_record(target)
    bound = 0
    for descriptor in describe_record(type(target)):
        if _bind_field(section, target, descriptor, name_mapper, path):
            bound += 1
    logger.debug(
        "section_bound",
        extra={
            "section_name": section.name,
            "record_type": type(target).__qualname__,
            "fields_bound": bound,
        },
    )


def _bind_field(
    section: Section,
    target: Any,
    descriptor: FieldDescriptor,
    name_mapper: NameMapper | None,
    path: tuple[str, ...],
) -> bool:
    """Bind one field. Returns whether anything was bound."""
    if descriptor.excluded:
        _skipped(descriptor, "excluded")
        return False

    name = resolve_field_name(descriptor.name, descriptor.tag, name_mapper)
    if not name or not descriptor.writable:
        _skipped(descriptor, "not_writable")
        return False

    if descriptor.kind is FieldKind.OPTIONAL_RECORD:
        # Allocated even when no section matches; not rolled back.
        setattr(target, descriptor.name, zero_record(descriptor.record_type))

    if descriptor.kind in (FieldKind.RECORD, FieldKind.OPTIONAL_RECORD):
        if _bind_child_section(section.document, target, descriptor, name, name_mapper, path):
            return True
        # No child section: fall through to a key of the same name. A present
        # key fails with UnsupportedTypeError for both record kinds.

    try:
        key = section.get_key(name)
    except KeyNotFoundError:
        _skipped(descriptor, "key_not_found", name)
        return False

    try:
        assigned = apply_key(target, descriptor, key)
    except BindingError as exc:
        _failed(descriptor, name, exc)
        raise FieldBindingError(name, exc) from exc

    if not assigned:
        _skipped(descriptor, "empty_collection", name)
        return False
    logger.debug("field_bound", extra={"field": descriptor.name, "config_name": name})
    return True


def _bind_child_section(
    document: Document,
    target: Any,
    descriptor: FieldDescriptor,
    name: str,
    name_mapper: NameMapper | None,
    path: tuple[str, ...],
) -> bool:
    try:
        child_section = document.get_section(name)
    except SectionNotFoundError:
        return False
    if child_section.name in path:
        # Already being bound further up: treat as not found.
        _skipped(descriptor, "section_on_path", name)
        return False

    child = getattr(target, descriptor.name)
    if child is None:
        child = zero_record(descriptor.record_type)
        setattr(target, descriptor.name, child)

    try:
        _bind_record(child_section, child, name_mapper, (*path, child_section.name))
    except BindingError as exc:
        _failed(descriptor, name, exc)
        raise FieldBindingError(name, exc) from exc

    logger.debug("field_bound", extra={"field": descriptor.name, "config_name": name})
    return True


def _skipped(descriptor: FieldDescriptor, reason: str, config_name: str | None = None) -> None:
    logger.debug(
        "field_skipped",
        extra={"field": descriptor.name, "config_name": config_name, "reason": reason},
    )


def _failed(descriptor: FieldDescriptor, name: str, exc: BindingError) -> None:
    logger.warning(
        "field_binding_failed",
        extra={
            "field": descriptor.name,
            "config_name": name,
            "error_code": exc.code,
        },
    )

"""
Field naming conventions.

A ``NameMapper`` turns a record field's declared name into the key (or
section) name looked up in the configuration document when the field has no
explicit tag. Two built-ins are provided:

    all_caps_underscore("NodePath")  -> "NODE_PATH"
    title_underscore("NodePath")     -> "node_path"

Only ASCII ``A``-``Z`` count as word boundaries, and no underscore is ever
inserted before the first character.

Pure functions; no I/O.
"""

from __future__ import annotations

from collections.abc import Callable

NameMapper = Callable[[str], str]

EXCLUDE_TAG = "-"


def _is_ascii_upper(ch: str) -> bool:
    return "A" <= ch <= "Z"


def all_caps_underscore(raw: str) -> str:
    """Convert to ALL_CAPS_UNDERSCORE."""
    out: list[str] = []
    for i, ch in enumerate(raw):
        if _is_ascii_upper(ch) and i > 0:
            out.append("_")
        out.append(ch.upper())
    return "".join(out)


def title_underscore(raw: str) -> str:
    """Convert to title_underscore."""
    out: list[str] = []
    for i, ch in enumerate(raw):
        if _is_ascii_upper(ch):
            if i > 0:
                out.append("_")
            ch = ch.lower()
        out.append(ch)
    return "".join(out)


def resolve_field_name(
    declared_name: str,
    tag: str | None,
    name_mapper: NameMapper | None = None,
) -> str:
    """
    Return the configuration name a field is looked up by.

    Precedence: explicit tag, then the naming convention, then the declared
    name. The exclusion tag is the caller's concern and must be filtered out
    before calling this.
    """
    if tag:
        return tag
    if name_mapper is not None:
        return name_mapper(declared_name)
    return declared_name

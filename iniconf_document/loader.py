"""
Document Loader (``iniconf_document.loader``).

Responsibility
--------------
Builds a ``Document`` from one or more raw configuration sources. Sources
are applied in order; a key present in a later source overwrites the value
from an earlier one.

Supported sources
-----------------
* ``str``            -- INI text.
* ``bytes``          -- INI text, decoded with ``LoadOptions.encoding``
                        (a UTF-8 BOM is stripped).
* ``pathlib.Path``   -- INI file, or YAML file when the suffix is
                        ``.yaml`` / ``.yml``.
* ``Mapping``        -- ``{section: {key: value}}``; top-level scalars
                        belong to the default section.

INI rules
---------
Parsed with ``configparser``: no interpolation, key case preserved, repeated
section headers merged, ``=`` or ``:`` delimiters, ``#`` / ``;`` comments.
Keys before the first header belong to the default section.

Failure modes
-------------
* Unreadable file, undecodable bytes, INI or YAML syntax errors, unknown
  source types, nested mappings deeper than one level
  -> ``SourceLoadError``.
"""

from __future__ import annotations

import configparser
from collections.abc import Mapping
from datetime import date
from pathlib import Path
from typing import Any

import yaml

from iniconf_kernel.exceptions import SourceLoadError
from iniconf_kernel.logging_config import get_logger

from iniconf_document.model import Document
from iniconf_document.options import LoadOptions

logger = get_logger("document.loader")

_YAML_SUFFIXES = frozenset({".yaml", ".yml"})

# configparser's own DEFAULT section inherits into every other section.
# Point it at a name no header can spell so every section stands alone.
_NO_INHERITED_DEFAULTS = "\x00"


def load(
    source: Any,
    *others: Any,
    options: LoadOptions | None = None,
) -> Document:
    """
    Build a Document from ``source`` and any ``others``, in order.

    Postconditions:
        - The default section always exists, even if no source declares it.
        - ``document.name_mapper`` is ``None``; callers attach one after.
    Raises:
        SourceLoadError: if any source cannot be read or parsed.
    """
    document = Document(options=options)
    sources = (source, *others)
    for src in sources:
        label = describe_source(src)
        append_source(document, src)
        logger.debug("source_loaded", extra={"source": label})

    logger.info(
        "document_loaded",
        extra={
            "source_count": len(sources),
            "section_count": len(document.section_names()),
        },
    )
    return document


def append_source(document: Document, source: Any) -> None:
    """Merge one source into an existing document."""
    if isinstance(source, Path):
        if source.suffix.lower() in _YAML_SUFFIXES:
            _apply_mapping(document, _load_yaml_file(source), str(source))
        else:
            _apply_ini_text(document, _decode(document, _read_bytes(source), str(source)), str(source))
    elif isinstance(source, str):
        _apply_ini_text(document, source, "<string>")
    elif isinstance(source, (bytes, bytearray)):
        _apply_ini_text(document, _decode(document, bytes(source), "<bytes>"), "<bytes>")
    elif isinstance(source, Mapping):
        _apply_mapping(document, source, "<mapping>")
    else:
        raise SourceLoadError(
            describe_source(source), f"unsupported source type '{type(source).__name__}'"
        )


# ---------------------------------------------------------------------------
# Raw input
# ---------------------------------------------------------------------------


def describe_source(source: Any) -> str:
    """Short label for a source, safe to log (never the contents)."""
    if isinstance(source, Path):
        return str(source)
    if isinstance(source, str):
        return "<string>"
    if isinstance(source, (bytes, bytearray)):
        return "<bytes>"
    if isinstance(source, Mapping):
        return "<mapping>"
    return f"<{type(source).__name__}>"


def _read_bytes(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as exc:
        raise SourceLoadError(str(path), exc.strerror or str(exc)) from exc


def _decode(document: Document, data: bytes, label: str) -> str:
    encoding = document.options.encoding
    if encoding.lower().replace("_", "-") in ("utf-8", "utf8"):
        encoding = "utf-8-sig"  # Strip BOM if present
    try:
        return data.decode(encoding)
    except UnicodeDecodeError as exc:
        raise SourceLoadError(label, f"cannot decode as {document.options.encoding}") from exc


def _load_yaml_file(path: Path) -> Mapping[str, Any]:
    try:
        with open(path, encoding="utf-8-sig") as f:
            data = yaml.safe_load(f) or {}
    except OSError as exc:
        raise SourceLoadError(str(path), exc.strerror or str(exc)) from exc
    except yaml.YAMLError as exc:
        raise SourceLoadError(str(path), f"invalid YAML: {exc}") from exc
    if not isinstance(data, Mapping):
        raise SourceLoadError(str(path), "top-level YAML value must be a mapping")
    return data


# ---------------------------------------------------------------------------
# INI
# ---------------------------------------------------------------------------


def _new_parser() -> configparser.ConfigParser:
    parser = configparser.ConfigParser(
        interpolation=None,
        strict=False,
        default_section=_NO_INHERITED_DEFAULTS,
        delimiters=("=", ":"),
        comment_prefixes=("#", ";"),
    )
    parser.optionxform = str  # type: ignore[assignment,method-assign]
    return parser


def _apply_ini_text(document: Document, text: str, label: str) -> None:
    parser = _new_parser()
    header = f"[{document.options.default_section}]\n"
    try:
        parser.read_string(header + text, source=label)
    except configparser.Error as exc:
        raise SourceLoadError(label, f"invalid INI: {exc}") from exc

    for section_name in parser.sections():
        section = document.section(section_name)
        for key_name, value in parser.items(section_name, raw=True):
            section.new_key(key_name, value if value is not None else "")


# ---------------------------------------------------------------------------
# Mappings (YAML, dicts)
# ---------------------------------------------------------------------------


def _render(value: Any) -> str:
    """Render a scalar the way it would be written in an INI file."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return ",".join(_render(item) for item in value)
    return str(value)


def _apply_mapping(document: Document, data: Mapping[str, Any], label: str) -> None:
    default = document.default_section
    for name, value in data.items():
        name = str(name)
        if not isinstance(value, Mapping):
            default.new_key(name, _render(value))
            continue
        section = document.section(name)
        for key_name, key_value in value.items():
            if isinstance(key_value, Mapping):
                raise SourceLoadError(
                    label, f"nested mapping under '{name}.{key_name}' is not supported"
                )
            section.new_key(str(key_name), _render(key_value))

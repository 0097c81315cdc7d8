"""
Configuration document model.

Document -> Section -> Key. Built by ``iniconf_document.loader`` and read by
the binder. Keys store raw text and coerce on demand; each coercion fails
independently with ``CoercionError``.

Lookups are case-sensitive. Insertion order is preserved for both sections
and keys; re-setting an existing key keeps its original position.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from datetime import datetime

from iniconf_kernel.exceptions import (
    CoercionError,
    KeyNotFoundError,
    SectionNotFoundError,
)
from iniconf_kernel.naming import NameMapper

from iniconf_document.options import LoadOptions

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

_TRUE_TOKENS = frozenset(
    {"1", "t", "T", "true", "TRUE", "True", "YES", "yes", "Yes", "y", "ON", "on", "On"}
)
_FALSE_TOKENS = frozenset(
    {"0", "f", "F", "false", "FALSE", "False", "NO", "no", "No", "n", "OFF", "off", "Off"}
)

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


class Key:
    """A named raw value inside a Section."""

    def __init__(self, section: Section, name: str, value: str):
        self.section = section
        self.name = name
        self.value = value

    def __repr__(self) -> str:
        return f"Key({self.name!r}, {self.value!r})"

    def __str__(self) -> str:
        return self.value

    def as_bool(self) -> bool:
        if self.value in _TRUE_TOKENS:
            return True
        if self.value in _FALSE_TOKENS:
            return False
        raise CoercionError(self.name, self.value, "bool")

    def as_int64(self) -> int:
        text = self.value.strip()
        if not _INTEGER_RE.fullmatch(text):
            raise CoercionError(self.name, self.value, "int64")
        parsed = int(text)
        if parsed < INT64_MIN or parsed > INT64_MAX:
            raise CoercionError(self.name, self.value, "int64", "value out of range")
        return parsed

    def as_float64(self) -> float:
        text = self.value.strip()
        if not text or "_" in text:
            raise CoercionError(self.name, self.value, "float64")
        try:
            return float(text)
        except ValueError:
            raise CoercionError(self.name, self.value, "float64") from None

    def as_timestamp(self) -> datetime:
        return self._parse_timestamp(self.value)

    def as_string_list(self, delim: str) -> list[str]:
        """Split on ``delim`` and strip each element. Empty text gives ``[]``."""
        if not self.value.strip():
            return []
        return [part.strip() for part in self.value.split(delim)]

    def as_timestamp_list(self, delim: str) -> list[datetime]:
        return [self._parse_timestamp(part) for part in self.as_string_list(delim)]

    def _parse_timestamp(self, text: str) -> datetime:
        time_format = self.section.document.options.time_format
        stripped = text.strip()
        try:
            if time_format is not None:
                return datetime.strptime(stripped, time_format)
            if stripped.endswith(("Z", "z")):
                stripped = stripped[:-1] + "+00:00"
            return datetime.fromisoformat(stripped)
        except ValueError:
            raise CoercionError(
                self.name, text, "timestamp", f"expected {time_format or 'ISO 8601'}"
            ) from None


class Section:
    """An ordered, named group of keys belonging to one Document."""

    def __init__(self, document: Document, name: str):
        self.document = document
        self.name = name
        self._keys: dict[str, Key] = {}

    def __repr__(self) -> str:
        return f"Section({self.name!r}, keys={len(self._keys)})"

    def __contains__(self, name: object) -> bool:
        return name in self._keys

    def __iter__(self) -> Iterator[Key]:
        return iter(list(self._keys.values()))

    def __len__(self) -> int:
        return len(self._keys)

    def new_key(self, name: str, value: str) -> Key:
        """Create a key, or overwrite the value of an existing one in place."""
        existing = self._keys.get(name)
        if existing is not None:
            existing.value = value
            return existing
        key = Key(self, name, value)
        self._keys[name] = key
        return key

    def get_key(self, name: str) -> Key:
        try:
            return self._keys[name]
        except KeyError:
            raise KeyNotFoundError(self.name, name) from None

    def has_key(self, name: str) -> bool:
        return name in self._keys

    def keys(self) -> list[Key]:
        return list(self._keys.values())

    def key_names(self) -> list[str]:
        return list(self._keys)


class Document:
    """
    A parsed configuration: ordered sections plus document-wide settings.

    ``name_mapper`` is the naming convention applied to every section of
    this document during binding. The binder reads it once per bind call.
    """

    def __init__(
        self,
        options: LoadOptions | None = None,
        name_mapper: NameMapper | None = None,
    ):
        self.options = options or LoadOptions()
        self.name_mapper = name_mapper
        self._sections: dict[str, Section] = {}
        self.section(self.options.default_section)

    def __repr__(self) -> str:
        return f"Document(sections={self.section_names()!r})"

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self._normalize(name) in self._sections

    def _normalize(self, name: str) -> str:
        return name or self.options.default_section

    @property
    def default_section(self) -> Section:
        return self._sections[self.options.default_section]

    def section(self, name: str) -> Section:
        """Return the named section, creating it if absent."""
        name = self._normalize(name)
        sec = self._sections.get(name)
        if sec is None:
            sec = Section(self, name)
            self._sections[name] = sec
        return sec

    def get_section(self, name: str) -> Section:
        try:
            return self._sections[self._normalize(name)]
        except KeyError:
            raise SectionNotFoundError(name) from None

    def has_section(self, name: str) -> bool:
        return self._normalize(name) in self._sections

    def sections(self) -> list[Section]:
        return list(self._sections.values())

    def section_names(self) -> list[str]:
        return list(self._sections)

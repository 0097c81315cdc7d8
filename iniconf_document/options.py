"""
Document Load Options (``iniconf_document.options``).

Responsibility
--------------
Declarative settings that control how sources are decoded and how keys
coerce timestamps. Passed explicitly to ``iniconf_document.load``; nothing
here reads files or environment variables.

Invariants enforced
-------------------
* ``encoding`` names a codec known to Python.
* ``default_section`` is non-empty.

Failure modes
-------------
* ``ValueError`` at construction if any constraint is violated.
"""

from __future__ import annotations

import codecs
from dataclasses import dataclass

from iniconf_kernel.logging_config import get_logger

logger = get_logger("document.options")

DEFAULT_SECTION = "DEFAULT"


@dataclass(frozen=True)
class LoadOptions:
    """Settings for building a Document from raw sources.

    Contract: ``time_format`` is either ``None`` (ISO 8601 / RFC 3339) or a
    ``strftime`` pattern understood by ``datetime.strptime``.
    Non-goals: does not configure list delimiters; the binder always splits
    on ``","``.
    """

    encoding: str = "utf-8"
    time_format: str | None = None
    default_section: str = DEFAULT_SECTION

    def __post_init__(self):
        try:
            codecs.lookup(self.encoding)
        except LookupError:
            raise ValueError(f"unknown encoding '{self.encoding}'") from None
        if not self.default_section or not self.default_section.strip():
            raise ValueError("default_section cannot be empty")
        if self.time_format is not None and not self.time_format.strip():
            raise ValueError("time_format cannot be blank; use None for ISO 8601")
        logger.debug(
            "load_options_initialized",
            extra={
                "encoding": self.encoding,
                "time_format": self.time_format,
                "default_section": self.default_section,
            },
        )

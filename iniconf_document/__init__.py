"""Configuration document model and source loading."""

from iniconf_document.loader import append_source, describe_source, load
from iniconf_document.model import Document, Key, Section
from iniconf_document.options import DEFAULT_SECTION, LoadOptions

__all__ = [
    "DEFAULT_SECTION",
    "Document",
    "Key",
    "LoadOptions",
    "Section",
    "append_source",
    "describe_source",
    "load",
]

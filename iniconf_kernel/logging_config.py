"""
Structured JSON logging for iniconf.

Every logger lives under the ``iniconf`` namespace. Lines are single JSON
objects: fixed header fields, then the bind-scoped ``LogContext`` fields
(``source``, ``target``, ``section``), then whatever the call site passed in
``extra``. Configuration keys and section names are logged; raw values never
are.
"""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from pathlib import PurePath
from types import MappingProxyType
from typing import Any

_ROOT_NAME = "iniconf"

# ---------------------------------------------------------------------------
# Context propagation
# ---------------------------------------------------------------------------

_CONTEXT_FIELDS = ("source", "target", "section")
_EMPTY: Mapping[str, str] = MappingProxyType({})
_context: ContextVar[Mapping[str, str]] = ContextVar("iniconf_log_context", default=_EMPTY)


def _with_fields(**fields: str | None) -> Mapping[str, str]:
    merged = dict(_context.get())
    for name, value in fields.items():
        if name in _CONTEXT_FIELDS and value is not None:
            merged[name] = value
    return MappingProxyType(merged)


class LogContext:
    """Bind-scoped fields stamped onto every log line. Async/thread safe."""

    @staticmethod
    def set(
        *,
        source: str | None = None,
        target: str | None = None,
        section: str | None = None,
    ) -> None:
        """Set context fields. ``None`` leaves a field as it is."""
        _context.set(_with_fields(source=source, target=target, section=section))

    @staticmethod
    def get_all() -> dict[str, str]:
        return dict(_context.get())

    @staticmethod
    def clear() -> None:
        _context.set(_EMPTY)

    @staticmethod
    @contextmanager
    def bind(**fields: str | None) -> Iterator[type["LogContext"]]:
        """Set fields for the duration of a ``with`` block, then restore.

        Unknown field names are ignored.
        """
        token = _context.set(_with_fields(**fields))
        try:
            yield LogContext
        finally:
            _context.reset(token)


# ---------------------------------------------------------------------------
# JSON Formatter
# ---------------------------------------------------------------------------

_RESERVED_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "asctime", "taskName"}


class _JSONEncoder(json.JSONEncoder):
    def default(self, obj: Any) -> Any:
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        if isinstance(obj, PurePath):
            return str(obj)
        if isinstance(obj, BaseException):
            return f"{type(obj).__name__}: {obj}"
        return str(obj)


class StructuredFormatter(logging.Formatter):
    """
    Formats each record as one JSON line.

    Key order: ``ts``, ``level``, ``logger``, ``message``, context fields,
    extras, then ``exc_*`` fields and ``traceback`` when ``exc_info`` is set.
    Extras never overwrite header or context fields.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }
        for key, val in vars(record).items():
            if key not in _RESERVED_ATTRS:
                payload.setdefault(key, val)
        if record.exc_info and record.exc_info[1] is not None:
            payload.update(self._exception_fields(record))
        return json.dumps(payload, cls=_JSONEncoder)

    def _exception_fields(self, record: logging.LogRecord) -> dict[str, Any]:
        exc = record.exc_info[1]
        fields: dict[str, Any] = {
            "exc_type": type(exc).__name__,
            "exc_message": str(exc),
        }
        code = getattr(exc, "code", None)
        if code is not None:
            fields["exc_code"] = code
        # IniConfError subclasses keep their data in instance attributes
        for name, value in vars(exc).items():
            if not name.startswith("_"):
                fields[f"exc_{name}"] = value
        fields["traceback"] = self.formatException(record.exc_info)
        return fields


# ---------------------------------------------------------------------------
# Logger factory and setup
# ---------------------------------------------------------------------------


def get_logger(name: str) -> logging.Logger:
    """Return ``iniconf.<name>``."""
    return logging.getLogger(f"{_ROOT_NAME}.{name}")


_setup_lock = threading.Lock()
_installed: logging.Handler | None = None


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach a single JSON handler to the ``iniconf`` logger.

    Idempotent: calls after the first are no-ops until ``reset_logging()``.
    The ``iniconf`` logger stops propagating to the root logger.
    """
    global _installed
    with _setup_lock:
        if _installed is not None:
            return
        if handler is None:
            handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
        handler.setFormatter(StructuredFormatter())
        root = logging.getLogger(_ROOT_NAME)
        root.setLevel(level)
        root.propagate = False
        root.addHandler(handler)
        _installed = handler


def reset_logging() -> None:
    """Undo ``configure_logging``. FOR TESTING ONLY."""
    global _installed
    with _setup_lock:
        _installed = None
        root = logging.getLogger(_ROOT_NAME)
        root.handlers.clear()
        root.setLevel(logging.WARNING)
        root.propagate = True

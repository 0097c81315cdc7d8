"""
Pytest fixtures for the iniconf test suite.

Provides:
- Structured logging setup and log capture
- Temporary configuration file writers
"""

import json
import logging
from io import StringIO
from pathlib import Path

import pytest

from iniconf_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "property: hypothesis-driven property test"
    )
    config.addinivalue_line(
        "markers", "architecture: static import-boundary checks"
    )


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Every test starts with an empty LogContext."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture iniconf logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            map_to(record, "port = 1")
            logs = captured_logs()
            assert any(r["message"] == "record_bound" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("iniconf")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _records() -> list[dict]:
        return [json.loads(line) for line in stream.getvalue().splitlines() if line]

    yield _records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# File fixtures
# =============================================================================


@pytest.fixture
def write_config(tmp_path):
    """
    Write a configuration file under tmp_path and return its Path.

    Usage::

        path = write_config("app.ini", "[server]\\nport = 80\\n")
    """

    def _write(name: str, content: str | bytes) -> Path:
        path = tmp_path / name
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
        return path

    return _write

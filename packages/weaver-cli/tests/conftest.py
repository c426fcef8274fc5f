"""Shared test fixtures for weaver-cli tests.

Provides CliRunner fixtures and class directory helpers for testing CLI
commands.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable, Generator, Iterator
from pathlib import Path

import pytest
import structlog
from click.testing import CliRunner

WEAVER_YAML_FILENAME = "weaver.yaml"


@pytest.fixture(autouse=True)
def configure_structlog_for_tests() -> Iterator[None]:
    """Configure structlog for tests and undo configure_logging() afterwards.

    The enhance and scan commands reconfigure logging; the root handlers they install
    point at the runner's streams, which are closed after each invocation.
    """
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,
    )
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click test runner.

    Returns:
        CliRunner instance for testing CLI commands.
    """
    return CliRunner()


@pytest.fixture
def isolated_runner(cli_runner: CliRunner) -> Generator[CliRunner, None, None]:
    """Create a Click test runner with an isolated filesystem.

    Yields:
        CliRunner instance running inside a temporary working directory.
    """
    with cli_runner.isolated_filesystem():
        yield cli_runner


@pytest.fixture
def classes_dir(tmp_path: Path) -> Path:
    """Return a classes directory with two compiled classes."""
    root = tmp_path / "classes"
    (root / "com" / "acme").mkdir(parents=True)
    (root / "com" / "acme" / "Order.class").write_bytes(b"\xca\xfe\xba\xbeOrder")
    (root / "Main.class").write_bytes(b"\xca\xfe\xba\xbeMain")
    (root / "app.properties").write_text("name=app")
    return root


@pytest.fixture
def write_config(tmp_path: Path) -> Callable[[str], Path]:
    """Return a helper that writes weaver.yaml content into tmp_path."""

    def _write(content: str) -> Path:
        path = tmp_path / WEAVER_YAML_FILENAME
        path.write_text(content)
        return path

    return _write

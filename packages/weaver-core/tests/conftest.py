"""Shared pytest fixtures for weaver-core tests.

This module provides common fixtures used across unit and integration tests:
class directory builders, a scriptable transformer and capability presets.
"""

from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
import structlog

from weaver_core.classpath import LoadingContext
from weaver_core.config import CapabilityConfig

CLASS_MAGIC = b"\xca\xfe\xba\xbe"


@pytest.fixture(autouse=True)
def configure_structlog_for_tests() -> None:
    """Configure structlog to output to stdout for test capture.

    Keeps structlog output independent of test execution order, including
    runs that called configure_logging() from the CLI.
    """
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,  # Important for test isolation
    )


class ScriptedTransformer:
    """Transformer whose behavior is scripted per class file name.

    A behavior is either None (unchanged), bytes (returned as-is), an
    exception instance (raised) or a callable taking the original bytes.
    """

    def __init__(self, behaviors: dict[str, Any] | None = None, default: Any = None) -> None:
        self.behaviors = behaviors or {}
        self.default = default
        self.calls: list[str] = []
        self.contexts: list[LoadingContext] = []
        self.capabilities: list[CapabilityConfig] = []

    def transform(
        self,
        data: bytes,
        *,
        name: str,
        context: LoadingContext,
        capabilities: CapabilityConfig,
    ) -> bytes | None:
        self.calls.append(name)
        self.contexts.append(context)
        self.capabilities.append(capabilities)
        behavior = self.behaviors.get(name, self.default)
        if isinstance(behavior, BaseException):
            raise behavior
        if callable(behavior):
            return behavior(data)  # type: ignore[no-any-return]
        return behavior  # type: ignore[no-any-return]


def append_marker(data: bytes) -> bytes:
    """Transformation that appends a recognizable marker."""
    return data + b"+enhanced"


@pytest.fixture
def scripted_transformer() -> Callable[..., ScriptedTransformer]:
    """Return a factory for ScriptedTransformer instances."""
    return ScriptedTransformer


@pytest.fixture
def enhancing() -> Callable[[bytes], bytes]:
    """Return a transformation that changes every class it sees."""
    return append_marker


@pytest.fixture
def classes_dir(tmp_path: Path) -> Path:
    """Return an empty classes directory inside tmp_path."""
    root = tmp_path / "target" / "classes"
    root.mkdir(parents=True)
    return root


@pytest.fixture
def make_class() -> Callable[..., Path]:
    """Return a helper that writes a class file below a root directory.

    Usage:
        make_class(root, "com/acme/Order.class")
    """

    def _make(root: Path, relative: str, data: bytes = CLASS_MAGIC) -> Path:
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data + relative.encode())
        return path

    return _make


@pytest.fixture
def dirty_tracking() -> CapabilityConfig:
    """Capabilities with a single feature switched on."""
    return CapabilityConfig(enable_dirty_tracking=True)

"""Diagnostics reported to the surrounding build tool.

A diagnostic is a structured, per-artifact problem report. Diagnostics are
output-only: weaver writes them to a DiagnosticSink and never reads them back.
Whether a diagnostic also aborts the run is decided by the FailurePolicy,
not by the sink.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Protocol, runtime_checkable

import structlog
from pydantic import BaseModel, ConfigDict, Field

logger = structlog.get_logger(__name__)


class Severity(str, Enum):
    """Severity of a diagnostic.

    Attributes:
        WARNING: Problem recorded, artifact left in its original state
        ERROR: Problem that may have left the artifact partially written
    """

    WARNING = "warning"
    ERROR = "error"


class FailureKind(str, Enum):
    """Pipeline stage a diagnostic originates from."""

    CLASSPATH = "classpath"
    TRANSFORM = "transform"
    PERSISTENCE = "persistence"


class Diagnostic(BaseModel):
    """A problem tied to one artifact or classpath entry.

    Attributes:
        path: Artifact (or dependency) the problem refers to
        severity: Diagnostic severity
        kind: Pipeline stage the problem originates from
        message: Human-readable message
        cause: Underlying exception, if any

    Example:
        >>> Diagnostic(
        ...     path=Path("target/classes/a.class"),
        ...     severity=Severity.WARNING,
        ...     kind=FailureKind.TRANSFORM,
        ...     message="Unable to enhance class: a.class",
        ... )
    """

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    path: Path | None = Field(default=None, description="Artifact or classpath entry")
    severity: Severity = Field(..., description="Diagnostic severity")
    kind: FailureKind = Field(..., description="Originating pipeline stage")
    message: str = Field(..., min_length=1, description="Human-readable message")
    cause: BaseException | None = Field(default=None, description="Underlying exception")

    @property
    def cause_text(self) -> str | None:
        """Short description of the underlying cause."""
        if self.cause is None:
            return None
        return f"{type(self.cause).__name__}: {self.cause}"


@runtime_checkable
class DiagnosticSink(Protocol):
    """Output channel for diagnostics."""

    def report(self, diagnostic: Diagnostic) -> None:
        """Accept one diagnostic."""
        ...


class CollectingSink:
    """Sink that keeps diagnostics in memory, in reporting order."""

    def __init__(self) -> None:
        self.diagnostics: list[Diagnostic] = []

    def report(self, diagnostic: Diagnostic) -> None:
        self.diagnostics.append(diagnostic)

    def for_path(self, path: Path) -> list[Diagnostic]:
        """Return the diagnostics recorded for one path."""
        return [d for d in self.diagnostics if d.path == path]

    def __len__(self) -> int:
        return len(self.diagnostics)


class LoggingSink:
    """Sink that writes diagnostics to the structured log."""

    def __init__(self) -> None:
        self._log = logger.bind(component="diagnostics")

    def report(self, diagnostic: Diagnostic) -> None:
        method = self._log.error if diagnostic.severity == Severity.ERROR else self._log.warning
        method(
            "diagnostic_reported",
            path=str(diagnostic.path) if diagnostic.path else None,
            kind=diagnostic.kind.value,
            message=diagnostic.message,
            cause=diagnostic.cause_text,
        )

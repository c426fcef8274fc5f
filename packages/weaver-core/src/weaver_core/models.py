"""Enhancement result models.

Models for per-class transformation results and the report of one run.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, model_validator

from weaver_core.diagnostics import Diagnostic, Severity
from weaver_core.errors import EnhancementAbortedError


class TransformOutcome(str, Enum):
    """Outcome of transforming one artifact.

    Attributes:
        UNCHANGED: The transformer left the class untouched
        TRANSFORMED: New bytes are available for persistence
        FAILED: The class could not be transformed
    """

    UNCHANGED = "unchanged"
    TRANSFORMED = "transformed"
    FAILED = "failed"


class TransformResult(BaseModel):
    """All-or-nothing result of one transformation.

    ``data`` is present exactly when the outcome is TRANSFORMED.

    Example:
        >>> TransformResult.transformed(b"\\xca\\xfe\\xba\\xbe").outcome
        <TransformOutcome.TRANSFORMED: 'transformed'>
    """

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    outcome: TransformOutcome = Field(..., description="Transformation outcome")
    data: bytes | None = Field(default=None, description="Transformed bytes")
    message: str = Field(default="", description="Failure message")
    cause: BaseException | None = Field(default=None, description="Underlying exception")

    @model_validator(mode="after")
    def data_matches_outcome(self) -> TransformResult:
        """Validate that only transformed results carry bytes."""
        if (self.outcome == TransformOutcome.TRANSFORMED) != (self.data is not None):
            msg = "data must be set if and only if outcome is 'transformed'"
            raise ValueError(msg)
        return self

    @classmethod
    def unchanged(cls) -> TransformResult:
        return cls(outcome=TransformOutcome.UNCHANGED)

    @classmethod
    def transformed(cls, data: bytes) -> TransformResult:
        return cls(outcome=TransformOutcome.TRANSFORMED, data=data)

    @classmethod
    def failed(cls, message: str, cause: BaseException | None = None) -> TransformResult:
        return cls(outcome=TransformOutcome.FAILED, message=message, cause=cause)


class RunState(str, Enum):
    """States of an enhancement run.

    IDLE -> CONFIG_CHECKED -> SCANNING -> CONTEXT_BUILT -> PROCESSING -> DONE,
    with early exits to DONE and the fail-fast exit to ABORTED.
    """

    IDLE = "idle"
    CONFIG_CHECKED = "config_checked"
    SCANNING = "scanning"
    CONTEXT_BUILT = "context_built"
    PROCESSING = "processing"
    DONE = "done"
    ABORTED = "aborted"

    @property
    def terminal(self) -> bool:
        return self in (RunState.DONE, RunState.ABORTED)


class RunStatus(str, Enum):
    """Overall status of a run.

    Attributes:
        SKIPPED: Nothing to do (no capability enabled, no classes)
        COMPLETED: Every artifact was processed; diagnostics may exist
        ABORTED: A failure stopped the run (fail-fast)
    """

    SKIPPED = "skipped"
    COMPLETED = "completed"
    ABORTED = "aborted"


class EnhancementReport(BaseModel):
    """Report of one enhancement run.

    Attributes:
        status: Overall run status
        final_state: Terminal state the run reached
        skip_reason: Why the run was skipped, if it was
        classes_dir: Classes root of the run
        scanned: Artifacts discovered, in processing order
        enhanced: Artifacts rewritten on disk
        unchanged: Artifacts the transformer left untouched
        diagnostics: Diagnostics recorded during the run
        abort: Diagnostic that aborted the run, if any
        started_at: When the run started
        finished_at: When the run finished
        total_duration_ms: Total duration in milliseconds

    Example:
        >>> report = runner.run()
        >>> report.passed
        True
        >>> report.enhanced_count
        3
    """

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    status: RunStatus = Field(..., description="Overall run status")
    final_state: RunState = Field(..., description="Terminal state")
    skip_reason: str | None = Field(default=None, description="Reason the run was skipped")
    classes_dir: Path = Field(..., description="Classes root")
    scanned: list[Path] = Field(default_factory=list, description="Discovered artifacts")
    enhanced: list[Path] = Field(default_factory=list, description="Rewritten artifacts")
    unchanged: list[Path] = Field(default_factory=list, description="Untouched artifacts")
    diagnostics: list[Diagnostic] = Field(default_factory=list, description="Recorded diagnostics")
    abort: Diagnostic | None = Field(default=None, description="Diagnostic that aborted the run")
    started_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC), description="Start time"
    )
    finished_at: datetime | None = Field(default=None, description="End time")
    total_duration_ms: int = Field(default=0, ge=0, description="Total duration")

    @property
    def passed(self) -> bool:
        """Check if the run completed (or was skipped) without aborting."""
        return self.status != RunStatus.ABORTED

    @property
    def aborted(self) -> bool:
        return self.status == RunStatus.ABORTED

    @property
    def enhanced_count(self) -> int:
        return len(self.enhanced)

    @property
    def warning_count(self) -> int:
        return sum(1 for d in self.diagnostics if d.severity == Severity.WARNING)

    @property
    def error_count(self) -> int:
        return sum(1 for d in self.diagnostics if d.severity == Severity.ERROR)

    def raise_for_status(self) -> None:
        """Raise if the run was aborted.

        Raises:
            EnhancementAbortedError: Chained to the originating cause.
        """
        if not self.aborted or self.abort is None:
            return
        raise EnhancementAbortedError(self.abort.path, self.abort.message) from self.abort.cause

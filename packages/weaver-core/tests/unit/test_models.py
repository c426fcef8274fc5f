"""Unit tests for weaver_core.models."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from weaver_core.diagnostics import Diagnostic, FailureKind, Severity
from weaver_core.errors import EnhancementAbortedError
from weaver_core.models import (
    EnhancementReport,
    RunState,
    RunStatus,
    TransformOutcome,
    TransformResult,
)

ROOT = Path("target/classes")


class TestTransformResult:
    """Tests for TransformResult invariants."""

    def test_unchanged_has_no_data(self) -> None:
        result = TransformResult.unchanged()
        assert result.outcome == TransformOutcome.UNCHANGED
        assert result.data is None

    def test_transformed_carries_data(self) -> None:
        result = TransformResult.transformed(b"new")
        assert result.outcome == TransformOutcome.TRANSFORMED
        assert result.data == b"new"

    def test_failed_carries_cause(self) -> None:
        cause = ValueError("bad")
        result = TransformResult.failed("Unable to enhance class: a.class", cause)
        assert result.outcome == TransformOutcome.FAILED
        assert result.cause is cause
        assert result.data is None

    def test_transformed_without_data_is_invalid(self) -> None:
        with pytest.raises(ValidationError, match="if and only if"):
            TransformResult(outcome=TransformOutcome.TRANSFORMED)

    def test_failed_with_data_is_invalid(self) -> None:
        """A failed transformation never exposes partial bytes."""
        with pytest.raises(ValidationError):
            TransformResult(outcome=TransformOutcome.FAILED, data=b"partial")


class TestRunState:
    def test_terminal_states(self) -> None:
        assert {s for s in RunState if s.terminal} == {RunState.DONE, RunState.ABORTED}


class TestEnhancementReport:
    """Tests for report properties and raise_for_status()."""

    def _diagnostic(self, severity: Severity, cause: BaseException | None = None) -> Diagnostic:
        return Diagnostic(
            path=ROOT / "a.class",
            severity=severity,
            kind=FailureKind.TRANSFORM,
            message="Unable to enhance class: a.class",
            cause=cause,
        )

    def test_completed_report(self) -> None:
        report = EnhancementReport(
            status=RunStatus.COMPLETED,
            final_state=RunState.DONE,
            classes_dir=ROOT,
            scanned=[ROOT / "a.class", ROOT / "b.class"],
            enhanced=[ROOT / "a.class"],
            unchanged=[ROOT / "b.class"],
            diagnostics=[self._diagnostic(Severity.WARNING), self._diagnostic(Severity.ERROR)],
        )

        assert report.passed
        assert not report.aborted
        assert report.enhanced_count == 1
        assert report.warning_count == 1
        assert report.error_count == 1
        report.raise_for_status()

    def test_skipped_report_passes(self) -> None:
        report = EnhancementReport(
            status=RunStatus.SKIPPED,
            final_state=RunState.DONE,
            classes_dir=ROOT,
            skip_reason="No enhancement feature is enabled",
        )
        assert report.passed
        report.raise_for_status()

    def test_aborted_report_raises_with_cause(self) -> None:
        cause = RuntimeError("unsupported class version")
        abort = self._diagnostic(Severity.WARNING, cause)
        report = EnhancementReport(
            status=RunStatus.ABORTED,
            final_state=RunState.ABORTED,
            classes_dir=ROOT,
            diagnostics=[abort],
            abort=abort,
        )

        assert not report.passed
        with pytest.raises(EnhancementAbortedError) as exc_info:
            report.raise_for_status()

        assert exc_info.value.path == ROOT / "a.class"
        assert exc_info.value.__cause__ is cause
        assert "a.class" in str(exc_info.value)

    def test_duration_cannot_be_negative(self) -> None:
        with pytest.raises(ValidationError):
            EnhancementReport(
                status=RunStatus.COMPLETED,
                final_state=RunState.DONE,
                classes_dir=ROOT,
                total_duration_ms=-1,
            )

"""Enhancement run orchestration.

Sequences one run: check capabilities, scan the classes directory, build
the loading context once, then invoke the transformer on each artifact in
discovery order and persist the transformed ones. Failures become
diagnostics; the run-wide FailurePolicy decides whether the run continues.

State machine:

    IDLE -> CONFIG_CHECKED -> SCANNING -> CONTEXT_BUILT -> PROCESSING -> DONE
    CONFIG_CHECKED -> DONE      (no capability enabled)
    SCANNING -> DONE            (no classes directory, or no classes)
    SCANNING -> ABORTED         (classpath resolution failed, fail-fast)
    PROCESSING -> ABORTED       (artifact failed, fail-fast)

Under fail-fast, artifacts after the failing one are not processed.
"""

from __future__ import annotations

import time
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from weaver_core.classpath import LoadingContextBuilder
from weaver_core.diagnostics import (
    Diagnostic,
    DiagnosticSink,
    FailureKind,
    LoggingSink,
    Severity,
)
from weaver_core.invoker import EnhancementInvoker
from weaver_core.models import (
    EnhancementReport,
    RunState,
    RunStatus,
    TransformOutcome,
)
from weaver_core.observability import span
from weaver_core.policy import PolicyDecision
from weaver_core.scanner import ArtifactScanner
from weaver_core.transformers import resolve_transformer
from weaver_core.writer import ResultWriter

if TYPE_CHECKING:
    from weaver_core.config import EnhanceConfig
    from weaver_core.transformers import Transformer

logger = structlog.get_logger(__name__)


class EnhancementRunner:
    """Orchestrates one enhancement run.

    Attributes:
        config: Enhancement configuration
        policy: Run-wide failure policy derived from the configuration
        transformer: Transformer selected for the run
        sink: Channel diagnostics are reported to

    Example:
        >>> config = EnhanceConfig(
        ...     classes_dir=Path("target/classes"),
        ...     capabilities=CapabilityConfig(enable_dirty_tracking=True),
        ... )
        >>> runner = EnhancementRunner(config, resolve_transformer("noop"))
        >>> report = runner.run()
        >>> report.status
        <RunStatus.COMPLETED: 'completed'>
    """

    def __init__(
        self,
        config: EnhanceConfig,
        transformer: Transformer,
        sink: DiagnosticSink | None = None,
    ) -> None:
        """Initialize the runner.

        Args:
            config: Enhancement configuration
            transformer: Transformer used for every artifact of the run
            sink: Diagnostics sink (defaults to the structured log)
        """
        self.config = config
        self.policy = config.failure_policy
        self.transformer = transformer
        self.sink: DiagnosticSink = sink if sink is not None else LoggingSink()
        self.scanner = ArtifactScanner(config.artifact_extension)
        self.writer = ResultWriter(config.write_strategy)
        self._log = logger.bind(component="enhancement_runner")
        self._reset()

    @property
    def state(self) -> RunState:
        return self.history[-1]

    def run(self) -> EnhancementReport:
        """Run the enhancement.

        Returns:
            EnhancementReport describing what happened. An aborted run is
            reported with status ABORTED; call ``raise_for_status()`` to turn
            it into an exception.
        """
        self._reset()

        with span(
            "weaver.enhance",
            attributes={"weaver.classes_dir": str(self.config.classes_dir)},
        ):
            report = self._execute()

        self._log.info(
            "enhancement_completed",
            status=report.status.value,
            enhanced=report.enhanced_count,
            unchanged=len(report.unchanged),
            warnings=report.warning_count,
            errors=report.error_count,
            total_duration_ms=report.total_duration_ms,
        )
        return report

    def _execute(self) -> EnhancementReport:
        capabilities = self.config.capabilities
        root = self.config.classes_dir

        self._transition(RunState.CONFIG_CHECKED)
        if not capabilities.any_enabled:
            self._log.warning(
                "enhancement_skipped",
                reason="no feature is enabled",
            )
            return self._finish(RunStatus.SKIPPED, skip_reason="No enhancement feature is enabled")

        self._transition(RunState.SCANNING)
        if not root.exists():
            self._log.info(
                "enhancement_skipped",
                reason="classes directory does not exist",
                classes_dir=str(root),
            )
            return self._finish(
                RunStatus.SKIPPED,
                skip_reason=f"There is no classes directory {root}",
            )

        artifacts = self.scanner.scan(root)
        self._scanned = list(artifacts)
        if artifacts.is_empty:
            self._log.info(
                "enhancement_skipped",
                reason="no classes to enhance",
                classes_dir=str(root),
            )
            return self._finish(
                RunStatus.SKIPPED,
                skip_reason=f"There are no classes to enhance in {root}",
            )

        self._log.info(
            "enhancement_started",
            classes_dir=str(root),
            classes=len(artifacts),
            features=capabilities.enabled_features(),
            fail_fast=self.policy.fail_fast,
        )

        builder = LoadingContextBuilder(self.policy, sink=self.sink)
        classpath = builder.build(root, self.config.dependencies)
        self._diagnostics.extend(classpath.diagnostics)
        if classpath.abort is not None or classpath.context is None:
            return self._abort(classpath.abort)

        self._transition(RunState.CONTEXT_BUILT)
        if capabilities.enable_extended_enhancement:
            self._log.warning(
                "extended_enhancement_enabled",
                detail=(
                    "Classes other than entities may be modified. Consider accessing "
                    "entities through getter/setter methods and disabling this property."
                ),
            )

        invoker = EnhancementInvoker(self.transformer, classpath.context, capabilities)

        self._transition(RunState.PROCESSING)
        for path in artifacts:
            abort = self._process(invoker, path)
            if abort is not None:
                return self._abort(abort)

        return self._finish(RunStatus.COMPLETED)

    def _process(self, invoker: EnhancementInvoker, path: Path) -> Diagnostic | None:
        """Enhance one artifact.

        Returns:
            The diagnostic that must abort the run, or None to continue.
        """
        with span("weaver.enhance_class", attributes={"weaver.class": str(path)}):
            result = invoker.invoke(path)

        if result.outcome == TransformOutcome.UNCHANGED:
            self._unchanged.append(path)
            self._log.debug("class_unchanged", path=str(path))
            return None

        if result.outcome == TransformOutcome.FAILED:
            return self._fail(
                Diagnostic(
                    path=path,
                    severity=Severity.WARNING,
                    kind=FailureKind.TRANSFORM,
                    message=result.message,
                    cause=result.cause,
                )
            )

        assert result.data is not None  # Type narrowing for mypy
        diagnostic = self.writer.write(path, result.data)
        if diagnostic is not None:
            return self._fail(diagnostic)

        self._enhanced.append(path)
        self._log.info("class_enhanced", path=str(path))
        return None

    def _fail(self, diagnostic: Diagnostic) -> Diagnostic | None:
        self._record(diagnostic)
        if self.policy.decide(diagnostic) == PolicyDecision.ABORT:
            self._log.warning(
                "fail_fast_triggered",
                path=str(diagnostic.path),
                kind=diagnostic.kind.value,
            )
            return diagnostic
        return None

    def _record(self, diagnostic: Diagnostic) -> None:
        self._diagnostics.append(diagnostic)
        self.sink.report(diagnostic)

    def _transition(self, state: RunState) -> None:
        self._log.debug("run_state_changed", previous=self.state.value, state=state.value)
        self.history.append(state)

    def _abort(self, diagnostic: Diagnostic | None) -> EnhancementReport:
        self._transition(RunState.ABORTED)
        return self._report(RunStatus.ABORTED, abort=diagnostic)

    def _finish(self, status: RunStatus, skip_reason: str | None = None) -> EnhancementReport:
        self._transition(RunState.DONE)
        return self._report(status, skip_reason=skip_reason)

    def _report(
        self,
        status: RunStatus,
        *,
        skip_reason: str | None = None,
        abort: Diagnostic | None = None,
    ) -> EnhancementReport:
        return EnhancementReport(
            status=status,
            final_state=self.state,
            skip_reason=skip_reason,
            classes_dir=self.config.classes_dir,
            scanned=self._scanned,
            enhanced=self._enhanced,
            unchanged=self._unchanged,
            diagnostics=self._diagnostics,
            abort=abort,
            started_at=self._started_at,
            finished_at=datetime.now(UTC),
            total_duration_ms=int((time.monotonic() - self._start_time) * 1000),
        )

    def _reset(self) -> None:
        self.history: list[RunState] = [RunState.IDLE]
        self._scanned: list[Path] = []
        self._enhanced: list[Path] = []
        self._unchanged: list[Path] = []
        self._diagnostics: list[Diagnostic] = []
        self._started_at = datetime.now(UTC)
        self._start_time = time.monotonic()


def run_enhancement(
    config: EnhanceConfig,
    transformer: Transformer | None = None,
    sink: DiagnosticSink | None = None,
) -> EnhancementReport:
    """Run an enhancement with the given configuration.

    Convenience function that selects the transformer (if not given),
    creates a runner and executes it.

    Args:
        config: Enhancement configuration
        transformer: Transformer to use; resolved from ``config.transformer``
            (or WEAVER_TRANSFORMER) when None
        sink: Diagnostics sink

    Returns:
        EnhancementReport of the run

    Example:
        >>> report = run_enhancement(EnhanceConfig.from_yaml("weaver.yaml"))
        >>> report.raise_for_status()
    """
    if transformer is None:
        transformer = resolve_transformer(config.transformer)
    runner = EnhancementRunner(config, transformer, sink)
    return runner.run()

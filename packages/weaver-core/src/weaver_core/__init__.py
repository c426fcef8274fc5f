"""weaver-core: Build-time bytecode enhancement orchestration.

This package provides:
- EnhanceConfig / CapabilityConfig: Pydantic configuration for a run
- scan_artifacts: Discovery of compiled class files
- LoadingContextBuilder: Ordered classpath for the transformer
- EnhancementInvoker / ResultWriter: Per-class transformation and persistence
- EnhancementRunner / run_enhancement: Orchestration with fail-fast policy
- Transformer / resolve_transformer: Pluggable transformer selection
"""

from __future__ import annotations

__version__ = "0.1.0"

from weaver_core.classpath import (
    ClasspathBuildResult,
    Dependency,
    DependencyScope,
    LoadingContext,
    LoadingContextBuilder,
)
from weaver_core.config import CapabilityConfig, EnhanceConfig, WriteStrategy
from weaver_core.diagnostics import (
    CollectingSink,
    Diagnostic,
    DiagnosticSink,
    FailureKind,
    LoggingSink,
    Severity,
)
from weaver_core.errors import (
    ConfigurationError,
    EnhancementAbortedError,
    TransformerNotFoundError,
    WeaverError,
)
from weaver_core.invoker import EnhancementInvoker
from weaver_core.models import (
    EnhancementReport,
    RunState,
    RunStatus,
    TransformOutcome,
    TransformResult,
)
from weaver_core.output import format_report_json, format_report_table, print_report
from weaver_core.policy import FailurePolicy, PolicyDecision
from weaver_core.runner import EnhancementRunner, run_enhancement
from weaver_core.scanner import ArtifactScanner, ArtifactSet, scan_artifacts
from weaver_core.transformers import (
    NoOpTransformer,
    Transformer,
    TransformerRegistry,
    resolve_transformer,
)
from weaver_core.writer import ResultWriter

__all__ = [
    "__version__",
    # Configuration
    "CapabilityConfig",
    "EnhanceConfig",
    "WriteStrategy",
    # Discovery
    "ArtifactScanner",
    "ArtifactSet",
    "scan_artifacts",
    # Loading context
    "ClasspathBuildResult",
    "Dependency",
    "DependencyScope",
    "LoadingContext",
    "LoadingContextBuilder",
    # Transformation
    "EnhancementInvoker",
    "NoOpTransformer",
    "Transformer",
    "TransformerRegistry",
    "TransformOutcome",
    "TransformResult",
    "resolve_transformer",
    # Persistence
    "ResultWriter",
    # Orchestration
    "EnhancementReport",
    "EnhancementRunner",
    "FailurePolicy",
    "PolicyDecision",
    "RunState",
    "RunStatus",
    "run_enhancement",
    # Diagnostics
    "CollectingSink",
    "Diagnostic",
    "DiagnosticSink",
    "FailureKind",
    "LoggingSink",
    "Severity",
    # Output
    "format_report_json",
    "format_report_table",
    "print_report",
    # Errors
    "ConfigurationError",
    "EnhancementAbortedError",
    "TransformerNotFoundError",
    "WeaverError",
]

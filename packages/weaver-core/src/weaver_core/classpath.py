"""Loading context construction.

The loading context is the ordered classpath a transformer uses to resolve
symbolic references while rewriting an artifact: the classes root first,
then every dependency that is not test-scoped, in the order the build
supplied them. It is built once per run and shared read-only.

Dependencies are passed in explicitly as (file, scope) pairs; there is no
lookup of a global project registry.
"""

from __future__ import annotations

import zipfile
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

import structlog
from pydantic import BaseModel, ConfigDict, Field

from weaver_core.diagnostics import Diagnostic, DiagnosticSink, FailureKind, Severity
from weaver_core.policy import FailurePolicy, PolicyDecision

logger = structlog.get_logger(__name__)


class DependencyScope(str, Enum):
    """Scope a build dependency was resolved in."""

    COMPILE = "compile"
    PROVIDED = "provided"
    RUNTIME = "runtime"
    TEST = "test"
    SYSTEM = "system"
    IMPORT = "import"


class Dependency(BaseModel):
    """A resolved build dependency.

    Attributes:
        file: Location of the dependency (jar or directory); None if the
            build could not resolve it
        scope: Dependency scope; test-scoped entries never reach the classpath
        id: Optional coordinates used in log and diagnostic messages

    Example:
        >>> Dependency.parse("libs/persistence-api.jar:provided")
        Dependency(file=PosixPath('libs/persistence-api.jar'), scope=<DependencyScope.PROVIDED: 'provided'>, id=None)
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    file: Path | None = Field(default=None, description="Dependency location")
    scope: DependencyScope = Field(default=DependencyScope.COMPILE, description="Dependency scope")
    id: str | None = Field(default=None, description="Dependency coordinates")

    @classmethod
    def parse(cls, text: str) -> Dependency:
        """Parse ``PATH`` or ``PATH:SCOPE``.

        The suffix is only taken as a scope when it names a known scope, so
        paths containing colons are kept intact.

        Args:
            text: Dependency specification.

        Returns:
            Parsed Dependency (scope defaults to compile).
        """
        path, sep, suffix = text.rpartition(":")
        if sep and path and suffix.lower() in {s.value for s in DependencyScope}:
            return cls(file=Path(path), scope=DependencyScope(suffix.lower()))
        return cls(file=Path(text))

    @property
    def is_test(self) -> bool:
        return self.scope == DependencyScope.TEST

    @property
    def label(self) -> str:
        if self.id:
            return self.id
        return str(self.file) if self.file is not None else "<unresolved>"


class LoadingContext:
    """Read-only, ordered classpath used during transformation.

    Attributes:
        entries: Absolute classpath roots, classes root first.
    """

    def __init__(self, entries: Sequence[Path]) -> None:
        self._entries: tuple[Path, ...] = tuple(entries)

    @property
    def entries(self) -> tuple[Path, ...]:
        return self._entries

    @property
    def root(self) -> Path:
        return self._entries[0]

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, item: object) -> bool:
        return item in self._entries

    def __repr__(self) -> str:
        return f"LoadingContext({[str(e) for e in self._entries]!r})"

    def as_uris(self) -> list[str]:
        """Return the classpath as file URIs."""
        return [entry.as_uri() for entry in self._entries]

    def locate(self, class_name: str) -> Path | None:
        """Find the classpath entry that provides ``class_name``.

        Args:
            class_name: Binary name, dotted (``com.acme.Order``) or
                slashed (``com/acme/Order``), with or without ``.class``.

        Returns:
            The first classpath entry containing the class, or None.
        """
        resource = _class_resource(class_name)
        for entry in self._entries:
            if entry.is_dir():
                if (entry / resource).is_file():
                    return entry
            elif _archive_contains(entry, resource):
                return entry
        return None

    def read_class(self, class_name: str) -> bytes | None:
        """Read the bytes of ``class_name`` from the first entry providing it."""
        entry = self.locate(class_name)
        if entry is None:
            return None
        resource = _class_resource(class_name)
        if entry.is_dir():
            return (entry / resource).read_bytes()
        with zipfile.ZipFile(entry) as archive:
            return archive.read(resource)


def _class_resource(class_name: str) -> str:
    name = class_name.removesuffix(".class")
    return name.replace(".", "/") + ".class"


def _archive_contains(entry: Path, resource: str) -> bool:
    if not zipfile.is_zipfile(entry):
        return False
    with zipfile.ZipFile(entry) as archive:
        try:
            archive.getinfo(resource)
        except KeyError:
            return False
    return True


@dataclass(frozen=True)
class ClasspathBuildResult:
    """Outcome of building the loading context.

    ``context`` is None only when the run must abort; ``abort`` then holds
    the diagnostic that caused it.
    """

    context: LoadingContext | None
    diagnostics: list[Diagnostic] = field(default_factory=list)
    abort: Diagnostic | None = None


class LoadingContextBuilder:
    """Builds the loading context for one run.

    Entries are made absolute without requiring them to exist yet; only a
    dependency with no file (or a path that cannot be resolved at all) is a
    failure. Failures abort the build under FAIL_FAST and are dropped with a
    warning diagnostic under CONTINUE. Each diagnostic is also reported to
    ``sink`` when one is given.

    Example:
        >>> builder = LoadingContextBuilder(FailurePolicy.CONTINUE)
        >>> result = builder.build(Path("target/classes"), dependencies)
        >>> result.context.entries[0]
        PosixPath('/work/app/target/classes')
    """

    def __init__(self, policy: FailurePolicy, sink: DiagnosticSink | None = None) -> None:
        self.policy = policy
        self.sink = sink
        self._log = logger.bind(component="loading_context_builder")

    def build(self, root: Path, dependencies: Iterable[Dependency] = ()) -> ClasspathBuildResult:
        """Build the ordered classpath.

        Args:
            root: Classes root, always the first entry.
            dependencies: Build dependencies in build order.

        Returns:
            ClasspathBuildResult with the context and any diagnostics.
        """
        entries: list[Path] = []
        diagnostics: list[Diagnostic] = []

        candidates: list[tuple[Path | None, str]] = [(root, "classes root")]
        for dep in dependencies:
            if dep.is_test:
                self._log.debug("classpath_entry_skipped", dependency=dep.label, scope=dep.scope.value)
                continue
            candidates.append((dep.file, f"dependency {dep.label}"))

        for location, label in candidates:
            resolved, problem = _resolve(location)
            if resolved is None:
                diagnostic = Diagnostic(
                    path=location,
                    severity=Severity.WARNING,
                    kind=FailureKind.CLASSPATH,
                    message=f"Unable to resolve classpath entry for {label}: {location}",
                    cause=problem,
                )
                diagnostics.append(diagnostic)
                if self.sink is not None:
                    self.sink.report(diagnostic)
                if self.policy.decide(diagnostic) == PolicyDecision.ABORT:
                    self._log.error("classpath_resolution_failed", entry=label, location=str(location))
                    return ClasspathBuildResult(context=None, diagnostics=diagnostics, abort=diagnostic)
                self._log.warning("classpath_entry_dropped", entry=label, location=str(location))
                continue

            if resolved in entries:
                continue
            entries.append(resolved)
            self._log.debug("classpath_entry_added", entry=label, location=str(resolved))

        return ClasspathBuildResult(context=LoadingContext(entries), diagnostics=diagnostics)


def _resolve(location: Path | None) -> tuple[Path | None, Exception | None]:
    if location is None:
        return None, None
    try:
        return Path(location).resolve(), None
    except (OSError, RuntimeError) as e:
        return None, e

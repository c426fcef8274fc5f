"""Persistence of enhanced class files.

Two strategies are available:

- ATOMIC (default): the bytes go to a temporary file in the artifact's
  directory, which is flushed, synced and closed, then renamed over the
  original. Readers see either the old or the new content.
- DELETE_RECREATE: the original is deleted, recreated and written in
  place. A failure part-way can leave the file missing or truncated.

Failures are returned as diagnostics. Severity is ERROR when the artifact
may be left partially prepared (or could not be replaced), WARNING when the
original is still intact.
"""

from __future__ import annotations

import contextlib
import os
import shutil
import tempfile
from pathlib import Path

import structlog

from weaver_core.config import WriteStrategy
from weaver_core.diagnostics import Diagnostic, FailureKind, Severity

logger = structlog.get_logger(__name__)

# Temp names do not grow with the artifact name
TEMP_PREFIX = ".weaver-"
TEMP_SUFFIX = ".weaving"


class ResultWriter:
    """Replaces an artifact's content with its enhanced bytes.

    Example:
        >>> writer = ResultWriter()
        >>> diagnostic = writer.write(Path("target/classes/a.class"), enhanced)
        >>> diagnostic is None
        True
    """

    def __init__(self, strategy: WriteStrategy = WriteStrategy.ATOMIC) -> None:
        self.strategy = strategy
        self._log = logger.bind(component="result_writer", strategy=strategy.value)

    def write(self, path: Path, data: bytes) -> Diagnostic | None:
        """Persist ``data`` as the new content of ``path``.

        Args:
            path: Artifact to replace.
            data: Enhanced bytes.

        Returns:
            None on success, otherwise a diagnostic naming the artifact.
        """
        if self.strategy == WriteStrategy.DELETE_RECREATE:
            diagnostic = self._delete_and_recreate(path, data)
        else:
            diagnostic = self._replace_atomically(path, data)

        if diagnostic is None:
            self._log.debug("class_written", path=str(path), size=len(data))
        else:
            self._log.warning(
                "class_write_failed",
                path=str(path),
                severity=diagnostic.severity.value,
                message=diagnostic.message,
            )
        return diagnostic

    def _replace_atomically(self, path: Path, data: bytes) -> Diagnostic | None:
        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=TEMP_PREFIX,
                suffix=TEMP_SUFFIX,
                dir=path.parent,
            )
        except OSError as e:
            return _diagnostic(
                path,
                Severity.WARNING,
                "Problem preparing class file for writing out enhancements",
                e,
            )

        tmp = Path(tmp_name)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            shutil.copymode(path, tmp)
        except OSError as e:
            _discard(tmp)
            return _diagnostic(path, Severity.WARNING, _write_error_message(path), e)

        try:
            os.replace(tmp, path)
        except OSError as e:
            _discard(tmp)
            return _diagnostic(path, Severity.ERROR, "Unable to replace class file", e)
        return None

    def _delete_and_recreate(self, path: Path, data: bytes) -> Diagnostic | None:
        try:
            path.unlink()
        except OSError as e:
            return _diagnostic(path, Severity.ERROR, "Unable to delete class file", e)

        try:
            f = path.open("xb")
        except OSError as e:
            return _diagnostic(path, Severity.ERROR, "Unable to recreate class file", e)

        try:
            with f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
        except OSError as e:
            return _diagnostic(path, Severity.ERROR, _write_error_message(path), e)
        return None


def _write_error_message(path: Path) -> str:
    return f"Error writing enhanced class [{path.name}] to file [{path.absolute()}]"


def _diagnostic(path: Path, severity: Severity, message: str, cause: OSError) -> Diagnostic:
    return Diagnostic(
        path=path,
        severity=severity,
        kind=FailureKind.PERSISTENCE,
        message=message,
        cause=cause,
    )


def _discard(tmp: Path) -> None:
    # Best-effort cleanup; the original artifact is untouched.
    with contextlib.suppress(OSError):
        tmp.unlink(missing_ok=True)

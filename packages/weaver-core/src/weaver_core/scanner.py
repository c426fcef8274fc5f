"""Discovery of compiled class artifacts.

Walks a classes directory depth-first and collects every regular file with
the artifact extension. Subdirectories are descended before the files of the
current directory are collected, so nested classes come first. Sibling order
is whatever the filesystem lists; callers must not rely on it.
"""

from __future__ import annotations

import os
from collections.abc import Iterator, Sequence
from pathlib import Path
from typing import overload

import structlog

logger = structlog.get_logger(__name__)

CLASS_FILE_EXTENSION = ".class"


class ArtifactSet(Sequence[Path]):
    """Immutable, insertion-ordered set of discovered artifact paths.

    Attributes:
        root: Directory the artifacts were discovered under.
    """

    def __init__(self, root: Path, paths: Sequence[Path] = ()) -> None:
        self.root = root
        self._paths: tuple[Path, ...] = tuple(paths)

    @overload
    def __getitem__(self, index: int) -> Path: ...

    @overload
    def __getitem__(self, index: slice) -> tuple[Path, ...]: ...

    def __getitem__(self, index: int | slice) -> Path | tuple[Path, ...]:
        return self._paths[index]

    def __len__(self) -> int:
        return len(self._paths)

    def __iter__(self) -> Iterator[Path]:
        return iter(self._paths)

    def __repr__(self) -> str:
        return f"ArtifactSet(root={str(self.root)!r}, count={len(self._paths)})"

    @property
    def is_empty(self) -> bool:
        return not self._paths


class ArtifactScanner:
    """Recursive, post-order scanner for artifact files.

    Example:
        >>> scanner = ArtifactScanner()
        >>> artifacts = scanner.scan(Path("target/classes"))
        >>> len(artifacts)
        12
    """

    def __init__(self, extension: str = CLASS_FILE_EXTENSION) -> None:
        """Initialize the scanner.

        Args:
            extension: File name suffix that marks an eligible artifact.
        """
        self.extension = extension
        self._log = logger.bind(component="artifact_scanner", extension=extension)

    def scan(self, root: Path) -> ArtifactSet:
        """Discover all eligible artifacts under ``root``.

        A missing root is not an error: the result is simply empty.

        Args:
            root: Directory to scan.

        Returns:
            ArtifactSet with every matching regular file, each exactly once.
        """
        root = Path(root)
        if not root.is_dir():
            self._log.debug("scan_root_missing", root=str(root))
            return ArtifactSet(root)

        found: list[Path] = []
        self._walk(root, found)
        self._log.debug("scan_completed", root=str(root), count=len(found))
        return ArtifactSet(root, found)

    def _walk(self, directory: Path, found: list[Path]) -> None:
        try:
            with os.scandir(directory) as it:
                entries = list(it)
        except OSError as e:
            self._log.warning("scan_directory_unreadable", directory=str(directory), error=str(e))
            return

        # Symlinked directories are not followed, so every file is reached once.
        for entry in entries:
            if entry.is_dir(follow_symlinks=False):
                self._walk(Path(entry.path), found)

        for entry in entries:
            if entry.name.endswith(self.extension) and entry.is_file():
                found.append(Path(entry.path))


def scan_artifacts(root: Path, extension: str = CLASS_FILE_EXTENSION) -> ArtifactSet:
    """Discover eligible artifacts under ``root``.

    Convenience function that creates a scanner and runs it.

    Args:
        root: Directory to scan.
        extension: File name suffix that marks an eligible artifact.

    Returns:
        ArtifactSet in discovery order.
    """
    return ArtifactScanner(extension).scan(root)

"""weaver-cli: Command line interface for weaver bytecode enhancement."""

from __future__ import annotations

__version__ = "0.1.0"

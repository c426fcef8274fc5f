"""Rich console output utilities for weaver-cli.

Colored success/error/warning messages on a shared console that respects
the NO_COLOR environment variable and the ``--no-color`` flag.
"""

from __future__ import annotations

import json
import os
from typing import Any

from rich.console import Console

# Rich respects NO_COLOR on its own; the flag forces it off as well
_force_no_color = os.environ.get("NO_COLOR") is not None


def create_console(no_color: bool = False) -> Console:
    """Create a Rich Console with the requested color settings.

    Args:
        no_color: If True, disable colored output. NO_COLOR is honored too.

    Returns:
        Configured Console instance.
    """
    disabled = no_color or _force_no_color
    return Console(force_terminal=False if disabled else None, no_color=disabled)


# Shared console; replaced by set_no_color()
console = create_console()


def success(message: str, **kwargs: Any) -> None:
    """Print a success message with a green checkmark.

    Example:
        >>> success("Enhanced 3 classes")
        ✓ Enhanced 3 classes
    """
    console.print(f"[green]✓[/green] {message}", **kwargs)


def error(message: str, **kwargs: Any) -> None:
    """Print an error message with a red X.

    Example:
        >>> error("Enhancement aborted at target/classes/a.class")
        ✗ Enhancement aborted at target/classes/a.class
    """
    console.print(f"[red]✗[/red] {message}", **kwargs)


def warning(message: str, **kwargs: Any) -> None:
    """Print a warning message with a yellow triangle."""
    console.print(f"[yellow]⚠[/yellow] {message}", **kwargs)


def info(message: str, **kwargs: Any) -> None:
    """Print an informational message."""
    console.print(message, **kwargs)


def print_json(data: dict[str, Any]) -> None:
    """Print JSON data without markup so it stays machine readable.

    Args:
        data: Dictionary to print as JSON.
    """
    console.file.write(json.dumps(data, indent=2, default=str) + "\n")


def set_no_color(no_color: bool) -> None:
    """Replace the shared console to enable/disable colors.

    Args:
        no_color: If True, disable colored output.
    """
    global console
    console = create_console(no_color=no_color)
